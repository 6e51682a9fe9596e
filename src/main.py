#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
🎧 AirPosture - Headphone posture monitor

Watches head pitch from motion-capable headphones. When the head tilts past
the bad posture threshold, other audio is ducked and a spoken "Posture"
warning plays; audio is restored as soon as posture recovers.

Architecture:
- MotionSource: headphone motion (mock synthetic / replay / static)
- OrientationMonitor: connectivity + attitude samples
- PostureSequencer: edge-triggered duck / restore / speak decisions
- PostureAudioRouter + AudioSession: audio side effects off the sample path
- PostureCoordinator: user controls and status

Usage:
    python run.py                       # synthetic head nodding
    python run.py --source replay --replay data/session.jsonl
    python run.py --threshold 0.4 --volume 0.5 --duration 60
"""

import argparse
import logging
import time

from utils.ctrl_handler import CtrlCHandler
from utils.config import Config
from core.builder import Builder
from core.imu.orientation_monitor import SensorUnavailable
from core.telemetry.loggers.telemetry_logger import TelemetryLogger
from core.telemetry.loggers.posture_logger import close_posture_logger, get_posture_logger


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="AirPosture headphone posture monitor")
    parser.add_argument(
        "--source",
        choices=["synthetic", "replay", "static"],
        default=Config.MOTION_SOURCE,
        help="Motion source mode",
    )
    parser.add_argument("--replay", default=Config.MOCK_REPLAY_PATH, help="Recording for replay mode (JSONL or CSV)")
    parser.add_argument(
        "--threshold",
        type=float,
        default=Config.POSTURE_THRESHOLD_DEFAULT,
        help=f"Bad posture threshold in radians ({Config.POSTURE_THRESHOLD_MIN}-{Config.POSTURE_THRESHOLD_MAX})",
    )
    parser.add_argument(
        "--volume",
        type=float,
        default=Config.WARNING_VOLUME_DEFAULT,
        help="Warning volume (0.0-1.0)",
    )
    parser.add_argument("--duration", type=float, default=None, help="Stop after N seconds")
    parser.add_argument("--no-silent-loop", action="store_true", help="Disable the silent keepalive loop")
    parser.add_argument("--no-telemetry", action="store_true", help="Do not write session logs")
    parser.add_argument("--quiet", action="store_true", help="Do not print the periodic status line")
    return parser.parse_args(argv)


def format_status(status) -> str:
    connection = "connected" if status.connected else "disconnected"
    monitoring = "ON" if status.monitoring else "OFF"
    posture = "BAD" if status.is_bad_posture else "good"
    ducked = " [ducked]" if status.is_ducked else ""
    return (
        f"[STATUS] Headphones: {connection} | Monitoring: {monitoring} | "
        f"Pitch: {status.pitch:+.2f} Roll: {status.roll:+.2f} Yaw: {status.yaw:+.2f} | "
        f"Posture: {posture} (threshold {status.threshold:.2f}){ducked}"
    )


def main(argv=None):
    """
    🎯 Main entry point

    Flow:
    1. Telemetry + channel loggers
    2. Build and start the posture system
    3. Start monitoring once headphones connect
    4. Status loop until Ctrl+C or --duration
    5. Ordered cleanup (audio always restored)
    """
    args = parse_args(argv)

    print("=" * 60)
    print("🎧 AirPosture - Headphone posture monitor")
    print("=" * 60)

    logging.basicConfig(level=logging.WARNING, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    ctrl_handler = CtrlCHandler()

    telemetry = None
    coordinator = None
    exit_code = 0

    try:
        print("\n🔧 Initializing components...")

        if Config.TELEMETRY_ENABLED and not args.no_telemetry:
            print("  📊 Initializing TelemetryLogger...")
            telemetry = TelemetryLogger(output_dir=Config.LOG_DIR)
            get_posture_logger(session_dir=telemetry.get_session_dir())

        builder = Builder()
        coordinator = builder.build_full_system(
            mode=args.source,
            replay_path=args.replay,
            threshold=args.threshold,
            volume=args.volume,
            silent_loop_enabled=False if args.no_silent_loop else None,
            telemetry=telemetry,
        )

        coordinator.startup()
        print("✅ All components initialized")
        print("\n🔄 Waiting for headphones... (Ctrl+C to exit)")

        start_time = time.time()
        last_status_print = 0.0

        while not ctrl_handler.should_stop:
            now = time.time()
            if args.duration is not None and now - start_time >= args.duration:
                print("\n[INFO] Duration reached, closing...")
                break

            # Start is only possible while connected
            if not coordinator.monitoring and coordinator.monitor.is_connected:
                if coordinator.start_monitoring():
                    print("[INFO] Monitoring started")

            if not args.quiet and now - last_status_print >= Config.STATUS_PRINT_INTERVAL:
                print(format_status(coordinator.get_status()))
                last_status_print = now

            time.sleep(0.05)

        print("\n📈 Final statistics:")
        coordinator.print_stats()

    except SensorUnavailable as e:
        print(f"\n[ERROR] ❌ {e}")
        print("💡 Headphone motion requires supported headphones (or a mock source)")
        exit_code = 1

    except KeyboardInterrupt:
        print("\n[INFO] ⌨️ Keyboard interrupt detected")

    except Exception as e:
        print(f"\n[ERROR] ❌ Error during execution: {e}")
        import traceback
        traceback.print_exc()
        exit_code = 1

    finally:
        print("\n🧹 Cleaning up...")

        try:
            if coordinator:
                coordinator.shutdown()
                print("  ✅ Coordinator shutdown")
        except Exception as e:
            print(f"  ⚠️ Coordinator shutdown error: {e}")

        try:
            if telemetry:
                print("  📊 Finalizing telemetry...")
                summary = telemetry.finalize_session()
                print("\n" + "=" * 60)
                print("📊 SESSION SUMMARY")
                print("=" * 60)
                print(f"  ⏱️  Duration: {summary['duration_seconds']:.1f}s")
                print(f"  📈 Samples evaluated: {summary['total_samples']}")
                print(f"  🙇 Bad posture ratio: {summary['bad_posture_ratio']:.1%}")
                print(f"  🔉 Audio commands: {summary['dispatched_by_kind']}")
                print(f"\n📁 Logs saved to: {telemetry.output_dir}")
                print("=" * 60 + "\n")
        except Exception as e:
            print(f"  ⚠️ Telemetry finalize error: {e}")

        close_posture_logger()
        print("✅ Program finished")

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
