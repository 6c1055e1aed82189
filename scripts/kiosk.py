"""Check in or out from this machine: one location fix, one selfie, one submission.

    python scripts/kiosk.py --employee 7
    python scripts/kiosk.py --employee 7 --intent check_out --notes "Site visit"
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for path in (REPO_ROOT, REPO_ROOT / "src" / "self_attendance"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from self_attendance.client.container import build_client, load_client_settings
from self_attendance.core.enums import AttendanceIntent, CaptureState, FacingMode
from self_attendance.main import configure_logging

logger = logging.getLogger("kiosk")

FINISHED_STATES = {CaptureState.DONE, CaptureState.FAILED, CaptureState.IDLE}


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Self check-in / check-out with selfie and location")
    parser.add_argument("--employee", type=int, help="Employee id (defaults to EMPLOYEE_ID)")
    parser.add_argument("--api", type=str, help="Backend base URL (defaults to ATTENDANCE_API_URL)")
    parser.add_argument(
        "--intent",
        choices=[i.value for i in AttendanceIntent],
        help="Force check-in or check-out instead of following today's status",
    )
    parser.add_argument("--remote", action="store_true", help="Mark the check-in as remote work")
    parser.add_argument("--notes", type=str, help="Optional notes")
    parser.add_argument("--shift", type=int, help="Shift id for the check-in")
    parser.add_argument("--facing", choices=[f.value for f in FacingMode], default=FacingMode.USER.value)
    parser.add_argument("--follow", action="store_true", help="After check-in keep tracking location until Ctrl+C")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    settings = load_client_settings()
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    client = build_client(settings)
    if args.employee is not None:
        client.api.employee_id = args.employee
    if args.api:
        client.api.base_url = args.api.rstrip("/")

    orchestrator = client.orchestrator
    try:
        status = client.gate.refresh()
        if status is None:
            print("Could not load today's attendance status.")
            return 1
        print(f"Today: {status.phase.value if status.phase else 'unknown'}")
        if not client.resolver.is_available():
            print("No location source configured. Set FIXED_LATITUDE and FIXED_LONGITUDE for this station.")
            return 1

        client.camera.facing_mode = FacingMode(args.facing)
        intent = AttendanceIntent(args.intent) if args.intent else None
        if not orchestrator.begin(intent, is_remote=args.remote, notes=args.notes, shift_id=args.shift):
            print(orchestrator.failure.message if orchestrator.failure else "Could not start attendance capture.")
            return 1

        print(f"Location: {orchestrator.location.address}")
        input("Look at the camera and press Enter to take the selfie...")
        if not orchestrator.capture():
            print(orchestrator.failure.message if orchestrator.failure else "Capture failed.")
            return 1

        # Auto-submit fires on its own once both selfie and location are held
        while orchestrator.state not in FINISHED_STATES:
            time.sleep(0.1)

        if orchestrator.state is not CaptureState.DONE:
            print(orchestrator.failure.message if orchestrator.failure else "Attendance was not recorded.")
            return 1

        record = orchestrator.last_record
        if orchestrator.intent is AttendanceIntent.CHECK_IN:
            print(f"OK: Checked in at {record.check_in_time:%H:%M} ({record.status.value})")
        else:
            total = record.hours.total_hours if record.hours else 0
            print(f"OK: Checked out at {record.check_out_time:%H:%M} ({total:.2f} h)")

        tracking = client.tracker.status()
        if args.follow and tracking.is_active:
            print(f"Tracking attendance {tracking.attendance_id} every {tracking.interval:g}s, press Ctrl+C to stop.")
            try:
                while True:
                    time.sleep(1)
            except KeyboardInterrupt:
                pass
        return 0
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
