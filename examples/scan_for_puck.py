"""List Z407 pucks advertising the control service.

Usage:
    python examples/scan_for_puck.py --duration 10
    python examples/scan_for_puck.py --verbose
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from datetime import datetime

from z407 import SERVICE_UUID, discover_devices


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


async def scan(duration: float) -> None:
    """Scan for the full duration and print every puck seen."""
    print(f"Scanning for Z407 pucks (service {SERVICE_UUID})...")
    print(f"Duration: {duration:.1f}s")

    found = await discover_devices(timeout=duration)

    if not found:
        print(f"[{_timestamp()}] No Z407 found")
        return

    print("\nSummary:")
    for address, name in sorted(found.items()):
        print(f"  {address}: {name or 'Unknown'}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="List Logitech Z407 pucks advertising the control service."
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=10.0,
        help="Scan duration in seconds. Default: 10",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every advertisement seen.",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        asyncio.run(scan(duration=args.duration))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
