"""Drive a Z407 from the terminal.

Reads one command per line and prints the session state whenever it
changes. Type "help" for the command list.

Usage:
    python examples/console_puck.py --connect
    python examples/console_puck.py --adapter hci1 --scan-timeout 20
"""

from __future__ import annotations

import argparse
import logging
import sys

from z407 import InputSource, PuckState, SessionConfig, Z407Puck

COMMANDS = {
    "vol+": Z407Puck.volume_up,
    "vol-": Z407Puck.volume_down,
    "bass+": Z407Puck.bass_up,
    "bass-": Z407Puck.bass_down,
    "play": Z407Puck.play_pause,
    "next": Z407Puck.next_track,
    "prev": Z407Puck.prev_track,
    "pair": Z407Puck.enter_pairing,
}

INPUTS = {
    "bt": InputSource.BLUETOOTH,
    "aux": InputSource.AUX,
    "usb": InputSource.USB,
}


def _print_state(state: PuckState) -> None:
    status = "connected" if state.connected else "disconnected"
    feedback = "" if state.notifications_active or not state.connected else " (no input feedback)"
    print(
        f"* {status} phase={state.phase.value} input={state.current_input.value}"
        f" volume={state.volume:.0f} bass={state.bass:.0f}{feedback}"
    )


def _print_help() -> None:
    print("connect            scan and connect")
    print("state              print the current state")
    print(" ".join(COMMANDS) + "   send a command")
    print("input bt|aux|usb   switch input")
    print("level VOL BASS     set slider positions (0-100)")
    print("reset              factory reset (asks first)")
    print("quit")


def handle(puck: Z407Puck, line: str) -> bool:
    """Run one console command; returns False to quit."""
    parts = line.split()
    if not parts:
        return True
    word, args = parts[0].lower(), parts[1:]

    if word in ("quit", "exit"):
        return False
    if word == "help":
        _print_help()
    elif word == "connect":
        puck.request_connect()
    elif word == "state":
        _print_state(puck.state)
    elif word in COMMANDS:
        if not COMMANDS[word](puck):
            print("Not connected, command discarded")
    elif word == "input" and args and args[0].lower() in INPUTS:
        if not puck.switch_input(INPUTS[args[0].lower()]):
            print("Not connected, command discarded")
    elif word == "level" and len(args) == 2:
        try:
            puck.set_levels(volume=float(args[0]), bass=float(args[1]))
        except ValueError:
            print("Levels must be numbers")
    elif word == "reset":
        if input("Factory reset the speaker? [y/N] ").strip().lower() == "y":
            if not puck.factory_reset():
                print("Not connected, command discarded")
    else:
        print(f"Unknown command: {line.strip()}")
    return True


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Control a Logitech Z407 from the terminal.")
    parser.add_argument("--connect", action="store_true", help="Connect on start.")
    parser.add_argument("--adapter", default=None, help="Bluetooth adapter (BlueZ), e.g. hci1.")
    parser.add_argument(
        "--scan-timeout",
        type=float,
        default=10.0,
        help="Scan timeout in seconds. Default: 10",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = SessionConfig(scan_timeout=args.scan_timeout, adapter=args.adapter)

    with Z407Puck(config, connect_on_start=args.connect) as puck:
        puck.add_listener(_print_state)
        print('Type "help" for commands.')
        try:
            for line in sys.stdin:
                if not handle(puck, line):
                    break
        except KeyboardInterrupt:
            pass


if __name__ == "__main__":
    main()
