"""Run a command repeatedly at a fixed interval."""

from __future__ import annotations

import argparse
import os
import re
import subprocess
import sys
import time
from typing import NoReturn, Optional, Sequence

DEFAULT_INTERVAL = "2"
MINIMUM_INTERVAL = 0.1

_UINT_RE = re.compile(r"\+?[0-9]+")
_U64_MAX = 2**64 - 1
_U32_MAX = 2**32 - 1


def _parse_uint(text: str, limit: int) -> int:
    if not _UINT_RE.fullmatch(text):
        raise ValueError(f"invalid digit in '{text}'")
    number = int(text)
    if number > limit:
        raise ValueError(f"number too large: '{text}'")
    return number


def parse_interval(text: str) -> float:
    """Return the interval in seconds given by "S", "S.F" or "S,F".

    A fractional interval is never shorter than 0.1 seconds. Raises ValueError.
    """
    separators = [pos for pos in (text.find(","), text.find(".")) if pos >= 0]
    if not separators:
        return float(_parse_uint(text, _U64_MAX))
    index = min(separators)

    seconds = _parse_uint(text[:index], _U64_MAX) if index > 0 else 0

    fraction = text[index + 1:]
    if not fraction:
        nanos = 0
    elif len(fraction) <= 9:
        nanos = _parse_uint(fraction, _U32_MAX) * 10 ** (9 - len(fraction))
    else:
        if not all(char.isnumeric() for char in fraction):
            raise ValueError(f"invalid digit in '{fraction}'")
        nanos = _parse_uint(fraction[:9], _U32_MAX)

    return max(seconds + nanos / 1_000_000_000, MINIMUM_INTERVAL)


def _shell_command(command: str) -> list[str]:
    if os.name == "nt":
        return [os.environ.get("COMSPEC", "cmd.exe"), "/c", command]
    return ["sh", "-c", command]


def run_watch(command: str, interval: float) -> int:
    """Run `command` every `interval` seconds until it fails; return its exit code."""
    while True:
        completed = subprocess.run(_shell_command(command))
        if completed.returncode != 0:
            print(
                f"watch: command failed: exit status: {completed.returncode}",
                file=sys.stderr,
            )
            return completed.returncode
        time.sleep(interval)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="watch",
        description="Execute a program periodically, showing output fullscreen",
    )
    parser.add_argument("command", help="Command to be executed")
    parser.add_argument(
        "-n",
        "--interval",
        default=DEFAULT_INTERVAL,
        metavar="SECONDS",
        help="Seconds to wait between updates",
    )
    parser.add_argument("-b", "--beep", help="Beep if command has a non-zero exit")
    parser.add_argument(
        "-c", "--color", help="Interpret ANSI color and style sequences"
    )
    parser.add_argument(
        "-C", "--no-color", help="Do not interpret ANSI color and style sequences"
    )
    parser.add_argument(
        "-d",
        "--differences",
        metavar="permanent",
        help="Highlight changes between updates",
    )
    parser.add_argument(
        "-e", "--errexit", help="Exit if command has a non-zero exit"
    )
    parser.add_argument(
        "-g", "--chgexit", help="Exit when output from command changes"
    )
    parser.add_argument(
        "-q",
        "--equexit",
        metavar="CYCLES",
        help="Exit when output from command does not change",
    )
    parser.add_argument(
        "-p", "--precise", help="Attempt to run command in precise intervals"
    )
    parser.add_argument(
        "-r", "--no-rerun", help="Do not rerun program on window resize"
    )
    parser.add_argument("-t", "--no-title", help="Turn off header")
    parser.add_argument("-w", "--no-wrap", help="Turn off line wrapping")
    parser.add_argument(
        "-x", "--exec", help="Pass command to exec instead of 'sh -c'"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        interval = parse_interval(args.interval)
    except ValueError:
        print(
            f"watch: failed to parse argument: '{args.interval}': Invalid argument",
            file=sys.stderr,
        )
        return 1
    try:
        run_watch(args.command, interval)
    except OSError as exc:
        print(f"watch: {exc.strerror or exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())