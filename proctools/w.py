"""Show who is logged on and what they are doing."""

from __future__ import annotations

import argparse
import os
import sys
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import NoReturn, Optional, Sequence

import psutil

PROC_ROOT = "/proc"
DEV_ROOT = "/dev"

_LONG_FORMAT = "{:<9}{:<9}{:<9}{:<6} {:<7}{:<5}{}"
_SHORT_FORMAT = "{:<9}{:<9}{:<7}{}"


@dataclass
class UserInfo:
    """One logged-in session as shown on a line of output."""

    user: str
    terminal: str
    login_time: str
    idle_time: float
    jcpu: str
    pcpu: str
    command: str


def format_time_elapsed(seconds: float, old_style: bool) -> str:
    """Format an idle time the way the IDLE column shows it.

    Raises ValueError for a negative duration.
    """
    if seconds < 0:
        raise ValueError("duration out of range")
    total_ms = int(seconds * 1000)
    total_seconds = total_ms // 1000
    total_minutes = total_seconds // 60
    total_hours = total_minutes // 60
    days = total_hours // 24

    if days >= 2:
        return f"{days}days"
    if total_hours >= 1:
        suffix = "" if old_style else "m"
        return f"{total_hours}:{total_minutes % 60:02}{suffix}"
    if total_minutes >= 1:
        suffix = "m" if old_style else ""
        return f"{total_minutes % 60}:{total_seconds % 60:02}{suffix}"
    if old_style:
        return ""
    return f"{total_seconds % 60}.{(total_ms % 1000) // 10:02}s"


def format_login_time(login: datetime, now: Optional[datetime] = None) -> str:
    """Return "HH:MM" for a login on the current day of the month, else e.g. "Sat16"."""
    if now is None:
        now = datetime.now(login.tzinfo)
    if now.day == login.day:
        return login.strftime("%H:%M")
    return login.strftime("%a%d")


def _stat_fields(pid: int, proc_root) -> list[str]:
    path = Path(proc_root) / str(pid) / "stat"
    return path.read_text(encoding="utf-8", errors="replace").split()


def _clock_tick() -> int:
    return os.sysconf("SC_CLK_TCK")


def _float_or_zero(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return 0.0


def fetch_terminal_number(pid: int, proc_root=PROC_ROOT) -> int:
    """Return the controlling terminal number of `pid` (0 when unparsable)."""
    field = _stat_fields(pid, proc_root)[6]
    return int(field) if field.isdigit() else 0


def fetch_pcpu_time(pid: int, proc_root=PROC_ROOT) -> float:
    """Return the user plus system CPU time of `pid`, in seconds."""
    fields = _stat_fields(pid, proc_root)
    utime = _float_or_zero(fields[13])
    stime = _float_or_zero(fields[14])
    return (utime + stime) / _clock_tick()


def fetch_cmdline(pid: int, proc_root=PROC_ROOT) -> str:
    """Return the raw command line of `pid`, NUL separators included."""
    path = Path(proc_root) / str(pid) / "cmdline"
    return path.read_bytes().decode("utf-8")


def fetch_terminal_jcpu(proc_root=PROC_ROOT) -> dict[int, float]:
    """Return the total CPU time of all processes, keyed by terminal number."""
    totals: dict[int, float] = {}
    for entry in sorted(os.scandir(proc_root), key=lambda e: e.name):
        if not entry.is_dir() or not entry.name.isdigit():
            continue
        pid = int(entry.name)
        try:
            terminal = fetch_terminal_number(pid, proc_root)
            cpu_time = fetch_pcpu_time(pid, proc_root)
        except (FileNotFoundError, ProcessLookupError):
            # The process exited while the directory was being read.
            continue
        totals[terminal] = totals.get(terminal, 0.0) + cpu_time
    return totals


def _fetch_idle_time(tty: str, dev_root=DEV_ROOT) -> float:
    accessed = (Path(dev_root) / tty).stat().st_atime
    return max(0.0, time.time() - accessed)


def _number_text(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return repr(value)


def fetch_user_info() -> list[UserInfo]:
    """Return one entry per logged-in user session.

    Raises OSError when the process table or a terminal cannot be read.
    """
    if not sys.platform.startswith("linux"):
        return []

    jcpu_by_terminal = fetch_terminal_jcpu(PROC_ROOT)
    sessions = []
    for entry in psutil.users():
        pid = entry.pid
        terminal = entry.terminal or ""
        jcpu = 0.0
        if pid is not None:
            try:
                jcpu = jcpu_by_terminal.get(fetch_terminal_number(pid), 0.0)
            except (OSError, IndexError):
                pass
        try:
            pcpu = fetch_pcpu_time(pid) if pid is not None else 0.0
        except (OSError, IndexError):
            pcpu = 0.0
        try:
            command = fetch_cmdline(pid) if pid is not None else ""
        except (OSError, UnicodeDecodeError):
            command = ""
        login = datetime.fromtimestamp(entry.started).astimezone()
        sessions.append(
            UserInfo(
                user=entry.name,
                terminal=terminal,
                login_time=format_login_time(login),
                idle_time=_fetch_idle_time(terminal),
                jcpu=f"{jcpu:.2f}",
                pcpu=_number_text(pcpu),
                command=command,
            )
        )
    return sessions


def _header(short: bool) -> str:
    if short:
        return _SHORT_FORMAT.format("USER", "TTY", "IDLE", "WHAT")
    return _LONG_FORMAT.format("USER", "TTY", "LOGIN@", "IDLE", "JCPU", "PCPU", "WHAT")


def format_line(info: UserInfo, short: bool, old_style: bool) -> str:
    """Return the output line for one session."""
    try:
        idle = format_time_elapsed(info.idle_time, old_style)
    except ValueError:
        idle = ""
    if short:
        return _SHORT_FORMAT.format(info.user, info.terminal, idle, info.command)
    return _LONG_FORMAT.format(
        info.user,
        info.terminal,
        info.login_time,
        idle,
        info.jcpu,
        info.pcpu,
        info.command,
    )


class _Formatter(argparse.HelpFormatter):
    def add_usage(self, usage, actions, groups, prefix=None):
        if prefix is None:
            prefix = "Usage: "
        super().add_usage(usage, actions, groups, prefix)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="w",
        description="Show who is logged on and what they are doing",
        add_help=False,
        formatter_class=_Formatter,
    )
    options = parser.add_argument_group("Options")
    options.add_argument(
        "--help", action="help", help="Print help information"
    )
    options.add_argument(
        "-h", "--no-header", action="store_true", help="do not print header"
    )
    options.add_argument(
        "-u",
        "--no-current",
        action="store_true",
        help="ignore current process username",
    )
    options.add_argument("-s", "--short", action="store_true", help="short format")
    options.add_argument(
        "-f", "--from", action="store_true", help="show remote hostname field"
    )
    options.add_argument(
        "-o", "--old-style", action="store_true", help="old style output"
    )
    options.add_argument(
        "-i",
        "--ip-addr",
        action="store_true",
        help="display IP address instead of hostname (if possible)",
    )
    options.add_argument(
        "-p",
        "--pids",
        action="store_true",
        help="show the PID(s) of processes in WHAT",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        sessions = fetch_user_info()
    except OSError as exc:
        print(f"w: failed to fetch user info: {exc.strerror or exc}", file=sys.stderr)
        return 1

    if not args.no_header:
        print(_header(args.short))
    for info in sessions:
        print(format_line(info, args.short, args.old_style))
    return 0


if __name__ == "__main__":
    sys.exit(main())