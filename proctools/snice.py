"""Change the priority of selected processes."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Iterable, NoReturn, Optional, Sequence

import psutil

from proctools.priority import DEFAULT_PRIORITY, Priority, PriorityError
from proctools.snice_action import (
    ActionResult,
    SelectedTarget,
    TargetKind,
    perform_action,
    process_tty,
)

try:
    import pwd
except ImportError:  # pragma: no cover - non-POSIX systems
    pwd = None

_SIGNALS = (
    "EXIT", "HUP", "INT", "QUIT", "ILL", "TRAP", "ABRT", "BUS", "FPE", "KILL",
    "USR1", "SEGV", "USR2", "PIPE", "ALRM", "TERM", "STKFLT", "CHLD", "CONT",
    "STOP", "TSTP", "TTIN", "TTOU", "URG", "XCPU", "XFSZ", "VTALRM", "PROF",
    "WINCH", "POLL", "PWR", "SYS",
)


def _chunks(items: Sequence, size: int) -> Iterable[Sequence]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def all_signals() -> list[str]:
    """Return the signal names, indexed by number, starting with EXIT."""
    return list(_SIGNALS)


def signal_list(signals: Sequence[str]) -> str:
    """Return signal names (without the first) sixteen to a line."""
    return "\n".join(" ".join(chunk) for chunk in _chunks(list(signals[1:]), 16))


def signal_table(signals: Sequence[str]) -> str:
    """Return numbered signal names (without the first) seven to a line."""
    cells = [f"{number:>2} {name:<8}" for number, name in enumerate(signals[1:], 1)]
    return "\n".join("".join(chunk).rstrip() for chunk in _chunks(cells, 7))


def build_targets(
    commands: Iterable[str],
    pids: Iterable[int],
    ttys: Iterable[str],
    users: Iterable[str],
) -> Optional[list[SelectedTarget]]:
    """Combine the selection expressions; None when there are none."""
    targets = [SelectedTarget(TargetKind.COMMAND, c) for c in commands]
    targets += [SelectedTarget(TargetKind.PID, p) for p in pids]
    targets += [SelectedTarget(TargetKind.TTY, t) for t in ttys]
    targets += [SelectedTarget(TargetKind.USER, u) for u in users]
    return targets or None


def collect_pids(targets: Iterable[SelectedTarget]) -> list[int]:
    """Return the sorted, de-duplicated pids selected by all targets."""
    return sorted({pid for target in targets for pid in target.to_pids()})


def _user_name(process: psutil.Process) -> str:
    uids = getattr(process, "uids", None)
    if uids is None or pwd is None:
        return "?"
    try:
        return pwd.getpwuid(uids().real).pw_name
    except KeyError:
        return "?"


def _command_name(process: psutil.Process) -> str:
    try:
        exe = process.exe()
    except (psutil.AccessDenied, psutil.ZombieProcess):
        exe = ""
    return os.path.basename(exe) if exe else "?"


def _render_clean(rows: list[list[str]]) -> str:
    if not rows:
        return ""
    widths = [max(len(cell) for cell in column) for column in zip(*rows)]
    return "".join(
        "".join(f" {cell:<{width}} " for cell, width in zip(row, widths)) + "\n"
        for row in rows
    )


def construct_verbose_result(
    pids: Sequence[int], results: Sequence[Optional[ActionResult]]
) -> str:
    """Return a table of terminal, user, pid, command and outcome per process."""
    rows = []
    for pid, result in zip(pids, results):
        if result is None:
            continue
        try:
            process = psutil.Process(pid)
            tty = process_tty(process)
            user = _user_name(process)
            command = _command_name(process)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
        rows.append([tty, user, str(pid), command, str(result)])
    return _render_clean(rows)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _pid(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        number = -1
    if not 0 <= number <= 2**32 - 1:
        raise argparse.ArgumentTypeError(f"invalid value '{value}'")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="snice",
        description="Report or change the priority of processes",
        usage="%(prog)s [new priority] [options] <expression>",
    )
    parser.add_argument("priority", nargs="?", help="priority change (+N, -N or N)")
    parser.add_argument(
        "-l", "--list", action="store_true", help="list all signal names"
    )
    parser.add_argument(
        "-L",
        "--table",
        action="store_true",
        help="list all signal names in a nice table",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="explain what is being done"
    )
    parser.add_argument(
        "-c", "--command", action="append", default=[], metavar="command",
        help="expression is a command name",
    )
    parser.add_argument(
        "-p", "--pid", action="append", default=[], type=_pid, metavar="pid",
        help="expression is a process id number",
    )
    parser.add_argument(
        "-t", "--tty", action="append", default=[], metavar="tty",
        help="expression is a terminal",
    )
    parser.add_argument(
        "-u", "--user", action="append", default=[], metavar="username",
        help="expression is a username",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args_list = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    if not args_list:
        parser.print_help(sys.stderr)
        return 1
    args = parser.parse_args(args_list)

    try:
        priority = (
            Priority.parse(args.priority) if args.priority is not None
            else DEFAULT_PRIORITY
        )
    except PriorityError as exc:
        print(f"snice: {exc}", file=sys.stderr)
        return 1

    if args.table or args.list:
        if os.name == "posix":
            render = signal_table if args.table else signal_list
            print(render(all_signals()))
        return 0

    targets = build_targets(args.command, args.pid, args.tty, args.user)
    if targets is not None:
        pids = collect_pids(targets)
        results = perform_action(pids, priority)
        if all(result is None for result in results):
            print("snice: no process selection criteria", file=sys.stderr)
            return 1
        if args.verbose:
            print(construct_verbose_result(pids, results).strip())
    return 0


if __name__ == "__main__":
    sys.exit(main())