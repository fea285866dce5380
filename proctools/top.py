"""Display a snapshot of running processes."""

from __future__ import annotations

import argparse
import enum
import itertools
import sys
import time
from dataclasses import dataclass
from typing import Callable, NoReturn, Optional, Sequence, Union

import psutil

from proctools.top_header import header
from proctools.top_picker import pickers

try:
    import pwd
except ImportError:  # pragma: no cover - non-POSIX systems
    pwd = None

_U32_MAX = 2**32 - 1
_PROCESS_ERRORS = (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess)

_FIELDS = (
    "PID", "USER", "PR", "NI", "VIRT", "RES", "SHR", "S", "%CPU", "%MEM",
    "TIME+", "COMMAND",
)


class FilterKind(enum.Enum):
    PID = "pid"
    USER = "user"
    EUSER = "euser"


@dataclass(frozen=True)
class Filter:
    """A restriction on which processes are shown.

    For PID the value is a tuple of pids; for USER and EUSER it is a uid string.
    """

    kind: FilterKind
    value: Union[tuple, str]


def try_into_uid(value) -> str:
    """Return `value` if it is numeric, else the uid of the user so named.

    Raises ValueError("Invalid user") if no such user exists.
    """
    text = str(value)
    if text.isdigit() and int(text) <= _U32_MAX:
        return text
    if pwd is not None:
        try:
            return str(pwd.getpwnam(text).pw_uid)
        except KeyError:
            pass
    raise ValueError("Invalid user")


def apply_width(line, width: int) -> str:
    """Cut `line` to `width` characters, or pad it with spaces to that width."""
    text = str(line)
    if len(text) > width:
        return text[:width]
    return text + " " * (width - len(text))


def selected_fields() -> list[str]:
    """Return the names of the columns that are shown."""
    return list(_FIELDS)


def _uid_matches(pid: int, expected: str, effective: bool) -> bool:
    try:
        process = psutil.Process(pid)
        uids = getattr(process, "uids", None)
        if uids is None:
            return False
        ids = uids()
    except (*_PROCESS_ERRORS, ValueError):
        return False
    uid = ids.effective if effective else ids.real
    return str(uid) == expected


def construct_filter(process_filter: Optional[Filter]) -> Callable[[int], bool]:
    """Return a predicate on pids that implements `process_filter`."""
    if process_filter is None:
        return lambda _pid: True
    if process_filter.kind is FilterKind.PID:
        allowed = frozenset(process_filter.value)
        return lambda pid: pid in allowed
    expected = str(process_filter.value)
    effective = process_filter.kind is FilterKind.EUSER
    return lambda pid: _uid_matches(pid, expected, effective)


def collect(process_filter: Optional[Filter], fields: Sequence[str]) -> list[list[str]]:
    """Return one row of column texts for every process the filter accepts."""
    column_pickers = pickers(fields)
    accept = construct_filter(process_filter)
    return [
        [pick(pid) for pick in column_pickers]
        for pid in psutil.pids()
        if accept(pid)
    ]


def render_table(rows: Sequence[Sequence[str]]) -> str:
    """Lay out rows as left-aligned columns, each cell padded by one space."""
    if not rows:
        return ""
    columns = list(itertools.zip_longest(*rows, fillvalue=""))
    widths = [max(len(str(cell)) for cell in column) for column in columns]
    lines = []
    for row in rows:
        cells = list(row) + [""] * (len(widths) - len(row))
        lines.append(
            "".join(f" {str(cell):<{width}} " for cell, width in zip(cells, widths))
        )
    return "\n".join(lines)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _pid_list(value: str) -> list[int]:
    pids = []
    for part in value.split(","):
        if not part.isdigit() or int(part) > _U32_MAX:
            raise argparse.ArgumentTypeError(f"invalid value '{part}'")
        pids.append(int(part))
    return pids


def _width(value: str) -> int:
    if not value.isdigit():
        raise argparse.ArgumentTypeError(f"invalid value '{value}'")
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(prog="top", description="Display Linux processes")
    parser.add_argument(
        "-E", "--scale-summary-mem", metavar="SCALE",
        help="set mem as: k,m,g,t,p,e for SCALE",
    )
    parser.add_argument(
        "-O", "--list-fields", action="store_true",
        help="output all field names, then exit",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "-p", "--pid", metavar="PIDLIST", action="append", type=_pid_list,
        help="monitor only the tasks in PIDLIST",
    )
    group.add_argument(
        "-U", "--filter-any-user", metavar="USER",
        help="show only processes owned by USER",
    )
    group.add_argument(
        "-u", "--filter-only-euser", metavar="EUSER",
        help="show only processes owned by USER",
    )
    parser.add_argument(
        "-w", "--width", metavar="COLUMNS", type=_width,
        help="change print width [,use COLUMNS]",
    )
    return parser


def _prime_cpu_usage() -> None:
    cpu = pickers(["%CPU"])[0]
    for pid in psutil.pids():
        cpu(pid)
    time.sleep(0.2)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    _prime_cpu_usage()

    process_filter: Optional[Filter] = None
    try:
        if args.pid is not None:
            pids = tuple(pid for chunk in args.pid for pid in chunk)
            process_filter = Filter(FilterKind.PID, pids)
        elif args.filter_any_user is not None:
            process_filter = Filter(FilterKind.USER, try_into_uid(args.filter_any_user))
        elif args.filter_only_euser is not None:
            process_filter = Filter(
                FilterKind.EUSER, try_into_uid(args.filter_only_euser)
            )
    except ValueError as exc:
        print(f"top: {exc}", file=sys.stderr)
        return 1

    fields = selected_fields()
    table = render_table([fields, *collect(process_filter, fields)])

    print(header(args.scale_summary_mem))
    print("\n")

    width = args.width
    for line in table.splitlines():
        print(apply_width(line, width) if width is not None else line)
    return 0


if __name__ == "__main__":
    sys.exit(main())