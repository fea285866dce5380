"""Display kernel slab cache information."""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn, Optional, Sequence

from proctools.slabinfo import DEFAULT_SLABINFO_PATH, SlabInfo

SLABINFO_PATH = DEFAULT_SLABINFO_PATH

_SORT_HELP = """\
The following are valid sort criteria:
  a: sort by number of active objects
  b: sort by objects per slab
  c: sort by cache size
  l: sort by number of slabs
  v: sort by number of active slabs
  n: sort by name
  o: sort by number of objects (the default)
  p: sort by pages per slab
  s: sort by object size
  u: sort by cache utilization"""


def to_kb(byte: int) -> float:
    """Convert bytes to kibibytes."""
    return byte / 1024.0


def percentage(numerator: int, denominator: int) -> float:
    """Return numerator as a percentage of denominator, 0.0 when it is zero."""
    if denominator == 0:
        return 0.0
    return numerator / denominator * 100.0


def format_header(info: SlabInfo) -> str:
    """Return the summary lines shown above the cache list."""
    active_objs, objs = info.total_active_objs(), info.total_objs()
    active_slabs, slabs = info.total_active_slabs(), info.total_slabs()
    active_cache, cache = info.total_active_cache(), info.total_cache()
    active_size, size = info.total_active_size(), info.total_size()
    lines = [
        f" Active / Total Objects (% used)    : {active_objs} / {objs} "
        f"({percentage(active_objs, objs):.1f}%)",
        f" Active / Total Slabs (% used)      : {active_slabs} / {slabs} "
        f"({percentage(active_slabs, slabs):.1f}%)",
        f" Active / Total Caches (% used)     : {active_cache} / {cache} "
        f"({percentage(active_cache, cache):.1f}%)",
        f" Active / Total Size (% used)       : {to_kb(active_size):.2f}K / "
        f"{to_kb(size):.2f}K ({percentage(active_size, size):.1f}%)",
        f" Minimum / Average / Maximum Object : {to_kb(info.object_minimum()):.2f}K / "
        f"{to_kb(info.object_avg()):.2f}K / {to_kb(info.object_maximum()):.2f}K",
    ]
    return "\n".join(lines)


def format_list(info: SlabInfo) -> str:
    """Return the column title followed by one line per cache."""
    lines = [
        f"{'OBJS':>6} {'ACTIVE':>6} {'USE':>4} {'OBJ SIZE':>8} {'SLABS':>6} "
        f"{'OBJ/SLAB':>8} {'CACHE SIZE':>10} NAME"
    ]
    for name in info.names():
        objs = info.fetch(name, "num_objs") or 0
        active = info.fetch(name, "active_objs") or 0
        used = f"{percentage(active, objs):.0f}%"
        objsize = (info.fetch(name, "objsize") or 0) / 1024.0
        slabs = info.fetch(name, "num_slabs") or 0
        obj_per_slab = info.fetch(name, "objperslab") or 0
        cache_size = int(objsize * objs)
        lines.append(
            f"{objs:>6} {active:>6} {used:>4} {objsize:>7.2f}K {slabs:>6} "
            f"{obj_per_slab:>8} {cache_size:>10} {name}"
        )
    return "\n".join(lines)


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _sort_char(value: str) -> str:
    if len(value) != 1:
        raise argparse.ArgumentTypeError(f"invalid sort criteria: '{value}'")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="slabtop",
        description="Display kernel slab cache information in real time",
        epilog=_SORT_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-o", "--once", action="store_true", help="only display once, then exit"
    )
    parser.add_argument(
        "-s",
        "--sort",
        metavar="char",
        type=_sort_char,
        default="o",
        help="specify sort criteria by character (see below)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        info = SlabInfo.from_proc(SLABINFO_PATH)
    except OSError as exc:
        print(f"slabtop: {exc.strerror or exc}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(f"slabtop: {exc}", file=sys.stderr)
        return 1

    info.sort(args.sort, ascending=False)
    print(format_header(info))
    print()
    print(format_list(info))
    return 0


if __name__ == "__main__":
    sys.exit(main())