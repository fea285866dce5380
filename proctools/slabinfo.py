"""Parsing and summarising of the kernel slab allocator statistics."""

from __future__ import annotations

import functools
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

DEFAULT_SLABINFO_PATH = "/proc/slabinfo"

_U64_RE = re.compile(r"\+?[0-9]+")
_U64_MAX = 2**64 - 1

# Sort keys that order by a single numeric column.
_COLUMN_SORT_KEYS = {
    "a": "active_objs",
    "b": "objperslab",
    "c": "objsize",
    "l": "num_slabs",
    "v": "active_slabs",
    "p": "pagesperslab",
    "s": "objsize",
}


def _parse_u64(token: str) -> Optional[int]:
    if not _U64_RE.fullmatch(token):
        return None
    value = int(token)
    return value if value <= _U64_MAX else None


def parse_version(line: str) -> Optional[str]:
    """Return the version from the first slabinfo line, or None if absent."""
    tokens = line.replace(":", " ").split()
    return tokens[-1] if tokens else None


def parse_meta(line: str) -> list[str]:
    """Return the column names, without angle brackets, from the header line."""
    cleaned = line.replace("#", " ").replace(":", " ")
    return [
        token.replace("<", "").replace(">", "")
        for token in cleaned.split()
        if token.startswith("<") and token.endswith(">")
    ]


def parse_data(line: str) -> Optional[tuple[str, list[int]]]:
    """Split a data line into its name and every numeric field on it."""
    tokens = line.replace(":", " ").split()
    if not tokens:
        return None
    values = [v for v in (_parse_u64(token) for token in tokens) if v is not None]
    return tokens[0], values


def _ordering(a, b) -> int:
    return (a > b) - (a < b)


def _utilization(active: Optional[int], total: Optional[int]) -> Optional[float]:
    if active is None or total is None:
        return None
    if total == 0:
        return math.nan if active == 0 else math.inf
    return active / total


@dataclass
class SlabInfo:
    """The column names and the per-cache rows of a slabinfo table."""

    meta: list[str] = field(default_factory=list)
    data: list[tuple[str, list[int]]] = field(default_factory=list)

    @classmethod
    def parse(cls, content: str) -> "SlabInfo":
        """Parse slabinfo text; raise ValueError if it lacks a version or header."""
        lines = content.splitlines()
        if len(lines) < 2:
            raise ValueError("unsupported slabinfo format")
        if parse_version(lines[0]) is None:
            raise ValueError("unsupported slabinfo format")
        meta = parse_meta(lines[1])
        data = [row for row in map(parse_data, lines[2:]) if row is not None]
        return cls(meta=meta, data=data)

    @classmethod
    def from_proc(cls, path=DEFAULT_SLABINFO_PATH) -> "SlabInfo":
        """Read and parse a slabinfo file (reading /proc/slabinfo needs root)."""
        return cls.parse(Path(path).read_text())

    def _offset(self, meta: str) -> Optional[int]:
        try:
            return self.meta.index(meta)
        except ValueError:
            return None

    @staticmethod
    def _get(values: list[int], offset: int) -> Optional[int]:
        return values[offset] if offset < len(values) else None

    def _column(self, meta: str) -> list[int]:
        offset = self._offset(meta)
        if offset is None:
            return []
        return [values[offset] for _, values in self.data if offset < len(values)]

    def fetch(self, name: str, meta: str) -> Optional[int]:
        """Return the value of column `meta` for the first cache called `name`."""
        offset = self._offset(meta)
        if offset is None:
            return None
        for key, values in self.data:
            if key == name:
                return self._get(values, offset)
        return None

    def names(self) -> list[str]:
        """Return the cache names in their current order."""
        return [name for name, _ in self.data]

    def _sort_with(self, compare: Callable[[tuple, tuple], int]) -> None:
        self.data.sort(key=functools.cmp_to_key(compare))

    def _sort_by_column(self, meta: str, ascending: bool) -> None:
        offset = self._offset(meta)
        if offset is None:
            return

        def compare(row1, row2) -> int:
            v1 = self._get(row1[1], offset)
            v2 = self._get(row2[1], offset)
            if v1 is None or v2 is None:
                return 0
            return _ordering(v1, v2) if ascending else _ordering(v2, v1)

        self._sort_with(compare)

    def _sort_by_utilization(self, ascending: bool) -> None:
        active_offset = self._offset("active_objs")
        total_offset = self._offset("num_objs")
        if active_offset is None or total_offset is None:
            return

        def ratio(values: list[int]) -> Optional[float]:
            return _utilization(
                self._get(values, active_offset), self._get(values, total_offset)
            )

        def compare(row1, row2) -> int:
            cu1, cu2 = ratio(row1[1]), ratio(row2[1])
            if cu1 is None or cu2 is None or math.isnan(cu1) or math.isnan(cu2):
                return 0
            return _ordering(cu1, cu2) if ascending else _ordering(cu2, cu1)

        self._sort_with(compare)

    def sort(self, by: str, ascending: bool = False) -> "SlabInfo":
        """Sort the rows in place by the criterion character `by` and return self."""
        if by == "n":
            self._sort_with(
                lambda r1, r2: _ordering(r1[0], r2[0])
                if ascending
                else _ordering(r2[0], r1[0])
            )
        elif by == "u":
            self._sort_by_utilization(ascending)
        else:
            self._sort_by_column(_COLUMN_SORT_KEYS.get(by, "num_objs"), ascending)
        return self

    def _total(self, meta: str) -> int:
        return sum(self._column(meta))

    def object_minimum(self) -> int:
        return min(self._column("objsize"), default=0)

    def object_maximum(self) -> int:
        return max(self._column("objsize"), default=0)

    def object_avg(self) -> int:
        sizes = self._column("objsize")
        return sum(sizes) // len(sizes) if sizes else 0

    def total_active_objs(self) -> int:
        return self._total("active_objs")

    def total_objs(self) -> int:
        return self._total("num_objs")

    def total_active_slabs(self) -> int:
        return self._total("active_slabs")

    def total_slabs(self) -> int:
        return self._total("num_slabs")

    def _sum_of_products(self, first: str, second: str) -> int:
        return sum(
            (self.fetch(name, first) or 0) * (self.fetch(name, second) or 0)
            for name in self.names()
        )

    def total_active_size(self) -> int:
        return self._sum_of_products("active_objs", "objsize")

    def total_size(self) -> int:
        return self._sum_of_products("num_objs", "objsize")

    def total_active_cache(self) -> int:
        return self._sum_of_products("objsize", "active_objs")

    def total_cache(self) -> int:
        return self._sum_of_products("objsize", "num_objs")