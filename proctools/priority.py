"""Priority adjustments as given on the snice command line."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

_U32_RE = re.compile(r"\+?[0-9]+")
_U32_MAX = 2**32 - 1


class PriorityError(ValueError):
    """Raised when a priority argument cannot be parsed."""

    def __init__(self, value: str) -> None:
        super().__init__(f"failed to parse argument: '{value}'")
        self.value = value


class PriorityKind(enum.Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    TO = "to"


def _parse_u32(text: str, original: str) -> int:
    if not _U32_RE.fullmatch(text):
        raise PriorityError(original)
    number = int(text)
    if number > _U32_MAX:
        raise PriorityError(original)
    return number


@dataclass(frozen=True)
class Priority:
    """A relative (+N, -N) or absolute (N) niceness change."""

    kind: PriorityKind
    value: int

    @classmethod
    def parse(cls, value: str) -> "Priority":
        """Parse "+N", "-N" or "N"; raise PriorityError otherwise."""
        if value.startswith("-"):
            return cls(PriorityKind.DECREASE, _parse_u32(value[1:], value))
        if value.startswith("+"):
            return cls(PriorityKind.INCREASE, _parse_u32(value[1:], value))
        return cls(PriorityKind.TO, _parse_u32(value, value))

    def apply(self, current: int) -> int:
        """Return the niceness that results from applying this change to `current`."""
        if self.kind is PriorityKind.INCREASE:
            return current + self.value
        if self.kind is PriorityKind.DECREASE:
            return current - self.value
        return self.value

    def __str__(self) -> str:
        if self.kind is PriorityKind.INCREASE:
            return f"+{self.value}"
        if self.kind is PriorityKind.DECREASE:
            return f"-{self.value}"
        return str(self.value)


DEFAULT_PRIORITY = Priority(PriorityKind.INCREASE, 4)