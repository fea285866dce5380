"""Selecting processes and changing their scheduling priority."""

from __future__ import annotations

import enum
import errno
import os
import sys
from dataclasses import dataclass
from typing import Optional, Sequence, Union

import psutil

from proctools.priority import Priority

try:
    import pwd
except ImportError:  # pragma: no cover - non-POSIX systems
    pwd = None


class ActionResult(enum.Enum):
    PERMISSION_DENIED = "Permission Denied"
    SUCCESS = "Success"

    def __str__(self) -> str:
        return self.value


class TargetKind(enum.Enum):
    COMMAND = "command"
    PID = "pid"
    TTY = "tty"
    USER = "user"


def normalize_tty(name: str) -> str:
    """Return a terminal name without a leading /dev/."""
    return name[len("/dev/"):] if name.startswith("/dev/") else name


def process_tty(process: psutil.Process) -> str:
    """Return the terminal of `process`, or "?" when it has none."""
    terminal = getattr(process, "terminal", None)
    if terminal is None:
        return "?"
    name = terminal()
    return normalize_tty(name) if name else "?"


def _uid_of_user(name: str) -> Optional[int]:
    if pwd is None:
        return None
    try:
        return pwd.getpwnam(name).pw_uid
    except KeyError:
        return None


def _real_uid(process: psutil.Process) -> Optional[int]:
    uids = getattr(process, "uids", None)
    if uids is None:
        return None
    return uids().real


@dataclass(frozen=True)
class SelectedTarget:
    """A process selection expression: a command, pid, terminal or user."""

    kind: TargetKind
    value: Union[str, int]

    def to_pids(self) -> list[int]:
        """Return the pids of the processes this expression selects."""
        if self.kind is TargetKind.PID:
            return [int(self.value)]
        if self.kind is TargetKind.COMMAND:
            return self._pids_by_name(str(self.value))
        if self.kind is TargetKind.TTY:
            return self._pids_by_tty(normalize_tty(str(self.value)))
        return self._pids_by_user(str(self.value))

    @staticmethod
    def _pids_by_name(name: str) -> list[int]:
        return [
            process.pid
            for process in psutil.process_iter(["name"])
            if name in (process.info.get("name") or "")
        ]

    @staticmethod
    def _pids_by_tty(tty: str) -> list[int]:
        if not sys.platform.startswith("linux"):
            return []
        pids = []
        for process in psutil.process_iter():
            try:
                if process_tty(process) == tty:
                    pids.append(process.pid)
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
        return pids

    @staticmethod
    def _pids_by_user(user: str) -> list[int]:
        uid = _uid_of_user(user)
        if uid is None:
            return []
        pids = []
        for process in psutil.process_iter():
            try:
                if _real_uid(process) == uid:
                    pids.append(process.pid)
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
        return pids


def set_priority(pid: int, priority: Priority) -> Optional[ActionResult]:
    """Change the niceness of `pid`; None means the outcome is unknown."""
    if not sys.platform.startswith("linux"):
        return None
    try:
        current = os.getpriority(os.PRIO_PROCESS, pid)
    except OSError:
        return None
    try:
        os.setpriority(os.PRIO_PROCESS, pid, priority.apply(current))
    except OSError as exc:
        if exc.errno == errno.ESRCH:
            return ActionResult.PERMISSION_DENIED
        return None
    return ActionResult.SUCCESS


def perform_action(
    pids: Sequence[int], priority: Priority
) -> list[Optional[ActionResult]]:
    """Apply `priority` to every pid and return the outcome of each."""
    return [set_priority(pid, priority) for pid in pids]