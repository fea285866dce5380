"""Per-process column values for the top table."""

from __future__ import annotations

import os
import sys
import time
from typing import Callable, Optional, Sequence

import psutil

try:
    import pwd
except ImportError:  # pragma: no cover - non-POSIX systems
    pwd = None

Picker = Callable[[int], str]

_PROCESS_ERRORS = (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess)

_STATUS_LETTERS = {
    psutil.STATUS_RUNNING: "R",
    psutil.STATUS_SLEEPING: "S",
    psutil.STATUS_DISK_SLEEP: "U",
    psutil.STATUS_STOPPED: "S",
    psutil.STATUS_TRACING_STOP: "T",
    psutil.STATUS_ZOMBIE: "Z",
    psutil.STATUS_DEAD: "D",
    psutil.STATUS_WAKE_KILL: "W",
    psutil.STATUS_WAKING: "W",
    psutil.STATUS_IDLE: "I",
    psutil.STATUS_PARKED: "P",
    psutil.STATUS_LOCKED: "L",
}

_cache: dict[int, psutil.Process] = {}


def _lookup(pid: int) -> Optional[psutil.Process]:
    process = _cache.get(pid)
    if process is not None and process.is_running():
        return process
    try:
        process = psutil.Process(pid)
    except (psutil.NoSuchProcess, ValueError):
        _cache.pop(pid, None)
        return None
    _cache[pid] = process
    return process


def format_time_plus(seconds: int) -> str:
    """Format a run time as hours:minutes.seconds."""
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02}.{secs:02}"


def _pid(pid: int) -> str:
    return str(pid)


def _user(pid: int) -> str:
    process = _lookup(pid)
    if process is None:
        return "0.0"
    try:
        if pwd is None:
            return process.username() or "?"
        uid = process.uids().real
    except _PROCESS_ERRORS:
        return "?"
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return "?"


def _pr(pid: int) -> str:
    if os.name == "nt" or not hasattr(os, "getpriority"):
        return "0"
    try:
        return str(os.getpriority(os.PRIO_PROCESS, pid))
    except OSError:
        return "0"


def _ni(pid: int) -> str:
    process = _lookup(pid)
    if process is None:
        return "0"
    try:
        return str(process.nice())
    except _PROCESS_ERRORS:
        return "0"


def _memory_kib(pid: int, attribute: str) -> str:
    process = _lookup(pid)
    if process is None:
        return "0"
    try:
        info = process.memory_info()
    except _PROCESS_ERRORS:
        return "0"
    return str(getattr(info, attribute, 0) // 1024)


def _virt(pid: int) -> str:
    return _memory_kib(pid, "vms")


def _res(pid: int) -> str:
    return _memory_kib(pid, "rss")


def _shr(pid: int) -> str:
    return _memory_kib(pid, "shared")


def _status(pid: int) -> str:
    process = _lookup(pid)
    if process is None:
        return "?"
    try:
        status = process.status()
    except _PROCESS_ERRORS:
        return "?"
    return _STATUS_LETTERS.get(status, "U")


def _cpu(pid: int) -> str:
    process = _lookup(pid)
    if process is None:
        return "0.0"
    try:
        usage = process.cpu_percent(interval=None)
    except _PROCESS_ERRORS:
        return "0.0"
    return f"{usage:.2f}"


def _time_plus(pid: int) -> str:
    process = _lookup(pid)
    if process is None:
        return "0:00.00"
    try:
        started = process.create_time()
    except _PROCESS_ERRORS:
        return "0:00.00"
    return format_time_plus(max(0, int(time.time() - started)))


def _mem(pid: int) -> str:
    process = _lookup(pid)
    if process is None:
        return "0.0"
    try:
        used = process.memory_info().rss
    except _PROCESS_ERRORS:
        return "0.0"
    total = psutil.virtual_memory().total
    return f"{used / total:.1f}" if total else "0.0"


def _name_from_status_file(pid: int) -> str:
    try:
        with open(f"/proc/{pid}/status", encoding="utf-8", errors="replace") as handle:
            first = handle.readline()
    except OSError:
        return ""
    _, _, name = first.partition(":")
    return name.strip()


def _command(pid: int) -> str:
    process = _lookup(pid)
    if process is None:
        return "?"
    try:
        exe = process.exe()
    except _PROCESS_ERRORS:
        exe = ""
    if exe:
        return os.path.basename(exe)
    try:
        cmdline = " ".join(process.cmdline()).strip()
    except _PROCESS_ERRORS:
        cmdline = ""
    if not cmdline and sys.platform.startswith("linux"):
        return _name_from_status_file(pid)
    return cmdline


_PICKERS: dict[str, Picker] = {
    "PID": _pid,
    "USER": _user,
    "PR": _pr,
    "NI": _ni,
    "VIRT": _virt,
    "RES": _res,
    "SHR": _shr,
    "S": _status,
    "%CPU": _cpu,
    "TIME+": _time_plus,
    "%MEM": _mem,
    "COMMAND": _command,
}


def _unknown(pid: int) -> str:
    """Placeholder column: '-' for a live process, '?' for a vanished one."""
    return "?" if _lookup(pid) is None else "-"


def pickers(fields: Sequence[str]) -> list[Picker]:
    """Return one function per field that maps a pid to that column's text."""
    return [_PICKERS.get(field, _unknown) for field in fields]