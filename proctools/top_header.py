"""The summary lines shown at the top of the top display."""

from __future__ import annotations

import math
import os
import sys
import time
from collections import Counter
from typing import Iterable, Optional

import psutil

_KIB = 1024
_MIB = 1024**2
_GIB = 1024**3
_TIB = 1024**4
_PIB = 1024**5
_EIB = 1_152_921_504_606_846_976

_UNITS = {
    "k": (_KIB, "KiB"),
    "m": (_MIB, "MiB"),
    "g": (_GIB, "GiB"),
    "t": (_TIB, "TiB"),
    "p": (_PIB, "PiB"),
    "e": (_EIB, "EiB"),
}


def memory_unit(scale: Optional[str]) -> tuple[int, str]:
    """Return the divisor and unit name for a memory scale letter (default MiB)."""
    if scale is None:
        return _MIB, "MiB"
    return _UNITS.get(scale, (_MIB, "MiB"))


def format_memory(memory_b: int, unit: int) -> float:
    """Return a byte count expressed in `unit`."""
    return memory_b / unit


def _formatted_time() -> str:
    return time.strftime("%H:%M:%S")


def _uptime() -> str:
    try:
        seconds = int(time.time() - psutil.boot_time())
    except (OSError, RuntimeError):
        return ""
    if seconds < 0:
        return ""
    days, rest = divmod(seconds, 86400)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60
    if days == 1:
        return f"up {days} day, {hours:2}:{minutes:02}"
    if days > 1:
        return f"up {days} days, {hours:2}:{minutes:02}"
    return f"up  {hours:2}:{minutes:02}"


def _users() -> str:
    try:
        count = len(psutil.users())
    except (OSError, RuntimeError):
        count = 0
    return "1 user" if count == 1 else f"{count} users"


def _load_average() -> str:
    try:
        one, five, fifteen = os.getloadavg()
    except (OSError, AttributeError):
        return ""
    return f"load average: {one:.2f}, {five:.2f}, {fifteen:.2f}"


def task_summary(statuses: Iterable[str]) -> str:
    """Return the "Tasks:" line for a collection of process status strings."""
    counts = Counter(statuses)
    total = sum(counts.values())
    return (
        f"Tasks: {total} total, {counts[psutil.STATUS_RUNNING]} running, "
        f"{counts[psutil.STATUS_SLEEPING]} sleeping, "
        f"{counts[psutil.STATUS_STOPPED]} stopped, "
        f"{counts[psutil.STATUS_ZOMBIE]} zombie"
    )


def _task() -> str:
    statuses = []
    for process in psutil.process_iter(["status"]):
        status = process.info.get("status")
        if status is not None:
            statuses.append(status)
    return task_summary(statuses)


def _optional(values: list[str], index: int) -> float:
    try:
        return float(values[index])
    except (IndexError, ValueError):
        return 0.0


def parse_cpu_line(content: str) -> str:
    """Return the "%Cpu(s):" line for the contents of /proc/stat.

    Raises ValueError if the first line is not an aggregate cpu line.
    """
    lines = content.splitlines()
    if not lines or not lines[0].startswith("cpu"):
        raise ValueError("no cpu line in stat contents")
    values = [token for token in lines[0][len("cpu"):].split(" ") if token]
    if len(values) < 3:
        raise ValueError("cpu line has too few fields")
    user, nice, system = (float(value) for value in values[:3])
    idle, io_wait, hardware, software, steal, guest, guest_nice = (
        _optional(values, index) for index in range(3, 10)
    )
    total = (
        user + nice + system + idle + io_wait + hardware + software
        + steal + guest + guest_nice
    )

    def share(value: float) -> float:
        return value / total * 100.0 if total else math.nan

    return (
        f"%Cpu(s):  {share(user):.1f} us, {share(system):.1f} sy, "
        f"{share(nice):.1f} ni, {share(idle):.1f} id, {share(io_wait):.1f} wa, "
        f"{share(hardware):.1f} hi, {share(software):.1f} si, {share(steal):.1f} st"
    )


def _cpu() -> str:
    if sys.platform.startswith("linux"):
        try:
            with open("/proc/stat", encoding="utf-8") as handle:
                return parse_cpu_line(handle.read())
        except OSError:
            pass
    times = psutil.cpu_times()
    names = (
        "user", "nice", "system", "idle", "iowait", "irq", "softirq",
        "steal", "guest", "guest_nice",
    )
    aliases = {"irq": "interrupt", "softirq": "dpc"}
    values = [
        getattr(times, name, getattr(times, aliases.get(name, name), 0.0))
        for name in names
    ]
    return parse_cpu_line("cpu " + " ".join(str(value) for value in values))


def _memory(scale: Optional[str]) -> str:
    unit, name = memory_unit(scale)
    virtual = psutil.virtual_memory()
    swap = psutil.swap_memory()
    buff_cache = max(virtual.available - virtual.free, 0)
    return (
        f"{name} Mem : {format_memory(virtual.total, unit):8.1f} total, "
        f"{format_memory(virtual.free, unit):8.1f} free, "
        f"{format_memory(virtual.used, unit):8.1f} used, "
        f"{format_memory(buff_cache, unit):8.1f} buff/cache\n"
        f"{name} Swap: {format_memory(swap.total, unit):8.1f} total, "
        f"{format_memory(swap.free, unit):8.1f} free, "
        f"{format_memory(swap.used, unit):8.1f} used, "
        f"{format_memory(virtual.available, unit):8.1f} avail Mem"
    )


def header(scale_summary_mem: Optional[str] = None) -> str:
    """Return the full summary block: time, tasks, cpu and memory."""
    return (
        f"top - {_formatted_time()} {_uptime()}, {_users()}, {_load_average()}\n"
        f"{_task()}\n"
        f"{_cpu()}\n"
        f"{_memory(scale_summary_mem)}"
    )