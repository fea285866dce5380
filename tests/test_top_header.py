import re

import pytest

from proctools.top_header import (
    format_memory,
    header,
    memory_unit,
    parse_cpu_line,
    task_summary,
)


def _shares(line):
    return [float(value) for value in re.findall(r"(\d+\.\d) [a-z]{2}", line)]


def test_memory_unit_default():
    assert memory_unit(None) == (1024**2, "MiB")


@pytest.mark.parametrize(
    "scale, name", [("k", "KiB"), ("m", "MiB"), ("g", "GiB"), ("t", "TiB"), ("p", "PiB")]
)
def test_memory_unit_powers_of_1024(scale, name):
    unit, unit_name = memory_unit(scale)
    assert unit_name == name
    assert unit == 1024 ** (["k", "m", "g", "t", "p"].index(scale) + 1)


def test_memory_unit_exbi():
    assert memory_unit("e") == (1_152_921_504_606_846_976, "EiB")


def test_memory_unit_unknown_falls_back():
    assert memory_unit("z") == memory_unit(None)


def test_format_memory():
    assert format_memory(2 * 1024**2, 1024**2) == 2.0


def test_parse_cpu_line_prefix_and_order():
    line = parse_cpu_line("cpu  100 0 100 800 0 0 0 0 0 0\ncpu0 1 2 3 4\n")
    assert line.startswith("%Cpu(s):  ")
    labels = re.findall(r"[0-9.]+ ([a-z]{2})", line)
    assert labels == ["us", "sy", "ni", "id", "wa", "hi", "si", "st"]


def test_parse_cpu_line_shares_sum_to_hundred():
    shares = _shares(parse_cpu_line("cpu  312 17 250 9021 44 0 12 3 0 0"))
    assert sum(shares) == pytest.approx(100.0, abs=0.5)


def test_parse_cpu_line_symmetric_values():
    shares = _shares(parse_cpu_line("cpu  50 0 50 0 0 0 0 0 0 0"))
    assert shares[0] == shares[1]


def test_parse_cpu_line_short_line_defaults():
    shares = _shares(parse_cpu_line("cpu 10 10 10"))
    assert shares[3:] == [0.0] * 5


def test_parse_cpu_line_rejects_other_lines():
    with pytest.raises(ValueError):
        parse_cpu_line("intr 1 2 3")


def test_parse_cpu_line_rejects_non_numeric():
    with pytest.raises(ValueError):
        parse_cpu_line("cpu a b c")


def test_parse_cpu_line_rejects_empty():
    with pytest.raises(ValueError):
        parse_cpu_line("")


def test_task_summary_counts():
    summary = task_summary(["running", "sleeping", "sleeping", "zombie", "idle"])
    assert summary == "Tasks: 5 total, 1 running, 2 sleeping, 0 stopped, 1 zombie"


def test_task_summary_empty():
    assert task_summary([]).startswith("Tasks: 0 total, 0 running")


def test_header_layout():
    lines = header(None).split("\n")
    assert len(lines) == 5
    assert lines[0].startswith("top - ")
    assert lines[1].startswith("Tasks: ")
    assert lines[2].startswith("%Cpu(s):")
    assert lines[3].startswith("MiB Mem :")
    assert lines[4].startswith("MiB Swap:")


def test_header_scale():
    lines = header("g").split("\n")
    assert lines[3].startswith("GiB Mem :")
    assert lines[4].startswith("GiB Swap:")