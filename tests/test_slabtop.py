import pytest

from proctools import slabtop
from proctools.slabinfo import SlabInfo
from proctools.slabtop import (
    build_parser,
    format_header,
    format_list,
    main,
    percentage,
    to_kb,
)

HEADER = (
    "# name            <active_objs> <num_objs> <objsize> <objperslab> "
    "<pagesperslab> : tunables <limit> <batchcount> <sharedfactor> : "
    "slabdata <active_slabs> <num_slabs> <sharedavail>"
)

SAMPLE = "\n".join(
    [
        "slabinfo - version: 2.1",
        HEADER,
        "nf_conntrack_expect      0      0    208   39    2 : tunables    0    0    0 : slabdata      0      0      0",
        "dmaengine-unmap-2     1000   1024     16  256    1 : tunables    0    0    0 : slabdata  16389  16389      0",
        "kmalloc-64             500    640     64   64    1 : tunables    0    0    0 : slabdata     10     10      0",
    ]
)


@pytest.fixture
def info():
    return SlabInfo.parse(SAMPLE)


def test_to_kb():
    assert to_kb(2048) == 2.0
    assert to_kb(0) == 0.0


def test_percentage():
    assert percentage(1, 4) == 25.0
    assert percentage(5, 0) == 0.0


def test_format_header_objects_line(info):
    first = format_header(info).splitlines()[0]
    assert first == " Active / Total Objects (% used)    : 1500 / 1664 (90.1%)"


def test_format_header_has_five_lines(info):
    lines = format_header(info).splitlines()
    assert len(lines) == 5
    assert lines[1].startswith(" Active / Total Slabs (% used)      : 16399 / 16399")
    assert lines[4].startswith(" Minimum / Average / Maximum Object :")


def test_format_list_title(info):
    title = format_list(info).splitlines()[0]
    assert title == "  OBJS ACTIVE  USE OBJ SIZE  SLABS OBJ/SLAB CACHE SIZE NAME"


def test_format_list_row(info):
    rows = format_list(info).splitlines()[1:]
    assert len(rows) == 3
    assert rows[0] == (
        "     0      0   0%    0.20K      0       39          0 nf_conntrack_expect"
    )


def test_invalid_arg():
    with pytest.raises(SystemExit) as excinfo:
        main(["--definitely-invalid"])
    assert excinfo.value.code == 1


def test_help():
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0


def test_parser_options():
    args = build_parser().parse_args(["-o", "-s", "n"])
    assert args.once is True
    assert args.sort == "n"


def test_parser_default_sort():
    assert build_parser().parse_args([]).sort == "o"


def test_missing_file_fails(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(slabtop, "SLABINFO_PATH", str(tmp_path / "missing"))
    for args in ([], ["-o"], ["--once"]):
        assert main(args) == 1
        assert "No such file or directory" in capsys.readouterr().err


def test_once_with_readable_file(tmp_path, monkeypatch, capsys):
    path = tmp_path / "slabinfo"
    path.write_text(SAMPLE)
    monkeypatch.setattr(slabtop, "SLABINFO_PATH", str(path))
    for args in (["-o"], ["--once"], []):
        assert main(args) == 0
        out = capsys.readouterr().out
        assert "Active / Total Objects" in out
        assert "OBJS" in out


def test_sort_applied_to_output(tmp_path, monkeypatch, capsys):
    path = tmp_path / "slabinfo"
    path.write_text(SAMPLE)
    monkeypatch.setattr(slabtop, "SLABINFO_PATH", str(path))
    assert main(["-o", "-s", "n"]) == 0
    names = [line.split()[-1] for line in capsys.readouterr().out.splitlines()[-3:]]
    assert names == ["nf_conntrack_expect", "kmalloc-64", "dmaengine-unmap-2"]