import os

import pytest

from proctools.snice import (
    all_signals,
    build_targets,
    collect_pids,
    construct_verbose_result,
    main,
    signal_list,
    signal_table,
)
from proctools.snice_action import ActionResult, SelectedTarget, TargetKind

ALL_SIGNALS = [
    "EXIT", "HUP", "INT", "QUIT", "ILL", "TRAP", "ABRT", "BUS", "FPE", "KILL",
    "USR1", "SEGV", "USR2", "PIPE", "ALRM", "TERM", "STKFLT", "CHLD", "CONT",
    "STOP", "TSTP", "TTIN", "TTOU", "URG", "XCPU", "XFSZ", "VTALRM", "PROF",
    "WINCH", "POLL", "PWR", "SYS",
]


def test_signal_display_list():
    assert signal_list(ALL_SIGNALS) == (
        "HUP INT QUIT ILL TRAP ABRT BUS FPE KILL USR1 SEGV USR2 PIPE ALRM TERM STKFLT\n"
        "CHLD CONT STOP TSTP TTIN TTOU URG XCPU XFSZ VTALRM PROF WINCH POLL PWR SYS"
    )


def test_signal_display_table():
    assert signal_table(ALL_SIGNALS) == (
        " 1 HUP      2 INT      3 QUIT     4 ILL      5 TRAP     6 ABRT     7 BUS\n"
        " 8 FPE      9 KILL    10 USR1    11 SEGV    12 USR2    13 PIPE    14 ALRM\n"
        "15 TERM    16 STKFLT  17 CHLD    18 CONT    19 STOP    20 TSTP    21 TTIN\n"
        "22 TTOU    23 URG     24 XCPU    25 XFSZ    26 VTALRM  27 PROF    28 WINCH\n"
        "29 POLL    30 PWR     31 SYS"
    )


def test_all_signals_matches_known_list():
    assert all_signals() == ALL_SIGNALS


def test_build_targets_empty_is_none():
    assert build_targets([], [], [], []) is None


def test_build_targets_order():
    targets = build_targets(["sh"], [7], ["tty1"], ["root"])
    assert [t.kind for t in targets] == [
        TargetKind.COMMAND, TargetKind.PID, TargetKind.TTY, TargetKind.USER,
    ]
    assert [t.value for t in targets] == ["sh", 7, "tty1", "root"]


def test_collect_pids_sorted_unique():
    targets = [SelectedTarget(TargetKind.PID, p) for p in (30, 10, 30, 20)]
    assert collect_pids(targets) == [10, 20, 30]


def test_verbose_result_skips_unknown_outcomes():
    assert construct_verbose_result([os.getpid()], [None]) == ""


def test_verbose_result_for_current_process():
    pid = os.getpid()
    table = construct_verbose_result([pid], [ActionResult.SUCCESS])
    cells = table.split()
    assert str(pid) in cells
    assert cells[-1] == "Success"


def test_no_args():
    assert main([]) == 1


def test_no_process_selected(capsys):
    assert main(["-u=invalid_user"]) == 1
    assert "no process selection criteria" in capsys.readouterr().err


def test_invalid_priority(capsys):
    assert main(["abc", "-p", "1"]) == 1
    assert "failed to parse argument: 'abc'" in capsys.readouterr().err


def test_invalid_option_exit_code():
    with pytest.raises(SystemExit) as info:
        main(["--definitely-invalid"])
    assert info.value.code == 1


def test_list_flag_prints_signals(capsys):
    assert main(["-l"]) == 0
    out = capsys.readouterr().out
    if os.name == "posix":
        assert out.startswith("HUP INT QUIT")
    else:
        assert out == ""


def test_priority_without_targets_succeeds(capsys):
    assert main(["+4"]) == 0
    assert capsys.readouterr().out == ""