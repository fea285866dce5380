import sys

import pytest

from proctools import sysctl
from proctools.sysctl import (
    SysctlError,
    get_all_sysctl_variables,
    get_sysctl,
    handle_one_arg,
    main,
    normalize_var,
    set_sysctl,
    variable_path,
)


@pytest.fixture
def root(tmp_path):
    (tmp_path / "kernel").mkdir()
    (tmp_path / "kernel" / "ostype").write_text("Linux\n")
    (tmp_path / "fs").mkdir()
    (tmp_path / "fs" / "overflowuid").write_text("65534\n")
    return tmp_path


@pytest.fixture
def linux_root(root, monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(sysctl, "PROC_SYS_ROOT", str(root))
    return root


def test_normalize_var():
    assert normalize_var("kernel/ostype") == "kernel.ostype"
    assert normalize_var("kernel.ostype") == "kernel.ostype"


def test_variable_path(tmp_path):
    assert variable_path("net.ipv4.ip_forward", tmp_path) == (
        tmp_path / "net" / "ipv4" / "ip_forward"
    )


def test_get_sysctl_trims_trailing_whitespace(root):
    assert get_sysctl("kernel.ostype", root) == "Linux"


def test_set_sysctl_writes_value(root):
    set_sysctl("kernel.ostype", "Other", root)
    assert (root / "kernel" / "ostype").read_text() == "Other"


def test_get_all_variables(root):
    assert get_all_sysctl_variables(root) == ["fs/overflowuid", "kernel/ostype"]


def test_handle_one_arg_read(root):
    assert handle_one_arg("kernel/ostype", False, root) == ("kernel.ostype", "Linux")


def test_handle_one_arg_write(root):
    assert handle_one_arg("kernel.ostype=Foo", False, root) == ("kernel.ostype", "Foo")
    assert get_sysctl("kernel.ostype", root) == "Foo"


def test_handle_one_arg_write_quiet(root):
    assert handle_one_arg("kernel.ostype=Bar", True, root) is None
    assert get_sysctl("kernel.ostype", root) == "Bar"


def test_handle_one_arg_value_keeps_extra_equals(root):
    assert handle_one_arg("kernel.ostype=a=b", False, root) == ("kernel.ostype", "a=b")


def test_handle_one_arg_missing_key(root):
    with pytest.raises(SysctlError) as info:
        handle_one_arg("nonexisting", False, root)
    assert str(info.value) == (
        "error reading key 'nonexisting': No such file or directory"
    )


def test_handle_one_arg_write_error(root):
    with pytest.raises(SysctlError) as info:
        handle_one_arg("missing.dir.key=1", False, root)
    assert str(info.value).startswith("error writing key 'missing.dir.key': ")


def test_invalid_arg():
    with pytest.raises(SystemExit) as info:
        main(["--definitely-invalid"])
    assert info.value.code == 1


def test_get_simple(linux_root, capsys):
    assert main(["kernel.ostype", "fs.overflowuid"]) == 0
    assert capsys.readouterr().out == "kernel.ostype = Linux\nfs.overflowuid = 65534\n"


def test_get_value_only(linux_root, capsys):
    assert main(["-n", "kernel.ostype", "fs.overflowuid"]) == 0
    assert capsys.readouterr().out == "Linux\n65534\n"


def test_get_key_only(linux_root, capsys):
    assert main(["-N", "kernel.ostype", "fs.overflowuid"]) == 0
    assert capsys.readouterr().out == "kernel.ostype\nfs.overflowuid\n"


def test_continues_on_error(linux_root, capsys):
    assert main(["nonexisting", "kernel.ostype"]) == 1
    captured = capsys.readouterr()
    assert captured.out == "kernel.ostype = Linux\n"
    assert captured.err == (
        "sysctl: error reading key 'nonexisting': No such file or directory\n"
    )


def test_ignoring_errors(linux_root, capsys):
    assert main(["-e", "nonexisting", "nonexisting2=foo", "kernel.ostype"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "kernel.ostype = Linux\n"
    assert captured.err == ""


def test_multiline_value(linux_root, capsys):
    (linux_root / "kernel" / "multi").write_text("a\nb\n")
    assert main(["kernel.multi"]) == 0
    assert capsys.readouterr().out == "kernel.multi = a\nkernel.multi = b\n"


def test_all(linux_root, capsys):
    assert main(["-a"]) == 0
    assert capsys.readouterr().out == "fs.overflowuid = 65534\nkernel.ostype = Linux\n"


def test_quiet_set_prints_nothing(linux_root, capsys):
    assert main(["-q", "kernel.ostype=New"]) == 0
    assert capsys.readouterr().out == ""
    assert (linux_root / "kernel" / "ostype").read_text() == "New"


def test_no_arguments_prints_help(linux_root, capsys):
    assert main([]) == 0
    assert "usage: sysctl" in capsys.readouterr().out


def test_fails_on_unsupported_platforms(monkeypatch, capsys):
    monkeypatch.setattr(sys, "platform", "darwin")
    assert main(["-a"]) == 1
    assert capsys.readouterr().err == (
        "sysctl: `sysctl` currently only supports Linux.\n"
    )