"""Read and write kernel parameters under /proc/sys."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Iterator, NoReturn, Optional, Sequence

PROC_SYS_ROOT = "/proc/sys"


class SysctlError(Exception):
    """Raised when a kernel parameter cannot be read or written."""


def normalize_var(var: str) -> str:
    """Return a variable name with path separators turned into dots."""
    return var.replace("/", ".")


def variable_path(var: str, root=PROC_SYS_ROOT) -> Path:
    """Return the file under `root` that holds the variable `var`."""
    return Path(root).joinpath(var.replace(".", "/"))


def get_sysctl(var: str, root=PROC_SYS_ROOT) -> str:
    """Return the value of `var` without trailing whitespace."""
    return variable_path(var, root).read_text(encoding="utf-8").rstrip()


def set_sysctl(var: str, value: str, root=PROC_SYS_ROOT) -> None:
    """Write `value` to the variable `var`."""
    variable_path(var, root).write_text(value, encoding="utf-8")


def _walk_files(directory: Path) -> Iterator[Path]:
    try:
        entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
    except OSError as exc:
        print(f"sysctl: {exc}", file=sys.stderr)
        return
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk_files(Path(entry.path))
        elif entry.is_file(follow_symlinks=False):
            yield Path(entry.path)


def get_all_sysctl_variables(root=PROC_SYS_ROOT) -> list[str]:
    """Return the path of every variable file under `root`, relative to it."""
    base = Path(root)
    return [path.relative_to(base).as_posix() for path in _walk_files(base)]


def _reason(exc: Exception) -> str:
    if isinstance(exc, UnicodeDecodeError):
        return "stream did not contain valid UTF-8"
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    return str(exc)


def handle_one_arg(
    var_or_assignment: str, quiet: bool, root=PROC_SYS_ROOT
) -> Optional[tuple[str, str]]:
    """Read `VAR` or write `VAR=VALUE`; return the name and value to print.

    Returns None when a value was written quietly.
    """
    name, sep, value = var_or_assignment.partition("=")
    var = normalize_var(name)
    if sep:
        try:
            set_sysctl(var, value, root)
        except (OSError, ValueError) as exc:
            raise SysctlError(f"error writing key '{var}': {_reason(exc)}") from exc
        return None if quiet else (var, value)
    try:
        current = get_sysctl(var, root)
    except (OSError, ValueError) as exc:
        raise SysctlError(f"error reading key '{var}': {_reason(exc)}") from exc
    return var, current


class _Parser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _Parser(
        prog="sysctl",
        description="Show or modify kernel parameters at runtime.",
    )
    parser.add_argument("variables", nargs="*", metavar="VARIABLE[=VALUE]")
    parser.add_argument(
        "-a", "-A", "-X", "--all", action="store_true", help="Display all variables"
    )
    parser.add_argument(
        "-N", "--names", action="store_true", help="Only print names"
    )
    parser.add_argument(
        "-n", "--values", action="store_true", help="Only print values"
    )
    parser.add_argument(
        "-e", "--ignore", action="store_true", help="Ignore errors"
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not print when setting variables",
    )
    parser.add_argument(
        "-o", dest="noop_o", help="Does nothing, for BSD compatibility"
    )
    parser.add_argument(
        "-x", dest="noop_x", help="Does nothing, for BSD compatibility"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not sys.platform.startswith("linux"):
        print("sysctl: `sysctl` currently only supports Linux.", file=sys.stderr)
        return 1

    root = PROC_SYS_ROOT
    if args.all:
        variables = get_all_sysctl_variables(root)
    elif args.variables:
        variables = args.variables
    else:
        parser.print_help()
        return 0

    status = 0
    for item in variables:
        try:
            result = handle_one_arg(item, args.quiet, root)
        except SysctlError as exc:
            if not args.ignore:
                print(f"sysctl: {exc}", file=sys.stderr)
                status = 1
            continue
        if result is None:
            continue
        var, value = result
        for line in value.split("\n"):
            if args.names:
                print(var)
            elif args.values:
                print(line)
            else:
                print(f"{var} = {line}")
    return status


if __name__ == "__main__":
    sys.exit(main())