# proctools

Small command-line tools for looking at processes and kernel state on Linux.
They are built on `psutil` and the files under `/proc`.

## Installation

    pip install .

This installs six commands: `slabtop`, `snice`, `sysctl`, `watch`, `top` and `w`.

## Commands

### slabtop

    slabtop [-o] [-s CHAR]

Reads `/proc/slabinfo` (usually needs root) and prints a summary of objects,
slabs, caches and sizes, followed by one line per slab cache. The list is
sorted in descending order by the key given with `-s`:

- `a` active objects
- `b` objects per slab
- `c`, `s` object size
- `l` number of slabs
- `v` active slabs
- `n` name
- `p` pages per slab
- `u` cache utilisation
- `o` number of objects (the default; any other character does the same)

`-o`/`--once` is accepted; the output is always printed once.

### snice

    snice [PRIORITY] [-c COMMAND] [-p PID] [-t TTY] [-u USER] [-v]
    snice -l | -L

Changes the nice value of the selected processes. `+N` raises it by N, `-N`
lowers it by N, a bare `N` sets it to N; without a priority the change is `+4`.
Processes are selected by command name (`-c`), pid (`-p`), terminal (`-t`) or
user name (`-u`); each option may be given several times. With `-v` a table of
terminal, user, pid, command and outcome is printed. If no selected process
could be changed, it reports "no process selection criteria" and exits with 1.

`-l` prints the signal names as a list, `-L` as a numbered table.

### sysctl

    sysctl [-a] [-N] [-n] [-e] [-q] [VARIABLE[=VALUE] ...]

Reads and writes kernel parameters under `/proc/sys`. Names may use dots or
slashes (`kernel.ostype`, `kernel/ostype`).

- `-a`, `-A`, `-X`, `--all`: show every variable
- `-N`, `--names`: print only names
- `-n`, `--values`: print only values
- `-e`, `--ignore`: do not report errors
- `-q`, `--quiet`: print nothing when setting a value

Errors are reported as, for example,
`sysctl: error reading key 'nonexisting': No such file or directory`, and the
exit status is then 1. On systems other than Linux it exits with an error.

### watch

    watch [-n SECONDS] COMMAND

Runs `COMMAND` through `sh -c` (`%COMSPEC% /c` on Windows) every two seconds,
or every `SECONDS` given as `S`, `S.F` or `S,F`. A fractional interval is never
shorter than 0.1 seconds. It stops when the command exits with a non-zero
status. An interval it cannot parse is reported as
`watch: failed to parse argument: '...': Invalid argument`.

### top

    top [-E SCALE] [-p PIDLIST | -U USER | -u EUSER] [-w COLUMNS]

Prints a summary (time, uptime, users, load average, tasks, CPU and memory)
and a table with the columns PID, USER, PR, NI, VIRT, RES, SHR, S, %CPU, %MEM,
TIME+ and COMMAND.

- `-E` scales the memory summary: `k`, `m` (default), `g`, `t`, `p` or `e`
- `-p` shows only the given pids (comma separated, may be repeated)
- `-U` shows only processes whose real user matches (name or uid)
- `-u` shows only processes whose effective user matches (name or uid)
- `-w` cuts or pads every table line to `COLUMNS` characters

An unknown user name gives `top: Invalid user` and exit status 1.

### w

    w [-h] [-s] [-o]

Lists logged-in sessions with user, terminal, login time, idle time, JCPU,
PCPU and command line. `-h` leaves out the header, `-s` uses the short format
(user, terminal, idle, command), `-o` uses the old-style idle time. Sessions
are only listed on Linux.

## Library use

The parsing and formatting pieces can be used on their own:

```python
from proctools.slabinfo import SlabInfo
from proctools.priority import Priority
from proctools.watch import parse_interval
from proctools.w import format_time_elapsed

with open("slabinfo.txt") as handle:
    info = SlabInfo.parse(handle.read()).sort("n", True)
print(info.names(), info.total_objs())

print(Priority.parse("-4").apply(10))         # 6
print(parse_interval("1,5"))                  # 1.5
print(format_time_elapsed(65880, False))      # 18:18m
```

Other useful pieces: `proctools.sysctl.handle_one_arg`,
`proctools.snice.signal_list` and `signal_table`,
`proctools.top_header.parse_cpu_line`, `memory_unit` and `task_summary`,
`proctools.top.apply_width` and `render_table`.

## What it does not do

- `top` and `slabtop` print one snapshot and exit; there is no interactive,
  refreshing screen. `top -O` is accepted but lists nothing.
- `watch` does not clear the screen, show a title or highlight differences;
  its other options are accepted and ignored.
- `snice` only changes nice values; it does not send signals, and `-t`
  selects nothing on systems other than Linux.
- `w` accepts `-u`, `-f`, `-i` and `-p` but they change nothing.

## Running the tests

    pip install .[test]
    pytest