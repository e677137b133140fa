# numatools

Tools for looking at NUMA memory on Linux.

The main entry point is the `numastat` command, which shows per-node memory
usage read from `/sys/devices/system/node` and `/proc`:

- per-node numastat counters (hits, misses, foreign, interleave hits,
  local and other node), converted to MB;
- meminfo-like per-node system memory usage, in MB;
- per-node memory usage of processes, read from `/proc/<PID>/numa_maps`,
  selected by PID or by a pattern matched against the command name and
  command line.

## Installation

```
pip install .
```

## Command line

```
numastat [-c] [-m] [-n] [-p <PID>|<pattern>] [-s[<node>]] [-v] [-V] [-z] [<PID>|<pattern>...]
```

| Option | Meaning |
| --- | --- |
| `-c` | minimize column widths (and show whole MB) |
| `-m` | show meminfo-like system-wide memory usage |
| `-n` | show the numastat statistics info |
| `-p <PID>\|<pattern>` | show process info |
| `-s[<node>]` | sort data by the total column or by `<node>` |
| `-v` | show a per-category table (Huge, Heap, Stack, Private) for each process |
| `-V` | show the version |
| `-z` | skip rows and columns of zeros |
| `-?`, `--help` | show the usage message |

Arguments after the options are further PIDs or patterns. A single process
is always shown with its per-category table; several processes are shown
one line each, followed by a total line.

Run without any arguments, `numastat` prints the classic numastat counter
table in its original layout (raw counts, `node<N>` headers). With options
but no processes, the numastat table is shown unless only `-m` was asked
for.

The output width is taken from the `NUMASTAT_WIDTH` environment variable
when it is set; on a terminal it is taken from the `COLUMNS=` line printed
by the `resize` program, falling back to 80; output that is not going to a
terminal is not folded. The width is never less than 32.

Examples:

```
numastat
numastat -m
numastat -c -p 1234
numastat -s0 python
```

## Library

The package can also be used from Python:

- `numatools.policy` — memory policy modes (`Policy`), flag enums
  (`MempolicyFlag`, `MbindFlag`), policy name parsing and display
  (`parse_policy`, `policy_name`, `policy_names`, `format_policies`,
  `print_policies`, raising `PolicyError`), size parsing with K/M/G
  suffixes (`memsize`) and node-mask helpers (`find_first`, `format_mask`,
  `print_mask`) that take an integer bit mask or an iterable of node numbers.
- `numatools.table` — the text table used for all reports (`Table`, `Cell`,
  `CellType`, `Justify`, `LineFlag`, `format_cell`), with column folding to a
  screen width, hiding of unseen or all-zero rows and columns, and
  descending sorting of rows.
- `numatools.sysinfo` — discovery of NUMA nodes (`discover_nodes`,
  `node_headers`), huge page sizes (`huge_page_size_in_bytes`,
  `hugepages_bytes`), processes (`command_name_for_pid`,
  `find_pids_matching`, `sort_unique_pids`, `all_digits`) and the output
  width (`get_screen_width`).
- `numatools.report` — builds the report text (`Settings`, `Reporter` with
  `numastat_info`, `system_info`, `process_info` and `system_file_table`).
  The sysfs and procfs roots, node list and page sizes can be passed in, so
  reports can be built from a copy of those trees.
- `numatools.sysfs` — reading small sysfs files and comma separated node
  lists (`sysfs_read`, `sysfs_node_read`, raising `SysfsError`).
- `numatools.netlink` — building and parsing route netlink messages with
  aligned attributes and IPv4/IPv6 address attributes (`NetlinkMessage`),
  and sending one request on a private socket (`rtnetlink_request`, raising
  `NetlinkError`).
- `numatools.stream` — the STREAM memory bandwidth benchmark on numpy
  arrays (`StreamBenchmark`, `check_tick`).
- `numatools.cli` — the `numastat` command (`main`, `parse_args`,
  `usage_text`, `UsageError`).

```python
from numatools.policy import parse_policy, policy_name, memsize

policy = parse_policy("interleave", "0-1")
print(policy_name(policy))   # interleave
print(memsize("2M"))         # 2097152
```

```python
from numatools.stream import StreamBenchmark

bench = StreamBenchmark(n=1_000_000, verbose=False)
rates = bench.run()          # {"Copy": ..., "Scale": ..., "Add": ..., "Triad": ...} in MB/s
```

## What it does not do

The package only reads and reports. It does not set, query or verify
memory policies in the kernel, bind processes or memory to nodes, move or
migrate pages, or manage shared memory segments; `numatools.policy` only
names, parses and prints policies and masks. `StreamBenchmark` measures
bandwidth with whatever memory placement the process already has.

## Tests

```
pip install .[test]
pytest
```