"""Discovery of NUMA nodes, processes and page sizes from sysfs and procfs."""

from __future__ import annotations

import os
import re
import subprocess
import sys
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

KILOBYTE = 1024
MEGABYTE = 1024 * 1024

SYS_NODE_ROOT = "/sys/devices/system/node"
PROC_ROOT = "/proc"
MEMINFO_PATH = "/proc/meminfo"

DEFAULT_SCREEN_WIDTH = 80
MIN_SCREEN_WIDTH = 32
MAX_SCREEN_WIDTH = 10_000_000

_MATCH_BUFFER = 2048
_NODE_DIR = re.compile(r"node([0-9]+)")
_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_LEADING_FLOAT = re.compile(r"[0-9]+(?:\.[0-9]*)?(?:[eE][+-]?[0-9]+)?")
_HUGEPAGE_FILES = (
    ("HugePages_Total", "nr_hugepages"),
    ("HugePages_Free", "free_hugepages"),
    ("HugePages_Surp", "surplus_hugepages"),
)


@dataclass(frozen=True)
class MemInfoRow:
    """A memory category: its table row, the token it is read by, and its label."""

    index: int
    token: str
    label: str


PROCESS_HUGE_INDEX = 0
PROCESS_PRIVATE_INDEX = 3

PROCESS_MEMINFO: tuple[MemInfoRow, ...] = (
    MemInfoRow(PROCESS_HUGE_INDEX, "huge", "Huge"),
    MemInfoRow(1, "heap", "Heap"),
    MemInfoRow(2, "stack", "Stack"),
    MemInfoRow(PROCESS_PRIVATE_INDEX, "N", "Private"),
)

NUMASTAT_MEMINFO: tuple[MemInfoRow, ...] = (
    MemInfoRow(0, "numa_hit", "Numa_Hit"),
    MemInfoRow(1, "numa_miss", "Numa_Miss"),
    MemInfoRow(2, "numa_foreign", "Numa_Foreign"),
    MemInfoRow(3, "interleave_hit", "Interleave_Hit"),
    MemInfoRow(4, "local_node", "Local_Node"),
    MemInfoRow(5, "other_node", "Other_Node"),
)

_SYSTEM_TOKENS = (
    "MemTotal", "MemFree", "MemUsed", "SwapCached", "HighTotal", "HighFree",
    "LowTotal", "LowFree", "Active", "Inactive", "Active(anon)", "Inactive(anon)",
    "Active(file)", "Inactive(file)", "Unevictable", "Mlocked", "Dirty", "Writeback",
    "FilePages", "Mapped", "AnonPages", "Shmem", "KernelStack", "ShadowCallStack",
    "PageTables", "SecPageTables", "NFS_Unstable", "Bounce", "WritebackTmp", "Slab",
    "SReclaimable", "SUnreclaim", "AnonHugePages", "ShmemHugePages", "ShmemPmdMapped",
    "FileHugePages", "FilePmdMapped", "HugePages_Total", "HugePages_Free",
    "HugePages_Surp", "KReclaimable",
)

SYSTEM_MEMINFO: tuple[MemInfoRow, ...] = tuple(
    MemInfoRow(index, token, token) for index, token in enumerate(_SYSTEM_TOKENS)
)


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def discover_nodes(sys_node_root: str | os.PathLike[str] = SYS_NODE_ROOT) -> list[int]:
    """Return the node numbers of the ``node<N>`` entries, in increasing order."""
    root = os.fspath(sys_node_root)
    nodes = sorted(
        int(match.group(1))
        for name in os.listdir(root)
        if (match := _NODE_DIR.fullmatch(name)) is not None
    )
    if not nodes:
        raise FileNotFoundError(2, "no NUMA node entries found", root)
    return nodes


def node_headers(nodes: Iterable[int], compatibility: bool = False) -> list[str]:
    """Return a column header for each node, followed by ``Total``."""
    template = "node{}" if compatibility else "Node {}"
    return [template.format(node) for node in nodes] + ["Total"]


def command_name_for_pid(pid: int, proc_root: str | os.PathLike[str] = PROC_ROOT) -> str | None:
    """Return the ``Name:`` field of a process status file, or None."""
    path = Path(proc_root) / str(pid) / "status"
    try:
        with open(path, encoding="utf-8", errors="replace") as handle:
            for line in handle:
                if line.startswith("Name:"):
                    name = line[5:].lstrip(" \t\v\f\r")
                    return name[:-1] if name.endswith("\n") else name
    except OSError:
        return None
    return None


def hugepages_bytes(
    node: int, token: str, sys_node_root: str | os.PathLike[str] = SYS_NODE_ROOT
) -> float:
    """Return the bytes in huge pages of kind ``token`` on ``node``, summed over page sizes.

    Raises ValueError for a token that is not a HugePages_* counter and
    FileNotFoundError when the node has no hugepages directory.
    """
    for prefix, filename in _HUGEPAGE_FILES:
        if token.startswith(prefix):
            break
    else:
        raise ValueError(f"not a huge page counter: {token}")

    top = Path(sys_node_root) / f"node{node}" / "hugepages"
    if not top.is_dir():
        raise FileNotFoundError(2, "invalid path", os.fspath(top))

    total = 0.0
    for entry in sorted(os.scandir(top), key=lambda e: e.name):
        if not entry.name.startswith("hugepages-") or not entry.is_dir(follow_symlinks=False):
            continue
        size_text = entry.name[len("hugepages-"):].split("kB", 1)[0]
        page_size = _atoi(size_text) * KILOBYTE
        path = Path(entry.path) / filename
        try:
            with open(path, encoding="ascii", errors="replace") as handle:
                pages = _atoi(handle.readline())
        except OSError as exc:
            print(f"cannot open {path}: {exc.strerror}")
            continue
        total += pages * page_size
    return total


def huge_page_size_in_bytes(meminfo_path: str | os.PathLike[str] = MEMINFO_PATH) -> float:
    """Return the default huge page size from a meminfo file, 0 if it is absent."""
    with open(meminfo_path, encoding="ascii", errors="replace") as handle:
        for line in handle:
            if line.startswith("Hugepagesize"):
                rest = line[len("Hugepagesize"):]
                digits = next((i for i, ch in enumerate(rest) if ch in "0123456789"), None)
                if digits is None:
                    return 0.0
                match = _LEADING_FLOAT.match(rest, digits)
                return float(match.group(0)) * KILOBYTE
    return 0.0


def all_digits(text: str | None) -> bool:
    """True when ``text`` is a string made only of ASCII digits."""
    if text is None:
        return False
    return all(ch in "0123456789" for ch in text)


def _read_bytes(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except OSError:
        return None


def find_pids_matching(
    pattern: str,
    proc_root: str | os.PathLike[str] = PROC_ROOT,
    own_pid: int | None = None,
) -> list[int]:
    """Return the PIDs whose command name or command line contains ``pattern``."""
    if own_pid is None:
        own_pid = os.getpid()
    root = Path(proc_root)
    try:
        names = sorted(name for name in os.listdir(root) if name[:1] in "0123456789" and name)
    except OSError as exc:
        print(f"Couldn't open {os.fspath(root)}: {exc.strerror}", file=sys.stderr)
        return []
    wanted = os.fsencode(pattern)
    found: list[int] = []
    for name in names:
        pid = _atoi(name)
        command = command_name_for_pid(pid, root)
        text = os.fsencode(command) if command else b""
        cmdline = _read_bytes(root / name / "cmdline")
        if cmdline is not None:
            room = max(_MATCH_BUFFER - 1 - len(text) - 1, 0)
            text = text + b" " + cmdline[:room].replace(b"\0", b" ")
        if wanted in text and pid != own_pid:
            found.append(pid)
    return found


def sort_unique_pids(pids: Iterable[int]) -> list[int]:
    """Return the PIDs in increasing order without duplicates."""
    return sorted(set(pids))


def _terminal_columns() -> int | None:
    try:
        result = subprocess.run(
            ["resize"], capture_output=True, text=True, check=False
        )
    except OSError:
        return None
    for line in result.stdout.splitlines():
        if line.startswith("COLUMNS="):
            return _atoi(line[len("COLUMNS="):])
    return None


def get_screen_width(environ: Mapping[str, str] | None = None, is_tty: bool | None = None) -> int:
    """Return the output width from NUMASTAT_WIDTH, the terminal, or a very long line."""
    if environ is None:
        environ = os.environ
    if is_tty is None:
        is_tty = sys.stdout.isatty()
    width = DEFAULT_SCREEN_WIDTH
    setting = environ.get("NUMASTAT_WIDTH")
    if setting is not None:
        width = _atoi(setting)
        if not 1 <= width <= MAX_SCREEN_WIDTH:
            width = DEFAULT_SCREEN_WIDTH
    elif is_tty:
        columns = _terminal_columns()
        if columns is not None:
            width = columns if 1 <= columns <= MAX_SCREEN_WIDTH else DEFAULT_SCREEN_WIDTH
    else:
        width = MAX_SCREEN_WIDTH
    return max(width, MIN_SCREEN_WIDTH)