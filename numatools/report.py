"""Per-node memory reports built from sysfs and procfs files."""

from __future__ import annotations

import mmap
import os
import re
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from numatools.sysinfo import (
    KILOBYTE,
    MEGABYTE,
    NUMASTAT_MEMINFO,
    PROC_ROOT,
    PROCESS_HUGE_INDEX,
    PROCESS_MEMINFO,
    PROCESS_PRIVATE_INDEX,
    SYS_NODE_ROOT,
    SYSTEM_MEMINFO,
    MemInfoRow,
    command_name_for_pid,
    discover_nodes,
    hugepages_bytes,
    node_headers,
)
from numatools.table import CellType, Justify, LineFlag, Table

_LEADING_INT = re.compile(r"[ \t\n\v\f\r]*([+-]?[0-9]+)")
_SYSTEM_DELIMITERS = re.compile(r"[ \t\r\n:]+")
_MAPS_DELIMITERS = re.compile(r"[ \t\r\n]+")
_PAGESIZE_KEY = "kernelpagesize_kB="

_COLUMN_WIDTH = 16
_COMPRESSED_MIN_WIDTH = 4
_WIDE_LABEL_WIDTH = 24


def _strtol(text: str) -> tuple[int, str]:
    """Parse a leading decimal integer; return it with the unparsed rest."""
    match = _LEADING_INT.match(text)
    if match is None:
        return 0, text
    return int(match.group(1)), text[match.end():]


def _tokens(pattern: re.Pattern[str], line: str) -> list[str]:
    return [token for token in pattern.split(line) if token]


@dataclass
class Settings:
    """Display options for the reports."""

    verbose: bool = False
    compress_display: bool = False
    sort_table: bool = False
    sort_table_node: int = -1
    compatibility_mode: bool = False
    show_zero_data: bool = True
    screen_width: int = 80


class Reporter:
    """Builds numastat, meminfo and per-process tables for a set of nodes."""

    def __init__(
        self,
        settings: Settings,
        nodes: Sequence[int] | None = None,
        sys_node_root: str | os.PathLike[str] = SYS_NODE_ROOT,
        proc_root: str | os.PathLike[str] = PROC_ROOT,
        page_size: float | None = None,
        huge_page_size: float = 0.0,
    ) -> None:
        self.settings = settings
        self.sys_node_root = Path(sys_node_root)
        self.proc_root = Path(proc_root)
        self.nodes = list(nodes) if nodes is not None else discover_nodes(self.sys_node_root)
        self.headers = node_headers(self.nodes, settings.compatibility_mode)
        self.page_size = float(mmap.PAGESIZE if page_size is None else page_size)
        self.huge_page_size = float(huge_page_size)

    @property
    def _decimal_places(self) -> int:
        return 0 if self.settings.compress_display else 2

    def _sort_column(self, header_cols: int, total_col: int, table: Table) -> int:
        node_ix = self.settings.sort_table_node
        if node_ix < 0 or node_ix >= len(self.nodes):
            return total_col
        col = header_cols + self.nodes[node_ix]
        return col if col < table.total_cols else total_col

    def _render(self, table: Table) -> str:
        show_zero = self.settings.show_zero_data
        return table.render(self.settings.screen_width, False, False, show_zero, show_zero)

    def _value_multiplier(self, node: int, tok: list[str], messages: list[str]) -> tuple[float, float | None]:
        """Return (multiplier, replacement value or None) for a meminfo line."""
        if len(tok) < 4:
            return self.page_size, None
        if tok[2].startswith("HugePages"):
            try:
                total = hugepages_bytes(node, tok[2], self.sys_node_root)
            except FileNotFoundError as exc:
                messages.append(f"invalid path: {exc.filename}\n")
                total = 0.0
            except ValueError:
                total = 0.0
            if total > 0:
                return 1.0, total
            return self.huge_page_size, None
        if len(tok) > 4 and tok[4].startswith("kB"):
            return float(KILOBYTE), None
        return 1.0, None

    def system_file_table(self, filename: str, rows: Sequence[MemInfoRow], tok_offset: int) -> str:
        """Return the table of a per-node sysfs file such as numastat or meminfo."""
        compat = self.settings.compatibility_mode
        header_rows = 1 if compat else 2
        header_cols = 1
        num_nodes = len(self.nodes)
        table = Table(header_rows, header_cols, len(rows), num_nodes + 1)
        total_col = header_cols + num_nodes
        lookup = {row.token: row.index for row in rows}
        for position, row in enumerate(rows):
            table.set_string(header_rows + position, 0, row.token if compat else row.label)
        table.set_col_width(0, _COLUMN_WIDTH)
        table.set_col_justification(0, Justify.LEFT)

        messages: list[str] = []
        columns = num_nodes if compat else num_nodes + 1
        for node_ix in range(columns):
            col = header_cols + node_ix
            table.set_string(0, col, self.headers[node_ix])
            if not compat:
                table.set_repchar(1, col, "-")
                table.set_col_decimal_places(col, self._decimal_places)
            table.set_col_width(col, _COLUMN_WIDTH)
            table.set_col_justification(col, Justify.RIGHT)
            if node_ix == num_nodes:
                break
            node = self.nodes[node_ix]
            path = self.sys_node_root / f"node{node}" / filename
            with open(path, encoding="ascii", errors="replace") as handle:
                for line in handle:
                    tok = _tokens(_SYSTEM_DELIMITERS, line)
                    if len(tok) <= 1 + tok_offset:
                        continue
                    index = lookup.get(tok[tok_offset])
                    if index is None:
                        messages.append(f"Token {tok[tok_offset]} not in hash table.\n")
                        continue
                    value = float(_strtol(tok[1 + tok_offset])[0])
                    if not compat:
                        multiplier, replacement = self._value_multiplier(node, tok, messages)
                        if replacement is not None:
                            value = replacement
                        value = value * multiplier / MEGABYTE
                    table.set_double(header_rows + index, col, value)
                    table.add_double(header_rows + index, total_col, value)

        if self.settings.compress_display:
            for col in range(header_cols + num_nodes + 1):
                table.auto_set_col_width(col, _COMPRESSED_MIN_WIDTH, _COLUMN_WIDTH)
        if self.settings.sort_table:
            sort_col = self._sort_column(header_cols, total_col, table)
            table.sort_rows_descending(header_rows, header_rows + len(rows) - 1, sort_col)
        return "".join(messages) + self._render(table)

    def numastat_info(self) -> str:
        """Return the per-node numastat report."""
        title = "" if self.settings.compatibility_mode else "\nPer-node numastat info (in MBs):\n"
        return title + self.system_file_table("numastat", NUMASTAT_MEMINFO, 0)

    def system_info(self) -> str:
        """Return the per-node meminfo report."""
        title = "\nPer-node system memory usage (in MBs):\n"
        return title + self.system_file_table("meminfo", SYSTEM_MEMINFO, 2)

    def _node_column(self, header_cols: int, node: int) -> int:
        try:
            return header_cols + self.nodes.index(node)
        except ValueError:
            raise ValueError(f"node {node} is not a known node") from None

    def _add_numa_maps(
        self, table: Table, path: Path, row_for: int | None, total_row: int, total_col: int
    ) -> None:
        header_rows, header_cols = table.header_rows, table.header_cols
        with open(path, encoding="utf-8", errors="replace") as handle:
            try:
                lines = list(handle)
            except OSError as exc:
                raise OSError(exc.errno, f"Can't read {path}") from exc
        for line in lines:
            category = PROCESS_PRIVATE_INDEX
            vm_pagesz = 0.0
            found = line.find(_PAGESIZE_KEY)
            if found >= 0:
                vm_pagesz = float(_strtol(line[found + len(_PAGESIZE_KEY):])[0]) * KILOBYTE
            for token in _tokens(_MAPS_DELIMITERS, line):
                if category == PROCESS_PRIVATE_INDEX:
                    for entry in PROCESS_MEMINFO[:PROCESS_PRIVATE_INDEX]:
                        if token.startswith(entry.token):
                            category = entry.index
                            break
                if not token.startswith("N"):
                    continue
                node_num, rest = _strtol(token[1:])
                if not rest.startswith("="):
                    raise ValueError(f"node value parse error: {token}")
                pages, _ = _strtol(rest[1:])
                if not vm_pagesz:
                    vm_pagesz = (
                        self.huge_page_size if category == PROCESS_HUGE_INDEX else self.page_size
                    )
                value = pages * vm_pagesz / MEGABYTE
                row = header_rows + category if row_for is None else row_for
                col = self._node_column(header_cols, node_num)
                table.add_double(row, col, value)
                table.add_double(row, total_col, value)
                table.add_double(total_row, col, value)
                table.add_double(total_row, total_col, value)

    def process_info(self, pids: Iterable[int]) -> str:
        """Return per-node memory usage of the given processes."""
        pids = list(pids)
        header_rows, header_cols = 2, 1
        num_nodes = len(self.nodes)
        show_sub = self.settings.verbose or len(pids) == 1
        data_rows = len(PROCESS_MEMINFO) if show_sub else len(pids)
        table = Table(header_rows, header_cols, data_rows + 2, num_nodes + 1)
        total_col = header_cols + num_nodes
        total_row = header_rows + data_rows + 1
        out: list[str] = []

        table.set_string(total_row, 0, "Total")
        if show_sub:
            for position, entry in enumerate(PROCESS_MEMINFO):
                table.set_string(header_rows + position, 0, entry.label)
        else:
            table.set_string(0, 0, "PID")
            table.set_repchar(1, 0, "-")
            out.append("\nPer-node process memory usage (in MBs)\n")
        table.set_col_width(0, _COLUMN_WIDTH)
        table.set_col_justification(0, Justify.LEFT)
        for node_ix in range(num_nodes + 1):
            col = header_cols + node_ix
            table.set_string(0, col, self.headers[node_ix])
            table.set_repchar(1, col, "-")
            table.set_col_width(col, _COLUMN_WIDTH)
            table.set_col_decimal_places(col, self._decimal_places)
            table.set_col_justification(col, Justify.RIGHT)
        table.zero_data(CellType.DOUBLE)

        for pid_ix, pid in enumerate(pids):
            name = command_name_for_pid(pid, self.proc_root)
            shown_name = "(null)" if name is None else name
            if show_sub:
                out.append(
                    f"\nPer-node process memory usage (in MBs) for PID {pid} ({shown_name})\n"
                )
                if pid_ix > 0:
                    table.zero_data(CellType.DOUBLE)
                row_for = None
            else:
                row_for = header_rows + pid_ix
                table.set_string(row_for, 0, f"{pid} ({shown_name})")

            path = self.proc_root / str(pid) / "numa_maps"
            try:
                self._add_numa_maps(table, path, row_for, total_row, total_col)
            except FileNotFoundError as exc:
                print(f"Can't read {self.proc_root / str(pid) / 'numa_maps'}: {exc.strerror}",
                      file=sys.stderr)
                continue
            except PermissionError as exc:
                print(f"Can't read {path}: {exc.strerror}", file=sys.stderr)
                continue

            if show_sub or pid_ix + 1 == len(pids):
                if self.settings.compress_display:
                    for col in range(header_cols + num_nodes + 1):
                        table.auto_set_col_width(col, _COMPRESSED_MIN_WIDTH, _COLUMN_WIDTH)
                else:
                    table.auto_set_col_width(0, _COLUMN_WIDTH, _WIDE_LABEL_WIDTH)
                table.set_row_flag(total_row - 1, LineFlag.ALWAYS_SHOW)
                for col in range(header_cols + num_nodes + 1):
                    table.set_repchar(total_row - 1, col, "-")
                if self.settings.sort_table:
                    sort_col = self._sort_column(header_cols, total_col, table)
                    table.sort_rows_descending(header_rows, header_rows + data_rows - 1, sort_col)
                out.append(self._render(table))
        return "".join(out)