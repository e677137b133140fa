"""Text tables with per-row and per-column visibility, sorting and line folding."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass

GUTTER_WIDTH = 1
MAX_CELL_WIDTH = 127
CHAR8_WIDTH = 8


class CellType(enum.IntEnum):
    """Kind of value a cell holds."""

    NULL = 0
    LONG = 1
    DOUBLE = 2
    STRING = 3
    CHAR8 = 4
    REPCHAR = 5


class Justify(enum.IntEnum):
    """Column justification."""

    LEFT = 1
    RIGHT = 2
    CENTER = 3


class LineFlag(enum.IntFlag):
    """State recorded for a row or a column."""

    SEEN_DATA = 1 << 2
    NON_ZERO_DATA = 1 << 3
    ALWAYS_SHOW = 1 << 4


_ZERO_VALUES: dict[CellType, int | float | str | None] = {
    CellType.NULL: None,
    CellType.LONG: 0,
    CellType.DOUBLE: 0.0,
    CellType.STRING: None,
    CellType.CHAR8: "",
    CellType.REPCHAR: "",
}


@dataclass
class Cell:
    """One table cell: its type and its value."""

    type: CellType = CellType.NULL
    value: int | float | str | None = None

    @property
    def has_data(self) -> bool:
        """True for anything but empty cells and repeated-character rules."""
        return self.type not in (CellType.NULL, CellType.REPCHAR)

    @property
    def is_nonzero(self) -> bool:
        """True when the cell holds a non-zero number or any string."""
        if self.type is CellType.DOUBLE:
            value = float(self.value or 0.0)
            return value != 0.0 or math.copysign(1.0, value) < 0
        if self.type is CellType.LONG:
            return int(self.value or 0) != 0
        if self.type is CellType.STRING:
            return self.value is not None
        return bool(self.value)


def format_cell(cell: Cell, max_width: int, decimal_places: int = 0) -> str:
    """Return the text of ``cell``, cut to ``max_width`` characters."""
    kind = cell.type
    if kind is CellType.LONG:
        text = str(int(cell.value or 0))
    elif kind is CellType.DOUBLE:
        text = f"{float(cell.value or 0.0):.{decimal_places}f}"
    elif kind is CellType.STRING:
        text = "" if cell.value is None else str(cell.value)
    elif kind is CellType.CHAR8:
        text = str(cell.value or "")[:CHAR8_WIDTH]
    elif kind is CellType.REPCHAR:
        text = str(cell.value or "")[:1] * max(max_width - GUTTER_WIDTH, 0)
    else:
        text = ""
    return text[: max(0, min(max_width, MAX_CELL_WIDTH))]


def _justify(text: str, width: int, justify: Justify) -> str:
    if width <= 0:
        return ""
    if justify is Justify.LEFT:
        return text.ljust(width)[:width]
    if justify is Justify.RIGHT:
        return text.rjust(width)[-width:]
    pad = (width - len(text) + 1) // 2
    return (" " * pad + text).ljust(width)[:width]


class Table:
    """A grid of header and data cells that renders to folded, justified text."""

    def __init__(self, header_rows: int, header_cols: int, data_rows: int, data_cols: int) -> None:
        if min(header_rows, header_cols, data_rows, data_cols) < 0:
            raise ValueError("table dimensions cannot be negative")
        self.header_rows = header_rows
        self.header_cols = header_cols
        self.data_rows = data_rows
        self.data_cols = data_cols
        rows, cols = self.total_rows, self.total_cols
        self._cells = [[Cell() for _ in range(cols)] for _ in range(rows)]
        self.row_order = list(range(rows))
        self.row_flags = [LineFlag(0)] * rows
        self.col_flags = [LineFlag(0)] * cols
        self.col_widths = [0] * cols
        self.col_justify = [Justify.CENTER] * cols
        self.col_decimal_places = [0] * cols

    @property
    def total_rows(self) -> int:
        return self.header_rows + self.data_rows

    @property
    def total_cols(self) -> int:
        return self.header_cols + self.data_cols

    def _check_row(self, row: int) -> None:
        if not 0 <= row < self.total_rows:
            raise IndexError(f"row {row} out of range")

    def _check_col(self, col: int) -> None:
        if not 0 <= col < self.total_cols:
            raise IndexError(f"column {col} out of range")

    def cell(self, row: int, col: int) -> Cell:
        """Return the cell at ``row``, ``col``."""
        self._check_row(row)
        self._check_col(col)
        return self._cells[row][col]

    def _assign(self, row: int, col: int, kind: CellType, value: int | float | str | None) -> None:
        target = self.cell(row, col)
        target.type = kind
        target.value = value

    def set_string(self, row: int, col: int, text: str) -> None:
        self._assign(row, col, CellType.STRING, text)

    def set_repchar(self, row: int, col: int, char: str) -> None:
        """Fill the cell with ``char`` repeated across the column width."""
        if len(char) != 1:
            raise ValueError("a repeated character must be a single character")
        self._assign(row, col, CellType.REPCHAR, char)

    def set_double(self, row: int, col: int, value: float) -> None:
        self._assign(row, col, CellType.DOUBLE, float(value))

    def add_double(self, row: int, col: int, value: float) -> None:
        """Add ``value`` to the cell, treating a non-double cell as zero."""
        target = self.cell(row, col)
        current = float(target.value or 0.0) if target.type is CellType.DOUBLE else 0.0
        target.type = CellType.DOUBLE
        target.value = current + float(value)

    def set_long(self, row: int, col: int, value: int) -> None:
        self._assign(row, col, CellType.LONG, int(value))

    def add_long(self, row: int, col: int, value: int) -> None:
        """Add ``value`` to the cell, treating a non-integer cell as zero."""
        target = self.cell(row, col)
        current = int(target.value or 0) if target.type is CellType.LONG else 0
        target.type = CellType.LONG
        target.value = current + int(value)

    def clear_cell(self, row: int, col: int) -> None:
        self._assign(row, col, CellType.NULL, None)

    def _data_cells(self):
        for row, cells in enumerate(self._cells[self.header_rows :], start=self.header_rows):
            for col, cell in enumerate(cells[self.header_cols :], start=self.header_cols):
                yield row, col, cell

    def zero_data(self, cell_type: CellType = CellType.DOUBLE) -> None:
        """Set every data cell to a zero of ``cell_type``."""
        kind = CellType(cell_type)
        for _, _, cell in self._data_cells():
            cell.type = kind
            cell.value = _ZERO_VALUES[kind]

    def set_row_flag(self, row: int, flag: LineFlag) -> None:
        self._check_row(row)
        self.row_flags[row] |= LineFlag(flag)

    def set_col_flag(self, col: int, flag: LineFlag) -> None:
        self._check_col(col)
        self.col_flags[col] |= LineFlag(flag)

    def set_col_width(self, col: int, width: int) -> None:
        """Set the column width, capped at the widest cell text allowed."""
        self._check_col(col)
        if width < 0:
            raise ValueError("column width cannot be negative")
        self.col_widths[col] = min(width, MAX_CELL_WIDTH)

    def set_col_justification(self, col: int, justify: Justify) -> None:
        self._check_col(col)
        self.col_justify[col] = Justify(justify)

    def set_col_decimal_places(self, col: int, places: int) -> None:
        self._check_col(col)
        if places < 0:
            raise ValueError("decimal places cannot be negative")
        self.col_decimal_places[col] = places

    def auto_set_col_width(self, col: int, min_width: int, max_width: int) -> None:
        """Fit the column to its widest cell plus a gutter, within the given bounds."""
        self._check_col(col)
        places = self.col_decimal_places[col]
        lengths = [
            len(format_cell(row[col], max_width, places))
            for row in self._cells
            if row[col].type is not CellType.REPCHAR
        ]
        width = max([min_width, *lengths]) + GUTTER_WIDTH
        self.col_widths[col] = min(width, max_width)

    @staticmethod
    def _sort_value(cell: Cell) -> float:
        if cell.type in (CellType.DOUBLE, CellType.LONG) and cell.value is not None:
            return float(cell.value)
        return 0.0

    def sort_rows_descending(self, start_row: int, stop_row: int, col: int) -> None:
        """Reorder display rows ``start_row``..``stop_row`` by descending value in ``col``."""
        self._check_col(col)
        if start_row > stop_row:
            return
        self._check_row(start_row)
        self._check_row(stop_row)
        order = self.row_order
        for ix in range(start_row, stop_row + 1):
            biggest = max(
                range(ix, stop_row + 1),
                key=lambda i: self._sort_value(self._cells[order[i]][col]),
            )
            if biggest != ix:
                order[ix], order[biggest] = order[biggest], order[ix]

    def _mark_data(self) -> tuple[bool, bool]:
        seen = nonzero = False
        for row, col, cell in self._data_cells():
            if not cell.has_data:
                continue
            seen = True
            self.row_flags[row] |= LineFlag.SEEN_DATA
            self.col_flags[col] |= LineFlag.SEEN_DATA
            if cell.is_nonzero:
                nonzero = True
                self.row_flags[row] |= LineFlag.NON_ZERO_DATA
                self.col_flags[col] |= LineFlag.NON_ZERO_DATA
        return seen, nonzero

    @staticmethod
    def _visible(flags: LineFlag, show_unseen: bool, show_zero: bool) -> bool:
        return bool(flags & LineFlag.ALWAYS_SHOW) or (
            (show_unseen or bool(flags & LineFlag.SEEN_DATA))
            and (show_zero or bool(flags & LineFlag.NON_ZERO_DATA))
        )

    def _display(self, row: int, col: int) -> str:
        width = self.col_widths[col]
        text = format_cell(self._cells[row][col], width, self.col_decimal_places[col])
        return _justify(text, width, self.col_justify[col])

    def render(
        self,
        screen_width: int,
        show_unseen_rows: bool = False,
        show_unseen_cols: bool = False,
        show_zero_rows: bool = True,
        show_zero_cols: bool = True,
    ) -> str:
        """Return the table as text, folding columns into sections to fit ``screen_width``."""
        seen, nonzero = self._mark_data()
        if not seen:
            return "Table has no data.\n"
        if not nonzero and not show_zero_rows and not show_zero_cols:
            return "Table has no non-zero data.\n"

        def col_shown(col: int) -> bool:
            return self._visible(self.col_flags[col], show_unseen_cols, show_zero_cols)

        out: list[str] = []
        col = -1
        data_col = self.header_cols
        while data_col < self.total_cols:
            if not col_shown(data_col):
                data_col += 1
                continue
            if col > 0:
                out.append("\n")
            for row in self.row_order:
                if row >= self.header_rows and not self._visible(
                    self.row_flags[row], show_unseen_rows, show_zero_rows
                ):
                    continue
                parts = [self._display(row, header) for header in range(self.header_cols)]
                line_width = sum(self.col_widths[: self.header_cols])
                col = data_col
                while True:
                    if col_shown(col):
                        parts.append(self._display(row, col))
                        line_width += self.col_widths[col]
                    col += 1
                    if col >= self.total_cols or line_width + self.col_widths[col] > screen_width:
                        break
                out.append("".join(parts) + "\n")
            data_col = max(col, data_col + 1)
        return "".join(out)