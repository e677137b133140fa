import pytest

from numatools.table import (
    Cell,
    CellType,
    Justify,
    LineFlag,
    Table,
    format_cell,
)

WIDTH = 8


def make_table(values):
    rows = len(values)
    cols = len(values[0])
    table = Table(1, 1, rows, cols)
    table.set_string(0, 0, "Name")
    table.set_col_width(0, WIDTH)
    table.set_col_justification(0, Justify.LEFT)
    for col in range(cols):
        table.set_string(0, col + 1, f"N{col}")
        table.set_col_width(col + 1, WIDTH)
        table.set_col_justification(col + 1, Justify.RIGHT)
        table.set_col_decimal_places(col + 1, 2)
    for row, row_values in enumerate(values, start=1):
        table.set_string(row, 0, f"r{row - 1}")
        for col, value in enumerate(row_values, start=1):
            table.set_double(row, col, value)
    return table


def test_format_long():
    assert format_cell(Cell(CellType.LONG, 42), 16, 0) == "42"


def test_format_double_uses_decimal_places():
    text = format_cell(Cell(CellType.DOUBLE, 2.5), 16, 2)
    assert float(text) == 2.5
    assert len(text.split(".")[1]) == 2


def test_format_double_no_places():
    text = format_cell(Cell(CellType.DOUBLE, 7.0), 16, 0)
    assert "." not in text
    assert int(text) == 7


def test_format_string_truncated_to_width():
    assert format_cell(Cell(CellType.STRING, "abcdefgh"), 3, 0) == "abc"


def test_format_repchar_leaves_gutter():
    assert format_cell(Cell(CellType.REPCHAR, "-"), 5, 0) == "-" * 4


def test_format_char8_and_null():
    assert format_cell(Cell(CellType.CHAR8, "abcdefghijk"), 16, 0) == "abcdefgh"
    assert format_cell(Cell(), 16, 0) == ""


def test_render_no_data():
    table = Table(1, 1, 2, 2)
    table.set_string(0, 0, "Name")
    assert table.render(80) == "Table has no data.\n"


def test_render_all_zero_hidden():
    table = make_table([[0.0, 0.0]])
    table.zero_data(CellType.DOUBLE)
    assert table.render(80, False, False, False, False) == "Table has no non-zero data.\n"


def test_render_all_zero_shown_when_requested():
    table = make_table([[0.0, 0.0]])
    out = table.render(80, False, False, True, True)
    lines = out.splitlines()
    assert len(lines) == 2
    assert float(lines[1][WIDTH:2 * WIDTH]) == 0.0


def test_render_layout():
    table = make_table([[1.0, 2.5]])
    lines = table.render(80).splitlines()
    assert lines[0] == "Name".ljust(WIDTH) + "N0".rjust(WIDTH) + "N1".rjust(WIDTH)
    assert lines[1].startswith("r0".ljust(WIDTH))
    assert float(lines[1][WIDTH:2 * WIDTH]) == 1.0
    assert float(lines[1][2 * WIDTH:]) == 2.5
    assert all(len(line) == 3 * WIDTH for line in lines)


def test_zero_rows_and_columns_skipped():
    table = make_table([[1.0, 0.0], [0.0, 0.0]])
    lines = table.render(80, False, False, False, False).splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("r0")
    assert all(len(line) == 2 * WIDTH for line in lines)
    assert "N1" not in lines[0]


def test_zero_rows_shown_by_default():
    table = make_table([[1.0, 0.0], [0.0, 0.0]])
    lines = table.render(80).splitlines()
    assert [line[:2] for line in lines[1:]] == ["r0", "r1"]


def test_always_show_row_overrides_zero_filter():
    table = make_table([[1.0], [0.0]])
    table.set_row_flag(2, LineFlag.ALWAYS_SHOW)
    lines = table.render(80, False, False, False, False).splitlines()
    assert [line[:2] for line in lines[1:]] == ["r0", "r1"]


def test_render_sets_row_and_column_flags():
    table = make_table([[1.0, 0.0]])
    lines = table.render(80).splitlines()
    assert lines[0] == "Name".ljust(WIDTH) + "N0".rjust(WIDTH) + "N1".rjust(WIDTH)
    assert (table.row_flags[1] & LineFlag.NON_ZERO_DATA) == LineFlag.NON_ZERO_DATA
    assert (table.col_flags[1] & LineFlag.SEEN_DATA) == LineFlag.SEEN_DATA
    assert (table.col_flags[2] & LineFlag.SEEN_DATA) == LineFlag.SEEN_DATA
    assert (table.col_flags[2] & LineFlag.NON_ZERO_DATA) == 0


def test_folding_into_sections():
    table = make_table([[1.0, 2.0, 3.0, 4.0]])
    out = table.render(4 * WIDTH)
    sections = out.split("\n\n")
    assert len(sections) == 2
    assert all(len(line) <= 4 * WIDTH for line in out.splitlines())
    first_header = sections[0].splitlines()[0]
    second_header = sections[1].splitlines()[0]
    assert "N2" in first_header and "N3" not in first_header
    assert second_header.startswith("Name") and "N3" in second_header


def test_sort_rows_descending():
    table = make_table([[1.0], [3.0], [2.0]])
    table.sort_rows_descending(1, 3, 1)
    assert table.row_order[0] == 0
    values = [table.cell(row, 1).value for row in table.row_order[1:]]
    assert values == sorted(values, reverse=True)
    labels = [line[:2] for line in table.render(80).splitlines()[1:]]
    assert labels == ["r1", "r2", "r0"]


def test_auto_set_col_width():
    table = Table(0, 1, 2, 0)
    table.set_string(0, 0, "abc")
    table.set_string(1, 0, "abcdefghij")
    table.auto_set_col_width(0, 4, 16)
    assert table.col_widths[0] == len("abcdefghij") + 1
    table.auto_set_col_width(0, 4, 5)
    assert table.col_widths[0] == 5


def test_auto_set_col_width_ignores_repchar():
    table = Table(0, 1, 2, 0)
    table.set_repchar(0, 0, "-")
    table.set_string(1, 0, "ab")
    table.auto_set_col_width(0, 4, 16)
    assert table.col_widths[0] == 4 + 1


def test_set_col_width_is_capped():
    table = Table(0, 1, 1, 0)
    table.set_col_width(0, 200)
    assert table.col_widths[0] == 127


def test_add_double_accumulates():
    table = Table(0, 0, 1, 1)
    table.add_double(0, 0, 1.5)
    table.add_double(0, 0, 1.5)
    cell = table.cell(0, 0)
    assert cell.type is CellType.DOUBLE
    assert cell.value == 3.0


def test_add_long_accumulates():
    table = Table(0, 0, 1, 1)
    table.add_long(0, 0, 4)
    table.add_long(0, 0, 5)
    assert table.cell(0, 0).value == 9


def test_zero_data_resets_only_data_area():
    table = make_table([[5.0]])
    table.zero_data(CellType.DOUBLE)
    assert table.cell(1, 1).value == 0.0
    assert table.cell(0, 1).value == "N0"
    assert table.cell(1, 0).value == "r0"


def test_clear_cell():
    table = make_table([[5.0]])
    table.clear_cell(1, 1)
    assert table.cell(1, 1) == Cell()


def test_center_justification():
    table = Table(1, 0, 1, 1)
    table.set_string(0, 0, "ab")
    table.set_long(1, 0, 7)
    table.set_col_width(0, 6)
    lines = table.render(80).splitlines()
    assert lines[0] == "  ab  "
    assert lines[1].strip() == "7"


def test_repchar_rule_renders_right_justified():
    table = Table(2, 0, 1, 1)
    table.set_string(0, 0, "Total")
    table.set_repchar(1, 0, "-")
    table.set_double(2, 0, 1.0)
    table.set_col_width(0, WIDTH)
    table.set_col_justification(0, Justify.RIGHT)
    lines = table.render(80).splitlines()
    assert lines[1] == " " + "-" * (WIDTH - 1)


def test_cell_out_of_range():
    table = Table(1, 1, 1, 1)
    with pytest.raises(IndexError):
        table.cell(5, 0)
    with pytest.raises(IndexError):
        table.cell(0, -1)


def test_invalid_arguments():
    with pytest.raises(ValueError):
        Table(-1, 0, 0, 0)
    table = Table(1, 1, 1, 1)
    with pytest.raises(ValueError):
        table.set_repchar(0, 0, "--")
    with pytest.raises(ValueError):
        table.set_col_width(0, -1)
    with pytest.raises(ValueError):
        table.set_col_decimal_places(0, -2)