import pytest

from numatools.cli import UsageError, main, parse_args, usage_text


def test_defaults_without_arguments():
    parsed = parse_args([])
    assert parsed.show_zero_data is True
    assert parsed.sort_table is False
    assert parsed.sort_table_node == -1
    assert parsed.pid_specs == []
    assert parsed.show_version is False


def test_separate_flags():
    parsed = parse_args(["-c", "-m", "-n", "-v", "-z"])
    assert parsed.compress_display
    assert parsed.show_system_info
    assert parsed.show_numastat_info
    assert parsed.verbose
    assert parsed.show_zero_data is False


def test_clustered_flags_match_separate_flags():
    assert parse_args(["-cmnvz"]) == parse_args(["-c", "-m", "-n", "-v", "-z"])


@pytest.mark.parametrize(
    "argv, spec",
    [(["-p", "123"], "123"), (["-p123"], "123"), (["-pbash"], "bash"), (["-p", "-c"], "-c")],
)
def test_pid_option_argument(argv, spec):
    parsed = parse_args(argv)
    assert parsed.pid_specs == [spec]
    assert parsed.compress_display is False


def test_pid_option_requires_argument():
    with pytest.raises(UsageError):
        parse_args(["-p"])


def test_sort_without_node():
    parsed = parse_args(["-s"])
    assert parsed.sort_table
    assert parsed.sort_table_node == -1


def test_sort_with_attached_node():
    parsed = parse_args(["-s2"])
    assert parsed.sort_table
    assert parsed.sort_table_node == 2


def test_sort_node_must_be_attached():
    parsed = parse_args(["-s", "2"])
    assert parsed.sort_table_node == -1
    assert parsed.pid_specs == ["2"]


def test_sort_with_non_digit_argument():
    parsed = parse_args(["-sx"])
    assert parsed.sort_table
    assert parsed.sort_table_node == -1


@pytest.mark.parametrize("argv", [["-x"], ["-?"], ["--help"], ["--he"], ["--bogus"], ["-cq"]])
def test_bad_options_raise(argv):
    with pytest.raises(UsageError):
        parse_args(argv)


def test_positional_arguments_are_permuted():
    parsed = parse_args(["42", "-c", "foo"])
    assert parsed.pid_specs == ["42", "foo"]
    assert parsed.compress_display


def test_option_specs_come_before_positional_ones():
    parsed = parse_args(["7", "-p", "9"])
    assert parsed.pid_specs == ["9", "7"]


def test_double_dash_ends_options():
    parsed = parse_args(["--", "-c"])
    assert parsed.pid_specs == ["-c"]
    assert parsed.compress_display is False


def test_version_stops_parsing():
    parsed = parse_args(["-V", "-x"])
    assert parsed.show_version is True


def test_usage_text_names_program():
    text = usage_text("prog")
    lines = text.splitlines()
    assert lines[0].startswith("Usage: prog [-c]")
    assert "-V to show the prog code version" in lines
    assert lines[-1] == "-z to skip rows and columns of zeros"


def test_main_version(capsys):
    assert main(["-V"]) == 0
    out = capsys.readouterr().out
    assert "version: 20130723" in out


@pytest.mark.parametrize("argv", [["-x"], ["--help"], ["-p"]])
def test_main_usage_error(argv, capsys):
    assert main(argv) == 1
    err = capsys.readouterr().err
    assert "Usage:" in err
    assert "-c to minimize column widths" in err