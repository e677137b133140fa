import pytest

from numatools.sysfs import SYSFS_BLOCK, SysfsError, sysfs_node_read, sysfs_read


def write(tmp_path, text, name="value"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_read_round_trip(tmp_path):
    path = write(tmp_path, "abc\n")
    assert sysfs_read(path) == "abc\n"


def test_read_is_limited_to_one_block(tmp_path):
    path = write(tmp_path, "a" * (SYSFS_BLOCK * 2))
    assert len(sysfs_read(path)) == SYSFS_BLOCK - 1


def test_read_missing_file(tmp_path):
    with pytest.raises(SysfsError):
        sysfs_read(tmp_path / "missing")


def test_read_empty_file(tmp_path):
    with pytest.raises(SysfsError):
        sysfs_read(write(tmp_path, ""))


def test_node_list(tmp_path):
    path = write(tmp_path, "0,2,5\n")
    assert sysfs_node_read(path, 8) == {0, 2, 5}


def test_node_list_with_spaces(tmp_path):
    path = write(tmp_path, " 1, 3 ,4\n")
    assert sysfs_node_read(path, 8) == {1, 3, 4}


def test_node_range_stops_at_dash(tmp_path):
    path = write(tmp_path, "0-3\n")
    assert sysfs_node_read(path, 8) == {0}


def test_node_list_hex(tmp_path):
    path = write(tmp_path, "0x3\n")
    assert sysfs_node_read(path, 8) == {3}


@pytest.mark.parametrize("text", ["7\n", "1,7\n", "-1\n", "x\n", "1,-2\n"])
def test_node_list_errors(tmp_path, text):
    path = write(tmp_path, text)
    with pytest.raises(SysfsError):
        sysfs_node_read(path, 7)


def test_node_list_missing_file(tmp_path):
    with pytest.raises(SysfsError):
        sysfs_node_read(tmp_path / "missing", 4)