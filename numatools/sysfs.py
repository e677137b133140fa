"""Reading small sysfs values and node lists."""

from __future__ import annotations

import os
import re
import string

SYSFS_BLOCK = 4096

_INTEGER = re.compile(r"[ \t\n\v\f\r]*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")
_SEPARATORS = re.compile(r"[ \t\n\v\f\r,]*")


class SysfsError(Exception):
    """Raised when a sysfs value cannot be read or parsed."""


def sysfs_read(path: str | os.PathLike[str]) -> str:
    """Return the text of a sysfs file, at most one block long."""
    try:
        with open(path, "rb") as handle:
            data = handle.read(SYSFS_BLOCK - 1)
    except OSError as exc:
        raise SysfsError(f"cannot read {os.fspath(path)}: {exc.strerror}") from exc
    if not data:
        raise SysfsError(f"{os.fspath(path)} is empty")
    return data.decode("ascii", errors="replace")


def _parse_integer(text: str, pos: int) -> tuple[int, int] | None:
    match = _INTEGER.match(text, pos)
    if match is None:
        return None
    sign, digits = match.groups()
    if digits[:2].lower() == "0x":
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    return (-value if sign == "-" else value), match.end()


def sysfs_node_read(path: str | os.PathLike[str], max_nodes: int) -> set[int]:
    """Read a comma separated list of node numbers below ``max_nodes``."""
    text = sysfs_read(path)
    nodes: set[int] = set()
    pos = 0
    while True:
        parsed = _parse_integer(text, pos)
        if parsed is None:
            raise SysfsError(f"cannot parse node list in {os.fspath(path)}")
        number, pos = parsed
        if number < 0:
            raise SysfsError(f"negative node {number} in {os.fspath(path)}")
        if number >= max_nodes:
            raise SysfsError(f"node {number} out of range in {os.fspath(path)}")
        nodes.add(number)
        pos = _SEPARATORS.match(text, pos).end()
        if pos >= len(text) or text[pos] not in string.digits:
            return nodes