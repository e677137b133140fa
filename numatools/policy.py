"""Memory policy constants, policy name parsing and node mask helpers."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable, Iterator


class Policy(enum.IntEnum):
    """Kernel memory policy modes."""

    DEFAULT = 0
    PREFERRED = 1
    BIND = 2
    INTERLEAVE = 3
    LOCAL = 4
    PREFERRED_MANY = 5
    MAX = 6


class MempolicyFlag(enum.IntFlag):
    """Flags for get_mempolicy and mode flags for set_mempolicy."""

    NODE = 1 << 0
    ADDR = 1 << 1
    MEMS_ALLOWED = 1 << 2
    NUMA_BALANCING = 1 << 13
    RELATIVE_NODES = 1 << 14
    STATIC_NODES = 1 << 15


class MbindFlag(enum.IntFlag):
    """Flags for mbind."""

    STRICT = 1 << 0
    MOVE = 1 << 1
    MOVE_ALL = 1 << 2


class PolicyError(ValueError):
    """Raised for an unknown policy or a policy missing its node argument."""


# (name, policy, takes no argument), in the order they are listed to users.
_POLICIES: tuple[tuple[str, Policy, bool], ...] = (
    ("preferred-many", Policy.PREFERRED_MANY, False),
    ("local", Policy.LOCAL, True),
    ("interleave", Policy.INTERLEAVE, False),
    ("membind", Policy.BIND, False),
    ("preferred", Policy.PREFERRED, False),
    ("default", Policy.DEFAULT, True),
)

_POLICY_NAMES = ("default", "preferred", "bind", "interleave", "local", "preferred-many")

_UNSIGNED = re.compile(r"[ \t\n\v\f\r]*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")

_SIZE_MULTIPLIERS = {"K": 1024, "M": 1024**2, "G": 1024**3}


def parse_policy(name: str | None, arg: str | None = None) -> Policy:
    """Return the policy called ``name``; ``arg`` is its node argument, if any."""
    if name is None:
        return Policy.DEFAULT
    wanted = name.lstrip("-")
    for policy_text, policy, noarg in _POLICIES:
        if policy_text == wanted:
            if arg is None and not noarg:
                raise PolicyError(f"policy {policy_text} needs a node argument")
            return policy
    raise PolicyError(f"unknown policy: {name}")


def policy_name(policy: int) -> str:
    """Return the display name of a policy mode, or ``[n]`` for unknown ones."""
    index = int(policy)
    if 0 <= index < len(_POLICY_NAMES):
        return _POLICY_NAMES[index]
    return f"[{index}]"


def policy_names() -> tuple[str, ...]:
    """Return the policy names accepted by :func:`parse_policy`."""
    return tuple(entry[0] for entry in _POLICIES)


def format_policies() -> str:
    """Return the one-line list of accepted policy names."""
    return "Policies:" + "".join(f" {name}" for name in policy_names())


def print_policies() -> None:
    """Print the list of accepted policy names."""
    print(format_policies())


def memsize(text: str) -> int:
    """Parse a size with an optional K, M or G suffix (powers of 1024)."""
    match = _UNSIGNED.match(text)
    if match is None:
        value, rest = 0, text
    else:
        sign, digits = match.groups()
        if digits[:2].lower() == "0x":
            value = int(digits[2:], 16)
        elif digits.startswith("0"):
            value = int(digits, 8)
        else:
            value = int(digits)
        if sign == "-":
            value = -value
        rest = text[match.end():]
    return value * _SIZE_MULTIPLIERS.get(rest[:1].upper(), 1)


def _bits(mask: int | Iterable[int]) -> Iterator[int]:
    """Yield the set bit numbers of a mask, in increasing order."""
    if isinstance(mask, int):
        if mask < 0:
            raise ValueError("a mask cannot be negative")
        return (i for i, bit in enumerate(reversed(bin(mask)[2:])) if bit == "1")
    return iter(sorted(set(mask)))


def find_first(mask: int | Iterable[int]) -> int:
    """Return the lowest set bit of ``mask``, or -1 when none is set."""
    return next(_bits(mask), -1)


def format_mask(name: str, mask: int | Iterable[int]) -> str:
    """Return ``name`` followed by the set bit numbers of ``mask``."""
    return f"{name}: " + "".join(f"{bit} " for bit in _bits(mask))


def print_mask(name: str, mask: int | Iterable[int]) -> None:
    """Print ``name`` followed by the set bit numbers of ``mask``."""
    print(format_mask(name, mask))