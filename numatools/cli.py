"""Command line front end showing per-node memory usage."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass, field

from numatools.report import Reporter, Settings
from numatools.sysinfo import (
    all_digits,
    find_pids_matching,
    get_screen_width,
    huge_page_size_in_bytes,
    sort_unique_pids,
)

PROG_NAME = "numastat"
VERSION_STRING = "20130723"

_FLAG_OPTIONS = frozenset("cmnvz")


class UsageError(Exception):
    """Raised for command lines that cannot be parsed, and for help requests."""


@dataclass
class _ParsedArgs:
    """Options and process specifiers taken from the command line."""

    compress_display: bool = False
    show_system_info: bool = False
    show_numastat_info: bool = False
    sort_table: bool = False
    sort_table_node: int = -1
    verbose: bool = False
    show_zero_data: bool = True
    show_version: bool = False
    pid_specs: list[str] = field(default_factory=list)


def _to_int(text: str) -> int:
    return int(text) if text else 0


def usage_text(prog_name: str = PROG_NAME) -> str:
    """Return the usage message."""
    lines = (
        f"Usage: {prog_name} [-c] [-m] [-n] [-p <PID>|<pattern>] [-s[<node>]] [-v] [-V] [-z] "
        "[ <PID>|<pattern>... ]",
        "-c to minimize column widths",
        "-m to show meminfo-like system-wide memory usage",
        "-n to show the numastat statistics info",
        "-p <PID>|<pattern> to show process info",
        "-s[<node>] to sort data by total column or <node>",
        "-v to make some reports more verbose",
        f"-V to show the {prog_name} code version",
        "-z to skip rows and columns of zeros",
    )
    return "".join(line + "\n" for line in lines)


def _long_option(arg: str) -> None:
    name, has_value, _ = arg[2:].partition("=")
    if name and "help".startswith(name):
        if has_value:
            raise UsageError("option '--help' doesn't allow an argument")
        raise UsageError("")
    raise UsageError(f"unrecognized option '{arg}'")


def parse_args(argv: Sequence[str]) -> _ParsedArgs:
    """Parse command line arguments (without the program name)."""
    parsed = _ParsedArgs()
    positional: list[str] = []
    args = iter(list(argv))
    for arg in args:
        if arg == "--":
            positional.extend(args)
            break
        if arg.startswith("--"):
            _long_option(arg)
        if not arg.startswith("-") or arg == "-":
            positional.append(arg)
            continue
        cluster = arg[1:]
        pos = 0
        while pos < len(cluster):
            opt = cluster[pos]
            rest = cluster[pos + 1:]
            pos += 1
            if opt in _FLAG_OPTIONS:
                if opt == "c":
                    parsed.compress_display = True
                elif opt == "m":
                    parsed.show_system_info = True
                elif opt == "n":
                    parsed.show_numastat_info = True
                elif opt == "v":
                    parsed.verbose = True
                else:
                    parsed.show_zero_data = False
            elif opt == "p":
                if rest:
                    value = rest
                else:
                    value = next(args, None)
                    if value is None:
                        raise UsageError("option requires an argument -- 'p'")
                parsed.pid_specs.append(value)
                break
            elif opt == "s":
                parsed.sort_table = True
                if rest and all_digits(rest):
                    parsed.sort_table_node = _to_int(rest)
                break
            elif opt == "V":
                parsed.show_version = True
                return parsed
            elif opt == "?":
                raise UsageError("")
            else:
                raise UsageError(f"invalid option -- '{opt}'")
    parsed.pid_specs.extend(positional)
    return parsed


def _resolve_pids(specs: Sequence[str]) -> list[int]:
    pids: list[int] = []
    for spec in specs:
        if all_digits(spec):
            pids.append(_to_int(spec))
            continue
        found = find_pids_matching(spec)
        if not found:
            print(f'Found no processes containing pattern: "{spec}"')
        pids.extend(found)
    return sort_unique_pids(pids)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the per-node memory report and return the exit status."""
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)
    try:
        parsed = parse_args(argv)
    except UsageError as exc:
        if str(exc):
            print(f"{PROG_NAME}: {exc}", file=sys.stderr)
        sys.stderr.write(usage_text(PROG_NAME))
        return 1
    if parsed.show_version:
        print(f"{PROG_NAME} version: {VERSION_STRING}")
        return 0

    screen_width = get_screen_width()
    pids = _resolve_pids(parsed.pid_specs)
    compatibility = not argv
    settings = Settings(
        verbose=parsed.verbose,
        compress_display=parsed.compress_display,
        sort_table=parsed.sort_table,
        sort_table_node=parsed.sort_table_node,
        compatibility_mode=compatibility,
        show_zero_data=parsed.show_zero_data,
        screen_width=screen_width,
    )

    try:
        reporter = Reporter(settings)
    except OSError as exc:
        reason = (
            "sysfs not mounted or system not NUMA aware"
            if compatibility
            else "Couldn't open /sys/devices/system/node"
        )
        print(f"{reason}: {exc.strerror}", file=sys.stderr)
        return 1

    try:
        if compatibility:
            sys.stdout.write(reporter.numastat_info())
            return 0
        try:
            reporter.huge_page_size = huge_page_size_in_bytes()
        except OSError as exc:
            print(f"Can't open /proc/meminfo: {exc.strerror}", file=sys.stderr)
            return 1
        if pids:
            sys.stdout.write(reporter.process_info(pids))
        if parsed.show_system_info:
            sys.stdout.write(reporter.system_info())
        if parsed.show_numastat_info or (not pids and not parsed.show_system_info):
            sys.stdout.write(reporter.numastat_info())
    except OSError as exc:
        where = exc.filename if exc.filename else ""
        print(f"cannot open {where}: {exc.strerror}", file=sys.stderr)
        return 1
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return 0