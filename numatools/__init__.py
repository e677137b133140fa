"""Per-node NUMA memory reports, memory policy helpers, sysfs and netlink utilities, and a STREAM benchmark."""

__version__ = "0.1.0"

__all__ = ["cli", "netlink", "policy", "report", "stream", "sysfs", "sysinfo", "table"]