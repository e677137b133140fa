[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "numatools"
version = "0.1.0"
description = "Per-node NUMA memory statistics, memory policy helpers and a STREAM memory bandwidth benchmark"
requires-python = ">=3.10"
keywords = ["numa", "numastat", "memory", "policy", "stream", "benchmark", "sysfs", "netlink"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Topic :: System :: Benchmark",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
numastat = "numatools.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["numatools"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
