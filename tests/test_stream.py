import numpy as np
import pytest

from numatools.stream import STREAM_NAMES, StreamBenchmark, check_tick


def test_check_tick_in_range():
    tick = check_tick()
    assert 0 <= tick <= 1_000_000


def test_run_returns_positive_rates():
    bench = StreamBenchmark(n=2000, verbose=False)
    results = bench.run()
    assert tuple(results) == STREAM_NAMES
    assert all(rate > 0 for rate in results.values())


def test_quiet_run_prints_nothing(capsys):
    StreamBenchmark(n=500, verbose=False).run()
    assert capsys.readouterr().out == ""


def test_memsize_round_trip():
    bench = StreamBenchmark(n=1234, verbose=False)
    size = bench.memsize()
    bench.set_memsize(size)
    assert bench.n == 1234
    assert bench.memsize() == size


def test_set_memsize_fits_inside_size():
    word = np.dtype(np.float64).itemsize
    bench = StreamBenchmark(verbose=False)
    for size in (1000, 4097, 123457):
        bench.set_memsize(size)
        assert bench.memsize() <= size
        assert size - bench.memsize() < 3 * word


def test_set_memsize_too_small():
    bench = StreamBenchmark(verbose=False)
    with pytest.raises(ValueError):
        bench.set_memsize(1)


def test_bad_array_size():
    with pytest.raises(ValueError):
        StreamBenchmark(n=0)


def test_verbose_check_output(capsys):
    bench = StreamBenchmark(n=1000, verbose=True)
    bench.check()
    out = capsys.readouterr().out
    assert "This system uses 8 bytes per DOUBLE PRECISION word." in out
    assert "Array size = 1000, Offset = 0" in out
    assert "the *best* time for each is used." in out


def test_verbose_run_prints_table(capsys):
    bench = StreamBenchmark(n=1000, verbose=True)
    bench.run()
    lines = capsys.readouterr().out.splitlines()
    assert "Function      Rate (MB/s)   RMS time     Min time     Max time" in lines
    for name in STREAM_NAMES:
        assert sum(line.startswith(name + ":") for line in lines) == 1


def test_resize_between_runs():
    bench = StreamBenchmark(n=100, verbose=False)
    bench.run()
    bench.set_memsize(StreamBenchmark(n=300, verbose=False).memsize())
    results = bench.run()
    assert bench.n == 300
    assert len(results) == len(STREAM_NAMES)