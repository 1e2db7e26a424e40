from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from counter_api.domain.counter import CounterEngine


def test_counter_starts_at_zero_and_counters_are_independent():
    c = CounterEngine(location="eu-west", kernel="5.15", framework="x.y")
    assert c.ascending_value == 0
    assert c.descending_value == 0

    assert c.increment() == 1
    assert c.increment() == 2
    assert c.decrement() == -1

    # decrement is its own counter, not the negation of ascending
    assert c.ascending_value == 2
    assert c.descending_value == -1


def test_concurrent_increments_are_gapless_and_unique():
    c = CounterEngine(location="l", kernel="k", framework="f")
    n = 2000

    with ThreadPoolExecutor(max_workers=16) as pool:
        values = list(pool.map(lambda _: c.increment(), range(n)))

    assert sorted(values) == list(range(1, n + 1))
    assert c.ascending_value == n
    assert c.descending_value == 0


def test_concurrent_decrements_are_gapless_and_unique():
    c = CounterEngine(location="l", kernel="k", framework="f")
    n = 2000

    with ThreadPoolExecutor(max_workers=16) as pool:
        values = list(pool.map(lambda _: c.decrement(), range(n)))

    assert sorted(values) == list(range(-n, 0))
    assert c.descending_value == -n
    assert c.ascending_value == 0


def test_mixed_concurrent_calls_do_not_lose_updates():
    c = CounterEngine(location="l", kernel="k", framework="f")

    def work(i: int) -> tuple[str, int, int]:
        if i % 2:
            v = c.increment()
            # own increment is always visible afterwards
            return "inc", v, c.ascending_value
        v = c.decrement()
        return "dec", v, c.descending_value

    with ThreadPoolExecutor(max_workers=12) as pool:
        results = list(pool.map(work, range(1000)))

    incs = [r for r in results if r[0] == "inc"]
    decs = [r for r in results if r[0] == "dec"]

    assert sorted(v for _, v, _ in incs) == list(range(1, len(incs) + 1))
    assert sorted(v for _, v, _ in decs) == list(range(-len(decs), 0))
    assert all(seen >= v for _, v, seen in incs)
    assert all(seen <= v for _, v, seen in decs)


def test_metadata_is_read_only():
    c = CounterEngine(location="eu-west", kernel="5.15", framework="x.y")
    assert (c.location, c.kernel, c.framework) == ("eu-west", "5.15", "x.y")

    with pytest.raises(AttributeError):
        c.location = "elsewhere"  # type: ignore[misc]
    with pytest.raises(AttributeError):
        c.ascending_value = 10  # type: ignore[misc]


def test_metadata_defaults_describe_the_running_instance():
    c = CounterEngine()
    assert c.location
    assert c.kernel
    assert c.framework.split(" ")[0] in {"CPython", "PyPy", "IronPython", "Jython", "GraalVM"}
