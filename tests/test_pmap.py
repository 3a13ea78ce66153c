import threading
import time

import pytest

from ledger_journal.pmap import p_map


def test_results_keep_input_order():
    def slow_square(n: int) -> int:
        time.sleep(0.01 * (5 - n))
        return n * n

    assert p_map(range(5), slow_square, concurrency=5) == [0, 1, 4, 9, 16]


def test_concurrency_is_capped():
    lock = threading.Lock()
    running = 0
    peak = 0

    def work(_: int) -> None:
        nonlocal running, peak
        with lock:
            running += 1
            peak = max(peak, running)
        time.sleep(0.01)
        with lock:
            running -= 1

    p_map(range(12), work, concurrency=3)
    assert 1 <= peak <= 3


def test_first_error_sets_cancel_and_stops_submissions():
    cancel = threading.Event()
    started: list[int] = []

    def work(n: int) -> int:
        started.append(n)
        if n == 0:
            raise ValueError("boom")
        return n

    with pytest.raises(ValueError, match="boom"):
        p_map(range(100), work, concurrency=1, cancel=cancel)
    assert cancel.is_set()
    assert started == [0]


def test_preset_cancel_submits_nothing():
    cancel = threading.Event()
    cancel.set()
    assert p_map(range(3), lambda n: n, concurrency=2, cancel=cancel) == []


@pytest.mark.parametrize("bad", [0, -1, 1.5])
def test_rejects_bad_concurrency(bad):
    with pytest.raises(ValueError):
        p_map([1], lambda n: n, concurrency=bad)
