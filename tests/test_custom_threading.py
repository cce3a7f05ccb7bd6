import threading

import pytest

from utils.custom_threading import ThreadExecutor, wait_any


def test_executor_rejects_empty_pool():
    with pytest.raises(ValueError, match="fetch"):
        ThreadExecutor(0, "fetch")


def test_exit_waits_for_submitted_work():
    release = threading.Event()
    finished = []

    def job():
        release.wait(1)
        finished.append(threading.current_thread().name)

    with ThreadExecutor(2, "store") as executor:
        executor.submit(job)
        release.set()

    assert len(finished) == 1
    assert finished[0].startswith("store")


def test_wait_any_returns_as_soon_as_one_finishes():
    gate = threading.Event()
    with ThreadExecutor(2, "fetch") as executor:
        quick = executor.submit(lambda: 1)
        slow = executor.submit(gate.wait, 5)
        done, not_done = wait_any([quick, slow])
        gate.set()

    assert quick in done
    assert slow in not_done
