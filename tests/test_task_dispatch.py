import threading
import time

from timeline.task_dispatch import (
    cancel_task, count_pending_tasks, dispatch_task, is_pending, shutdown_tasks, wait_for_tasks
)


def _drain(qapp, done, timeout: float = 5.0) -> None:
    """Process queued deliveries until ``done()`` or the timeout."""
    deadline = time.monotonic() + timeout
    while not done() and time.monotonic() < deadline:
        qapp.processEvents()
        time.sleep(0.01)


def test_result_is_delivered_on_the_main_thread(qapp) -> None:
    results = []
    main_thread = threading.current_thread()

    ticket = dispatch_task(lambda value: results.append((value, threading.current_thread())), sum, [1, 2, 3])
    assert wait_for_tasks(5000)
    _drain(qapp, lambda: results)

    assert results == [(6, main_thread)]
    assert not is_pending(ticket)
    shutdown_tasks(wait=True)


def test_errors_go_to_on_error(qapp) -> None:
    results = []
    errors = []

    def _fail():
        raise OSError("disk full")

    dispatch_task(results.append, _fail, on_error=errors.append)
    assert wait_for_tasks(5000)
    _drain(qapp, lambda: errors)

    assert results == []
    assert [str(e) for e in errors] == ["disk full"]
    shutdown_tasks(wait=True)


def test_cancelled_ticket_result_is_dropped(qapp) -> None:
    release = threading.Event()
    results = []

    ticket = dispatch_task(results.append, release.wait, 5)
    assert is_pending(ticket)
    assert count_pending_tasks() == 1

    assert cancel_task(ticket) == ticket
    assert not is_pending(ticket)
    assert count_pending_tasks() == 0

    release.set()
    shutdown_tasks(wait=True)
    qapp.processEvents()
    assert results == []


def test_callbacks_run_only_from_the_event_loop(qapp) -> None:
    results = []

    ticket = dispatch_task(results.append, str.upper, "saved")
    deadline = time.monotonic() + 5
    while is_pending(ticket) and time.monotonic() < deadline:
        time.sleep(0.01)

    assert not is_pending(ticket)
    assert results == []
    _drain(qapp, lambda: results)
    assert results == ["SAVED"]
    shutdown_tasks(wait=True)
