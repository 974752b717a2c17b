"""
Background dispatch for persistence calls.

Runs blocking work (writing a task change to storage) on a worker thread
and delivers the result, or the failure, back on the Qt main thread.
Callers hold a ticket per call and may cancel it.
"""

import uuid
import sys
from datetime import datetime
from concurrent.futures import ThreadPoolExecutor, Future
from typing import Callable, Any, Dict, Optional
from PySide6.QtCore import QObject, Qt, QTimer, QEventLoop, Signal, Slot

Notify = Callable[[Any], None]
OnError = Callable[[Exception], None]


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] DISPATCH: {msg}", file=sys.stderr)


def _crash(ticket: str, error: Exception) -> None:
    print(f"CRITICAL: Task {ticket} crashed: {error}", file=sys.stderr)
    sys.exit(1)


class _StoreDispatcher(QObject):
    """Owns the worker pool and the table of live tickets."""

    # Carries a zero-argument callable to the thread that owns the dispatcher
    _callback_ready = Signal(object)

    def __init__(self, max_workers: int = 1):
        super().__init__()
        # One worker by default so writes to the task file land in order
        self.pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="TaskStoreWorker")
        self.live: Dict[str, Future] = {}
        self._callback_ready.connect(self._run_callback, Qt.ConnectionType.QueuedConnection)

    @Slot(object)
    def _run_callback(self, call: Callable[[], None]) -> None:
        call()

    def on_main_thread(self, call: Callable[[], None]) -> None:
        self._callback_ready.emit(call)

    def run(self, func: Callable, notify: Notify, on_error: Optional[OnError], *args, **kwargs) -> str:
        ticket = str(uuid.uuid4())

        def _finished(future: Future):
            if self.live.pop(ticket, None) is None:
                return  # cancelled

            error = future.exception()
            if error is None:
                result = future.result()
                self.on_main_thread(lambda: notify(result))
            elif on_error is not None:
                _debug_print(f"Task {ticket} failed: {error}")
                self.on_main_thread(lambda: on_error(error))
            else:
                # Unhandled failures take the application down from the main thread
                self.on_main_thread(lambda: _crash(ticket, error))

        future = self.pool.submit(func, *args, **kwargs)
        self.live[ticket] = future
        future.add_done_callback(_finished)
        return ticket


_dispatcher: Optional[_StoreDispatcher] = None


def _get_dispatcher() -> _StoreDispatcher:
    # Created on first use, after the QApplication exists
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = _StoreDispatcher()
    return _dispatcher


def dispatch_task(notify: Notify, func: Callable, *args,
                  on_error: Optional[OnError] = None, **kwargs) -> str:
    """Run ``func(*args, **kwargs)`` in the background; hand its result to ``notify``.

    If ``func`` raises, ``on_error`` receives the exception instead. Without
    an ``on_error`` the failure is fatal. Both callbacks run on the main thread.
    """
    return _get_dispatcher().run(func, notify, on_error, *args, **kwargs)


def is_pending(ticket: str) -> bool:
    return ticket in _get_dispatcher().live


def tasks_are_pending() -> bool:
    return bool(_get_dispatcher().live)


def count_pending_tasks() -> int:
    return len(_get_dispatcher().live)


def cancel_task(ticket: str) -> str:
    """
    Forget a ticket. Its result, if it still arrives, is discarded.
    Returns the ticket ID to allow chaining.
    """
    future = _get_dispatcher().live.pop(ticket, None)
    if future is not None:
        future.cancel()  # no effect once the work has started
    return ticket


def shutdown_tasks(wait: bool = False) -> None:
    global _dispatcher
    if _dispatcher is None:
        return
    _dispatcher.pool.shutdown(wait=wait)
    _dispatcher = None


def wait_for_tasks(timeout_ms: Optional[int] = None) -> bool:
    """
    Spin a local event loop until no ticket is live or ``timeout_ms`` passes.

    Returns True when everything finished.
    """
    if not tasks_are_pending():
        return True

    loop = QEventLoop()
    poll = QTimer()
    poll.timeout.connect(lambda: None if tasks_are_pending() else loop.quit())
    poll.start(20)
    if timeout_ms:
        QTimer.singleShot(timeout_ms, loop.quit)
    loop.exec()
    poll.stop()
    return not tasks_are_pending()
