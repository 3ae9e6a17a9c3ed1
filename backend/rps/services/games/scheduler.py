import logging
import threading
from typing import Callable, Optional


class RoundTimer:
    """Handle for one deferred callback. ``cancel()`` is idempotent."""

    def __init__(self, delay: float, label: str = ''):
        self.delay = delay
        self.label = label
        self._cancelled = threading.Event()

    def cancel(self) -> bool:
        """Cancel the timer. Returns False if it was already cancelled."""
        if self._cancelled.is_set():
            return False
        self._cancelled.set()
        return True

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class SocketIOScheduler:
    """Run round timers as Socket.IO background tasks.

    The worker sleeps with ``socketio.sleep`` so it cooperates with eventlet and
    gevent as well as plain threads. A cancelled timer never invokes its
    callback; callers still re-check their own state when the callback runs
    since cancellation can race with the wake-up.
    """

    def __init__(self, socketio, logger: Optional[logging.Logger] = None, heartbeat_sec: int = 0):
        self.socketio = socketio
        self.logger = logger or logging.getLogger(__name__)
        self.heartbeat_sec = int(heartbeat_sec or 0)

    def schedule(self, delay: float, callback: Callable[[], None], label: str = '') -> RoundTimer:
        timer = RoundTimer(delay, label)
        self.socketio.start_background_task(self._worker, timer, callback)
        return timer

    def _worker(self, timer: RoundTimer, callback: Callable[[], None]) -> None:
        hb = self.heartbeat_sec
        if hb > 0:
            slept = 0.0
            while slept < timer.delay and not timer.cancelled:
                step = min(hb, timer.delay - slept)
                self.socketio.sleep(step)
                slept += step
                self.logger.info(f"[timer-heartbeat] {timer.label} remaining={max(0, timer.delay - slept)}s")
        else:
            self.socketio.sleep(timer.delay)

        if timer.cancelled:
            self.logger.debug(f"[timer-abort] {timer.label} cancelled")
            return
        try:
            callback()
        except Exception:
            self.logger.exception(f"[timer-error] {timer.label}")
