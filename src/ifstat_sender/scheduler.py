"""Drive sample → publish cycles at a fixed nominal period.

Two strategies are provided:

- :class:`PacedScheduler` runs cycles back to back on the calling thread,
  waiting ``interval - cost`` between them (never a negative wait).
- :class:`TimerScheduler` fires a tick every ``interval`` from a ticker
  thread and runs each cycle on a worker thread. A tick that arrives while
  a cycle is still in flight is dropped, not queued.

Both stop at a cycle boundary once the :class:`ShutdownSignal` is set.
"""

from __future__ import annotations

import enum
import logging
import signal
import threading
import time
from collections.abc import Callable, Iterable
from types import FrameType

log = logging.getLogger(__name__)

# Longest the timer scheduler's main thread blocks between shutdown polls
_POLL_INTERVAL_S = 0.1

_THREAD_JOIN_TIMEOUT_S = 5.0


class CycleState(enum.Enum):
    IDLE = "idle"
    SAMPLING = "sampling"
    PUBLISHING = "publishing"
    WAITING = "waiting"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class ShutdownSignal:
    """Turn SIGINT/SIGTERM into a pollable, thread-safe condition.

    The installed handlers only set an event; the main loop checks it at
    cycle boundaries, so no collector state is touched from the handler.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._previous: dict[int, object] = {}

    def _handler(self, signum: int, frame: FrameType | None) -> None:
        self._event.set()

    def install(
        self,
        signals: Iterable[int] = (signal.SIGINT, signal.SIGTERM),
    ) -> None:
        """Install handlers; must be called from the main thread."""
        for sig in signals:
            self._previous[sig] = signal.signal(sig, self._handler)

    def restore(self) -> None:
        """Put back the handlers that were active before :meth:`install`."""
        for sig, previous in self._previous.items():
            signal.signal(sig, previous)  # type: ignore[arg-type]
        self._previous.clear()

    def request(self) -> None:
        """Ask the loop to stop at the next cycle boundary."""
        self._event.set()

    @property
    def requested(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block up to ``timeout`` seconds; return True if shutdown was requested."""
        return self._event.wait(timeout)

    def __enter__(self) -> ShutdownSignal:
        self.install()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.restore()


class CycleScheduler:
    """Shared state and stop conditions of both scheduling strategies.

    Args:
        sample: Runs one sampling cycle and returns the encoded snapshot.
        publish: Hands a snapshot to the publish sink; must not block.
        interval: Nominal period in seconds.
        shutdown: Stop condition polled at cycle boundaries.
        max_cycles: Stop after this many cycles (None = unlimited).
        duration: Stop after this many seconds (0 = unlimited).
        clock: Monotonic time source.
        on_shutdown: Called once in the SHUTTING_DOWN state, after the
            last cycle has finished.
    """

    def __init__(
        self,
        sample: Callable[[], bytes],
        publish: Callable[[bytes], object],
        interval: float,
        shutdown: ShutdownSignal,
        max_cycles: int | None = None,
        duration: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
        on_shutdown: Callable[[], None] | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self._sample = sample
        self._publish = publish
        self._interval = interval
        self._shutdown = shutdown
        self._max_cycles = max_cycles
        self._duration = duration
        self._clock = clock
        self._on_shutdown = on_shutdown

        self._state = CycleState.IDLE
        self._cycles = 0
        self._start = 0.0

    @property
    def state(self) -> CycleState:
        return self._state

    @property
    def cycles(self) -> int:
        """Number of completed sample → publish cycles."""
        return self._cycles

    def _run_cycle(self) -> None:
        self._state = CycleState.SAMPLING
        payload = self._sample()
        self._state = CycleState.PUBLISHING
        self._publish(payload)
        self._cycles += 1

    def _should_stop(self) -> bool:
        if self._shutdown.requested:
            return True
        if self._max_cycles is not None and self._cycles >= self._max_cycles:
            return True
        if self._duration > 0 and self._clock() - self._start >= self._duration:
            log.info("Duration limit reached (%ss)", self._duration)
            return True
        return False

    def _shut_down(self) -> None:
        self._state = CycleState.SHUTTING_DOWN
        try:
            if self._on_shutdown is not None:
                self._on_shutdown()
        finally:
            self._state = CycleState.TERMINATED


class PacedScheduler(CycleScheduler):
    """Self-paced loop with drift compensation on the calling thread."""

    def run(self) -> None:
        """Run cycles until a stop condition is observed."""
        self._start = self._clock()
        try:
            while not self._should_stop():
                started = self._clock()
                self._run_cycle()
                cost = self._clock() - started

                delay = self._interval - cost
                if delay < 0:
                    log.warning(
                        "Cycle took %.3fs, longer than the %.3fs interval",
                        cost,
                        self._interval,
                    )
                    delay = 0.0

                if self._should_stop():
                    break
                self._state = CycleState.WAITING
                if delay > 0 and self._shutdown.wait(delay):
                    break
        finally:
            self._shut_down()


class TimerScheduler(CycleScheduler):
    """Periodic ticker thread with a single in-flight guard.

    An exception raised by a cycle stops the scheduler and is re-raised
    from :meth:`run` on the calling thread.
    """

    def __init__(
        self,
        sample: Callable[[], bytes],
        publish: Callable[[bytes], object],
        interval: float,
        shutdown: ShutdownSignal,
        max_cycles: int | None = None,
        duration: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
        on_shutdown: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(
            sample,
            publish,
            interval,
            shutdown,
            max_cycles=max_cycles,
            duration=duration,
            clock=clock,
            on_shutdown=on_shutdown,
        )
        self._in_flight = threading.Lock()
        self._stop_event = threading.Event()
        self._error: BaseException | None = None
        self._dropped_ticks = 0

    @property
    def dropped_ticks(self) -> int:
        """Ticks skipped because the previous cycle was still running."""
        return self._dropped_ticks

    def _tick_loop(self) -> None:
        next_tick = self._clock() + self._interval
        while not self._stop_event.wait(max(0.0, next_tick - self._clock())):
            next_tick += self._interval
            self._on_tick()

    def _on_tick(self) -> None:
        if not self._in_flight.acquire(blocking=False):
            self._dropped_ticks += 1
            log.debug("Cycle still in flight, dropping tick")
            return

        if self._stop_event.is_set() or self._should_stop():
            self._in_flight.release()
            return

        worker = threading.Thread(
            target=self._guarded_cycle,
            name="ifstat-cycle",
            daemon=True,
        )
        worker.start()

    def _guarded_cycle(self) -> None:
        try:
            self._run_cycle()
            self._state = CycleState.WAITING
        except Exception as exc:
            self._error = exc
            self._stop_event.set()
        finally:
            self._in_flight.release()

    def run(self) -> None:
        """Start ticking and block until a stop condition is observed."""
        self._start = self._clock()
        ticker = threading.Thread(
            target=self._tick_loop,
            name="ifstat-ticker",
            daemon=True,
        )
        ticker.start()
        try:
            while self._error is None and not self._should_stop():
                self._shutdown.wait(min(self._interval, _POLL_INTERVAL_S))
        finally:
            self._state = CycleState.SHUTTING_DOWN
            self._stop_event.set()
            ticker.join(timeout=_THREAD_JOIN_TIMEOUT_S)
            # Never tear down under a running cycle
            while not self._in_flight.acquire(timeout=_THREAD_JOIN_TIMEOUT_S):
                log.warning("Waiting for the in-flight cycle to finish")
            self._in_flight.release()
            self._shut_down()

        if self._error is not None:
            raise self._error
