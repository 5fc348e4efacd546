"""Scope scheduling: sample frames in the background without blocking.

The analyzer is a two-state machine. ``tick`` moves it from Idle to
Sampling and hands the frame to a single background worker; the worker
moves it back to Idle when the sample is stored. Ticks that arrive while
Sampling are dropped, so the scopes always show a recent frame and never
queue work. A cancelled sample is discarded but still holds the worker until
it returns; ticks are dropped until then too.

Example:
    >>> analyzer = ScopeAnalyzer(ScopeConfig(waveform_enabled=True, refresh_rate=30))
    >>> analyzer.start(player)  # polls player.current_frame() 30 times a second
    >>> ...
    >>> sample = analyzer.latest
    >>> analyzer.close()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from gradekit.config.values import ScopeConfig
from gradekit.scopes.apply import compute_scopes
from gradekit.scopes.result import ScopeSample

if TYPE_CHECKING:
    from gradekit.protocols import FrameSource

logger = logging.getLogger(__name__)


class ScopeState(Enum):
    IDLE = "idle"
    SAMPLING = "sampling"


class ScopeAnalyzer:
    """Rate-limited, non-blocking scope sampler.

    :param config: Which scopes to compute and how often
    :param on_sample: Optional callback run on the worker thread with each
        completed sample
    """

    def __init__(
        self,
        config: ScopeConfig | None = None,
        on_sample: Callable[[ScopeSample], None] | None = None,
    ):
        self.config = config if config is not None else ScopeConfig()
        self.on_sample = on_sample

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="scope-worker")
        self._lock = threading.Lock()
        self._state = ScopeState.IDLE
        self._generation = 0
        self._sequence = 0
        self._latest: ScopeSample | None = None
        self._pending: Future | None = None
        self._busy = False
        self._closed = False

        self._stop_event = threading.Event()
        self._timer: threading.Thread | None = None

        self.dropped = 0

    @property
    def state(self) -> ScopeState:
        return self._state

    @property
    def latest(self) -> ScopeSample | None:
        """Most recent completed sample, or None."""
        return self._latest

    @property
    def is_running(self) -> bool:
        """True while the refresh timer is active."""
        return self._timer is not None and self._timer.is_alive()

    def tick(self, frame: NDArray) -> bool:
        """Offer a frame for sampling.

        Never blocks on scope computation.

        :param frame: RGB frame [H, W, 3]; copied before it is handed off
        :returns: True if sampling started, False if dropped because a sample
            (current or cancelled) is still running
        :raises RuntimeError: If the analyzer was closed
        """
        with self._lock:
            if self._closed:
                raise RuntimeError("ScopeAnalyzer is closed")
            if self._state is ScopeState.SAMPLING or self._busy:
                self.dropped += 1
                return False

            self._state = ScopeState.SAMPLING
            self._busy = True
            self._sequence += 1
            sequence = self._sequence
            generation = self._generation
            self._pending = self._executor.submit(self._sample, np.array(frame, copy=True), sequence, generation)
        return True

    def _sample(self, frame: NDArray, sequence: int, generation: int) -> None:
        try:
            sample = compute_scopes(frame, self.config, sequence)
        except Exception:
            logger.exception("[Scopes] Sample %d failed", sequence)
            sample = None

        with self._lock:
            self._busy = False
            if generation != self._generation:
                logger.debug("[Scopes] Discarded cancelled sample %d", sequence)
                return
            self._state = ScopeState.IDLE
            if sample is None:
                return
            self._latest = sample

        if self.on_sample is not None:
            self.on_sample(sample)

    def wait(self, timeout: float | None = None) -> ScopeSample | None:
        """Block until the in-flight sample (if any) finishes.

        :param timeout: Seconds to wait
        :returns: The latest sample
        """
        pending = self._pending
        if pending is not None:
            pending.result(timeout=timeout)
        return self._latest

    def cancel(self) -> None:
        """Discard any in-flight sample and return to Idle.

        The discarded sample keeps the worker until it returns, and ``wait``
        still blocks on it.
        """
        with self._lock:
            self._generation += 1
            self._state = ScopeState.IDLE

    def start(self, source: FrameSource) -> None:
        """Tick at ``config.refresh_rate`` with frames pulled from a source.

        :param source: Provider of the frame currently on display
        """
        if self.is_running:
            return
        self._stop_event.clear()
        self._timer = threading.Thread(target=self._run_timer, args=(source,), name="scope-timer", daemon=True)
        self._timer.start()
        logger.info("[Scopes] Started at %d Hz (%s)", self.config.refresh_rate, ", ".join(self.config.enabled_scopes))

    def _run_timer(self, source: FrameSource) -> None:
        while not self._stop_event.wait(self.config.interval):
            frame = source.current_frame()
            if frame is None:
                continue
            try:
                self.tick(frame)
            except RuntimeError:
                break

    def stop(self) -> None:
        """Stop the timer and discard any in-flight sample."""
        self._stop_event.set()
        timer = self._timer
        self._timer = None
        if timer is not None and timer is not threading.current_thread():
            timer.join()
        self.cancel()
        if timer is not None:
            logger.info("[Scopes] Stopped (%d ticks dropped)", self.dropped)

    def close(self) -> None:
        """Stop and release the worker thread."""
        self.stop()
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=True)

    def __enter__(self) -> ScopeAnalyzer:
        return self

    def __exit__(self, *exc) -> None:
        self.close()
