"""
Frame Scheduler
===============

Display-refresh callback model. Callers request a callback for the next
frame and may cancel it; the host loop runs one frame per refresh.

A callback requested while a frame is running is deferred to the following
frame, so a callback that re-requests itself runs exactly once per frame.
"""

from __future__ import annotations

import time
from typing import Callable, Dict, Optional, Set

FrameCallback = Callable[[float], None]


def _perf_clock_ms() -> float:
    return time.perf_counter() * 1000.0


class SimulatedClock:
    """Manually advanced millisecond clock for headless hosts and tests."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = float(start)

    def __call__(self) -> float:
        return self._now

    def advance(self, ms: float) -> float:
        """Move time forward and return the new reading."""
        self._now += ms
        return self._now

    def set(self, ms: float) -> None:
        self._now = float(ms)


class FrameScheduler:
    """
    Queue of one-shot frame callbacks.

    Handles are positive integers and never reused. Cancelling an unknown or
    already-run handle is a no-op.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        """
        Initialize scheduler.

        Args:
            clock: Returns the current time in milliseconds. Uses a
                monotonic high-resolution clock if None.
        """
        self._clock = clock if clock is not None else _perf_clock_ms
        self._pending: Dict[int, FrameCallback] = {}
        self._this_frame: Set[int] = set()
        self._next_handle = 1
        self._in_frame = False
        self._frames_run = 0

    def now(self) -> float:
        """Current time in milliseconds."""
        return self._clock()

    @property
    def pending(self) -> int:
        """Number of callbacks waiting for a frame."""
        return len(self._pending) + len(self._this_frame)

    @property
    def frames_run(self) -> int:
        return self._frames_run

    def request_frame(self, callback: FrameCallback) -> int:
        """
        Schedule a callback for the next frame.

        Args:
            callback: Called with the frame timestamp (ms).

        Returns:
            Handle for cancel_frame().
        """
        handle = self._next_handle
        self._next_handle += 1
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: Optional[int]) -> bool:
        """
        Cancel a scheduled callback.

        Returns:
            True if a callback was actually removed.
        """
        if handle is None:
            return False
        if self._pending.pop(handle, None) is not None:
            return True
        if handle in self._this_frame:
            # Requested before this frame started but not run yet
            self._this_frame.discard(handle)
            return True
        return False

    def run_frame(self, timestamp: Optional[float] = None) -> int:
        """
        Run every callback that was pending when the frame began.

        Args:
            timestamp: Frame time in ms. Reads the clock if None.

        Returns:
            Number of callbacks run.

        Raises:
            RuntimeError: If called from inside a frame callback.
        """
        if self._in_frame:
            raise RuntimeError("run_frame() called from inside a frame callback")

        if timestamp is None:
            timestamp = self._clock()

        batch = self._pending
        self._pending = {}
        self._this_frame = set(batch)
        self._in_frame = True
        ran = 0
        try:
            for handle, callback in batch.items():
                if handle not in self._this_frame:
                    continue
                self._this_frame.discard(handle)
                callback(timestamp)
                ran += 1
        finally:
            self._in_frame = False
            # Anything left was skipped by an exception; keep it for next frame
            for handle in self._this_frame:
                self._pending[handle] = batch[handle]
            self._this_frame = set()

        self._frames_run += 1
        return ran
