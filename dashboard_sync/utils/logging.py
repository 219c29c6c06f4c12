"""Logging helpers shared by the synchronization components."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable


class ThrottledLogger:
    """Emit at most one log line per ``interval`` seconds.

    Messages arriving inside the window are counted instead of logged; the
    next emitted line carries a ``suppressed N similar messages`` annotation.
    """

    def __init__(
        self,
        logger: logging.Logger,
        *,
        interval: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._logger = logger
        self._interval = interval
        self._clock = clock
        self._last_emitted: float | None = None
        self._suppressed = 0

    @property
    def suppressed(self) -> int:
        """Number of messages swallowed since the last emitted line."""

        return self._suppressed

    def log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> bool:
        """Log ``msg`` at ``level`` unless the throttle window is still open.

        Returns ``True`` when a line was written.
        """

        now = self._clock()
        if self._last_emitted is not None and now - self._last_emitted < self._interval:
            self._suppressed += 1
            return False

        if self._suppressed:
            msg = f"{msg} (suppressed %d similar messages)"
            args = (*args, self._suppressed)
        self._logger.log(level, msg, *args, **kwargs)
        self._last_emitted = now
        self._suppressed = 0
        return True

    def error(self, msg: str, *args: Any, **kwargs: Any) -> bool:
        return self.log(logging.ERROR, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> bool:
        return self.log(logging.WARNING, msg, *args, **kwargs)

    def reset(self) -> None:
        """Forget the throttle window, typically after a successful recovery."""

        self._last_emitted = None
        self._suppressed = 0


__all__ = ["ThrottledLogger"]
