"""Cooperative cancellation for long-running conversions."""

import threading
import time

from playlist_converter.core.errors import ConversionCancelled


class CancelToken:
    """
    Caller-owned cancellation flag with an optional deadline.

    Pipeline stages call check() between pages, search tasks and write
    chunks; in-flight HTTP calls are never interrupted.
    """

    def __init__(self, deadline_seconds: float | None = None):
        self._event = threading.Event()
        self._deadline = (time.monotonic() + deadline_seconds
                          if deadline_seconds is not None else None)

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self) -> None:
        if not self.cancelled:
            return
        if self._event.is_set():
            raise ConversionCancelled("Conversion cancelled by caller")
        raise ConversionCancelled("Conversion deadline exceeded")


def check_cancelled(cancel: CancelToken | None) -> None:
    if cancel is not None:
        cancel.check()
