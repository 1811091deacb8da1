from __future__ import annotations

import threading

from reach_radius.errors import AnalysisCancelled


class CancelToken:
    """Set once a newer request supersedes the one holding this token."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelled("analysis superseded by a newer request")
