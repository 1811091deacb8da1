from __future__ import annotations

import random
import threading
from collections import OrderedDict
from typing import TYPE_CHECKING, Optional

from reach_radius.core.cancel import CancelToken
from reach_radius.core.engine import AnalysisResult, run_analysis
from reach_radius.core.models import Query
from reach_radius.providers.registry import ProviderSet

if TYPE_CHECKING:
    from reach_radius.config import Settings

MAX_SESSIONS = 1024


class AnalysisSession:
    """
    Runs analyses for one consumer (a map view, a CLI run).

    Starting a new analysis cancels the previous one: its partial results
    are discarded and its run raises AnalysisCancelled.
    """

    def __init__(
        self,
        config: "Settings",
        providers: Optional[ProviderSet] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.providers = providers or ProviderSet()
        self.rng = rng
        self._current: Optional[CancelToken] = None
        self._lock = threading.Lock()

    def begin(self) -> CancelToken:
        token = CancelToken()
        with self._lock:
            previous, self._current = self._current, token
        if previous is not None:
            previous.cancel()
        return token

    def cancel(self) -> None:
        with self._lock:
            current = self._current
        if current is not None:
            current.cancel()

    def run(self, query: Query) -> AnalysisResult:
        token = self.begin()
        return run_analysis(query, self.config, self.providers, rng=self.rng, cancel=token)


class SessionRegistry:
    """
    One AnalysisSession per consumer id, for servers with many clients.

    Only requests carrying the same id supersede each other. A request
    without an id gets a throwaway session and cancels nothing.
    """

    def __init__(
        self,
        config: "Settings",
        providers: Optional[ProviderSet] = None,
        rng: Optional[random.Random] = None,
        max_sessions: int = MAX_SESSIONS,
    ):
        self.config = config
        self.providers = providers or ProviderSet()
        self.rng = rng
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, AnalysisSession]" = OrderedDict()
        self._lock = threading.Lock()

    def _new(self) -> AnalysisSession:
        return AnalysisSession(self.config, self.providers, self.rng)

    def get(self, session_id: Optional[str] = None) -> AnalysisSession:
        if not session_id:
            return self._new()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                session = self._sessions[session_id] = self._new()
                # least recently used consumers are forgotten first
                while len(self._sessions) > self.max_sessions:
                    self._sessions.popitem(last=False)
            else:
                self._sessions.move_to_end(session_id)
            return session

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
