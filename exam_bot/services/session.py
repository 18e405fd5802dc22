"""Admin session gating and the visitor-stats polling loop it controls."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set

from ..config import DEFAULT_STATS_INTERVAL
from ..errors import DomainRejection, TransportError, ValidationError
from .backend import BackendClient
from .events import emit_task_event
from .models import VisitorStats


LOGGER = logging.getLogger(__name__)


MISSING_CREDENTIALS_MESSAGE = "Please enter both username and password"
LOGIN_FAILED_MESSAGE = "Login failed. Please try again."

SessionListener = Callable[[bool], None]
StatsListener = Callable[[VisitorStats], None]


@dataclass
class SessionState:
    authenticated: bool = False
    error: str = ""


class AdminSession:
    """Volatile authenticated/not flag for the admin view.

    Credentials are only used for the duration of :meth:`login`; nothing but
    the resulting flag (and the last error message) is retained.
    """

    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self._state = SessionState()
        self._listeners: List[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def authenticated(self) -> bool:
        return self._state.authenticated

    @property
    def error(self) -> str:
        return self._state.error

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call *listener* with the new flag on every authentication change."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            with contextlib.suppress(ValueError):
                self._listeners.remove(listener)

        return _unsubscribe

    async def login(self, username: str, password: str) -> bool:
        self._state.error = ""
        try:
            await self._authenticate(username, password)
        except ValidationError as error:
            self._state.error = str(error)
        except DomainRejection as error:
            self._state.error = str(error)
        except TransportError as error:
            LOGGER.error("Login request failed: %s", error)
            self._state.error = LOGIN_FAILED_MESSAGE
        else:
            self._set_authenticated(True)
            return True
        return False

    def logout(self) -> None:
        self._state.error = ""
        self._set_authenticated(False)

    async def _authenticate(self, username: str, password: str) -> None:
        if not username or not password:
            raise ValidationError(MISSING_CREDENTIALS_MESSAGE)
        response = await self._client.login(username, password)
        if not response.success:
            raise DomainRejection(response.message or "")

    def _set_authenticated(self, value: bool) -> None:
        if self._state.authenticated == value:
            return
        self._state.authenticated = value
        emit_task_event("session", "authenticated" if value else "signed out")
        for listener in list(self._listeners):
            listener(value)


class StatsPoller:
    """Refresh :class:`VisitorStats` on a fixed period while a session is live.

    The loop runs as one asyncio task. It is cancelled synchronously the
    moment the session signs out, and on :meth:`stop` or when leaving an
    ``async with`` block, so no tick can fire after either event.
    """

    def __init__(
        self,
        client: BackendClient,
        session: AdminSession,
        *,
        interval: float = DEFAULT_STATS_INTERVAL,
        on_update: Optional[StatsListener] = None,
    ) -> None:
        self._client = client
        self._session = session
        self._interval = interval
        self._on_update = on_update
        self._snapshot: Optional[VisitorStats] = None
        self._worker: Optional[asyncio.Task[None]] = None
        self._cancelled: Set[asyncio.Task[None]] = set()
        self._unsubscribe = session.subscribe(self._on_session_change)

    @property
    def snapshot(self) -> Optional[VisitorStats]:
        return self._snapshot

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> bool:
        """Begin polling; a no-op returning ``False`` without a live session."""

        if not self._session.authenticated:
            LOGGER.debug("Not starting stats polling without an authenticated session")
            return False
        if self.running:
            return True
        loop = asyncio.get_running_loop()
        self._worker = loop.create_task(self._run(), name="stats-poller")
        emit_task_event("stats", "started", payload={"interval": self._interval})
        return True

    def cancel(self) -> None:
        worker = self._worker
        self._worker = None
        if worker is not None and not worker.done():
            worker.cancel()
            self._cancelled.add(worker)
            worker.add_done_callback(self._cancelled.discard)
            emit_task_event("stats", "cancelled")

    async def stop(self) -> None:
        """Cancel polling and wait until every cancelled loop has unwound."""

        self.cancel()
        for worker in list(self._cancelled):
            with contextlib.suppress(asyncio.CancelledError):
                await worker

    def close(self) -> None:
        """Cancel polling and detach from the session for good."""

        self.cancel()
        self._unsubscribe()

    async def __aenter__(self) -> "StatsPoller":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def refresh(self) -> Optional[VisitorStats]:
        """Fetch one snapshot; failures keep the previous one on display."""

        try:
            stats = await self._client.fetch_stats()
        except TransportError as error:
            LOGGER.error("Error loading stats: %s", error)
            return None
        if not self._session.authenticated:
            return None
        self._snapshot = stats
        if self._on_update is not None:
            try:
                self._on_update(stats)
            except Exception:
                LOGGER.exception("Error handling stats update")
        return stats

    async def _run(self) -> None:
        while True:
            await self.refresh()
            await asyncio.sleep(self._interval)

    def _on_session_change(self, authenticated: bool) -> None:
        if not authenticated:
            self.cancel()


__all__ = [
    "AdminSession",
    "LOGIN_FAILED_MESSAGE",
    "MISSING_CREDENTIALS_MESSAGE",
    "SessionState",
    "StatsListener",
    "StatsPoller",
]
