"""Best-effort visit notification sent once when the home view mounts."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from ..errors import TransportError
from .backend import BackendClient
from .events import emit_task_event


LOGGER = logging.getLogger(__name__)


def build_visitor_id(clock: Callable[[], float] = time.time) -> str:
    """Pseudo identifier sent as ``ip_address``: ``user_<epoch milliseconds>``."""

    return f"user_{int(clock() * 1000)}"


class VisitorTracker:
    """Fire-and-forget; a failure is logged and never reaches the user."""

    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self._task: Optional[asyncio.Task[bool]] = None

    @property
    def task(self) -> Optional[asyncio.Task[bool]]:
        return self._task

    def start(self) -> asyncio.Task[bool]:
        if self._task is None:
            loop = asyncio.get_running_loop()
            self._task = loop.create_task(self.track(), name="visitor-tracker")
        return self._task

    async def track(self) -> bool:
        visitor_id = build_visitor_id()
        try:
            await self._client.track_visitor(visitor_id)
        except TransportError as error:
            LOGGER.error("Error tracking visitor: %s", error)
            return False
        emit_task_event("visitor", "tracked", payload={"visitor": visitor_id})
        return True

    async def wait(self) -> Optional[bool]:
        """Await the outstanding notification, if one was started."""

        if self._task is None:
            return None
        return await self._task


__all__ = ["VisitorTracker", "build_visitor_id"]
