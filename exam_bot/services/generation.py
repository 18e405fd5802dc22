"""Request/response state machine behind the summary and question buttons."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import TransportError
from .backend import BackendClient
from .events import Notifier, emit_task_event, log_notice
from .images import ImageStore
from .models import GenerationKind


LOGGER = logging.getLogger(__name__)


NO_IMAGES_MESSAGE = "Please upload at least one image"


def generation_failed_message(kind: GenerationKind) -> str:
    return f"Error generating {kind.value}. Please try again."


class GenerationState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class GenerationResult:
    kind: GenerationKind
    text: str


@dataclass
class GenerationStatus:
    """Everything a view needs to draw the generation area."""

    state: GenerationState = GenerationState.IDLE
    kind: Optional[GenerationKind] = None
    result: Optional[GenerationResult] = None
    error: Optional[str] = None


class GenerationOrchestrator:
    """Drive one generation request at a time against the backend.

    A newer call to :meth:`generate` (or :meth:`reset`) supersedes any request
    still in flight. The superseded network call is not cancelled; its
    response is recognised by its stale request token and dropped.
    """

    def __init__(
        self,
        client: BackendClient,
        images: ImageStore,
        *,
        notify: Notifier = log_notice,
    ) -> None:
        self._client = client
        self._images = images
        self._notify = notify
        self._token = 0
        self._status = GenerationStatus()

    @property
    def status(self) -> GenerationStatus:
        return self._status

    @property
    def result(self) -> Optional[GenerationResult]:
        return self._status.result

    @property
    def busy(self) -> bool:
        return self._status.state is GenerationState.REQUESTING

    def reset(self) -> None:
        """Return to idle and invalidate any in-flight request."""

        self._token += 1
        self._status = GenerationStatus()

    async def generate(self, kind: GenerationKind) -> Optional[GenerationResult]:
        payloads = self._images.to_payloads()
        if not payloads:
            self._notify(NO_IMAGES_MESSAGE)
            return None

        self._token += 1
        token = self._token
        started = time.perf_counter()
        self._status = GenerationStatus(
            state=GenerationState.REQUESTING,
            kind=kind,
        )
        emit_task_event(
            "generation",
            "requesting",
            payload={"kind": kind, "images": len(payloads), "token": token},
        )

        try:
            text = await self._client.generate(kind, payloads)
        except TransportError as error:
            if token != self._token:
                LOGGER.debug("Dropping failure of superseded %s request %s", kind.value, token)
                return None
            LOGGER.error("Error generating %s: %s", kind.value, error)
            message = generation_failed_message(kind)
            self._status = GenerationStatus(
                state=GenerationState.FAILED,
                kind=kind,
                error=message,
            )
            self._notify(message)
            return None

        if token != self._token:
            LOGGER.debug("Dropping stale %s response for request %s", kind.value, token)
            return None

        result = GenerationResult(kind=kind, text=text)
        self._status = GenerationStatus(
            state=GenerationState.SUCCEEDED,
            kind=kind,
            result=result,
        )
        emit_task_event(
            "generation",
            "succeeded",
            payload={"kind": kind, "token": token},
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        return result


__all__ = [
    "GenerationOrchestrator",
    "GenerationResult",
    "GenerationState",
    "GenerationStatus",
    "NO_IMAGES_MESSAGE",
    "generation_failed_message",
]
