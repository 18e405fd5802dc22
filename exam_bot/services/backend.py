"""Async HTTP client for the Exam Bot backend API."""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..config import ClientConfig
from ..errors import TransportError
from .events import emit_http_event
from .models import (
    AdRecord,
    AdSlot,
    AdUpdatePayload,
    GenerationKind,
    GenerationPayload,
    GenerationResponse,
    LoginPayload,
    LoginResponse,
    VisitorStats,
)


LOGGER = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

_AD_LIST_ADAPTER = TypeAdapter(List[AdRecord])


class BackendClient:
    """Thin wrapper around :class:`httpx.AsyncClient` for the fixed API surface.

    Every method either returns a validated model or raises
    :class:`~exam_bot.errors.TransportError`; network failures, non-2xx
    responses and malformed bodies are all folded into that one type so
    callers only have a single failure path to handle.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.api_url,
            timeout=config.request_timeout,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------
    async def track_visitor(self, ip_address: str) -> None:
        await self._request("POST", "/visitor/track", params={"ip_address": ip_address})

    async def list_ads(self) -> List[AdRecord]:
        data = await self._request("GET", "/admin/ads")
        try:
            return _AD_LIST_ADAPTER.validate_python(data)
        except PydanticValidationError as error:
            raise TransportError("Malformed ad list returned by backend") from error

    async def save_ad(self, position: AdSlot, image_url: str, link_url: str) -> None:
        payload = AdUpdatePayload(position=position, image_url=image_url, link_url=link_url)
        await self._request("POST", "/admin/ads", json=payload.model_dump(mode="json"))

    async def login(self, username: str, password: str) -> LoginResponse:
        payload = LoginPayload(username=username, password=password)
        data = await self._request("POST", "/admin/login", json=payload.model_dump())
        return self._parse(LoginResponse, data, "/admin/login")

    async def fetch_stats(self) -> VisitorStats:
        data = await self._request("GET", "/admin/stats")
        return self._parse(VisitorStats, data, "/admin/stats")

    async def generate(self, kind: GenerationKind, images: Sequence[str]) -> str:
        payload = GenerationPayload(images=list(images))
        data = await self._request("POST", kind.endpoint, json=payload.model_dump())
        return self._parse(GenerationResponse, data, kind.endpoint).result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _parse(model: Type[ModelT], data: Any, path: str) -> ModelT:
        try:
            return model.model_validate(data)
        except PydanticValidationError as error:
            raise TransportError(f"Malformed response from {path}") from error

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        started = time.perf_counter()
        status_code: Optional[int] = None
        try:
            response = await self._client.request(method, path, json=json, params=params)
            status_code = response.status_code
            response.raise_for_status()
        except httpx.HTTPStatusError as error:
            emit_http_event(
                method,
                path,
                status_code=status_code,
                duration_ms=(time.perf_counter() - started) * 1000,
            )
            raise TransportError(
                f"{method} {path} failed with status {status_code}",
                status_code=status_code,
            ) from error
        except httpx.HTTPError as error:
            emit_http_event(
                method,
                path,
                error=type(error).__name__,
                duration_ms=(time.perf_counter() - started) * 1000,
            )
            raise TransportError(f"{method} {path} failed: {error}") from error

        emit_http_event(
            method,
            path,
            status_code=status_code,
            duration_ms=(time.perf_counter() - started) * 1000,
        )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as error:
            raise TransportError(
                f"{method} {path} returned a non-JSON body",
                status_code=status_code,
            ) from error


__all__ = ["BackendClient"]
