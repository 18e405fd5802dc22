from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from exam_bot.config import ClientConfig
from exam_bot.errors import TransportError
from exam_bot.services.backend import BackendClient
from exam_bot.services.models import (
    AdRecord,
    AdSlot,
    GenerationKind,
    LoginResponse,
    VisitorStats,
)


BACKEND_URL = "http://testserver"

# Only the bytes matter to the client; it never decodes pixels.
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png-body"
GIF_BYTES = b"GIF89afake-gif-body"


@dataclass
class BackendState:
    """Everything the fake backend serves and everything it was sent."""

    ads: List[Dict[str, Any]] = field(default_factory=list)
    stats: Dict[str, int] = field(
        default_factory=lambda: {"realtime": 1, "daily": 2, "weekly": 3, "monthly": 4}
    )
    credentials: Tuple[str, str] = ("admin", "secret")
    generation_result: str = "X"
    failing: Set[str] = field(default_factory=set)
    malformed: Set[str] = field(default_factory=set)
    calls: List[Tuple[str, str]] = field(default_factory=list)
    bodies: List[Dict[str, Any]] = field(default_factory=list)
    visitors: List[str] = field(default_factory=list)

    def count(self, method: str, path: str) -> int:
        return sum(1 for call in self.calls if call == (method, path))


def build_fake_backend(state: BackendState):
    """A FastAPI app that answers like the real backend."""

    app = FastAPI()

    @app.middleware("http")
    async def _record(request: Request, call_next):
        path = request.url.path
        state.calls.append((request.method, path))
        if path in state.failing:
            return PlainTextResponse("boom", status_code=500)
        if path in state.malformed:
            return PlainTextResponse("<html>not json</html>", status_code=200)
        return await call_next(request)

    @app.post("/api/visitor/track")
    async def track(ip_address: str):
        state.visitors.append(ip_address)
        return {"status": "ok"}

    @app.get("/api/admin/ads")
    async def list_ads():
        return state.ads

    @app.post("/api/admin/ads")
    async def save_ad(request: Request):
        body = await request.json()
        state.bodies.append(body)
        state.ads = [ad for ad in state.ads if ad.get("position") != body["position"]]
        state.ads.append(body)
        return {"status": "ok"}

    @app.post("/api/admin/login")
    async def login(request: Request):
        body = await request.json()
        state.bodies.append(body)
        if (body.get("username"), body.get("password")) == state.credentials:
            return {"success": True}
        return {"success": False, "message": "bad credentials"}

    @app.get("/api/admin/stats")
    async def stats():
        return state.stats

    @app.post("/api/generate/{kind}")
    async def generate(kind: str, request: Request):
        if kind not in {"summary", "questions"}:
            raise HTTPException(status_code=404)
        body = await request.json()
        state.bodies.append(body)
        return {"result": state.generation_result}

    return app


@pytest.fixture()
def backend_state() -> BackendState:
    return BackendState()


@pytest.fixture()
def client_config() -> ClientConfig:
    return ClientConfig.from_mapping({"backend_url": BACKEND_URL})


@pytest_asyncio.fixture()
async def backend_client(backend_state: BackendState, client_config: ClientConfig):
    app = build_fake_backend(backend_state)
    client = BackendClient(client_config, transport=httpx.ASGITransport(app=app))
    try:
        yield client
    finally:
        await client.aclose()


class ScriptedClient:
    """Stand-in for :class:`BackendClient` whose responses tests control.

    ``generate`` blocks on a future per call so tests can decide when (and in
    which order) each request resolves.
    """

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Any]] = []
        self.pending_generations: List[asyncio.Future] = []
        self.ads: List[AdRecord] = []
        self.stats = VisitorStats(realtime=5, daily=10, weekly=20, monthly=40)
        self.login_response = LoginResponse(success=True)
        self.fail: Set[str] = set()
        self.stats_fetches = 0

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail:
            raise TransportError(f"{name} failed", status_code=500)

    def calls_to(self, name: str) -> List[Any]:
        return [args for call, args in self.calls if call == name]

    async def track_visitor(self, ip_address: str) -> None:
        self.calls.append(("track_visitor", ip_address))
        self._maybe_fail("track_visitor")

    async def list_ads(self) -> List[AdRecord]:
        self.calls.append(("list_ads", None))
        self._maybe_fail("list_ads")
        return list(self.ads)

    async def save_ad(self, position: AdSlot, image_url: str, link_url: str) -> None:
        self.calls.append(("save_ad", (position, image_url, link_url)))
        self._maybe_fail("save_ad")
        self.ads = [ad for ad in self.ads if ad.position != position.value]
        self.ads.append(AdRecord(position=position.value, image_url=image_url, link_url=link_url))

    async def login(self, username: str, password: str) -> LoginResponse:
        self.calls.append(("login", (username, password)))
        self._maybe_fail("login")
        return self.login_response

    async def fetch_stats(self) -> VisitorStats:
        self.stats_fetches += 1
        self.calls.append(("fetch_stats", None))
        self._maybe_fail("fetch_stats")
        return self.stats

    async def generate(self, kind: GenerationKind, images: List[str]) -> str:
        self.calls.append(("generate", (kind, list(images))))
        future = asyncio.get_running_loop().create_future()
        self.pending_generations.append(future)
        return await future


@pytest.fixture()
def scripted_client() -> ScriptedClient:
    return ScriptedClient()


@pytest.fixture()
def make_image_file(tmp_path: Path):
    def _make(name: str, content: Optional[bytes] = None) -> Path:
        path = tmp_path / name
        if content is None:
            content = GIF_BYTES if name.endswith(".gif") else PNG_BYTES
        path.write_bytes(content)
        return path

    return _make
