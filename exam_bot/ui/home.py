"""The public home view: uploads, generation results and the six ad slots."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

from rich import box
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..services.ads import AdResolver
from ..services.backend import BackendClient
from ..services.events import Notifier
from ..services.generation import GenerationOrchestrator, GenerationResult, GenerationState
from ..services.images import Image, ImageStore, filter_image_files
from ..services.models import AdSlot, GenerationKind
from ..services.visitors import VisitorTracker
from .widgets import build_ad_block, console_notifier


APP_TITLE = "Exam Bot - AI Study Assistant"
APP_SUBTITLE = (
    "Upload your study materials and generate summaries or question papers instantly"
)


class HomeView:
    """Owns the state behind the home page for the lifetime of one mount."""

    def __init__(
        self,
        client: BackendClient,
        *,
        console: Optional[Console] = None,
        notify: Optional[Notifier] = None,
    ) -> None:
        self._console = console or Console()
        notify = notify or console_notifier(self._console)
        self.images = ImageStore()
        self.ads = AdResolver(client)
        self.generation = GenerationOrchestrator(client, self.images, notify=notify)
        self.visitor = VisitorTracker(client)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def mount(self) -> None:
        self.visitor.start()
        await self.ads.load()

    async def teardown(self) -> None:
        await self.visitor.wait()

    async def __aenter__(self) -> "HomeView":
        await self.mount()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.teardown()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------
    async def upload(self, paths: Iterable[Path]) -> List[Image]:
        return await self.images.add(*filter_image_files(paths))

    def remove_image(self, index: int) -> None:
        self.images.remove_at(index)

    def clear_images(self) -> None:
        self.images.clear()

    async def generate_summary(self) -> Optional[GenerationResult]:
        return await self.generation.generate(GenerationKind.SUMMARY)

    async def generate_questions(self) -> Optional[GenerationResult]:
        return await self.generation.generate(GenerationKind.QUESTIONS)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def show(self) -> None:
        self._console.print(self.render())

    def render(self) -> RenderableType:
        layout = Table.grid(expand=True, padding=(0, 1))
        layout.add_column(ratio=1)
        layout.add_column(ratio=3)
        layout.add_column(ratio=1)
        layout.add_row(
            self._build_ad_column(AdSlot.LEFT1, AdSlot.LEFT2),
            self._build_content(),
            self._build_ad_column(AdSlot.RIGHT1, AdSlot.RIGHT2),
        )
        return Group(
            Text("Exam Bot", style="bold magenta"),
            build_ad_block(self.ads.resolve(AdSlot.TOP)),
            layout,
            build_ad_block(self.ads.resolve(AdSlot.BOTTOM)),
        )

    def _build_ad_column(self, *slots: AdSlot) -> Group:
        return Group(*(build_ad_block(self.ads.resolve(slot)) for slot in slots))

    def _build_content(self) -> Group:
        parts: List[RenderableType] = [
            Text(APP_TITLE, style="bold"),
            Text(APP_SUBTITLE, style="dim"),
            self._build_image_list(),
        ]
        status = self.generation.status
        if status.state is GenerationState.REQUESTING:
            parts.append(Text("⏳ Generating…", style="bold cyan"))
        if status.result is not None:
            parts.append(
                Panel(
                    Text(status.result.text),
                    title=status.result.kind.heading,
                    border_style="green",
                    box=box.ROUNDED,
                )
            )
        return Group(*parts)

    def _build_image_list(self) -> RenderableType:
        images = self.images.images
        if not images:
            return Panel(
                "📁 Upload Images\nSelect images of your study material to get started.",
                border_style="cyan",
                box=box.ROUNDED,
            )
        table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("Type")
        table.add_column("Size", justify="right")
        for index, image in enumerate(images):
            table.add_row(
                str(index),
                image.mime_type or "unknown",
                _format_payload_size(image.payload),
            )
        return table


def _format_payload_size(payload: str) -> str:
    size = len(payload) * 3 // 4
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    if size >= 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size} B"


__all__ = ["APP_SUBTITLE", "APP_TITLE", "HomeView"]
