"""The gated admin view: visitor analytics and ad management."""

from __future__ import annotations

from typing import List, Optional, Tuple

from rich import box
from rich.columns import Columns
from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import DEFAULT_STATS_INTERVAL
from ..services.ads import AdAdmin, AdField, AdResolver, PendingEdit
from ..services.backend import BackendClient
from ..services.events import Notifier
from ..services.models import AdRecord, AdSlot, VisitorStats
from ..services.session import AdminSession, StatsListener, StatsPoller
from .widgets import console_notifier


ADMIN_SLOT_ORDER: Tuple[AdSlot, ...] = (
    AdSlot.LEFT1,
    AdSlot.LEFT2,
    AdSlot.RIGHT1,
    AdSlot.RIGHT2,
    AdSlot.TOP,
    AdSlot.BOTTOM,
)

STAT_LABELS: Tuple[Tuple[str, str], ...] = (
    ("realtime", "Real-time (5 min)"),
    ("daily", "Daily Visitors"),
    ("weekly", "Weekly Visitors"),
    ("monthly", "Monthly Visitors"),
)


class AdminView:
    """Admin page state: everything past the login gate lives here.

    Use it as an async context manager so the stats poller is released on
    every exit path.
    """

    def __init__(
        self,
        client: BackendClient,
        *,
        interval: float = DEFAULT_STATS_INTERVAL,
        console: Optional[Console] = None,
        notify: Optional[Notifier] = None,
        on_stats: Optional[StatsListener] = None,
    ) -> None:
        self._console = console or Console()
        notify = notify or console_notifier(self._console)
        self.session = AdminSession(client)
        self.ads = AdResolver(client)
        self.ad_admin = AdAdmin(client, self.ads, notify=notify)
        self.poller = StatsPoller(client, self.session, interval=interval, on_update=on_stats)

    @property
    def stats(self) -> Optional[VisitorStats]:
        return self.poller.snapshot

    async def login(self, username: str, password: str, *, poll: bool = True) -> bool:
        """Authenticate, then load the ads; *poll* starts the stats refresh loop."""

        if not await self.session.login(username, password):
            return False
        if poll:
            self.poller.start()
        await self.ads.load()
        return True

    def logout(self) -> None:
        self.session.logout()

    async def teardown(self) -> None:
        self.session.logout()
        await self.poller.stop()
        self.poller.close()

    async def __aenter__(self) -> "AdminView":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.teardown()

    def update_field(self, position: AdSlot, field: AdField, value: str) -> PendingEdit:
        return self.ad_admin.update_field(position, field, value)

    async def commit(self, position: AdSlot) -> bool:
        return await self.ad_admin.commit(position)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def show(self) -> None:
        self._console.print(self.render())

    def render(self) -> RenderableType:
        if not self.session.authenticated:
            return self._build_login_panel()
        return Group(
            Text("Exam Bot Admin", style="bold magenta"),
            Panel(
                self._build_stats_grid(),
                title="Visitor Analytics",
                border_style="magenta",
                box=box.ROUNDED,
            ),
            Panel(
                Columns(
                    [self._build_ad_card(slot) for slot in ADMIN_SLOT_ORDER],
                    equal=True,
                    expand=True,
                ),
                title="Ad Management",
                border_style="cyan",
                box=box.ROUNDED,
            ),
        )

    def _build_login_panel(self) -> Panel:
        body: List[RenderableType] = [Text("Enter your admin credentials to continue.")]
        if self.session.error:
            body.append(Text(self.session.error, style="bold red"))
        return Panel(Group(*body), title="Admin Login", border_style="yellow", box=box.ROUNDED)

    def _build_stats_grid(self) -> RenderableType:
        stats = self.stats
        if stats is None:
            return Text("Loading statistics…", style="dim")
        grid = Table.grid(expand=True, padding=(0, 2))
        for _ in STAT_LABELS:
            grid.add_column(justify="center")
        grid.add_row(*(Text(str(getattr(stats, key)), style="bold") for key, _ in STAT_LABELS))
        grid.add_row(*(Text(label, style="dim") for _, label in STAT_LABELS))
        return grid

    def _build_ad_card(self, slot: AdSlot) -> Panel:
        current = self.ads.current(slot) or AdRecord(position=slot.value)
        draft = self.ad_admin.draft(slot)

        table = Table.grid(padding=(0, 1))
        table.add_column(style="dim")
        table.add_column()
        table.add_row("Image URL", _field_text(draft.image_url, current.image_url, "Enter image URL"))
        table.add_row("Link URL", _field_text(draft.link_url, current.link_url, "Enter link URL"))
        preview = draft.image_url or current.image_url
        if preview:
            table.add_row("Preview", Text(preview, style=f"link {preview}"))
        return Panel(table, title=slot.value.upper(), border_style="cyan", box=box.ROUNDED)


def _field_text(draft: Optional[str], current: Optional[str], hint: str) -> Text:
    if draft:
        return Text(draft, style="bold")
    return Text(current or hint, style="dim italic")


__all__ = ["ADMIN_SLOT_ORDER", "AdminView", "STAT_LABELS"]
