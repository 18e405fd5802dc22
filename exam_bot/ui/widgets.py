"""Rich building blocks shared by the home and admin views."""

from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..services.ads import PLACEHOLDER_TEXT, Creative


SPONSORED_LABEL = "Sponsored"


def build_ad_block(creative: Optional[Creative], label: str = SPONSORED_LABEL) -> Panel:
    """One ad slot: the linked image when servable, otherwise the placeholder."""

    if creative is None:
        body = Text(PLACEHOLDER_TEXT, style="dim italic", justify="center")
        border = "grey50"
    else:
        body = Text(creative.image_url, style=f"link {creative.link_url}", justify="center")
        body.append("\n")
        body.append(f"→ {creative.link_url}", style="dim")
        border = "yellow"
    return Panel(body, title=label, title_align="left", border_style=border, box=box.ROUNDED)


def console_notifier(console: Console):
    """Return a notifier that prints user-facing messages as alerts."""

    def _notify(message: str) -> None:
        console.print(Panel(Text(message), border_style="bright_cyan", box=box.HEAVY))

    return _notify


__all__ = ["SPONSORED_LABEL", "build_ad_block", "console_notifier"]
