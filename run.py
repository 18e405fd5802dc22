"""Entry-point for the Exam Bot console client."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.live import Live

from exam_bot.config import BACKEND_URL_ENVVAR, ClientConfig, load_config
from exam_bot.errors import ConfigError
from exam_bot.logging_utils import configure_logging, resolve_log_level
from exam_bot.services.backend import BackendClient
from exam_bot.services.models import AdSlot
from exam_bot.ui.admin import AdminView
from exam_bot.ui.home import HomeView


LOGGER = logging.getLogger("exam_bot.cli")


cli = typer.Typer(add_completion=False, help="Exam Bot study assistant client")

console = Console()


backend_option = typer.Option(
    None,
    "--backend-url",
    "-b",
    envvar=BACKEND_URL_ENVVAR,
    help="Base URL of the Exam Bot backend (without the /api suffix).",
)
config_option = typer.Option(
    None,
    "--config",
    exists=True,
    file_okay=True,
    dir_okay=False,
    resolve_path=True,
    help="Optional JSON configuration file.",
)
verbose_option = typer.Option(False, "--verbose", "-v", help="Log debug details to stderr.")


def _prepare(backend_url: Optional[str], config_path: Optional[Path], verbose: bool) -> ClientConfig:
    configure_logging(resolve_log_level(verbose=verbose))
    environ = {BACKEND_URL_ENVVAR: backend_url} if backend_url else {}
    try:
        return load_config(config_path, environ=environ)
    except ConfigError as error:
        raise typer.BadParameter(str(error), param_hint="--backend-url") from error


def _open_client(config: ClientConfig) -> BackendClient:
    return BackendClient(config)


@cli.command()
def home(
    images: List[Path] = typer.Argument(
        ...,
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Images of the study material to upload.",
    ),
    questions: bool = typer.Option(
        False,
        "--questions",
        "-q",
        help="Generate a question paper instead of a summary.",
    ),
    backend_url: Optional[str] = backend_option,
    config_path: Optional[Path] = config_option,
    verbose: bool = verbose_option,
) -> None:
    """Upload IMAGES and print the generated summary or question paper."""

    config = _prepare(backend_url, config_path, verbose)

    async def _run() -> bool:
        async with _open_client(config) as client:
            async with HomeView(client, console=console) as view:
                await view.upload(images)
                if questions:
                    result = await view.generate_questions()
                else:
                    result = await view.generate_summary()
                view.show()
                return result is not None

    if not asyncio.run(_run()):
        raise typer.Exit(code=1)


@cli.command()
def ads(
    backend_url: Optional[str] = backend_option,
    config_path: Optional[Path] = config_option,
    verbose: bool = verbose_option,
) -> None:
    """Print the home view with its ad slots and no uploads."""

    config = _prepare(backend_url, config_path, verbose)

    async def _run() -> None:
        async with _open_client(config) as client:
            async with HomeView(client, console=console) as view:
                view.show()

    asyncio.run(_run())


@cli.command()
def admin(
    username: str = typer.Option(..., "--username", "-u", help="Admin user name."),
    password: str = typer.Option(
        ...,
        "--password",
        "-p",
        prompt=True,
        hide_input=True,
        help="Admin password (prompted when omitted).",
    ),
    watch: float = typer.Option(
        0.0,
        "--watch",
        "-w",
        min=0.0,
        help="Keep refreshing the dashboard for this many seconds.",
    ),
    backend_url: Optional[str] = backend_option,
    config_path: Optional[Path] = config_option,
    verbose: bool = verbose_option,
) -> None:
    """Log in and show visitor analytics and the ad management grid."""

    config = _prepare(backend_url, config_path, verbose)

    async def _run() -> bool:
        async with _open_client(config) as client:
            async with AdminView(client, interval=config.stats_interval, console=console) as view:
                if not await view.login(username, password, poll=watch > 0):
                    view.show()
                    return False
                if watch <= 0:
                    # One snapshot is enough for a single render.
                    await view.poller.refresh()
                    view.show()
                    return True
                with Live(view.render(), console=console, refresh_per_second=2) as live:
                    loop = asyncio.get_running_loop()
                    deadline = loop.time() + watch
                    while loop.time() < deadline:
                        await asyncio.sleep(min(0.5, max(deadline - loop.time(), 0)))
                        live.update(view.render())
                return True

    if not asyncio.run(_run()):
        raise typer.Exit(code=1)


@cli.command("set-ad")
def set_ad(
    position: AdSlot = typer.Argument(..., help="Slot to update."),
    image_url: str = typer.Option(..., "--image-url", help="Image shown in the slot."),
    link_url: str = typer.Option(..., "--link-url", help="Target opened when clicked."),
    username: str = typer.Option(..., "--username", "-u", help="Admin user name."),
    password: str = typer.Option(
        ...,
        "--password",
        "-p",
        prompt=True,
        hide_input=True,
        help="Admin password (prompted when omitted).",
    ),
    backend_url: Optional[str] = backend_option,
    config_path: Optional[Path] = config_option,
    verbose: bool = verbose_option,
) -> None:
    """Replace the creative served in POSITION."""

    config = _prepare(backend_url, config_path, verbose)

    async def _run() -> bool:
        async with _open_client(config) as client:
            async with AdminView(client, interval=config.stats_interval, console=console) as view:
                if not await view.login(username, password, poll=False):
                    view.show()
                    return False
                view.update_field(position, "image_url", image_url)
                view.update_field(position, "link_url", link_url)
                return await view.commit(position)

    if not asyncio.run(_run()):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    cli()
