"""Configuration loading utilities for the Exam Bot client."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError


LOGGER = logging.getLogger(__name__)


BACKEND_URL_ENVVAR = "EXAM_BOT_BACKEND_URL"

DEFAULT_REQUEST_TIMEOUT = 120.0
DEFAULT_STATS_INTERVAL = 5.0


def _coerce_positive_float(value: Any, *, label: str, default: float) -> float:
    """Return *value* as a positive float, falling back to *default*."""

    if value is None or value == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        LOGGER.warning("Ignoring invalid %s value %r; using %s.", label, value, default)
        return default
    if number <= 0:
        LOGGER.warning("Ignoring non-positive %s value %r; using %s.", label, value, default)
        return default
    return number


def _normalize_backend_url(value: Any) -> str:
    if value is None:
        return ""
    normalized = str(value).strip()
    return normalized.rstrip("/")


@dataclass(frozen=True)
class ClientConfig:
    """Simple container describing how to reach the backend."""

    backend_url: str
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    stats_interval: float = DEFAULT_STATS_INTERVAL

    @property
    def api_url(self) -> str:
        """Base URL every endpoint hangs off."""

        return f"{self.backend_url}/api"

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "ClientConfig":
        backend_url = _normalize_backend_url(mapping.get("backend_url"))
        if not backend_url:
            raise ConfigError(
                f"No backend URL configured; set {BACKEND_URL_ENVVAR} or 'backend_url'."
            )
        if not backend_url.startswith(("http://", "https://")):
            raise ConfigError(f"Backend URL '{backend_url}' must start with http:// or https://")

        return cls(
            backend_url=backend_url,
            request_timeout=_coerce_positive_float(
                mapping.get("request_timeout"),
                label="request_timeout",
                default=DEFAULT_REQUEST_TIMEOUT,
            ),
            stats_interval=_coerce_positive_float(
                mapping.get("stats_interval"),
                label="stats_interval",
                default=DEFAULT_STATS_INTERVAL,
            ),
        )


def load_config(
    config_path: Path | None = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientConfig:
    """Load the client configuration.

    Values come from the optional JSON file at *config_path*; the
    ``EXAM_BOT_BACKEND_URL`` environment variable overrides ``backend_url``.
    """

    raw_config: Dict[str, Any] = {}
    if config_path is not None:
        with config_path.open("r", encoding="utf-8") as config_file:
            loaded = json.load(config_file)
        if not isinstance(loaded, dict):
            raise ConfigError(f"Configuration file '{config_path}' must contain a JSON object")
        raw_config.update(loaded)

    env = os.environ if environ is None else environ
    override = (env.get(BACKEND_URL_ENVVAR) or "").strip()
    if override:
        raw_config["backend_url"] = override

    return ClientConfig.from_mapping(raw_config)


__all__ = [
    "BACKEND_URL_ENVVAR",
    "ClientConfig",
    "DEFAULT_REQUEST_TIMEOUT",
    "DEFAULT_STATS_INTERVAL",
    "load_config",
]
