"""Structured event helpers shared across the client."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional


DEFAULT_EVENT_LOGGER = logging.getLogger("exam_bot.events")
NOTICE_LOGGER = logging.getLogger("exam_bot.notices")

_MAX_VALUE_LENGTH = 200


# Receives user-facing messages (the browser client showed them as alerts).
Notifier = Callable[[str], None]


def log_notice(message: str) -> None:
    """Default :data:`Notifier` used when no front-end is attached."""

    NOTICE_LOGGER.info("%s", message)


def sanitize_context_value(value: Any) -> Any:
    """Return a log-friendly representation for *value*."""

    if value is None:
        return None
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, (list, tuple, set)):
        text = ", ".join(str(item) for item in value)
    else:
        text = str(value)
    trimmed = text.strip()
    if not trimmed:
        return None
    if len(trimmed) > _MAX_VALUE_LENGTH:
        return trimmed[:_MAX_VALUE_LENGTH] + "…"
    return trimmed


def normalize_context(values: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop empty entries and sanitise the rest."""

    if not values:
        return {}
    normalised: Dict[str, Any] = {}
    for key, raw_value in values.items():
        if not key:
            continue
        value = sanitize_context_value(raw_value)
        if value is None:
            continue
        normalised[str(key)] = value
    return normalised


def emit_structured_event(
    event_type: str,
    message: str,
    *,
    payload: Optional[Dict[str, Any]] = None,
    duration_ms: Optional[float] = None,
    level: int = logging.INFO,
    logger: logging.Logger = DEFAULT_EVENT_LOGGER,
) -> None:
    """Emit a structured event with consistent logging metadata."""

    base_message = str(message).strip()
    details = normalize_context(payload)
    if duration_ms is not None:
        details["duration_ms"] = round(float(duration_ms), 1)
    details_text = ", ".join(f"{key}={value}" for key, value in details.items())
    display_message = f"[{event_type}] {base_message}" if event_type else base_message
    log_message = f"{display_message} ({details_text})" if details_text else display_message
    extra: Dict[str, Any] = {
        "event": base_message,
        "event_type": event_type or "",
    }
    if details:
        extra["event_payload"] = details
    logger.log(level, log_message, extra=extra)


def emit_http_event(
    method: str,
    path: str,
    *,
    status_code: Optional[int] = None,
    error: Optional[str] = None,
    duration_ms: Optional[float] = None,
    logger: logging.Logger = DEFAULT_EVENT_LOGGER,
) -> None:
    """Emit an event describing one backend round-trip."""

    failed = error is not None or (status_code is not None and status_code >= 400)
    emit_structured_event(
        "HTTP_CALL",
        f"{method.upper()} {path}",
        payload={"status": status_code, "error": error},
        duration_ms=duration_ms,
        level=logging.WARNING if failed else logging.DEBUG,
        logger=logger,
    )


def emit_task_event(
    task: str,
    phase: str,
    *,
    payload: Optional[Dict[str, Any]] = None,
    duration_ms: Optional[float] = None,
    level: int = logging.DEBUG,
    logger: logging.Logger = DEFAULT_EVENT_LOGGER,
) -> None:
    """Emit a structured task lifecycle event."""

    emit_structured_event(
        "TASK_STATE",
        f"{task}: {phase}",
        payload=payload,
        duration_ms=duration_ms,
        level=level,
        logger=logger,
    )


__all__ = [
    "DEFAULT_EVENT_LOGGER",
    "NOTICE_LOGGER",
    "Notifier",
    "emit_http_event",
    "emit_structured_event",
    "emit_task_event",
    "log_notice",
    "normalize_context",
    "sanitize_context_value",
]
