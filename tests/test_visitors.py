from __future__ import annotations

import pytest

from exam_bot.services.visitors import VisitorTracker, build_visitor_id


def test_visitor_id_uses_epoch_milliseconds() -> None:
    assert build_visitor_id(lambda: 1700000000.1234) == "user_1700000000123"


@pytest.mark.asyncio
async def test_tracker_fires_once(scripted_client) -> None:
    tracker = VisitorTracker(scripted_client)

    first = tracker.start()
    second = tracker.start()

    assert first is second
    assert await tracker.wait() is True
    sent = scripted_client.calls_to("track_visitor")
    assert len(sent) == 1
    assert sent[0].startswith("user_")


@pytest.mark.asyncio
async def test_tracker_failure_is_swallowed(scripted_client, caplog) -> None:
    scripted_client.fail.add("track_visitor")
    tracker = VisitorTracker(scripted_client)

    tracker.start()

    assert await tracker.wait() is False
    assert "Error tracking visitor" in caplog.text


@pytest.mark.asyncio
async def test_wait_without_start_returns_none(scripted_client) -> None:
    assert await VisitorTracker(scripted_client).wait() is None
    assert scripted_client.calls == []
