from __future__ import annotations

import asyncio
import base64
from pathlib import Path

import pytest

import exam_bot.services.images as images_module
from exam_bot.services.images import (
    Image,
    ImageStore,
    encode_data_url,
    filter_image_files,
    strip_data_url_header,
)

from conftest import GIF_BYTES, PNG_BYTES


def test_payload_strips_data_url_header() -> None:
    image = Image(raw_encoding=encode_data_url(b"hello", "image/png"))

    assert image.raw_encoding.startswith("data:image/png;base64,")
    assert image.payload == base64.b64encode(b"hello").decode("ascii")
    assert image.mime_type == "image/png"


def test_strip_header_leaves_headerless_text_alone() -> None:
    assert strip_data_url_header("abc") == "abc"
    assert strip_data_url_header("data:image/gif;base64,a,b") == "a,b"


def test_filter_keeps_only_images_in_order(tmp_path: Path) -> None:
    paths = [
        tmp_path / "notes.pdf",
        tmp_path / "page2.jpg",
        tmp_path / "readme.txt",
        tmp_path / "page1.png",
    ]

    assert filter_image_files(paths) == [tmp_path / "page2.jpg", tmp_path / "page1.png"]


@pytest.mark.asyncio
async def test_add_decodes_files_into_data_urls(make_image_file) -> None:
    store = ImageStore()
    png = make_image_file("a.png")
    gif = make_image_file("b.gif")

    added = await store.add(png, gif)

    assert len(added) == 2
    assert store.to_payloads() == [
        base64.b64encode(PNG_BYTES).decode("ascii"),
        base64.b64encode(GIF_BYTES).decode("ascii"),
    ]
    assert [image.mime_type for image in store.images] == ["image/png", "image/gif"]


@pytest.mark.asyncio
async def test_add_keeps_selection_order_when_decodes_finish_out_of_order(
    monkeypatch, tmp_path: Path
) -> None:
    delays = {"slow.png": 0.05, "fast.png": 0.0}

    async def fake_decode(path: Path) -> Image:
        await asyncio.sleep(delays[path.name])
        return Image(raw_encoding=f"data:image/png;base64,{path.stem}")

    monkeypatch.setattr(images_module, "decode_file", fake_decode)
    store = ImageStore()

    await store.add(tmp_path / "slow.png", tmp_path / "fast.png")

    assert store.to_payloads() == ["slow", "fast"]


@pytest.mark.asyncio
async def test_overlapping_adds_commit_in_call_order(monkeypatch, tmp_path: Path) -> None:
    delays = {"first.png": 0.05, "second.png": 0.0}

    async def fake_decode(path: Path) -> Image:
        await asyncio.sleep(delays[path.name])
        return Image(raw_encoding=f"data:image/png;base64,{path.stem}")

    monkeypatch.setattr(images_module, "decode_file", fake_decode)
    store = ImageStore()

    await asyncio.gather(store.add(tmp_path / "first.png"), store.add(tmp_path / "second.png"))

    assert store.to_payloads() == ["first", "second"]


@pytest.mark.asyncio
async def test_unreadable_file_is_skipped(make_image_file, tmp_path: Path) -> None:
    store = ImageStore()
    good = make_image_file("good.png")

    added = await store.add(tmp_path / "missing.png", good)

    assert len(added) == 1
    assert len(store) == 1
    assert store.to_payloads() == [base64.b64encode(PNG_BYTES).decode("ascii")]


@pytest.mark.asyncio
async def test_remove_and_clear_follow_surviving_order(monkeypatch, tmp_path: Path) -> None:
    async def fake_decode(path: Path) -> Image:
        return Image(raw_encoding=f"data:image/png;base64,{path.stem}")

    monkeypatch.setattr(images_module, "decode_file", fake_decode)
    store = ImageStore()

    await store.add(tmp_path / "a.png", tmp_path / "b.png", tmp_path / "c.png")
    store.remove_at(1)
    await store.add(tmp_path / "d.png")
    store.remove_at(0)

    assert store.to_payloads() == ["c", "d"]

    store.clear()
    assert store.to_payloads() == []
    assert not store


@pytest.mark.parametrize("index", [-1, 0, 3, 99])
def test_remove_at_out_of_range_is_a_no_op(index: int) -> None:
    store = ImageStore()
    store.remove_at(index)
    assert len(store) == 0


@pytest.mark.asyncio
async def test_remove_at_past_end_leaves_store_unchanged(make_image_file) -> None:
    store = ImageStore()
    await store.add(make_image_file("a.png"))
    before = store.to_payloads()

    store.remove_at(1)
    store.remove_at(-1)

    assert store.to_payloads() == before
