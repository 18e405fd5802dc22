"""In-memory store for the study images selected by the user."""

from __future__ import annotations

import asyncio
import base64
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .events import emit_task_event


LOGGER = logging.getLogger(__name__)


_DEFAULT_IMAGE_MIME = "application/octet-stream"


def guess_mime_type(path: Path) -> Optional[str]:
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type


def is_image_file(path: Path) -> bool:
    mime_type = guess_mime_type(path)
    return bool(mime_type) and mime_type.startswith("image/")


def filter_image_files(paths: Iterable[Path]) -> List[Path]:
    """Keep only the paths whose MIME type is ``image/*``, preserving order."""

    selected: List[Path] = []
    for path in paths:
        if is_image_file(path):
            selected.append(path)
        else:
            LOGGER.info("Skipping non-image file: %s", path)
    return selected


@dataclass(frozen=True)
class Image:
    """A decoded upload, kept as the data URL produced when reading the file."""

    raw_encoding: str

    @property
    def payload(self) -> str:
        """The encoding with its ``data:<mime>;base64,`` header removed."""

        return strip_data_url_header(self.raw_encoding)

    @property
    def mime_type(self) -> Optional[str]:
        header, separator, _ = self.raw_encoding.partition(",")
        if not separator or not header.startswith("data:"):
            return None
        return header[len("data:"):].split(";", 1)[0] or None


def strip_data_url_header(raw_encoding: str) -> str:
    _, separator, data = raw_encoding.partition(",")
    if not separator:
        return raw_encoding
    return data


def encode_data_url(content: bytes, mime_type: Optional[str]) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mime_type or _DEFAULT_IMAGE_MIME};base64,{encoded}"


def _read_data_url(path: Path) -> str:
    return encode_data_url(path.read_bytes(), guess_mime_type(path))


async def decode_file(path: Path) -> Image:
    """Read *path* into an :class:`Image` without blocking the event loop."""

    loop = asyncio.get_running_loop()
    raw_encoding = await loop.run_in_executor(None, _read_data_url, path)
    return Image(raw_encoding=raw_encoding)


class ImageStore:
    """Ordered collection of uploaded images.

    Identity is positional: an image is addressed by its index in the store,
    never by its content, so the same file may be added twice.
    """

    def __init__(self) -> None:
        self._images: List[Image] = []
        # Overlapping add() calls commit in call order.
        self._append_lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._images)

    def __bool__(self) -> bool:
        return bool(self._images)

    @property
    def images(self) -> List[Image]:
        return list(self._images)

    async def add(self, *files: Path) -> List[Image]:
        """Decode *files* concurrently and append them in selection order.

        Files that cannot be read are logged and skipped. Returns the images
        that were appended.
        """

        if not files:
            return []

        async with self._append_lock:
            results = await asyncio.gather(
                *(decode_file(path) for path in files),
                return_exceptions=True,
            )
            return self._commit(files, results)

    def _commit(self, files: Sequence[Path], results: Sequence[object]) -> List[Image]:
        added: List[Image] = []
        for path, outcome in zip(files, results):
            if isinstance(outcome, Image):
                added.append(outcome)
                continue
            if isinstance(outcome, Exception):
                LOGGER.error("Could not read image %s: %s", path, outcome)
                continue
            raise outcome  # CancelledError and friends

        self._images.extend(added)
        emit_task_event(
            "images",
            "added",
            payload={"selected": len(files), "added": len(added), "total": len(self._images)},
        )
        return added

    def remove_at(self, index: int) -> None:
        if index < 0 or index >= len(self._images):
            LOGGER.debug("Ignoring removal of out-of-range image index %s", index)
            return
        del self._images[index]

    def clear(self) -> None:
        self._images.clear()

    def to_payloads(self) -> List[str]:
        return [image.payload for image in self._images]


__all__ = [
    "Image",
    "ImageStore",
    "decode_file",
    "encode_data_url",
    "filter_image_files",
    "is_image_file",
    "strip_data_url_header",
]
