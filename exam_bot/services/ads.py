"""Ad slot resolution for the public view and ad editing for the admin view."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, Literal, Mapping, Optional

from ..errors import TransportError
from .backend import BackendClient
from .events import Notifier, emit_task_event, log_notice
from .models import AdRecord, AdSlot


LOGGER = logging.getLogger(__name__)


AdField = Literal["image_url", "link_url"]

AD_FIELDS: tuple[str, ...] = ("image_url", "link_url")

PLACEHOLDER_TEXT = "Ad Placeholder"

MISSING_FIELDS_MESSAGE = "Please provide both image URL and link URL"
AD_UPDATED_MESSAGE = "Ad updated successfully!"
AD_UPDATE_FAILED_MESSAGE = "Error updating ad. Please try again."


@dataclass(frozen=True)
class Creative:
    image_url: str
    link_url: str


def index_ads(records: Iterable[AdRecord]) -> Dict[AdSlot, AdRecord]:
    """Key *records* by slot; unknown positions are ignored, the first match wins."""

    indexed: Dict[AdSlot, AdRecord] = {}
    for record in records:
        try:
            slot = AdSlot(record.position)
        except ValueError:
            LOGGER.debug("Ignoring ad for unknown position %r", record.position)
            continue
        indexed.setdefault(slot, record)
    return indexed


def resolve_creative(ads: Mapping[AdSlot, AdRecord], position: AdSlot) -> Optional[Creative]:
    """Return the servable creative for *position*, or ``None`` for a placeholder.

    A creative is servable only when both its image and its link are set; a
    partial record is treated exactly like a missing one.
    """

    record = ads.get(AdSlot(position))
    if record is None or not record.image_url or not record.link_url:
        return None
    return Creative(image_url=record.image_url, link_url=record.link_url)


class AdResolver:
    """Holds the ad list fetched for one view mount."""

    def __init__(self, client: BackendClient) -> None:
        self._client = client
        self._ads: Dict[AdSlot, AdRecord] = {}

    async def load(self) -> bool:
        """Fetch the ad list, replacing the previous copy.

        Returns ``False`` when the backend could not be reached; the previous
        copy (empty on first mount, so every slot is a placeholder) is kept.
        """

        try:
            records = await self._client.list_ads()
        except TransportError as error:
            LOGGER.error("Error loading ads: %s", error)
            return False
        self._ads = index_ads(records)
        emit_task_event("ads", "loaded", payload={"slots": sorted(slot.value for slot in self._ads)})
        return True

    def resolve(self, position: AdSlot) -> Optional[Creative]:
        return resolve_creative(self._ads, position)

    def current(self, position: AdSlot) -> Optional[AdRecord]:
        """The raw record for *position*, even when it is incomplete."""

        return self._ads.get(AdSlot(position))


@dataclass(frozen=True)
class PendingEdit:
    image_url: Optional[str] = None
    link_url: Optional[str] = None

    def merged(self, field: AdField, value: str) -> "PendingEdit":
        if field not in AD_FIELDS:
            raise ValueError(f"Unknown ad field '{field}'")
        return replace(self, **{field: value})

    @property
    def complete(self) -> bool:
        return bool(self.image_url) and bool(self.link_url)


class AdAdmin:
    """Stage and commit per-slot edits on behalf of an authenticated admin."""

    def __init__(
        self,
        client: BackendClient,
        resolver: AdResolver,
        *,
        notify: Notifier = log_notice,
    ) -> None:
        self._client = client
        self._resolver = resolver
        self._notify = notify
        self._pending: Dict[AdSlot, PendingEdit] = {}

    @property
    def pending(self) -> Dict[AdSlot, PendingEdit]:
        return dict(self._pending)

    def draft(self, position: AdSlot) -> PendingEdit:
        return self._pending.get(AdSlot(position), PendingEdit())

    def update_field(self, position: AdSlot, field: AdField, value: str) -> PendingEdit:
        slot = AdSlot(position)
        edit = self.draft(slot).merged(field, value)
        self._pending[slot] = edit
        return edit

    async def commit(self, position: AdSlot) -> bool:
        slot = AdSlot(position)
        edit = self._pending.get(slot)
        if edit is None or not edit.complete:
            self._notify(MISSING_FIELDS_MESSAGE)
            return False

        try:
            await self._client.save_ad(slot, edit.image_url or "", edit.link_url or "")
        except TransportError as error:
            LOGGER.error("Error updating ad %s: %s", slot.value, error)
            self._notify(AD_UPDATE_FAILED_MESSAGE)
            return False

        self._notify(AD_UPDATED_MESSAGE)
        if await self._resolver.load():
            # Drop the draft only once the committed state is visible again.
            if self._pending.get(slot) == edit:
                del self._pending[slot]
        return True


__all__ = [
    "AD_FIELDS",
    "AD_UPDATED_MESSAGE",
    "AD_UPDATE_FAILED_MESSAGE",
    "AdAdmin",
    "AdField",
    "AdResolver",
    "Creative",
    "MISSING_FIELDS_MESSAGE",
    "PLACEHOLDER_TEXT",
    "PendingEdit",
    "index_ads",
    "resolve_creative",
]
