from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from accelerator.clock import utcnow
from accelerator.db.base import CardUpdate
from accelerator.db.errors import CardNotFoundError, DuplicateCardError, PersistenceError
from accelerator.db.jsonfile import read_json, write_json
from accelerator.models.card import ReviewCard
from accelerator.scheduler import summarize_cards

logger = logging.getLogger(__name__)

EMPTY_STATS = {"total": 0, "mastered": 0, "learning": 0, "new": 0}


def _parse_card(record: Any) -> ReviewCard:
    try:
        return ReviewCard.model_validate(record)
    except ValidationError as e:
        raise PersistenceError(f"Malformed card record: {e}") from e


class JsonCardStore:
    """Cards kept in one JSON document, ``{"cards": [...], "stats": {...}}``.

    Every mutation rewrites the whole document under a process-wide lock.
    The stats block is recomputed on every write.
    """

    def __init__(self, path: Path):
        self.path = path
        self._lock = asyncio.Lock()

    async def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"cards": [], "stats": dict(EMPTY_STATS)}
        doc = await asyncio.to_thread(read_json, self.path)
        if not isinstance(doc, dict) or not isinstance(doc.get("cards"), list):
            raise PersistenceError(f"{self.path.name} has no cards list")
        return doc

    async def _save(self, doc: dict[str, Any]) -> None:
        stats = summarize_cards((_parse_card(r) for r in doc["cards"]), utcnow())
        doc["stats"] = stats.model_dump(exclude={"due"})
        await asyncio.to_thread(write_json, self.path, doc)

    async def list(self) -> list[ReviewCard]:
        async with self._lock:
            doc = await self._load()
        return [_parse_card(r) for r in doc["cards"]]

    async def get(self, card_id: str) -> ReviewCard:
        for card in await self.list():
            if card.id == card_id:
                return card
        raise CardNotFoundError(card_id)

    async def count(self) -> int:
        async with self._lock:
            doc = await self._load()
        return len(doc["cards"])

    async def update(self, card_id: str, fn: CardUpdate) -> ReviewCard:
        async with self._lock:
            doc = await self._load()
            records = doc["cards"]
            for i, record in enumerate(records):
                if isinstance(record, dict) and record.get("id") == card_id:
                    break
            else:
                raise CardNotFoundError(card_id)

            updated = fn(_parse_card(records[i]))
            records[i] = updated.to_record()
            await self._save(doc)
            return updated

    async def add(self, card: ReviewCard) -> ReviewCard:
        await self.add_many([card])
        return card

    async def add_many(self, cards: Iterable[ReviewCard]) -> int:
        async with self._lock:
            doc = await self._load()
            existing = {r.get("id") for r in doc["cards"] if isinstance(r, dict)}
            added = 0
            for card in cards:
                if card.id in existing:
                    raise DuplicateCardError(card.id)
                existing.add(card.id)
                doc["cards"].append(card.to_record())
                added += 1
            await self._save(doc)
        logger.debug("Added %d card(s) to %s", added, self.path)
        return added
