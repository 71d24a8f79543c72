from __future__ import annotations

import asyncio
from collections.abc import Iterable

from accelerator.db.base import CardUpdate
from accelerator.db.errors import CardNotFoundError, DuplicateCardError
from accelerator.models.card import ReviewCard


class MemoryCardStore:
    """Dict-backed store; contents are lost on restart."""

    def __init__(self, cards: Iterable[ReviewCard] = ()):
        self._cards: dict[str, ReviewCard] = {c.id: c for c in cards}
        self._lock = asyncio.Lock()

    async def get(self, card_id: str) -> ReviewCard:
        try:
            return self._cards[card_id]
        except KeyError:
            raise CardNotFoundError(card_id) from None

    async def list(self) -> list[ReviewCard]:
        return list(self._cards.values())

    async def count(self) -> int:
        return len(self._cards)

    async def update(self, card_id: str, fn: CardUpdate) -> ReviewCard:
        async with self._lock:
            card = await self.get(card_id)
            updated = fn(card)
            self._cards[card_id] = updated
            return updated

    async def add(self, card: ReviewCard) -> ReviewCard:
        await self.add_many([card])
        return card

    async def add_many(self, cards: Iterable[ReviewCard]) -> int:
        async with self._lock:
            staged: dict[str, ReviewCard] = {}
            for card in cards:
                if card.id in self._cards or card.id in staged:
                    raise DuplicateCardError(card.id)
                staged[card.id] = card
            self._cards.update(staged)
            return len(staged)
