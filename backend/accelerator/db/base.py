from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Protocol

from accelerator.models.card import ReviewCard

CardUpdate = Callable[[ReviewCard], ReviewCard]


class CardStore(Protocol):
    """Persistence seam for review cards.

    ``update`` is a scoped read-modify-write: if ``fn`` raises, nothing is
    persisted and the exception propagates unchanged.
    """

    async def get(self, card_id: str) -> ReviewCard: ...

    async def list(self) -> list[ReviewCard]: ...

    async def update(self, card_id: str, fn: CardUpdate) -> ReviewCard: ...

    async def add(self, card: ReviewCard) -> ReviewCard: ...

    async def add_many(self, cards: Iterable[ReviewCard]) -> int: ...

    async def count(self) -> int: ...
