from __future__ import annotations

import logging
from datetime import datetime, timezone

from accelerator.config import Settings
from accelerator.db.base import CardStore
from accelerator.db.content import ContentRepository
from accelerator.db.errors import (
    CardNotFoundError,
    ContentNotFoundError,
    DuplicateCardError,
    PersistenceError,
)
from accelerator.db.json_store import JsonCardStore
from accelerator.db.memory import MemoryCardStore
from accelerator.db.progress import ProgressStore
from accelerator.db.sqlite import SqliteCardStore
from accelerator.scheduler import new_card

logger = logging.getLogger(__name__)

_card_store: CardStore | None = None
_progress_store: ProgressStore | None = None
_content: ContentRepository | None = None

__all__ = [
    "CardNotFoundError",
    "CardStore",
    "ContentNotFoundError",
    "ContentRepository",
    "DuplicateCardError",
    "JsonCardStore",
    "MemoryCardStore",
    "PersistenceError",
    "ProgressStore",
    "SqliteCardStore",
    "get_card_store",
    "get_content",
    "get_progress_store",
    "init_all_stores",
    "seed_cards",
]


async def _build_card_store(cfg: Settings) -> CardStore:
    if cfg.store_backend == "sqlite":
        store = SqliteCardStore(cfg.data_dir / cfg.sqlite_filename)
        await store.init()
        return store
    if cfg.store_backend == "memory":
        return MemoryCardStore()
    return JsonCardStore(cfg.data_dir / cfg.quiz_filename)


async def seed_cards(store: CardStore, content: ContentRepository, now: datetime) -> int:
    """Create the authored flashcards in their initial state if the store is empty."""
    if await store.count():
        return 0
    cards = []
    for i, record in enumerate(content.seed_flashcards()):
        extra = {
            k: v for k, v in record.items()
            if k not in ("id", "front", "back", "repetitions", "interval",
                         "easeFactor", "nextReview", "lastReviewed", "created")
        }
        cards.append(
            new_card(
                front=str(record.get("front", "")),
                back=str(record.get("back", "")),
                now=now,
                card_id=str(record["id"]) if record.get("id") is not None else f"card-{i + 1}",
                **extra,
            )
        )
    if not cards:
        logger.warning("No flashcards found, starting with an empty card store")
        return 0
    return await store.add_many(cards)


async def init_all_stores(cfg: Settings) -> None:
    global _card_store, _progress_store, _content
    cfg.data_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Runtime dir: %s", cfg.data_dir)
    logger.info("Content dir: %s", cfg.content_dir)

    _content = ContentRepository(cfg.content_dir, cfg.lesson_files)
    for filename in _content.missing_files():
        logger.warning("Missing content file: %s", cfg.content_dir / filename)

    _progress_store = ProgressStore(cfg.data_dir / cfg.progress_filename)
    await _progress_store.init()

    _card_store = await _build_card_store(cfg)
    seeded = await seed_cards(_card_store, _content, datetime.now(timezone.utc))
    if seeded:
        logger.info("Initialized %d flashcards", seeded)


def get_card_store() -> CardStore:
    assert _card_store is not None, "Card store not initialized"
    return _card_store


def get_progress_store() -> ProgressStore:
    assert _progress_store is not None, "Progress store not initialized"
    return _progress_store


def get_content() -> ContentRepository:
    assert _content is not None, "Content repository not initialized"
    return _content
