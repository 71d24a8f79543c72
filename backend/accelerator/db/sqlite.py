from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite
from pydantic import ValidationError

from accelerator.db.base import CardUpdate
from accelerator.db.errors import CardNotFoundError, DuplicateCardError, PersistenceError
from accelerator.models.card import ReviewCard

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS cards (
    seq           INTEGER PRIMARY KEY AUTOINCREMENT,
    id            TEXT NOT NULL UNIQUE,
    front         TEXT NOT NULL DEFAULT '',
    back          TEXT NOT NULL DEFAULT '',
    repetitions   INTEGER NOT NULL DEFAULT 0,
    interval      INTEGER NOT NULL DEFAULT 0,
    ease_factor   REAL NOT NULL DEFAULT 2.5,
    next_review   TEXT,
    last_reviewed TEXT,
    created       TEXT NOT NULL,
    extra         TEXT NOT NULL DEFAULT '{}'
);
CREATE INDEX IF NOT EXISTS idx_cards_next_review ON cards(next_review);

CREATE TABLE IF NOT EXISTS schema_version (
    version    INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);
INSERT OR IGNORE INTO schema_version(version) VALUES (1);
"""

_COLUMNS = (
    "id", "front", "back", "repetitions", "interval", "ease_factor",
    "next_review", "last_reviewed", "created",
)


def _card_to_row(card: ReviewCard) -> tuple:
    record = card.model_dump(mode="json")
    extra = {k: v for k, v in record.items() if k not in _COLUMNS}
    return tuple(record[c] for c in _COLUMNS) + (json.dumps(extra),)


def _row_to_card(row: aiosqlite.Row) -> ReviewCard:
    d = dict(row)
    d.pop("seq", None)
    extra = json.loads(d.pop("extra") or "{}")
    try:
        return ReviewCard.model_validate({**extra, **d})
    except ValidationError as e:
        raise PersistenceError(f"Malformed card row {d.get('id')!r}: {e}") from e


class SqliteCardStore:
    """Cards in an embedded SQLite database, one row per card.

    ``update`` holds a write transaction (``BEGIN IMMEDIATE``) across the
    read and the write, so it is safe across processes sharing the file.
    """

    def __init__(self, path: Path):
        self.path = path

    async def init(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        async with self._connect() as db:
            await db.executescript(SCHEMA_SQL)
            await db.commit()

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        try:
            async with aiosqlite.connect(self.path, isolation_level=None) as db:
                db.row_factory = aiosqlite.Row
                yield db
        except aiosqlite.Error as e:
            logger.error("SQLite error on %s: %s", self.path, e)
            raise PersistenceError(str(e)) from e

    async def get(self, card_id: str) -> ReviewCard:
        async with self._connect() as db:
            cursor = await db.execute("SELECT * FROM cards WHERE id = ?", (card_id,))
            row = await cursor.fetchone()
        if row is None:
            raise CardNotFoundError(card_id)
        return _row_to_card(row)

    async def list(self) -> list[ReviewCard]:
        async with self._connect() as db:
            cursor = await db.execute("SELECT * FROM cards ORDER BY seq ASC")
            rows = await cursor.fetchall()
        return [_row_to_card(r) for r in rows]

    async def count(self) -> int:
        async with self._connect() as db:
            cursor = await db.execute("SELECT COUNT(*) FROM cards")
            row = await cursor.fetchone()
        return row[0] if row else 0

    async def update(self, card_id: str, fn: CardUpdate) -> ReviewCard:
        async with self._connect() as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                cursor = await db.execute("SELECT * FROM cards WHERE id = ?", (card_id,))
                row = await cursor.fetchone()
                if row is None:
                    raise CardNotFoundError(card_id)
                updated = fn(_row_to_card(row))
                values = _card_to_row(updated)
                await db.execute(
                    """UPDATE cards
                       SET front = ?, back = ?, repetitions = ?, interval = ?,
                           ease_factor = ?, next_review = ?, last_reviewed = ?,
                           created = ?, extra = ?
                       WHERE id = ?""",
                    values[1:] + (card_id,),
                )
            except BaseException:
                await db.execute("ROLLBACK")
                raise
            await db.execute("COMMIT")
            return updated

    async def add(self, card: ReviewCard) -> ReviewCard:
        await self.add_many([card])
        return card

    async def add_many(self, cards: Iterable[ReviewCard]) -> int:
        rows = [_card_to_row(c) for c in cards]
        async with self._connect() as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                for values in rows:
                    cursor = await db.execute("SELECT 1 FROM cards WHERE id = ?", (values[0],))
                    if await cursor.fetchone() is not None:
                        raise DuplicateCardError(values[0])
                    await db.execute(
                        f"INSERT INTO cards ({', '.join(_COLUMNS)}, extra) "  # noqa: S608
                        f"VALUES ({', '.join('?' for _ in range(len(_COLUMNS) + 1))})",
                        values,
                    )
            except BaseException:
                await db.execute("ROLLBACK")
                raise
            await db.execute("COMMIT")
        return len(rows)
