from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from accelerator.db.errors import PersistenceError
from accelerator.db.jsonfile import read_json, write_json
from accelerator.models.progress import Progress


class ProgressStore:
    """The learner's progress document (single user, so a single file)."""

    def __init__(self, path: Path):
        self.path = path
        self._lock = asyncio.Lock()

    async def init(self) -> None:
        if not self.path.exists():
            await asyncio.to_thread(write_json, self.path, Progress().model_dump(mode="json", by_alias=True))

    async def _load(self) -> Progress:
        if not self.path.exists():
            return Progress()
        raw = await asyncio.to_thread(read_json, self.path)
        try:
            return Progress.model_validate(raw)
        except ValidationError as e:
            raise PersistenceError(f"Malformed {self.path.name}: {e}") from e

    async def read(self) -> Progress:
        async with self._lock:
            return await self._load()

    async def update(self, fn: Callable[[Progress], Progress]) -> Progress:
        async with self._lock:
            updated = fn(await self._load())
            await asyncio.to_thread(
                write_json, self.path, updated.model_dump(mode="json", by_alias=True)
            )
            return updated
