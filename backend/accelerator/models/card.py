from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3


def as_utc(value: datetime) -> datetime:
    """Naive timestamps on disk were written as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class Unscheduled:
    """A card that has never been given a review date; always due."""

    def is_due(self, now: datetime) -> bool:
        return True


@dataclass(frozen=True)
class ScheduledFor:
    at: datetime

    def is_due(self, now: datetime) -> bool:
        return self.at <= now


Schedule = Unscheduled | ScheduledFor


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReviewCard(CamelModel):
    model_config = ConfigDict(extra="allow")  # seeded content carries extra keys

    id: str
    front: str = ""
    back: str = ""
    repetitions: int = Field(default=0, ge=0)
    interval: int = Field(default=0, ge=0)  # days
    ease_factor: float = Field(default=DEFAULT_EASE_FACTOR, ge=MIN_EASE_FACTOR)
    next_review: datetime | None = None
    last_reviewed: datetime | None = None
    created: datetime

    @field_validator("next_review", "last_reviewed", "created")
    @classmethod
    def _normalize_tz(cls, value: datetime | None) -> datetime | None:
        return as_utc(value) if value is not None else None

    @property
    def schedule(self) -> Schedule:
        if self.next_review is None:
            return Unscheduled()
        return ScheduledFor(self.next_review)

    def to_record(self) -> dict:
        """Serialize with the persisted camelCase field names."""
        return self.model_dump(mode="json", by_alias=True)


class CardCreate(BaseModel):
    front: str
    back: str


class CardStats(BaseModel):
    total: int
    due: int
    new: int
    learning: int
    mastered: int


class ReviewRequest(CamelModel):
    card_id: str
    # strict: JSON true, "4" and 3.0 are not ratings
    quality: int = Field(strict=True)


class ReviewResponse(CamelModel):
    message: str = "Review recorded"
    next_review: datetime
