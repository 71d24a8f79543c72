"""
SM-2 review scheduler.

Pure functions over ReviewCard: nothing here touches a store or reads the
clock, callers pass ``now`` explicitly.

Quality scale (learner self-assessment):
  0 - no recall            3 - recalled with serious difficulty
  1 - wrong, recognised    4 - recalled after hesitation
  2 - wrong, seemed easy   5 - perfect recall
"""
from __future__ import annotations

import math
import uuid
from collections.abc import Iterable
from datetime import datetime, timedelta

from accelerator.models.card import (
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    CardStats,
    ReviewCard,
    as_utc,
)

MIN_QUALITY = 0
MAX_QUALITY = 5
PASS_QUALITY = 3
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
MASTERED_INTERVAL = 21  # days


class InvalidRatingError(ValueError):
    """Raised when a quality rating is not an integer in [0, 5]."""

    def __init__(self, quality: object):
        self.quality = quality
        super().__init__(
            f"quality must be an integer between {MIN_QUALITY} and {MAX_QUALITY}, got {quality!r}"
        )


def validate_quality(quality: object) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidRatingError(quality)
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidRatingError(quality)
    return quality


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def next_ease_factor(ease_factor: float, quality: int) -> float:
    miss = MAX_QUALITY - quality
    updated = ease_factor + (0.1 - miss * (0.08 + miss * 0.02))
    return max(updated, MIN_EASE_FACTOR)


def schedule_review(card: ReviewCard, quality: int, now: datetime) -> ReviewCard:
    """
    Apply one SM-2 review to ``card`` and return the updated copy.

    The pass branch keys its interval off the repetition count *before*
    incrementing, which gives the 1-day / 6-day onboarding sequence.
    """
    quality = validate_quality(quality)
    now = as_utc(now)

    if quality < PASS_QUALITY:
        repetitions = 0
        interval = FIRST_INTERVAL
    else:
        if card.repetitions == 0:
            interval = FIRST_INTERVAL
        elif card.repetitions == 1:
            interval = SECOND_INTERVAL
        else:
            interval = _round_half_up(card.interval * card.ease_factor)
        repetitions = card.repetitions + 1

    return card.model_copy(
        update={
            "repetitions": repetitions,
            "interval": interval,
            "ease_factor": next_ease_factor(card.ease_factor, quality),
            # UTC has no DST, so whole days here are calendar days.
            "next_review": now + timedelta(days=interval),
            "last_reviewed": now,
        }
    )


def find_due_cards(cards: Iterable[ReviewCard], now: datetime) -> list[ReviewCard]:
    """Cards never scheduled or scheduled at or before ``now``, in input order."""
    now = as_utc(now)
    return [card for card in cards if card.schedule.is_due(now)]


def new_card(
    front: str,
    back: str,
    now: datetime,
    card_id: str | None = None,
    **extra: object,
) -> ReviewCard:
    return ReviewCard(
        id=card_id or str(uuid.uuid4()),
        front=front,
        back=back,
        repetitions=0,
        interval=0,
        ease_factor=DEFAULT_EASE_FACTOR,
        next_review=now,
        created=now,
        **extra,
    )


def summarize_cards(cards: Iterable[ReviewCard], now: datetime) -> CardStats:
    now = as_utc(now)
    total = due = new = learning = mastered = 0
    for card in cards:
        total += 1
        if card.schedule.is_due(now):
            due += 1
        if card.last_reviewed is None:
            new += 1
        elif card.interval >= MASTERED_INTERVAL:
            mastered += 1
        else:
            learning += 1
    return CardStats(total=total, due=due, new=new, learning=learning, mastered=mastered)
