from __future__ import annotations

import logging
from datetime import datetime

from accelerator.db.base import CardStore
from accelerator.db.errors import PersistenceError
from accelerator.db.progress import ProgressStore
from accelerator.models.card import ReviewCard
from accelerator.scheduler import find_due_cards, schedule_review, validate_quality
from accelerator.services.gamification import record_activity

logger = logging.getLogger(__name__)


async def submit_review(
    cards: CardStore,
    progress: ProgressStore,
    card_id: str,
    quality: int,
    now: datetime,
) -> ReviewCard:
    """
    Apply one review to a stored card and persist it.

    The rating is validated before the store is touched, so a rejected
    rating never rewrites anything. A failed card write leaves the previous
    card state in place and the call can be retried. Once the card is
    committed the review has happened; the streak bump after it is
    best-effort and never fails the request.
    """
    validate_quality(quality)
    updated = await cards.update(card_id, lambda card: schedule_review(card, quality, now))
    logger.info(
        "Card %s reviewed (q=%d): interval=%dd reps=%d ease=%.2f",
        card_id, quality, updated.interval, updated.repetitions, updated.ease_factor,
    )

    try:
        await record_activity(progress, now.date())
    except PersistenceError as e:
        logger.warning("Streak update failed after reviewing %s: %s", card_id, e)

    return updated


async def list_due(cards: CardStore, now: datetime) -> list[ReviewCard]:
    return find_due_cards(await cards.list(), now)
