"""
XP, streak and milestone bookkeeping.

All mutations go through ProgressStore.update so the XP award and the
streak bump land in one read-modify-write.
"""
from __future__ import annotations

import logging
from datetime import date, timedelta

from accelerator.db.content import ContentRepository
from accelerator.db.progress import ProgressStore
from accelerator.models.content import Challenge
from accelerator.models.progress import (
    CompletionResult,
    Dashboard,
    LearnerStats,
    Milestone,
    NextChallenge,
    Progress,
    ProgressView,
    TierProgress,
)

logger = logging.getLogger(__name__)

LESSON_XP = 100
TIERS = ("foundation", "intermediate", "advanced")

MILESTONES = [
    Milestone(threshold=100, title="Bronze Learner", emoji="🥉"),
    Milestone(threshold=300, title="Silver Builder", emoji="🥈"),
    Milestone(threshold=600, title="Gold Shipper", emoji="🥇"),
    Milestone(threshold=1000, title="Diamond Maker", emoji="💎"),
]


def check_milestones(xp: int) -> list[Milestone]:
    return [m.model_copy(update={"unlocked": True}) for m in MILESTONES if xp >= m.threshold]


def touch_streak(progress: Progress, today: date) -> Progress:
    """Count consecutive active days; a gap of more than one day restarts at 1."""
    today_iso = today.isoformat()
    if progress.last_active == today_iso:
        return progress
    if progress.last_active == (today - timedelta(days=1)).isoformat():
        streak = progress.streak + 1
    else:
        streak = 1
    return progress.model_copy(update={"streak": streak, "last_active": today_iso})


async def record_activity(store: ProgressStore, today: date) -> Progress:
    return await store.update(lambda p: touch_streak(p, today))


async def _award(
    store: ProgressStore,
    field: str,
    item_id: str,
    xp: int,
    today: date,
) -> tuple[Progress, bool]:
    """Add ``item_id`` to the completed list ``field`` and grant ``xp`` once."""
    awarded = False

    def apply(progress: Progress) -> Progress:
        nonlocal awarded
        completed = getattr(progress, field)
        if item_id in completed:
            return progress
        awarded = True
        total = progress.xp + xp
        progress = progress.model_copy(
            update={
                "xp": total,
                field: [*completed, item_id],
                "milestones": check_milestones(total),
            }
        )
        return touch_streak(progress, today)

    return await store.update(apply), awarded


async def complete_lesson(
    store: ProgressStore,
    content: ContentRepository,
    lesson_id: str,
    today: date,
) -> CompletionResult:
    lesson = content.lesson(lesson_id)
    progress, awarded = await _award(store, "completed_lessons", lesson.id, LESSON_XP, today)
    if awarded:
        logger.info("Lesson %s completed (+%d XP, total %d)", lesson.id, LESSON_XP, progress.xp)
    else:
        logger.info("Lesson %s already completed", lesson.id)

    return CompletionResult(
        message=f"+{LESSON_XP} XP! Total: {progress.xp}" if awarded else "Already completed",
        xp=progress.xp,
        xp_gained=LESSON_XP if awarded else 0,
        streak=progress.streak,
        milestones=check_milestones(progress.xp),
        completed_lessons=len(progress.completed_lessons),
        completed_lesson_ids=progress.completed_lessons,
    )


async def complete_challenge(
    store: ProgressStore,
    content: ContentRepository,
    challenge_id: str,
    today: date,
) -> CompletionResult:
    challenge = content.challenge(challenge_id)
    progress, awarded = await _award(
        store, "completed_skills", challenge.id, challenge.xp, today
    )
    if awarded:
        logger.info("Challenge %s completed (+%d XP)", challenge.id, challenge.xp)

    return CompletionResult(
        message=f"+{challenge.xp} XP! Total: {progress.xp}" if awarded else "Already completed",
        xp=progress.xp,
        xp_gained=challenge.xp if awarded else 0,
        streak=progress.streak,
        milestones=check_milestones(progress.xp),
    )


def with_completion(challenges: list[Challenge], progress: Progress) -> list[Challenge]:
    done = set(progress.completed_skills)
    return [c.model_copy(update={"completed": c.id in done}) for c in challenges]


def build_dashboard(
    progress: Progress, challenges: list[Challenge], cards_due: int
) -> Dashboard:
    done = set(progress.completed_skills)
    upcoming = next((c for c in challenges if c.id not in done), None)
    return Dashboard(
        xp=progress.xp,
        streak=progress.streak,
        cardsdue=cards_due,
        next_challenge=NextChallenge(
            id=upcoming.id, title=upcoming.title, xp=upcoming.xp, time=upcoming.time_estimate
        ) if upcoming else None,
        milestones=check_milestones(progress.xp),
        completed_skills=len(progress.completed_skills),
        total_skills=len(challenges),
    )


def build_progress_view(progress: Progress, challenges: list[Challenge]) -> ProgressView:
    done = set(progress.completed_skills)
    tier_progress = {}
    for tier in TIERS:
        in_tier = [c for c in challenges if c.tier == tier]
        tier_progress[tier] = TierProgress(
            total=len(in_tier),
            completed=sum(1 for c in in_tier if c.id in done),
        )
    return ProgressView(
        **progress.model_dump(exclude={"milestones"}),
        milestones=check_milestones(progress.xp),
        tier_progress=tier_progress,
    )


def build_learner_stats(
    progress: Progress, challenges: list[Challenge], cards_total: int
) -> LearnerStats:
    return LearnerStats(
        total_xp=progress.xp,
        current_streak=progress.streak,
        skills_completed=len(progress.completed_skills),
        total_skills=len(challenges),
        cards_total=cards_total,
        milestones=check_milestones(progress.xp),
    )
