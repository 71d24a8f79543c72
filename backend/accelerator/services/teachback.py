"""
Teach-back: the learner explains a concept in their own words.

Scoring is keyword based. An explanation passes when it is long enough,
gives an example and names a practical use; a pass counts as activity
for the streak.
"""
from __future__ import annotations

import logging
from datetime import date

from accelerator.db.progress import ProgressStore
from accelerator.models.progress import TeachBackResult, TeachBackScore
from accelerator.services.gamification import record_activity

logger = logging.getLogger(__name__)

MIN_EXPLANATION_LENGTH = 200  # characters
EXAMPLE_MARKERS = ("example", "for instance")
USE_CASE_MARKERS = ("use", "practical")

PASS_FEEDBACK = "✅ Good explanation! You clearly understand this concept."
FAIL_FEEDBACK = "❌ Needs more detail. Add a real-world example and practical use case."


def score_explanation(explanation: str) -> TeachBackScore:
    text = explanation.lower()
    long_enough = len(explanation) >= MIN_EXPLANATION_LENGTH
    has_example = any(marker in text for marker in EXAMPLE_MARKERS)
    has_use_case = any(marker in text for marker in USE_CASE_MARKERS)
    return TeachBackScore(
        length=long_enough,
        has_example=has_example,
        has_use_case=has_use_case,
        overall=long_enough and has_example and has_use_case,
    )


async def submit_teachback(
    store: ProgressStore, concept: str, explanation: str, today: date
) -> TeachBackResult:
    score = score_explanation(explanation)
    logger.info("Teach-back on %r: passed=%s (%d chars)", concept, score.overall, len(explanation))
    if score.overall:
        await record_activity(store, today)
    return TeachBackResult(
        score=score,
        feedback=PASS_FEEDBACK if score.overall else FAIL_FEEDBACK,
        passed=score.overall,
    )
