"""
Gamification endpoints: challenges, dashboard summary, progress view,
learner stats and teach-back submissions.
"""
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Response

from accelerator.clock import utcnow
from accelerator.db import (
    CardStore,
    ContentNotFoundError,
    ContentRepository,
    ProgressStore,
    get_card_store,
    get_content,
    get_progress_store,
)
from accelerator.models.content import Challenge
from accelerator.models.progress import (
    CompletionResult,
    Dashboard,
    LearnerStats,
    ProgressView,
    TeachBackRequest,
    TeachBackResult,
)
from accelerator.services.gamification import (
    build_dashboard,
    build_learner_stats,
    build_progress_view,
    complete_challenge,
    with_completion,
)
from accelerator.services.review_service import list_due
from accelerator.services.teachback import submit_teachback

router = APIRouter()

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, private",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get("/challenges", response_model=list[Challenge])
async def list_challenges(
    content: ContentRepository = Depends(get_content),
    progress: ProgressStore = Depends(get_progress_store),
) -> list[Challenge]:
    return with_completion(content.challenges(), await progress.read())


@router.get("/challenges/{challenge_id}", response_model=Challenge)
async def get_challenge(
    challenge_id: str,
    content: ContentRepository = Depends(get_content),
    progress: ProgressStore = Depends(get_progress_store),
) -> Challenge:
    try:
        challenge = content.challenge(challenge_id)
    except ContentNotFoundError as e:
        raise HTTPException(status_code=404, detail="Challenge not found") from e
    return with_completion([challenge], await progress.read())[0]


@router.post("/challenges/{challenge_id}/complete", response_model=CompletionResult)
async def finish_challenge(
    challenge_id: str,
    content: ContentRepository = Depends(get_content),
    progress: ProgressStore = Depends(get_progress_store),
    now: datetime = Depends(utcnow),
) -> CompletionResult:
    try:
        return await complete_challenge(progress, content, challenge_id, now.date())
    except ContentNotFoundError as e:
        raise HTTPException(status_code=404, detail="Challenge not found") from e


@router.get("/dashboard", response_model=Dashboard)
async def dashboard(
    content: ContentRepository = Depends(get_content),
    progress: ProgressStore = Depends(get_progress_store),
    cards: CardStore = Depends(get_card_store),
    now: datetime = Depends(utcnow),
) -> Dashboard:
    due = await list_due(cards, now)
    return build_dashboard(await progress.read(), content.challenges(), len(due))


@router.get("/progress", response_model=ProgressView)
async def get_progress(
    response: Response,
    content: ContentRepository = Depends(get_content),
    progress: ProgressStore = Depends(get_progress_store),
) -> ProgressView:
    # Stale progress on mobile browsers otherwise
    response.headers.update(NO_CACHE_HEADERS)
    return build_progress_view(await progress.read(), content.challenges())


@router.get("/stats", response_model=LearnerStats)
async def learner_stats(
    content: ContentRepository = Depends(get_content),
    progress: ProgressStore = Depends(get_progress_store),
    cards: CardStore = Depends(get_card_store),
) -> LearnerStats:
    return build_learner_stats(await progress.read(), content.challenges(), await cards.count())


@router.post("/teachback/submit", response_model=TeachBackResult)
async def teachback(
    body: TeachBackRequest,
    progress: ProgressStore = Depends(get_progress_store),
    now: datetime = Depends(utcnow),
) -> TeachBackResult:
    return await submit_teachback(progress, body.concept, body.explanation, now.date())
