"""
Flashcard review router.

Endpoints:
  GET  /api/quiz/due              — cards due now (never scheduled or nextReview <= now)
  POST /api/quiz/review           — submit {cardId, quality}, run SM-2, persist
  GET  /api/quiz/cards            — every stored card
  POST /api/quiz/cards            — add a learner-authored card
  GET  /api/quiz/stats            — totals: due / new / learning / mastered
  GET  /api/quiz/cards/{card_id}  — single card
  GET  /api/quiz/{lesson_id}      — authored quiz questions for a lesson
"""
from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException

from accelerator.clock import utcnow
from accelerator.db import (
    CardNotFoundError,
    CardStore,
    ContentRepository,
    DuplicateCardError,
    ProgressStore,
    get_card_store,
    get_content,
    get_progress_store,
)
from accelerator.models.card import (
    CardCreate,
    CardStats,
    ReviewCard,
    ReviewRequest,
    ReviewResponse,
)
from accelerator.models.content import LessonQuiz
from accelerator.scheduler import InvalidRatingError, new_card, summarize_cards
from accelerator.services.review_service import list_due, submit_review

router = APIRouter()


@router.get("/due", response_model=list[ReviewCard])
async def get_due(
    store: CardStore = Depends(get_card_store),
    now: datetime = Depends(utcnow),
) -> list[ReviewCard]:
    return await list_due(store, now)


@router.post("/review", response_model=ReviewResponse)
async def review_card(
    body: ReviewRequest,
    store: CardStore = Depends(get_card_store),
    progress: ProgressStore = Depends(get_progress_store),
    now: datetime = Depends(utcnow),
) -> ReviewResponse:
    try:
        card = await submit_review(store, progress, body.card_id, body.quality, now)
    except InvalidRatingError as e:
        raise HTTPException(status_code=422, detail=f"Invalid rating: {e}") from e
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail="Card not found") from e
    assert card.next_review is not None
    return ReviewResponse(next_review=card.next_review)


@router.get("/cards", response_model=list[ReviewCard])
async def list_cards(store: CardStore = Depends(get_card_store)) -> list[ReviewCard]:
    return await store.list()


@router.post("/cards", response_model=ReviewCard, status_code=201)
async def create_card(
    body: CardCreate,
    store: CardStore = Depends(get_card_store),
    now: datetime = Depends(utcnow),
) -> ReviewCard:
    try:
        return await store.add(new_card(body.front, body.back, now))
    except DuplicateCardError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@router.get("/stats", response_model=CardStats)
async def card_stats(
    store: CardStore = Depends(get_card_store),
    now: datetime = Depends(utcnow),
) -> CardStats:
    return summarize_cards(await store.list(), now)


@router.get("/cards/{card_id}", response_model=ReviewCard)
async def get_card(card_id: str, store: CardStore = Depends(get_card_store)) -> ReviewCard:
    try:
        return await store.get(card_id)
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail="Card not found") from e


@router.get("/{lesson_id}", response_model=LessonQuiz)
async def lesson_quiz(
    lesson_id: str, content: ContentRepository = Depends(get_content)
) -> LessonQuiz:
    return content.lesson_quiz(lesson_id)
