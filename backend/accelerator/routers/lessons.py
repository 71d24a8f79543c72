from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException

from accelerator.clock import utcnow
from accelerator.db import (
    ContentNotFoundError,
    ContentRepository,
    ProgressStore,
    get_content,
    get_progress_store,
)
from accelerator.models.content import Lesson, LessonExercises
from accelerator.models.progress import CompletionResult
from accelerator.services.gamification import complete_lesson

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/lessons", response_model=list[Lesson])
async def list_lessons(content: ContentRepository = Depends(get_content)) -> list[Lesson]:
    lessons = content.lessons()
    if not lessons:
        logger.error("No lessons found in %s", content.content_dir)
        raise HTTPException(status_code=404, detail="No lesson content found")
    return lessons


@router.get("/lessons/{lesson_id}", response_model=Lesson)
async def get_lesson(lesson_id: str, content: ContentRepository = Depends(get_content)) -> Lesson:
    try:
        return content.lesson(lesson_id)
    except ContentNotFoundError as e:
        raise HTTPException(status_code=404, detail="Lesson not found") from e


@router.post("/lessons/{lesson_id}/complete", response_model=CompletionResult)
async def finish_lesson(
    lesson_id: str,
    content: ContentRepository = Depends(get_content),
    progress: ProgressStore = Depends(get_progress_store),
    now: datetime = Depends(utcnow),
) -> CompletionResult:
    try:
        return await complete_lesson(progress, content, lesson_id, now.date())
    except ContentNotFoundError as e:
        raise HTTPException(status_code=404, detail="Lesson not found") from e


@router.get("/code-exercises/{lesson_id}", response_model=LessonExercises)
async def lesson_exercises(
    lesson_id: str, content: ContentRepository = Depends(get_content)
) -> LessonExercises:
    return content.code_exercises(lesson_id)
