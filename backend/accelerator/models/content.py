from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field

from accelerator.models.card import CamelModel


class Lesson(CamelModel):
    model_config = ConfigDict(extra="allow")

    id: str
    title: str = ""
    level: int | None = None


class Challenge(CamelModel):
    model_config = ConfigDict(extra="allow")

    id: str
    title: str = ""
    xp: int = 0
    time_estimate: str | int | None = None
    tier: str | None = None
    completed: bool = False


class LessonQuiz(CamelModel):
    model_config = ConfigDict(extra="allow")

    lesson_id: str | None = None
    in_lesson_quizzes: list[Any] = Field(default_factory=list)
    final_quiz: Any | None = None


class LessonExercises(CamelModel):
    model_config = ConfigDict(extra="allow")

    lesson_id: str | None = None
    exercises: list[Any] = Field(default_factory=list)
