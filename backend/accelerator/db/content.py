"""
Read-only lesson content: lessons, challenges, flashcard seeds, lesson
quizzes and code exercises, each a JSON file under the content directory.

Files are re-read on every lookup so edited content shows up without a
restart. Missing files yield empty collections; unparseable files raise
PersistenceError.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from accelerator.db.errors import ContentNotFoundError, PersistenceError
from accelerator.db.jsonfile import read_json
from accelerator.models.content import Challenge, Lesson, LessonExercises, LessonQuiz

logger = logging.getLogger(__name__)

CHALLENGES_FILE = "manning-challenges.json"
FLASHCARDS_FILE = "flashcards.json"
QUIZ_QUESTIONS_FILE = "quiz-questions.json"
CODE_EXERCISES_FILE = "code-exercises.json"

M = TypeVar("M", bound=BaseModel)


def _parse(model: type[M], record: Any, filename: str) -> M:
    try:
        return model.model_validate(record)
    except ValidationError as e:
        raise PersistenceError(f"Malformed record in {filename}: {e}") from e


class ContentRepository:
    def __init__(self, content_dir: Path, lesson_files: list[str]):
        self.content_dir = content_dir
        self.lesson_files = lesson_files

    def _read_list(self, filename: str) -> list[Any]:
        path = self.content_dir / filename
        if not path.exists():
            return []
        data = read_json(path)
        if not isinstance(data, list):
            raise PersistenceError(f"{filename} must contain a JSON array")
        return data

    def missing_files(self) -> list[str]:
        required = [self.lesson_files[0]] if self.lesson_files else []
        required.append(FLASHCARDS_FILE)
        return [f for f in required if not (self.content_dir / f).exists()]

    # --- Lessons ---

    def lessons(self) -> list[Lesson]:
        lessons: list[Lesson] = []
        for filename in self.lesson_files:
            lessons.extend(_parse(Lesson, r, filename) for r in self._read_list(filename))
        return lessons

    def lesson(self, lesson_id: str) -> Lesson:
        for lesson in self.lessons():
            if lesson.id == lesson_id:
                return lesson
        raise ContentNotFoundError("lesson", lesson_id)

    # --- Challenges ---

    def challenges(self) -> list[Challenge]:
        return [_parse(Challenge, r, CHALLENGES_FILE) for r in self._read_list(CHALLENGES_FILE)]

    def challenge(self, challenge_id: str) -> Challenge:
        for challenge in self.challenges():
            if challenge.id == challenge_id:
                return challenge
        raise ContentNotFoundError("challenge", challenge_id)

    # --- Per-lesson material ---

    def lesson_quiz(self, lesson_id: str) -> LessonQuiz:
        for record in self._read_list(QUIZ_QUESTIONS_FILE):
            if isinstance(record, dict) and record.get("lessonId") == lesson_id:
                return _parse(LessonQuiz, record, QUIZ_QUESTIONS_FILE)
        logger.info("No quiz found for lesson %s", lesson_id)
        return LessonQuiz()

    def code_exercises(self, lesson_id: str) -> LessonExercises:
        for record in self._read_list(CODE_EXERCISES_FILE):
            if isinstance(record, dict) and record.get("lessonId") == lesson_id:
                return _parse(LessonExercises, record, CODE_EXERCISES_FILE)
        logger.info("No code exercises found for lesson %s", lesson_id)
        return LessonExercises()

    # --- Flashcard seeds ---

    def seed_flashcards(self) -> list[dict[str, Any]]:
        path = self.content_dir / FLASHCARDS_FILE
        if not path.exists():
            return []
        data = read_json(path)
        cards = data.get("cards") if isinstance(data, dict) else data
        if not isinstance(cards, list):
            raise PersistenceError(f"{FLASHCARDS_FILE} has no cards list")
        return [c for c in cards if isinstance(c, dict)]
