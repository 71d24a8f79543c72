import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from accelerator import create_app
from accelerator.clock import utcnow
from accelerator.config import Settings
from accelerator.models.card import ReviewCard

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)

LESSONS = [
    {"id": "lesson-1", "level": 1, "title": "Tokens and embeddings"},
    {"id": "lesson-2", "level": 2, "title": "Attention"},
]
MORE_LESSONS = [{"id": "lesson-6", "level": 6, "title": "Transformer blocks"}]
CHALLENGES = [
    {"id": "ch-1", "title": "Build a tokenizer", "xp": 50, "timeEstimate": "1h", "tier": "foundation"},
    {"id": "ch-2", "title": "Train a bigram model", "xp": 150, "timeEstimate": "3h", "tier": "intermediate"},
    {"id": "ch-3", "title": "Ship a GPT", "xp": 400, "timeEstimate": "2d", "tier": "advanced"},
]
FLASHCARDS = {
    "cards": [
        {"id": "card-1", "front": "What is a token?", "back": "A unit of text", "category": "basics"},
        {"id": "card-2", "front": "What does softmax do?", "back": "Normalizes scores"},
    ],
    "stats": {"total": 2, "mastered": 0, "learning": 0, "new": 2},
}
QUIZZES = [
    {"lessonId": "lesson-1", "inLessonQuizzes": [{"q": "1+1?"}], "finalQuiz": {"questions": []}},
]
EXERCISES = [{"lessonId": "lesson-1", "exercises": [{"id": "ex-1", "prompt": "print tokens"}]}]


def make_card(**overrides) -> ReviewCard:
    fields = {
        "id": "c1",
        "front": "front",
        "back": "back",
        "repetitions": 0,
        "interval": 0,
        "ease_factor": 2.5,
        "next_review": NOW,
        "created": NOW - timedelta(days=30),
    }
    fields.update(overrides)
    return ReviewCard(**fields)


def write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


@pytest.fixture
def content_dir(tmp_path):
    root = tmp_path / "static"
    write_json(root / "lesson-content.json", LESSONS)
    write_json(root / "lessons-6-10.json", MORE_LESSONS)
    write_json(root / "manning-challenges.json", CHALLENGES)
    write_json(root / "flashcards.json", FLASHCARDS)
    write_json(root / "quiz-questions.json", QUIZZES)
    write_json(root / "code-exercises.json", EXERCISES)
    return root


@pytest.fixture
def cfg(tmp_path, content_dir):
    return Settings(
        data_dir=tmp_path / "runtime",
        content_dir=content_dir,
        store_backend="json",
    )


@pytest.fixture
def quiz_file(cfg):
    """A persisted quiz state with one card in each scheduling situation."""
    cards = [
        make_card(id="due-past", next_review=NOW - timedelta(days=2), repetitions=2, interval=6),
        make_card(id="due-now", next_review=NOW),
        make_card(id="later", next_review=NOW + timedelta(days=1), repetitions=1, interval=1),
        make_card(id="never", next_review=None),
    ]
    path = cfg.data_dir / cfg.quiz_filename
    write_json(path, {"cards": [c.to_record() for c in cards], "stats": FLASHCARDS["stats"]})
    return path


@pytest.fixture
def client(cfg, quiz_file):
    app = create_app(cfg)
    app.dependency_overrides[utcnow] = lambda: NOW
    with TestClient(app) as c:
        yield c
