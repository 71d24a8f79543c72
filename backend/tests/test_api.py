"""
HTTP API tests against a TestClient with the clock pinned to NOW.
"""
import json
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from accelerator import create_app
from accelerator.clock import utcnow
from conftest import NOW, write_json


def parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class TestHealth:
    def test_health(self, client):
        res = client.get("/health")

        assert res.status_code == 200
        assert res.json()["status"] == "ok"
        assert res.json()["environment"] == "development"

    def test_health_degraded_when_files_missing(self, client, cfg):
        (cfg.data_dir / cfg.progress_filename).unlink()

        res = client.get("/health")

        assert res.status_code == 500
        assert res.json()["status"] == "degraded"
        assert res.json()["missingFiles"] == [{"file": "progress.json", "exists": False}]


class TestQuizApi:
    def test_due_cards(self, client):
        res = client.get("/api/quiz/due")

        assert res.status_code == 200
        assert [c["id"] for c in res.json()] == ["due-past", "due-now", "never"]

    def test_due_cards_use_persisted_field_names(self, client):
        card = client.get("/api/quiz/due").json()[0]

        assert {"id", "front", "back", "repetitions", "interval", "easeFactor",
                "nextReview", "lastReviewed", "created"} <= set(card)

    def test_review_updates_card(self, client):
        res = client.post("/api/quiz/review", json={"cardId": "due-past", "quality": 5})

        assert res.status_code == 200
        body = res.json()
        assert body["message"] == "Review recorded"
        assert parse_ts(body["nextReview"]) == NOW + timedelta(days=15)

        card = client.get("/api/quiz/cards/due-past").json()
        assert card["repetitions"] == 3
        assert card["interval"] == 15
        assert card["easeFactor"] == pytest.approx(2.6)
        assert parse_ts(card["lastReviewed"]) == NOW

    def test_reviewed_card_leaves_due_list(self, client):
        client.post("/api/quiz/review", json={"cardId": "never", "quality": 4})

        assert "never" not in [c["id"] for c in client.get("/api/quiz/due").json()]

    def test_review_unknown_card(self, client):
        res = client.post("/api/quiz/review", json={"cardId": "missing", "quality": 3})

        assert res.status_code == 404
        assert res.json()["detail"] == "Card not found"

    @pytest.mark.parametrize("quality", [6, -1])
    def test_invalid_rating_leaves_file_untouched(self, client, quiz_file, quality):
        before = quiz_file.read_bytes()

        res = client.post("/api/quiz/review", json={"cardId": "due-now", "quality": quality})

        assert res.status_code == 422
        assert res.json()["detail"].startswith("Invalid rating")
        assert quiz_file.read_bytes() == before

    @pytest.mark.parametrize("quality", [True, "4", 3.0])
    def test_non_integer_rating_rejected(self, client, quiz_file, quality):
        before = quiz_file.read_bytes()

        res = client.post("/api/quiz/review", json={"cardId": "due-now", "quality": quality})

        assert res.status_code == 422
        assert quiz_file.read_bytes() == before

    def test_review_bumps_streak(self, client, cfg):
        client.post("/api/quiz/review", json={"cardId": "due-now", "quality": 4})

        progress = json.loads((cfg.data_dir / cfg.progress_filename).read_text())
        assert progress["streak"] == 1
        assert progress["lastActive"] == NOW.date().isoformat()

    def test_streak_failure_does_not_fail_review(self, client, cfg):
        progress_file = cfg.data_dir / cfg.progress_filename
        progress_file.write_text("{broken")

        res = client.post("/api/quiz/review", json={"cardId": "due-past", "quality": 5})

        assert res.status_code == 200
        assert client.get("/api/quiz/cards/due-past").json()["repetitions"] == 3
        assert progress_file.read_text() == "{broken"

    def test_create_and_list_cards(self, client):
        res = client.post("/api/quiz/cards", json={"front": "Q?", "back": "A."})

        assert res.status_code == 201
        created = res.json()
        assert created["repetitions"] == 0
        assert created["interval"] == 0
        assert created["easeFactor"] == 2.5
        assert parse_ts(created["nextReview"]) == NOW

        listing = client.get("/api/quiz/cards").json()
        assert len(listing) == 5
        assert listing[-1]["id"] == created["id"]

    def test_get_unknown_card(self, client):
        assert client.get("/api/quiz/cards/missing").status_code == 404

    def test_stats(self, client):
        stats = client.get("/api/quiz/stats").json()

        assert stats["total"] == 4
        assert stats["due"] == 3

    def test_lesson_quiz(self, client):
        quiz = client.get("/api/quiz/lesson-1").json()

        assert quiz["lessonId"] == "lesson-1"
        assert quiz["inLessonQuizzes"] == [{"q": "1+1?"}]

    def test_lesson_quiz_missing(self, client):
        quiz = client.get("/api/quiz/lesson-2").json()

        assert quiz["inLessonQuizzes"] == []
        assert quiz["finalQuiz"] is None


class TestLessonsApi:
    def test_lessons_span_files(self, client):
        ids = [lesson["id"] for lesson in client.get("/api/lessons").json()]

        assert ids == ["lesson-1", "lesson-2", "lesson-6"]

    def test_lesson_detail(self, client):
        assert client.get("/api/lessons/lesson-2").json()["title"] == "Attention"
        assert client.get("/api/lessons/nope").status_code == 404

    def test_complete_lesson(self, client):
        first = client.post("/api/lessons/lesson-1/complete").json()
        again = client.post("/api/lessons/lesson-1/complete").json()

        assert first["xp"] == 100
        assert first["xpGained"] == 100
        assert first["completedLessonIds"] == ["lesson-1"]
        assert again["message"] == "Already completed"
        assert again["xp"] == 100

    def test_complete_unknown_lesson(self, client):
        assert client.post("/api/lessons/nope/complete").status_code == 404

    def test_code_exercises(self, client):
        assert client.get("/api/code-exercises/lesson-1").json()["exercises"][0]["id"] == "ex-1"
        assert client.get("/api/code-exercises/lesson-2").json()["exercises"] == []

    def test_malformed_lesson_is_storage_failure(self, client, content_dir):
        write_json(content_dir / "lesson-content.json", [{"id": "lesson-1", "level": "first"}])

        res = client.get("/api/lessons")

        assert res.status_code == 500
        assert res.json()["error"] == "Storage failure"
        assert "lesson-content.json" in res.json()["details"]


class TestProgressApi:
    def test_challenges_and_completion(self, client):
        res = client.post("/api/challenges/ch-1/complete")

        assert res.json()["xpGained"] == 50
        flags = {c["id"]: c["completed"] for c in client.get("/api/challenges").json()}
        assert flags == {"ch-1": True, "ch-2": False, "ch-3": False}

    def test_complete_unknown_challenge(self, client):
        assert client.post("/api/challenges/nope/complete").status_code == 404

    def test_dashboard(self, client):
        client.post("/api/challenges/ch-1/complete")

        dash = client.get("/api/dashboard").json()

        assert dash["xp"] == 50
        assert dash["streak"] == 1
        assert dash["cardsdue"] == 3
        assert dash["nextChallenge"]["id"] == "ch-2"
        assert dash["completedSkills"] == 1
        assert dash["totalSkills"] == 3

    def test_progress_view(self, client):
        client.post("/api/lessons/lesson-1/complete")

        res = client.get("/api/progress")

        assert res.headers["cache-control"].startswith("no-store")
        body = res.json()
        assert body["completedLessons"] == ["lesson-1"]
        assert body["tierProgress"]["foundation"] == {"total": 1, "completed": 0}
        assert [m["title"] for m in body["milestones"]] == ["Bronze Learner"]

    def test_challenge_detail(self, client):
        client.post("/api/challenges/ch-2/complete")

        challenge = client.get("/api/challenges/ch-2").json()

        assert challenge["title"] == "Train a bigram model"
        assert challenge["completed"] is True
        assert client.get("/api/challenges/nope").status_code == 404

    def test_learner_stats(self, client):
        client.post("/api/challenges/ch-1/complete")

        stats = client.get("/api/stats").json()

        assert stats == {
            "totalXP": 50,
            "currentStreak": 1,
            "skillsCompleted": 1,
            "totalSkills": 3,
            "cardsTotal": 4,
            "milestones": [],
        }

    def test_teachback_pass_bumps_streak(self, client):
        explanation = (
            "Attention lets every token weigh all the other tokens in the sequence. "
            "For example, in \"the cat sat because it was tired\" the word it attends to cat. "
            "In practice we use attention to build translation and summarization models."
        )

        res = client.post(
            "/api/teachback/submit", json={"concept": "attention", "explanation": explanation}
        ).json()

        assert res["passed"] is True
        assert res["score"] == {
            "length": True, "hasExample": True, "hasUseCase": True, "overall": True,
        }
        assert client.get("/api/stats").json()["currentStreak"] == 1

    def test_teachback_short_answer_fails(self, client):
        res = client.post(
            "/api/teachback/submit", json={"concept": "attention", "explanation": "It is useful."}
        ).json()

        assert res["passed"] is False
        assert res["score"]["length"] is False
        assert res["feedback"].startswith("❌")
        assert client.get("/api/stats").json()["currentStreak"] == 0


class TestStartup:
    def test_seeds_from_flashcards_on_first_start(self, cfg):
        app = create_app(cfg)
        app.dependency_overrides[utcnow] = lambda: NOW + timedelta(days=3650)
        with TestClient(app) as c:
            due = c.get("/api/quiz/due").json()

        assert [card["id"] for card in due] == ["card-1", "card-2"]
        assert (cfg.data_dir / cfg.progress_filename).exists()

    def test_sqlite_backend(self, cfg):
        app = create_app(cfg.model_copy(update={"store_backend": "sqlite"}))
        app.dependency_overrides[utcnow] = lambda: NOW + timedelta(days=3650)
        with TestClient(app) as c:
            res = c.post("/api/quiz/review", json={"cardId": "card-1", "quality": 5})
            card = c.get("/api/quiz/cards/card-1").json()

        assert res.status_code == 200
        assert card["repetitions"] == 1
        assert card["interval"] == 1
        assert card["category"] == "basics"

    def test_corrupt_store_fails_startup(self, cfg):
        path = cfg.data_dir / cfg.quiz_filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("{broken")
        app = create_app(cfg)

        with pytest.raises(Exception):
            with TestClient(app):
                pass

    def test_persistence_error_mid_request(self, cfg, quiz_file):
        app = create_app(cfg)
        with TestClient(app) as c:
            quiz_file.write_text("{broken")
            res = c.get("/api/quiz/due")

        assert res.status_code == 500
        assert res.json()["error"] == "Storage failure"
        assert "details" in res.json()
