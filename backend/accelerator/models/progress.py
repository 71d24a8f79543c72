from __future__ import annotations

from pydantic import BaseModel, Field

from accelerator.models.card import CamelModel


class Milestone(CamelModel):
    threshold: int
    title: str
    emoji: str
    unlocked: bool = True


class Progress(CamelModel):
    xp: int = 0
    streak: int = 0
    last_active: str | None = None  # ISO date (YYYY-MM-DD)
    completed_skills: list[str] = Field(default_factory=list)
    completed_lessons: list[str] = Field(default_factory=list)
    milestones: list[Milestone] = Field(default_factory=list)


class CompletionResult(CamelModel):
    message: str
    xp: int
    xp_gained: int = 0
    streak: int
    milestones: list[Milestone] = Field(default_factory=list)
    completed_lessons: int | None = None
    completed_lesson_ids: list[str] | None = None


class NextChallenge(CamelModel):
    id: str
    title: str
    xp: int
    time: str | int | None = None


class Dashboard(CamelModel):
    xp: int
    streak: int
    cardsdue: int
    next_challenge: NextChallenge | None
    milestones: list[Milestone]
    completed_skills: int
    total_skills: int


class TierProgress(CamelModel):
    total: int
    completed: int


class ProgressView(Progress):
    tier_progress: dict[str, TierProgress]


class LearnerStats(CamelModel):
    total_xp: int = Field(alias="totalXP")
    current_streak: int
    skills_completed: int
    total_skills: int
    cards_total: int
    milestones: list[Milestone]


class TeachBackRequest(BaseModel):
    concept: str
    explanation: str


class TeachBackScore(CamelModel):
    length: bool
    has_example: bool
    has_use_case: bool
    overall: bool


class TeachBackResult(CamelModel):
    score: TeachBackScore
    feedback: str
    passed: bool
