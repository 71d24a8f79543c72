from accelerator.models.card import (
    CardCreate,
    CardStats,
    ReviewCard,
    ReviewRequest,
    ReviewResponse,
    Schedule,
    ScheduledFor,
    Unscheduled,
)
from accelerator.models.content import Challenge, Lesson, LessonExercises, LessonQuiz
from accelerator.models.progress import (
    CompletionResult,
    Dashboard,
    LearnerStats,
    Milestone,
    NextChallenge,
    Progress,
    ProgressView,
    TeachBackRequest,
    TeachBackResult,
    TeachBackScore,
    TierProgress,
)

__all__ = [
    "CardCreate",
    "CardStats",
    "Challenge",
    "CompletionResult",
    "Dashboard",
    "LearnerStats",
    "Lesson",
    "LessonExercises",
    "LessonQuiz",
    "Milestone",
    "NextChallenge",
    "Progress",
    "ProgressView",
    "ReviewCard",
    "ReviewRequest",
    "ReviewResponse",
    "Schedule",
    "ScheduledFor",
    "TeachBackRequest",
    "TeachBackResult",
    "TeachBackScore",
    "TierProgress",
    "Unscheduled",
]
