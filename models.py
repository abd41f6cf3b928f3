"""
Record types for profiles, daily activities, courses and quizzes.

Stores build these from DB rows via ``from_row``; blueprints serialize them
with ``to_dict``. Booleans are stored as 0/1 integers and JSON columns as text.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, asdict
from typing import Any, Optional

from points import level_info, progress_percentage


def _json(value: Any, default: Any) -> Any:
    if value is None or value == "":
        return default
    if isinstance(value, (list, dict)):
        return value
    return json.loads(value)


@dataclass
class UserProfile:
    id: int
    user_id: int
    total_points: int = 0
    completed_days: int = 0
    current_level: str = "seedling"
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, r) -> UserProfile:
        return cls(
            id=r["id"],
            user_id=r["user_id"],
            total_points=r["total_points"],
            completed_days=r["completed_days"],
            current_level=r["current_level"],
            created_at=r["created_at"],
            updated_at=r["updated_at"],
        )

    @property
    def progress_percentage(self) -> int:
        return progress_percentage(self.completed_days)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["progress_percentage"] = self.progress_percentage
        d["level_info"] = level_info(self.total_points)
        return d


@dataclass
class DailyActivity:
    id: int
    user_id: int
    activity_date: str
    photos_count: int = 0
    video_completed: bool = False
    editing_completed: bool = False
    editing_time_minutes: int = 0
    comments: str = ""
    points_earned: int = 0
    is_complete: bool = False
    created_at: str = ""

    @classmethod
    def from_row(cls, r) -> DailyActivity:
        return cls(
            id=r["id"],
            user_id=r["user_id"],
            activity_date=r["activity_date"],
            photos_count=r["photos_count"],
            video_completed=bool(r["video_completed"]),
            editing_completed=bool(r["editing_completed"]),
            editing_time_minutes=r["editing_time_minutes"],
            comments=r["comments"],
            points_earned=r["points_earned"],
            is_complete=bool(r["is_complete"]),
            created_at=r["created_at"],
        )

    def to_dict(self) -> dict:
        return asdict(self)


# ── Courses ──────────────────────────────────────────────────────────


@dataclass
class Course:
    id: int
    title: str
    description: str = ""
    category: str = "photography"  # audiovisual | photography | video_editing
    difficulty: str = "beginner"   # beginner | intermediate | advanced
    estimated_duration_minutes: int = 0
    points_reward: int = 0
    order_index: int = 0
    is_published: bool = True
    created_at: str = ""

    @classmethod
    def from_row(cls, r) -> Course:
        return cls(
            id=r["id"],
            title=r["title"],
            description=r["description"],
            category=r["category"],
            difficulty=r["difficulty"],
            estimated_duration_minutes=r["estimated_duration_minutes"],
            points_reward=r["points_reward"],
            order_index=r["order_index"],
            is_published=bool(r["is_published"]),
            created_at=r["created_at"],
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CourseContent:
    id: int
    course_id: int
    title: str
    content_type: str = "text"  # text | video | image | exercise
    content: str = ""
    order_index: int = 0
    created_at: str = ""

    @classmethod
    def from_row(cls, r) -> CourseContent:
        return cls(**{k: r[k] for k in (
            "id", "course_id", "title", "content_type", "content", "order_index", "created_at",
        )})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CourseProgress:
    id: int
    user_id: int
    course_id: int
    progress_percentage: int = 0
    started_at: str = ""
    completed_at: Optional[str] = None
    last_accessed_at: str = ""

    @classmethod
    def from_row(cls, r) -> CourseProgress:
        return cls(
            id=r["id"],
            user_id=r["user_id"],
            course_id=r["course_id"],
            progress_percentage=r["progress_percentage"],
            started_at=r["started_at"],
            completed_at=r["completed_at"] or None,
            last_accessed_at=r["last_accessed_at"],
        )

    @property
    def is_completed(self) -> bool:
        return self.progress_percentage >= 100

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CourseWeek:
    id: int
    course_id: int
    week_number: int
    title: str
    description: str = ""
    order_index: int = 0

    @classmethod
    def from_row(cls, r) -> CourseWeek:
        return cls(**{k: r[k] for k in (
            "id", "course_id", "week_number", "title", "description", "order_index",
        )})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CourseActivity:
    id: int
    week_id: int
    title: str
    description: str = ""
    activity_type: str = "lecture"  # lecture | video | quiz | exercise
    day_number: int = 1
    estimated_duration_minutes: int = 0
    xp_reward: int = 0
    order_index: int = 0

    @classmethod
    def from_row(cls, r) -> CourseActivity:
        return cls(**{k: r[k] for k in (
            "id", "week_id", "title", "description", "activity_type", "day_number",
            "estimated_duration_minutes", "xp_reward", "order_index",
        )})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class CourseProject:
    id: int
    course_id: int
    title: str
    description: str = ""
    instructions: str = ""

    @classmethod
    def from_row(cls, r) -> CourseProject:
        return cls(**{k: r[k] for k in ("id", "course_id", "title", "description", "instructions")})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ProjectCriterion:
    id: int
    project_id: int
    criterion: str
    description: str = ""
    max_points: int = 0
    order_index: int = 0

    @classmethod
    def from_row(cls, r) -> ProjectCriterion:
        return cls(**{k: r[k] for k in (
            "id", "project_id", "criterion", "description", "max_points", "order_index",
        )})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ActivityCompletion:
    id: int
    user_id: int
    activity_id: int
    completed: bool = False
    completed_at: Optional[str] = None

    @classmethod
    def from_row(cls, r) -> ActivityCompletion:
        return cls(
            id=r["id"],
            user_id=r["user_id"],
            activity_id=r["activity_id"],
            completed=bool(r["completed"]),
            completed_at=r["completed_at"] or None,
        )

    def to_dict(self) -> dict:
        return asdict(self)


# ── Quizzes ──────────────────────────────────────────────────────────


@dataclass
class Quiz:
    id: int
    title: str
    course_id: Optional[int] = None
    description: str = ""
    passing_score: int = 70
    points_reward: int = 0
    time_limit_minutes: int = 0
    created_at: str = ""

    @classmethod
    def from_row(cls, r) -> Quiz:
        return cls(**{k: r[k] for k in (
            "id", "title", "course_id", "description", "passing_score",
            "points_reward", "time_limit_minutes", "created_at",
        )})

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class QuizQuestion:
    id: int
    quiz_id: int
    question_text: str
    correct_answer: str
    question_type: str = "multiple_choice"  # multiple_choice | true_false | open_ended
    options: list[str] = field(default_factory=list)
    points: int = 1
    order_index: int = 0
    explanation: str = ""

    @classmethod
    def from_row(cls, r) -> QuizQuestion:
        return cls(
            id=r["id"],
            quiz_id=r["quiz_id"],
            question_text=r["question_text"],
            correct_answer=r["correct_answer"],
            question_type=r["question_type"],
            options=_json(r["options"], []),
            points=r["points"],
            order_index=r["order_index"],
            explanation=r["explanation"],
        )

    def to_dict(self, include_answer: bool = True) -> dict:
        d = asdict(self)
        if not include_answer:
            d.pop("correct_answer")
            d.pop("explanation")
        return d


@dataclass
class QuizAttempt:
    id: int
    user_id: int
    quiz_id: int
    score: int
    max_score: int
    passed: bool
    answers: dict[str, str] = field(default_factory=dict)
    completed_at: str = ""
    time_taken_minutes: int = 0

    @classmethod
    def from_row(cls, r) -> QuizAttempt:
        return cls(
            id=r["id"],
            user_id=r["user_id"],
            quiz_id=r["quiz_id"],
            score=r["score"],
            max_score=r["max_score"],
            passed=bool(r["passed"]),
            answers=_json(r["answers"], {}),
            completed_at=r["completed_at"],
            time_taken_minutes=r["time_taken_minutes"],
        )

    @property
    def percentage(self) -> float:
        return round(self.score / self.max_score * 100, 1) if self.max_score else 0.0

    def to_dict(self) -> dict:
        d = asdict(self)
        d["percentage"] = self.percentage
        return d
