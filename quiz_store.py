"""
Quiz storage and grading.

Answers are compared to the stored correct answer by exact string match, each
question is all-or-nothing, and a passing attempt credits the quiz's
points_reward to the user's profile.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any, Optional

from database import get_db
from db_stores import SQL_INT_MAX, UserProfileDB
from errors import NotFoundError, ValidationError, translate_db_errors
from models import Quiz, QuizAttempt, QuizQuestion
from points import MAX_COUNT, coerce_count

logger = logging.getLogger(__name__)

QUESTION_TYPES = ("multiple_choice", "true_false", "open_ended")


def grade_answers(questions: list[QuizQuestion], answers: dict[str, str]) -> tuple[int, int]:
    """Return (score, max_score) for a set of answers keyed by question id."""
    max_score = sum(q.points for q in questions)
    score = sum(q.points for q in questions if answers.get(str(q.id)) == q.correct_answer)
    return score, max_score


def is_passing(score: int, max_score: int, passing_score: int) -> bool:
    if max_score <= 0:
        raise ValidationError("Quiz has no scorable questions")
    return score / max_score * 100 >= passing_score


class QuizStoreDB:
    """DB-backed quizzes, questions and attempts."""

    @translate_db_errors
    def all(self) -> list[Quiz]:
        db = get_db()
        rows = db.execute("SELECT * FROM quizzes ORDER BY created_at DESC, id DESC").fetchall()
        return [Quiz.from_row(r) for r in rows]

    @translate_db_errors
    def get(self, quiz_id: int) -> Optional[Quiz]:
        db = get_db()
        r = db.execute("SELECT * FROM quizzes WHERE id=?", (quiz_id,)).fetchone()
        return Quiz.from_row(r) if r else None

    @translate_db_errors
    def questions(self, quiz_id: int) -> list[QuizQuestion]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM quiz_questions WHERE quiz_id=? ORDER BY order_index, id",
            (quiz_id,),
        ).fetchall()
        return [QuizQuestion.from_row(r) for r in rows]

    @staticmethod
    def _question_row(i: int, q: Any) -> tuple:
        """Validate one question payload and return its quiz_questions values."""
        label = f"Question {i + 1}"
        if not isinstance(q, dict):
            raise ValidationError(f"{label} must be an object")

        text = q.get("question_text")
        answer = q.get("correct_answer")
        if not isinstance(text, str) or not text.strip():
            raise ValidationError(f"{label} needs question_text")
        if isinstance(answer, bool) or not isinstance(answer, (str, int, float)) or answer == "":
            raise ValidationError(f"{label} needs a text or number correct_answer")

        qtype = q.get("question_type", "multiple_choice")
        if qtype not in QUESTION_TYPES:
            raise ValidationError(f"{label} has unknown type {qtype!r}")

        options = q.get("options")
        if options is None:
            options = []
        if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
            raise ValidationError(f"{label} options must be a list of text")

        order_index = q.get("order_index", i)
        if isinstance(order_index, bool) or not isinstance(order_index, int) or not 0 <= order_index <= MAX_COUNT:
            raise ValidationError(f"{label} order_index must be an integer between 0 and {MAX_COUNT}")

        explanation = q.get("explanation")
        if explanation is None:
            explanation = ""
        if not isinstance(explanation, str):
            raise ValidationError(f"{label} explanation must be text")

        return (
            text.strip(),
            qtype,
            str(answer),
            json.dumps(options),
            coerce_count(q.get("points", 1)),
            order_index,
            explanation,
        )

    @translate_db_errors
    def create(
        self,
        title: str,
        questions: list[dict[str, Any]],
        passing_score: int = 70,
        points_reward: int = 0,
        description: str = "",
        course_id: int | None = None,
        time_limit_minutes: int = 0,
    ) -> Quiz:
        """Create a quiz with its questions.

        Authoring entry point for seed scripts and admin tooling; the JSON API
        only reads quizzes and submits attempts. Quizzes whose questions are
        worth zero points in total are rejected, since no attempt on them could
        ever be graded.
        """
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Quiz title is required")
        title = title.strip()
        if not isinstance(description, str):
            raise ValidationError("Quiz description must be text")
        if isinstance(passing_score, bool) or not isinstance(passing_score, int) or not 0 <= passing_score <= 100:
            raise ValidationError("passing_score must be an integer between 0 and 100")
        if not isinstance(questions, list) or not questions:
            raise ValidationError("A quiz needs at least one question")
        if course_id is not None and (
            isinstance(course_id, bool) or not isinstance(course_id, int) or not 0 < course_id <= SQL_INT_MAX
        ):
            raise ValidationError("course_id must be a positive integer")

        rows = [self._question_row(i, q) for i, q in enumerate(questions)]
        if sum(r[4] for r in rows) <= 0:
            raise ValidationError("Quiz questions must be worth more than 0 points in total")

        db = get_db()
        cur = db.execute(
            "INSERT INTO quizzes (course_id, title, description, passing_score, points_reward, "
            "time_limit_minutes, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (course_id, title, description, passing_score, coerce_count(points_reward),
             coerce_count(time_limit_minutes), datetime.now().isoformat()),
        )
        quiz_id = cur.lastrowid
        for r in rows:
            db.execute(
                "INSERT INTO quiz_questions (quiz_id, question_text, question_type, correct_answer, "
                "options, points, order_index, explanation) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (quiz_id, *r),
            )
        db.commit()
        logger.info("Created quiz %s (%s questions)", quiz_id, len(rows))
        return self.get(quiz_id)

    @translate_db_errors
    def submit_attempt(
        self,
        user_id: int,
        quiz_id: int,
        answers: dict,
        time_taken_minutes: int = 0,
    ) -> QuizAttempt:
        """Grade and store an attempt; a pass credits the quiz reward to the profile."""
        quiz = self.get(quiz_id)
        if quiz is None:
            raise NotFoundError(f"Quiz {quiz_id} not found")
        if not isinstance(answers, dict):
            raise ValidationError("answers must map question ids to answer text")
        profile = UserProfileDB(user_id)
        profile.get()

        answers = {str(k): v for k, v in answers.items()}
        score, max_score = grade_answers(self.questions(quiz_id), answers)
        passed = is_passing(score, max_score, quiz.passing_score)

        db = get_db()
        cur = db.execute(
            "INSERT INTO user_quiz_attempts (user_id, quiz_id, score, max_score, passed, answers, "
            "completed_at, time_taken_minutes) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (user_id, quiz_id, score, max_score, int(passed), json.dumps(answers),
             datetime.now().isoformat(), coerce_count(time_taken_minutes)),
        )
        db.commit()
        attempt_id = cur.lastrowid

        logger.info("User %s quiz %s: %s/%s passed=%s", user_id, quiz_id, score, max_score, passed)
        if passed:
            profile.add_points(quiz.points_reward)

        r = db.execute("SELECT * FROM user_quiz_attempts WHERE id=?", (attempt_id,)).fetchone()
        return QuizAttempt.from_row(r)

    @translate_db_errors
    def attempts(self, user_id: int) -> list[QuizAttempt]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM user_quiz_attempts WHERE user_id=? ORDER BY completed_at DESC, id DESC",
            (user_id,),
        ).fetchall()
        return [QuizAttempt.from_row(r) for r in rows]

    @translate_db_errors
    def best_attempt(self, user_id: int, quiz_id: int) -> Optional[QuizAttempt]:
        db = get_db()
        r = db.execute(
            "SELECT * FROM user_quiz_attempts WHERE user_id=? AND quiz_id=? "
            "ORDER BY score DESC, id ASC LIMIT 1",
            (user_id, quiz_id),
        ).fetchone()
        return QuizAttempt.from_row(r) if r else None
