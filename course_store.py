"""
Course catalog, per-user course progress, and week/activity completion.

Course progress is tracked independently of the points engine: nothing here
awards points, and activity completions are not rolled up into
user_course_progress automatically.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional

from database import get_db
from errors import NotFoundError, ValidationError, translate_db_errors
from models import (
    ActivityCompletion,
    Course,
    CourseActivity,
    CourseContent,
    CourseProgress,
    CourseProject,
    CourseWeek,
    ProjectCriterion,
)

logger = logging.getLogger(__name__)


class CourseCatalogDB:
    """Read access to published courses and their content."""

    @translate_db_errors
    def list_published(self) -> list[Course]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM courses WHERE is_published=1 ORDER BY order_index, id"
        ).fetchall()
        return [Course.from_row(r) for r in rows]

    @translate_db_errors
    def get(self, course_id: int) -> Optional[Course]:
        db = get_db()
        r = db.execute("SELECT * FROM courses WHERE id=?", (course_id,)).fetchone()
        return Course.from_row(r) if r else None

    @translate_db_errors
    def content(self, course_id: int) -> list[CourseContent]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM course_content WHERE course_id=? ORDER BY order_index, id",
            (course_id,),
        ).fetchall()
        return [CourseContent.from_row(r) for r in rows]


class CourseProgressDB:
    """Percent-complete per (user, course)."""

    def __init__(self, user_id: int):
        self.user_id = user_id

    @translate_db_errors
    def get(self, course_id: int) -> Optional[CourseProgress]:
        db = get_db()
        r = db.execute(
            "SELECT * FROM user_course_progress WHERE user_id=? AND course_id=?",
            (self.user_id, course_id),
        ).fetchone()
        return CourseProgress.from_row(r) if r else None

    @translate_db_errors
    def all(self) -> list[CourseProgress]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM user_course_progress WHERE user_id=? ORDER BY last_accessed_at DESC",
            (self.user_id,),
        ).fetchall()
        return [CourseProgress.from_row(r) for r in rows]

    def completed_count(self) -> int:
        return sum(1 for p in self.all() if p.is_completed)

    @translate_db_errors
    def start(self, course_id: int) -> CourseProgress:
        """Open a course at 0%. Starting an already-started course is a no-op."""
        if CourseCatalogDB().get(course_id) is None:
            raise NotFoundError(f"Course {course_id} not found")
        db = get_db()
        now = datetime.now().isoformat()
        cur = db.execute(
            "INSERT OR IGNORE INTO user_course_progress "
            "(user_id, course_id, progress_percentage, started_at, last_accessed_at) "
            "VALUES (?, ?, 0, ?, ?)",
            (self.user_id, course_id, now, now),
        )
        db.commit()
        if cur.rowcount:
            logger.info("User %s started course %s", self.user_id, course_id)
        return self.get(course_id)

    @translate_db_errors
    def update(self, course_id: int, percentage: int | float) -> CourseProgress:
        """Set progress and touch last_accessed_at.

        Whole-number floats such as 50.0 are accepted as 50.

        Reaching 100 stamps completed_at. Dropping below 100 later leaves
        completed_at as it was.
        """
        if isinstance(percentage, float) and percentage.is_integer():
            percentage = int(percentage)
        if isinstance(percentage, bool) or not isinstance(percentage, int) or not 0 <= percentage <= 100:
            raise ValidationError("progress_percentage must be an integer between 0 and 100")
        if self.get(course_id) is None:
            raise NotFoundError(f"Course {course_id} has not been started")

        now = datetime.now().isoformat()
        sets = "progress_percentage=?, last_accessed_at=?"
        params: list = [percentage, now]
        if percentage >= 100:
            sets += ", completed_at=?"
            params.append(now)

        db = get_db()
        db.execute(
            f"UPDATE user_course_progress SET {sets} WHERE user_id=? AND course_id=?",
            (*params, self.user_id, course_id),
        )
        db.commit()
        logger.info("User %s course %s progress=%s%%", self.user_id, course_id, percentage)
        return self.get(course_id)


class CourseDetailDB:
    """Weekly structure, activities, the final project, and activity completion."""

    @translate_db_errors
    def weeks(self, course_id: int) -> list[CourseWeek]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM course_weeks WHERE course_id=? ORDER BY order_index, id",
            (course_id,),
        ).fetchall()
        return [CourseWeek.from_row(r) for r in rows]

    @translate_db_errors
    def week_activities(self, week_id: int) -> list[CourseActivity]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM course_activities WHERE week_id=? ORDER BY day_number, order_index, id",
            (week_id,),
        ).fetchall()
        return [CourseActivity.from_row(r) for r in rows]

    @translate_db_errors
    def course_activities(self, course_id: int) -> list[CourseActivity]:
        db = get_db()
        rows = db.execute(
            "SELECT a.* FROM course_activities a JOIN course_weeks w ON a.week_id = w.id "
            "WHERE w.course_id=? ORDER BY a.day_number, a.order_index, a.id",
            (course_id,),
        ).fetchall()
        return [CourseActivity.from_row(r) for r in rows]

    @translate_db_errors
    def project(self, course_id: int) -> Optional[CourseProject]:
        db = get_db()
        r = db.execute("SELECT * FROM course_projects WHERE course_id=?", (course_id,)).fetchone()
        return CourseProject.from_row(r) if r else None

    @translate_db_errors
    def project_criteria(self, project_id: int) -> list[ProjectCriterion]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM project_evaluation_criteria WHERE project_id=? ORDER BY order_index, id",
            (project_id,),
        ).fetchall()
        return [ProjectCriterion.from_row(r) for r in rows]

    @translate_db_errors
    def completions(self, user_id: int, activity_ids: list[int]) -> list[ActivityCompletion]:
        if not activity_ids:
            return []
        placeholders = ",".join("?" * len(activity_ids))
        db = get_db()
        rows = db.execute(
            f"SELECT * FROM user_activity_completion WHERE user_id=? AND activity_id IN ({placeholders})",
            (user_id, *activity_ids),
        ).fetchall()
        return [ActivityCompletion.from_row(r) for r in rows]

    @translate_db_errors
    def toggle_activity_completion(self, user_id: int, activity_id: int, completed: bool) -> ActivityCompletion:
        db = get_db()
        if not db.execute("SELECT id FROM course_activities WHERE id=?", (activity_id,)).fetchone():
            raise NotFoundError(f"Course activity {activity_id} not found")

        completed_at = datetime.now().isoformat() if completed else None
        db.execute(
            "INSERT INTO user_activity_completion (user_id, activity_id, completed, completed_at) "
            "VALUES (?, ?, ?, ?) "
            "ON CONFLICT(user_id, activity_id) DO UPDATE SET "
            "completed=excluded.completed, completed_at=excluded.completed_at",
            (user_id, activity_id, int(bool(completed)), completed_at),
        )
        db.commit()
        r = db.execute(
            "SELECT * FROM user_activity_completion WHERE user_id=? AND activity_id=?",
            (user_id, activity_id),
        ).fetchone()
        return ActivityCompletion.from_row(r)

    def xp_summary(self, user_id: int, course_id: int) -> dict:
        """Earned vs. available activity XP for a course. Read-only."""
        activities = self.course_activities(course_id)
        done = {
            c.activity_id
            for c in self.completions(user_id, [a.id for a in activities])
            if c.completed
        }
        total_xp = sum(a.xp_reward for a in activities)
        earned_xp = sum(a.xp_reward for a in activities if a.id in done)
        pct = math.floor(earned_xp / total_xp * 100 + 0.5) if total_xp > 0 else 0
        return {
            "earned_xp": earned_xp,
            "total_xp": total_xp,
            "progress_percentage": pct,
            "completed_activities": len(done),
            "total_activities": len(activities),
        }
