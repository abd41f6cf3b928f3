"""
DB-backed stores for user profiles and daily activities.

UserProfileDB owns the running points total, level and completed-day count.
DailyActivityStoreDB scores a day through the points engine, persists it, and
pushes only the point delta into the profile.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from database import get_db
from errors import NotFoundError, ValidationError, translate_db_errors
from models import DailyActivity, UserProfile
from points import calculate_day_points, coerce_count, level_case_sql, level_from_points

logger = logging.getLogger(__name__)

# Largest value an INTEGER column holds
SQL_INT_MAX = 2**63 - 1


def parse_activity_date(value) -> str:
    """Normalize a date or ISO string to YYYY-MM-DD."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    try:
        return date.fromisoformat(str(value).strip()).isoformat()
    except ValueError:
        raise ValidationError(f"Invalid activity date: {value!r} (expected YYYY-MM-DD)")


# ── Profile Accumulator ──────────────────────────────────────────────


class UserProfileDB:
    """DB-backed points/level profile for one user.

    Counters are changed in SQL relative to their stored value and committed in
    one transaction, so two devices saving at the same time cannot lose each
    other's points.
    """

    UPDATABLE_FIELDS = ("total_points", "completed_days")

    def __init__(self, user_id: int):
        self.user_id = user_id

    def _row(self):
        db = get_db()
        return db.execute("SELECT * FROM user_profiles WHERE user_id=?", (self.user_id,)).fetchone()

    @staticmethod
    @translate_db_errors
    def load(user_id: int) -> Optional[UserProfile]:
        r = UserProfileDB(user_id)._row()
        return UserProfile.from_row(r) if r else None

    @staticmethod
    def exists(user_id: int) -> bool:
        return UserProfileDB.load(user_id) is not None

    @staticmethod
    @translate_db_errors
    def create(user_id: int) -> UserProfile:
        """Create the zeroed profile for a new user. Returns the existing one if present."""
        db = get_db()
        now = datetime.now().isoformat()
        cur = db.execute(
            "INSERT OR IGNORE INTO user_profiles "
            "(user_id, total_points, completed_days, current_level, created_at, updated_at) "
            "VALUES (?, 0, 0, ?, ?, ?)",
            (user_id, level_from_points(0), now, now),
        )
        db.commit()
        if cur.rowcount:
            logger.info("Created profile for user %s", user_id)
        return UserProfileDB(user_id).get()

    @translate_db_errors
    def get(self) -> UserProfile:
        r = self._row()
        if not r:
            raise NotFoundError(f"Profile not found for user {self.user_id}")
        return UserProfile.from_row(r)

    def _apply(self, set_clause: str, params: tuple = ()) -> None:
        db = get_db()
        cur = db.execute(
            f"UPDATE user_profiles SET {set_clause}, updated_at=? WHERE user_id=?",
            (*params, datetime.now().isoformat(), self.user_id),
        )
        if cur.rowcount == 0:
            db.rollback()
            raise NotFoundError(f"Profile not found for user {self.user_id}")

    @translate_db_errors
    def add_points(self, delta: int) -> UserProfile:
        """Apply a point delta and recompute the level from the new total."""
        db = get_db()
        self._apply("total_points = total_points + ?", (int(delta),))
        self._apply(f"current_level = {level_case_sql('total_points')}")
        db.commit()
        profile = self.get()
        logger.info(
            "Points %+d for user %s -> total=%s level=%s",
            delta, self.user_id, profile.total_points, profile.current_level,
        )
        return profile

    @translate_db_errors
    def increment_completed_days(self) -> UserProfile:
        db = get_db()
        self._apply("completed_days = completed_days + 1")
        db.commit()
        logger.info("Completed day +1 for user %s", self.user_id)
        return self.get()

    @translate_db_errors
    def decrement_completed_days(self) -> UserProfile:
        """Remove one completed day, never going below zero."""
        db = get_db()
        self._apply("completed_days = CASE WHEN completed_days > 0 THEN completed_days - 1 ELSE 0 END")
        db.commit()
        logger.info("Completed day -1 for user %s", self.user_id)
        return self.get()

    @translate_db_errors
    def update(self, **fields) -> UserProfile:
        """Overwrite counters directly. The level always follows total_points."""
        unknown = set(fields) - set(self.UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Cannot update profile field(s): {', '.join(sorted(unknown))}")
        if not fields:
            return self.get()

        sets = []
        params: list = []
        for name in self.UPDATABLE_FIELDS:
            if name in fields:
                value = fields[name]
                if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= SQL_INT_MAX:
                    raise ValidationError(f"{name} must be a non-negative integer")
                sets.append(f"{name}=?")
                params.append(value)
        if "total_points" in fields:
            sets.append("current_level=?")
            params.append(level_from_points(fields["total_points"]))

        db = get_db()
        self._apply(", ".join(sets), tuple(params))
        db.commit()
        return self.get()


# ── Activity Recorder ────────────────────────────────────────────────


class DailyActivityStoreDB:
    """DB-backed daily activity log (one row per user per date)."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        self.profile = UserProfileDB(user_id)

    @translate_db_errors
    def recent(self, limit: int = 30) -> list[DailyActivity]:
        db = get_db()
        rows = db.execute(
            "SELECT * FROM daily_activities WHERE user_id=? ORDER BY activity_date DESC LIMIT ?",
            (self.user_id, limit),
        ).fetchall()
        return [DailyActivity.from_row(r) for r in rows]

    @translate_db_errors
    def by_date(self, activity_date) -> Optional[DailyActivity]:
        db = get_db()
        r = db.execute(
            "SELECT * FROM daily_activities WHERE user_id=? AND activity_date=?",
            (self.user_id, parse_activity_date(activity_date)),
        ).fetchone()
        return DailyActivity.from_row(r) if r else None

    @translate_db_errors
    def get(self, activity_id: int) -> DailyActivity:
        db = get_db()
        r = db.execute(
            "SELECT * FROM daily_activities WHERE id=? AND user_id=?",
            (activity_id, self.user_id),
        ).fetchone()
        if not r:
            raise NotFoundError(f"Activity {activity_id} not found")
        return DailyActivity.from_row(r)

    @translate_db_errors
    def record(
        self,
        activity_date,
        photos_count=0,
        video_completed: bool = False,
        editing_completed: bool = False,
        editing_time_minutes=0,
        comments: str = "",
    ) -> DailyActivity:
        """Create or update the day's entry and move the profile by the point delta."""
        day_key = parse_activity_date(activity_date)
        photos = coerce_count(photos_count)
        minutes = coerce_count(editing_time_minutes)
        video = bool(video_completed)
        editing = bool(editing_completed)
        comments = str(comments or "")

        # Fail before writing anything when the user has no profile.
        self.profile.get()

        points, is_complete = calculate_day_points(photos, video, editing)
        existing = self.by_date(day_key)
        db = get_db()

        if existing:
            delta = points - existing.points_earned
            db.execute(
                "UPDATE daily_activities SET photos_count=?, video_completed=?, editing_completed=?, "
                "editing_time_minutes=?, comments=?, points_earned=?, is_complete=? WHERE id=?",
                (photos, int(video), int(editing), minutes, comments, points, int(is_complete), existing.id),
            )
            db.commit()

            if delta != 0:
                self.profile.add_points(delta)
            if is_complete and not existing.is_complete:
                self.profile.increment_completed_days()
            elif existing.is_complete and not is_complete:
                self.profile.decrement_completed_days()

            logger.info("Updated activity %s for user %s: points=%s delta=%+d",
                        day_key, self.user_id, points, delta)
            return self.get(existing.id)

        cur = db.execute(
            "INSERT INTO daily_activities (user_id, activity_date, photos_count, video_completed, "
            "editing_completed, editing_time_minutes, comments, points_earned, is_complete, created_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (self.user_id, day_key, photos, int(video), int(editing), minutes, comments,
             points, int(is_complete), datetime.now().isoformat()),
        )
        db.commit()
        activity_id = cur.lastrowid

        self.profile.add_points(points)
        if is_complete:
            self.profile.increment_completed_days()

        logger.info("Recorded activity %s for user %s: points=%s complete=%s",
                    day_key, self.user_id, points, is_complete)
        return self.get(activity_id)

    @translate_db_errors
    def delete(self, activity_id: int) -> None:
        """Delete a day and reverse its points and completed-day credit."""
        activity = self.get(activity_id)
        db = get_db()
        db.execute(
            "DELETE FROM daily_activities WHERE id=? AND user_id=?",
            (activity.id, self.user_id),
        )
        db.commit()

        self.profile.add_points(-activity.points_earned)
        if activity.is_complete:
            self.profile.decrement_completed_days()
        logger.info("Deleted activity %s for user %s (-%s points)",
                    activity.activity_date, self.user_id, activity.points_earned)
