"""
Points Engine — daily activity scoring, levels, and 100-day progress.

Pure functions only. Nothing in here touches the database; the stores call
into it to keep points and levels consistent. Only ``coerce_count`` raises,
for counts too large to be real input.
"""

from __future__ import annotations

import math
import re
from typing import Any, NamedTuple

from errors import ValidationError

POINTS = {
    "photo": 10,
    "video": 30,
    "editing": 20,
    "complete_day_bonus": 50,
}

# A complete day needs at least this many photos plus video and editing.
COMPLETE_DAY_MIN_PHOTOS = 3

# Number of complete days that make up the mastery goal.
DAY_GOAL = 100

# Upper bound for any user-supplied count (photos, minutes, quiz points).
MAX_COUNT = 100_000

# Ordered lowest to highest. ``max`` is inclusive, ``None`` means unbounded.
LEVEL_THRESHOLDS: dict[str, dict[str, Any]] = {
    "seedling": {"emoji": "🌱", "min": 0, "max": 499},
    "target": {"emoji": "🎯", "min": 500, "max": 1499},
    "star": {"emoji": "⭐", "min": 1500, "max": 2999},
    "diamond": {"emoji": "💎", "min": 3000, "max": 4999},
    "trophy": {"emoji": "🏆", "min": 5000, "max": None},
}

LEVELS = tuple(LEVEL_THRESHOLDS)


class DayPoints(NamedTuple):
    points: int
    is_complete: bool


def calculate_day_points(photos_count: int, video_completed: bool, editing_completed: bool) -> DayPoints:
    """Score one day of activity.

    ``photos_count`` is used as given; callers clamp it with ``coerce_count``.
    """
    points = photos_count * POINTS["photo"]
    if video_completed:
        points += POINTS["video"]
    if editing_completed:
        points += POINTS["editing"]

    is_complete = photos_count >= COMPLETE_DAY_MIN_PHOTOS and bool(video_completed) and bool(editing_completed)
    if is_complete:
        points += POINTS["complete_day_bonus"]

    return DayPoints(points, is_complete)


def level_from_points(points: int) -> str:
    for level in reversed(LEVELS):
        if points >= LEVEL_THRESHOLDS[level]["min"]:
            return level
    return LEVELS[0]


def progress_percentage(completed_days: int) -> int:
    """Percent of the 100-day goal reached, capped at 100.

    Rounds half up rather than to even.
    """
    pct = math.floor(completed_days / DAY_GOAL * 100 + 0.5)
    return min(pct, 100)


def level_info(points: int) -> dict[str, Any]:
    """Level details for display: emoji, bounds, and distance to the next tier."""
    level = level_from_points(points)
    idx = LEVELS.index(level)
    next_level = LEVELS[idx + 1] if idx + 1 < len(LEVELS) else None
    return {
        "level": level,
        "emoji": LEVEL_THRESHOLDS[level]["emoji"],
        "min": LEVEL_THRESHOLDS[level]["min"],
        "max": LEVEL_THRESHOLDS[level]["max"],
        "next_level": next_level,
        "points_to_next_level": (
            max(LEVEL_THRESHOLDS[next_level]["min"] - points, 0) if next_level else 0
        ),
    }


def level_case_sql(expr: str) -> str:
    """Render the threshold table as a SQL CASE over ``expr``.

    Lets an UPDATE recompute ``current_level`` from the new total.
    ``expr`` is trusted SQL written by the caller, never user input.
    """
    clauses = " ".join(
        f"WHEN {expr} >= {LEVEL_THRESHOLDS[level]['min']} THEN '{level}'"
        for level in reversed(LEVELS[1:])
    )
    return f"CASE {clauses} ELSE '{LEVELS[0]}' END"


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_count(value: Any) -> int:
    """Coerce a user-supplied count to a non-negative int.

    Non-numeric input becomes 0. Strings keep their leading integer
    (``"12abc"`` -> 12), floats are truncated, negatives clamp to 0.
    Anything above ``MAX_COUNT`` raises ValidationError.
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        n = value
    elif isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        n = int(value)
    elif isinstance(value, str):
        m = _LEADING_INT.match(value)
        if not m or m.group(1).startswith("-"):
            return 0
        digits = m.group(1).lstrip("+").lstrip("0") or "0"
        if len(digits) > len(str(MAX_COUNT)):
            raise ValidationError(f"Count must be at most {MAX_COUNT}")
        n = int(digits)
    else:
        return 0
    if n > MAX_COUNT:
        raise ValidationError(f"Count must be at most {MAX_COUNT}")
    return max(n, 0)
