"""Core routes — health checks and the public points table."""

from __future__ import annotations

import logging
import sqlite3
import time

from flask import Blueprint, jsonify

from database import get_db
from errors import PersistenceError
from points import COMPLETE_DAY_MIN_PHOTOS, DAY_GOAL, LEVEL_THRESHOLDS, POINTS

logger = logging.getLogger(__name__)

bp = Blueprint("core", __name__)

_start_time = time.time()


@bp.route("/health")
def health():
    uptime = int(time.time() - _start_time)
    return jsonify({"status": "ok", "uptime_seconds": uptime})


@bp.route("/ready")
def ready():
    try:
        db = get_db()
        db.execute("SELECT 1").fetchone()
        return jsonify({"status": "ready"}), 200
    except (sqlite3.Error, PersistenceError) as exc:
        logger.error("Readiness check failed: %s", exc, exc_info=True)
        return jsonify({"status": "not_ready"}), 503


@bp.route("/live")
def live():
    return jsonify({"status": "alive"}), 200


@bp.route("/api/points/rules")
def api_points_rules():
    return jsonify({
        "points": POINTS,
        "complete_day_min_photos": COMPLETE_DAY_MIN_PHOTOS,
        "day_goal": DAY_GOAL,
        "levels": [
            {"level": name, **info}
            for name, info in LEVEL_THRESHOLDS.items()
        ],
    })
