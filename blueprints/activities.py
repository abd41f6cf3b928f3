"""Daily activity blueprint — log, edit, list and delete creative days."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from db_stores import DailyActivityStoreDB, UserProfileDB
from errors import NotFoundError, ValidationError
from helpers import current_user_id, json_body, limit_arg, parse_bool
from points import coerce_count

bp = Blueprint("activities", __name__)


@bp.route("/api/activities")
@login_required
def api_activities():
    uid = current_user_id()
    store = DailyActivityStoreDB(uid)
    activities = store.recent(limit=limit_arg(default_limit=30, max_limit=365))
    return jsonify({"activities": [a.to_dict() for a in activities]})


@bp.route("/api/activities/<activity_date>")
@login_required
def api_activity_for_date(activity_date):
    uid = current_user_id()
    activity = DailyActivityStoreDB(uid).by_date(activity_date)
    if activity is None:
        raise NotFoundError(f"No activity logged for {activity_date}")
    return jsonify(activity.to_dict())


@bp.route("/api/activities", methods=["POST"])
@login_required
def api_record_activity():
    """Create or edit the entry for a date and return it with the updated profile."""
    uid = current_user_id()
    data = json_body()
    if not data.get("activity_date"):
        raise ValidationError("activity_date is required")

    store = DailyActivityStoreDB(uid)
    created = store.by_date(data["activity_date"]) is None
    activity = store.record(
        data["activity_date"],
        photos_count=coerce_count(data.get("photos_count", 0)),
        video_completed=parse_bool(data.get("video_completed", False)),
        editing_completed=parse_bool(data.get("editing_completed", False)),
        editing_time_minutes=coerce_count(data.get("editing_time_minutes", 0)),
        comments=data.get("comments") or "",
    )
    return jsonify({
        "activity": activity.to_dict(),
        "profile": UserProfileDB(uid).get().to_dict(),
    }), 201 if created else 200


@bp.route("/api/activities/<int:activity_id>", methods=["DELETE"])
@login_required
def api_delete_activity(activity_id):
    uid = current_user_id()
    DailyActivityStoreDB(uid).delete(activity_id)
    return jsonify({
        "success": True,
        "profile": UserProfileDB(uid).get().to_dict(),
    })
