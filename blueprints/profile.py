"""Profile blueprint — points total, level and completed-day progress."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from db_stores import UserProfileDB
from helpers import current_user_id

bp = Blueprint("profile", __name__)


@bp.route("/api/profile")
@login_required
def api_profile():
    uid = current_user_id()
    profile = UserProfileDB(uid).get()
    return jsonify(profile.to_dict())


@bp.route("/api/profile", methods=["POST"])
@login_required
def api_profile_create():
    """Create the signed-in user's profile. Safe to call more than once."""
    uid = current_user_id()
    existed = UserProfileDB.exists(uid)
    profile = UserProfileDB.create(uid)
    return jsonify(profile.to_dict()), 200 if existed else 201
