"""
User session loading — Flask-Login wiring.

Sign-up, login and password handling are run by the hosting platform; this
module only maps the session's user id to a row in ``users`` so routes can
use ``login_required`` and ``current_user``.
"""

from __future__ import annotations

from flask import jsonify
from flask_login import LoginManager, UserMixin

from database import get_db

login_manager = LoginManager()


class User(UserMixin):
    """Wraps a DB user row for Flask-Login."""

    def __init__(self, id: int, name: str, email: str):
        self.id = id
        self.name = name
        self.email = email

    @staticmethod
    def get(user_id: int):
        db = get_db()
        row = db.execute("SELECT id, name, email FROM users WHERE id = ?", (user_id,)).fetchone()
        if row:
            return User(row["id"], row["name"], row["email"])
        return None


@login_manager.user_loader
def load_user(user_id):
    try:
        return User.get(int(user_id))
    except (TypeError, ValueError):
        return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Authentication required"}), 401
