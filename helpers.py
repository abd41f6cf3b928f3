"""
Shared helpers used across blueprints.
"""

from __future__ import annotations

from typing import Any

from flask import request
from flask_login import current_user

from errors import ValidationError


def current_user_id() -> int:
    """Return the authenticated user's ID. Routes using this are login_required."""
    return current_user.id


def json_body() -> dict[str, Any]:
    """Parsed JSON object body, or ValidationError for anything else."""
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def limit_arg(default_limit: int = 30, max_limit: int = 365) -> int:
    """Extract ?limit= from request.args, clamped to [1, max_limit]."""
    try:
        return min(max_limit, max(1, int(request.args.get("limit", default_limit))))
    except (ValueError, TypeError):
        return default_limit


def parse_bool(value: Any) -> bool:
    """Interpret JSON/form style truthy values ("true", "1", 1, True)."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)
