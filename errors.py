"""Exception types raised by the stores and mapped to HTTP responses by the app."""

from __future__ import annotations

import logging
import sqlite3
from functools import wraps

from flask import g, has_app_context

logger = logging.getLogger(__name__)


class TrackerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500


class NotFoundError(TrackerError):
    """A profile, activity, quiz or progress row is missing."""

    status_code = 404


class ValidationError(TrackerError):
    """Input the core cannot coerce into something meaningful."""

    status_code = 400


class PersistenceError(TrackerError):
    """A database operation failed. The driver error is chained as __cause__."""

    status_code = 500


def translate_db_errors(f):
    """Re-raise sqlite3 errors from a store method as PersistenceError.

    The request connection is rolled back first so a half-written change
    can never be committed by a later call.
    """
    @wraps(f)
    def decorated(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except sqlite3.Error as exc:
            logger.error("Database error in %s: %s", f.__qualname__, exc)
            db = g.get("db") if has_app_context() else None
            if db is not None:
                db.rollback()
            raise PersistenceError(str(exc)) from exc
    return decorated
