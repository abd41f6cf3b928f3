"""Quiz blueprint — list quizzes, take them, and review attempts."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from db_stores import UserProfileDB
from errors import NotFoundError, ValidationError
from helpers import current_user_id, json_body
from quiz_store import QuizStoreDB

bp = Blueprint("quizzes", __name__)


def _quiz_or_404(store: QuizStoreDB, quiz_id: int):
    quiz = store.get(quiz_id)
    if quiz is None:
        raise NotFoundError(f"Quiz {quiz_id} not found")
    return quiz


@bp.route("/api/quizzes")
@login_required
def api_quizzes():
    return jsonify({"quizzes": [q.to_dict() for q in QuizStoreDB().all()]})


@bp.route("/api/quizzes/<int:quiz_id>")
@login_required
def api_quiz_detail(quiz_id):
    """Quiz with its questions. Correct answers stay on the server."""
    store = QuizStoreDB()
    quiz = _quiz_or_404(store, quiz_id)
    return jsonify({
        "quiz": quiz.to_dict(),
        "questions": [q.to_dict(include_answer=False) for q in store.questions(quiz_id)],
    })


@bp.route("/api/quizzes/<int:quiz_id>/attempts", methods=["POST"])
@login_required
def api_submit_attempt(quiz_id):
    uid = current_user_id()
    data = json_body()
    answers = data.get("answers")
    if not isinstance(answers, dict):
        raise ValidationError("answers must map question ids to answer text")

    attempt = QuizStoreDB().submit_attempt(
        uid, quiz_id, answers, time_taken_minutes=data.get("time_taken_minutes", 0),
    )
    return jsonify({
        "attempt": attempt.to_dict(),
        "profile": UserProfileDB(uid).get().to_dict(),
    }), 201


@bp.route("/api/quiz-attempts")
@login_required
def api_quiz_attempts():
    uid = current_user_id()
    return jsonify({"attempts": [a.to_dict() for a in QuizStoreDB().attempts(uid)]})


@bp.route("/api/quizzes/<int:quiz_id>/best")
@login_required
def api_best_attempt(quiz_id):
    uid = current_user_id()
    store = QuizStoreDB()
    _quiz_or_404(store, quiz_id)
    best = store.best_attempt(uid, quiz_id)
    return jsonify({"attempt": best.to_dict() if best else None})
