"""
Test fixtures for LensQuest.

Provides app, client, auth_client, and db fixtures with file-based SQLite,
plus seeded course and quiz data.
"""

from __future__ import annotations

import json
from datetime import datetime

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def app(tmp_path):
    """Create app with file-based SQLite for testing."""
    from app import create_app

    db_file = str(tmp_path / "test.db")
    app = create_app({
        "TESTING": True,
        "DATABASE": db_file,
        "SECRET_KEY": "test-secret-key",
        "RATELIMIT_ENABLED": False,
    })

    with app.app_context():
        from database import init_db, get_db
        from db_stores import UserProfileDB

        init_db()

        # Seed test user with a fresh profile
        db = get_db()
        db.execute(
            "INSERT INTO users (id, name, email, created_at) VALUES (1, 'Test Creator', 'test@example.com', ?)",
            (datetime.now().isoformat(),),
        )
        db.execute(
            "INSERT INTO users (id, name, email, created_at) VALUES (2, 'Other Creator', 'other@example.com', ?)",
            (datetime.now().isoformat(),),
        )
        db.commit()
        UserProfileDB.create(1)

        yield app


@pytest.fixture
def client(app):
    """Unauthenticated test client."""
    return app.test_client()


@pytest.fixture
def auth_client(app):
    """Authenticated test client (session belongs to user 1)."""
    client = app.test_client()
    with client:
        with client.session_transaction() as sess:
            sess["_user_id"] = "1"
            sess["_fresh"] = True
        yield client


@pytest.fixture
def db(app):
    """Direct database access for store tests."""
    with app.app_context():
        from database import get_db
        yield get_db()


@pytest.fixture
def seeded_course(app):
    """One published course with content, two weeks of activities and a project.

    Returns the ids needed by the tests.
    """
    with app.app_context():
        from database import get_db
        db = get_db()
        db.execute(
            "INSERT INTO courses (id, title, description, category, difficulty, "
            "estimated_duration_minutes, points_reward, order_index, is_published, created_at) "
            "VALUES (1, 'Photography Basics', 'Light, lenses and composition', 'photography', "
            "'beginner', 600, 200, 1, 1, '2026-01-01')"
        )
        db.execute(
            "INSERT INTO courses (id, title, category, order_index, is_published, created_at) "
            "VALUES (2, 'Draft Editing Course', 'video_editing', 0, 0, '2026-01-01')"
        )
        db.execute(
            "INSERT INTO courses (id, title, category, order_index, is_published, created_at) "
            "VALUES (3, 'Storytelling with Video', 'audiovisual', 0, 1, '2026-01-01')"
        )
        db.execute(
            "INSERT INTO course_content (course_id, title, content_type, content, order_index) "
            "VALUES (1, 'Exposure triangle', 'text', 'Aperture, shutter, ISO', 2)"
        )
        db.execute(
            "INSERT INTO course_content (course_id, title, content_type, content, order_index) "
            "VALUES (1, 'Welcome', 'video', 'https://example.com/welcome.mp4', 1)"
        )
        db.execute(
            "INSERT INTO course_weeks (id, course_id, week_number, title, order_index) "
            "VALUES (10, 1, 1, 'Seeing light', 1)"
        )
        db.execute(
            "INSERT INTO course_weeks (id, course_id, week_number, title, order_index) "
            "VALUES (11, 1, 2, 'Composition', 2)"
        )
        activities = [
            (100, 10, "Golden hour walk", "practice", 2, 30, 0),
            (101, 10, "Intro lecture", "lecture", 1, 20, 0),
            (102, 11, "Rule of thirds", "practice", 3, 50, 0),
        ]
        for a in activities:
            db.execute(
                "INSERT INTO course_activities (id, week_id, title, activity_type, day_number, "
                "xp_reward, order_index) VALUES (?, ?, ?, ?, ?, ?, ?)",
                a,
            )
        db.execute(
            "INSERT INTO course_projects (id, course_id, title, instructions) "
            "VALUES (20, 1, 'Photo essay', 'Shoot a 10-image essay')"
        )
        db.execute(
            "INSERT INTO project_evaluation_criteria (project_id, criterion, max_points, order_index) "
            "VALUES (20, 'Storytelling', 40, 2)"
        )
        db.execute(
            "INSERT INTO project_evaluation_criteria (project_id, criterion, max_points, order_index) "
            "VALUES (20, 'Exposure', 60, 1)"
        )
        db.commit()
    return {"course_id": 1, "draft_id": 2, "activity_ids": [100, 101, 102], "project_id": 20}


@pytest.fixture
def seeded_quiz(app):
    """Two questions worth 5 points each, passing at 60%, rewarding 25 points."""
    with app.app_context():
        from quiz_store import QuizStoreDB
        quiz = QuizStoreDB().create(
            title="Exposure check",
            passing_score=60,
            points_reward=25,
            questions=[
                {
                    "question_text": "Which setting controls depth of field?",
                    "question_type": "multiple_choice",
                    "options": ["Aperture", "Shutter", "ISO"],
                    "correct_answer": "Aperture",
                    "points": 5,
                    "explanation": "Wider apertures give shallower focus.",
                },
                {
                    "question_text": "A higher ISO adds noise.",
                    "question_type": "true_false",
                    "options": ["true", "false"],
                    "correct_answer": "true",
                    "points": 5,
                },
            ],
        )
        questions = QuizStoreDB().questions(quiz.id)
    return {"quiz_id": quiz.id, "question_ids": [q.id for q in questions]}


@pytest.fixture
def legacy_zero_point_quiz(app):
    """A quiz row written before zero-point quizzes were rejected."""
    with app.app_context():
        from database import get_db
        db = get_db()
        cur = db.execute(
            "INSERT INTO quizzes (title, passing_score, points_reward, created_at) "
            "VALUES ('Broken quiz', 50, 10, '2025-01-01')"
        )
        quiz_id = cur.lastrowid
        db.execute(
            "INSERT INTO quiz_questions (quiz_id, question_text, correct_answer, options, points) "
            "VALUES (?, 'Unscored', 'x', ?, 0)",
            (quiz_id, json.dumps([])),
        )
        db.commit()
    return quiz_id
