"""
Blueprint registration for LensQuest.

All blueprints serve JSON under /api, plus the health probes in core.
"""

from __future__ import annotations


def register_blueprints(app):
    from blueprints.core import bp as core_bp
    from blueprints.profile import bp as profile_bp
    from blueprints.activities import bp as activities_bp
    from blueprints.courses import bp as courses_bp
    from blueprints.quizzes import bp as quizzes_bp

    app.register_blueprint(core_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(activities_bp)
    app.register_blueprint(courses_bp)
    app.register_blueprint(quizzes_bp)
