"""Course blueprint — catalog, per-user progress, weekly plan and activity completion."""

from __future__ import annotations

from flask import Blueprint, jsonify
from flask_login import login_required

from course_store import CourseCatalogDB, CourseDetailDB, CourseProgressDB
from errors import NotFoundError, ValidationError
from helpers import current_user_id, json_body, parse_bool

bp = Blueprint("courses", __name__)


def _course_or_404(course_id: int):
    course = CourseCatalogDB().get(course_id)
    if course is None:
        raise NotFoundError(f"Course {course_id} not found")
    return course


@bp.route("/api/courses")
@login_required
def api_courses():
    courses = CourseCatalogDB().list_published()
    return jsonify({"courses": [c.to_dict() for c in courses]})


@bp.route("/api/courses/<int:course_id>")
@login_required
def api_course_detail(course_id):
    uid = current_user_id()
    catalog = CourseCatalogDB()
    course = _course_or_404(course_id)
    progress = CourseProgressDB(uid).get(course_id)
    return jsonify({
        "course": course.to_dict(),
        "content": [c.to_dict() for c in catalog.content(course_id)],
        "progress": progress.to_dict() if progress else None,
    })


@bp.route("/api/courses/<int:course_id>/start", methods=["POST"])
@login_required
def api_start_course(course_id):
    uid = current_user_id()
    progress = CourseProgressDB(uid).start(course_id)
    return jsonify(progress.to_dict())


@bp.route("/api/courses/<int:course_id>/progress", methods=["POST"])
@login_required
def api_update_course_progress(course_id):
    uid = current_user_id()
    data = json_body()
    if "progress_percentage" not in data:
        raise ValidationError("progress_percentage is required")
    progress = CourseProgressDB(uid).update(course_id, data["progress_percentage"])
    return jsonify(progress.to_dict())


@bp.route("/api/progress")
@login_required
def api_progress():
    uid = current_user_id()
    store = CourseProgressDB(uid)
    progress = store.all()
    return jsonify({
        "progress": [p.to_dict() for p in progress],
        "completed_count": store.completed_count(),
    })


@bp.route("/api/courses/<int:course_id>/weeks")
@login_required
def api_course_weeks(course_id):
    _course_or_404(course_id)
    detail = CourseDetailDB()
    weeks = []
    for week in detail.weeks(course_id):
        d = week.to_dict()
        d["activities"] = [a.to_dict() for a in detail.week_activities(week.id)]
        weeks.append(d)
    return jsonify({"weeks": weeks})


@bp.route("/api/courses/<int:course_id>/activities")
@login_required
def api_course_activities(course_id):
    uid = current_user_id()
    _course_or_404(course_id)
    detail = CourseDetailDB()
    activities = detail.course_activities(course_id)
    done = {
        c.activity_id
        for c in detail.completions(uid, [a.id for a in activities])
        if c.completed
    }
    items = []
    for a in activities:
        d = a.to_dict()
        d["completed"] = a.id in done
        items.append(d)
    return jsonify({
        "activities": items,
        "summary": detail.xp_summary(uid, course_id),
    })


@bp.route("/api/courses/<int:course_id>/project")
@login_required
def api_course_project(course_id):
    _course_or_404(course_id)
    detail = CourseDetailDB()
    project = detail.project(course_id)
    if project is None:
        raise NotFoundError(f"Course {course_id} has no final project")
    return jsonify({
        "project": project.to_dict(),
        "criteria": [c.to_dict() for c in detail.project_criteria(project.id)],
    })


@bp.route("/api/course-activities/<int:activity_id>/completion", methods=["POST"])
@login_required
def api_toggle_activity_completion(activity_id):
    uid = current_user_id()
    data = json_body()
    completed = parse_bool(data.get("completed", True))
    completion = CourseDetailDB().toggle_activity_completion(uid, activity_id, completed)
    return jsonify(completion.to_dict())
