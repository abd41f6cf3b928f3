"""Integration tests for the JSON API blueprints."""

import pytest


class TestAuthRequired:
    @pytest.mark.parametrize("method,url", [
        ("get", "/api/profile"),
        ("get", "/api/activities"),
        ("post", "/api/activities"),
        ("get", "/api/courses"),
        ("get", "/api/progress"),
        ("get", "/api/quizzes"),
        ("get", "/api/quiz-attempts"),
    ])
    def test_requires_login(self, client, method, url):
        resp = getattr(client, method)(url)
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Authentication required"}


class TestCore:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "ok"

    def test_ready_and_live(self, client):
        assert client.get("/ready").status_code == 200
        assert client.get("/live").get_json() == {"status": "alive"}

    def test_points_rules(self, client):
        data = client.get("/api/points/rules").get_json()
        assert data["points"]["photo"] == 10
        assert data["points"]["complete_day_bonus"] == 50
        assert data["day_goal"] == 100
        assert [lv["level"] for lv in data["levels"]] == ["seedling", "target", "star", "diamond", "trophy"]

    def test_unknown_route_is_json(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Not found"}

    def test_request_id_echoed(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"

    def test_security_headers(self, client):
        resp = client.get("/health")
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"


class TestProfileAPI:
    def test_get_profile(self, auth_client):
        data = auth_client.get("/api/profile").get_json()
        assert data["total_points"] == 0
        assert data["current_level"] == "seedling"
        assert data["progress_percentage"] == 0
        assert data["level_info"]["next_level"] == "target"

    def test_create_profile_is_idempotent(self, auth_client):
        resp = auth_client.post("/api/profile")
        assert resp.status_code == 200
        assert resp.get_json()["user_id"] == 1


class TestActivitiesAPI:
    def test_record_and_fetch(self, auth_client):
        resp = auth_client.post("/api/activities", json={
            "activity_date": "2026-04-01",
            "photos_count": "3",
            "video_completed": "true",
            "editing_completed": True,
            "editing_time_minutes": 25,
            "comments": "Street portraits",
        })
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["activity"]["points_earned"] == 130
        assert data["activity"]["is_complete"] is True
        assert data["profile"]["total_points"] == 130
        assert data["profile"]["completed_days"] == 1

        day = auth_client.get("/api/activities/2026-04-01").get_json()
        assert day["comments"] == "Street portraits"

        listing = auth_client.get("/api/activities?limit=5").get_json()
        assert len(listing["activities"]) == 1

    def test_edit_returns_200_and_applies_delta(self, auth_client):
        auth_client.post("/api/activities", json={"activity_date": "2026-04-02", "photos_count": 2})
        resp = auth_client.post("/api/activities", json={"activity_date": "2026-04-02", "photos_count": 5})
        assert resp.status_code == 200
        assert resp.get_json()["profile"]["total_points"] == 50

    def test_oversized_count_rejected(self, auth_client):
        resp = auth_client.post("/api/activities", json={"activity_date": "2026-04-01", "photos_count": 10**19})
        assert resp.status_code == 400
        assert "error" in resp.get_json()
        assert auth_client.get("/api/profile").get_json()["total_points"] == 0
        assert auth_client.get("/api/activities/2026-04-01").status_code == 404

    def test_missing_date(self, auth_client):
        resp = auth_client.post("/api/activities", json={"photos_count": 2})
        assert resp.status_code == 400
        assert "activity_date" in resp.get_json()["error"]

    def test_invalid_date(self, auth_client):
        resp = auth_client.post("/api/activities", json={"activity_date": "04/01/2026"})
        assert resp.status_code == 400

    def test_body_must_be_object(self, auth_client):
        resp = auth_client.post("/api/activities", json=[1, 2, 3])
        assert resp.status_code == 400

    def test_no_activity_for_date(self, auth_client):
        resp = auth_client.get("/api/activities/2026-04-03")
        assert resp.status_code == 404
        assert "error" in resp.get_json()

    def test_delete(self, auth_client):
        created = auth_client.post("/api/activities", json={
            "activity_date": "2026-04-04", "photos_count": 3,
            "video_completed": True, "editing_completed": True,
        }).get_json()
        resp = auth_client.delete(f"/api/activities/{created['activity']['id']}")
        assert resp.status_code == 200
        profile = resp.get_json()["profile"]
        assert profile["total_points"] == 0
        assert profile["completed_days"] == 0

    def test_delete_missing(self, auth_client):
        assert auth_client.delete("/api/activities/9999").status_code == 404


class TestCoursesAPI:
    def test_list_courses(self, auth_client, seeded_course):
        data = auth_client.get("/api/courses").get_json()
        assert [c["id"] for c in data["courses"]] == [3, 1]

    def test_course_detail(self, auth_client, seeded_course):
        data = auth_client.get("/api/courses/1").get_json()
        assert data["course"]["title"] == "Photography Basics"
        assert [c["title"] for c in data["content"]] == ["Welcome", "Exposure triangle"]
        assert data["progress"] is None

    def test_course_detail_missing(self, auth_client, seeded_course):
        assert auth_client.get("/api/courses/999").status_code == 404

    def test_start_and_progress(self, auth_client, seeded_course):
        assert auth_client.post("/api/courses/1/start").status_code == 200
        resp = auth_client.post("/api/courses/1/progress", json={"progress_percentage": 100})
        assert resp.status_code == 200
        assert resp.get_json()["completed_at"] is not None

        overview = auth_client.get("/api/progress").get_json()
        assert overview["completed_count"] == 1
        assert overview["progress"][0]["course_id"] == 1

    def test_progress_validation(self, auth_client, seeded_course):
        auth_client.post("/api/courses/1/start")
        assert auth_client.post("/api/courses/1/progress", json={"progress_percentage": 140}).status_code == 400
        assert auth_client.post("/api/courses/1/progress", json={}).status_code == 400

    def test_progress_accepts_whole_number_float(self, auth_client, seeded_course):
        auth_client.post("/api/courses/1/start")
        resp = auth_client.post("/api/courses/1/progress", json={"progress_percentage": 50.0})
        assert resp.status_code == 200
        assert resp.get_json()["progress_percentage"] == 50

    def test_progress_not_started(self, auth_client, seeded_course):
        resp = auth_client.post("/api/courses/1/progress", json={"progress_percentage": 10})
        assert resp.status_code == 404

    def test_weeks(self, auth_client, seeded_course):
        weeks = auth_client.get("/api/courses/1/weeks").get_json()["weeks"]
        assert [w["week_number"] for w in weeks] == [1, 2]
        assert [a["id"] for a in weeks[0]["activities"]] == [101, 100]

    def test_activities_with_completion(self, auth_client, seeded_course):
        resp = auth_client.post("/api/course-activities/102/completion", json={"completed": True})
        assert resp.status_code == 200
        assert resp.get_json()["completed"] is True

        data = auth_client.get("/api/courses/1/activities").get_json()
        flags = {a["id"]: a["completed"] for a in data["activities"]}
        assert flags == {100: False, 101: False, 102: True}
        assert data["summary"]["earned_xp"] == 50
        assert data["summary"]["progress_percentage"] == 50

    def test_uncomplete_activity(self, auth_client, seeded_course):
        auth_client.post("/api/course-activities/100/completion", json={"completed": True})
        resp = auth_client.post("/api/course-activities/100/completion", json={"completed": False})
        assert resp.get_json()["completed"] is False

    def test_completion_unknown_activity(self, auth_client, seeded_course):
        resp = auth_client.post("/api/course-activities/9999/completion", json={"completed": True})
        assert resp.status_code == 404

    def test_project(self, auth_client, seeded_course):
        data = auth_client.get("/api/courses/1/project").get_json()
        assert data["project"]["title"] == "Photo essay"
        assert [c["max_points"] for c in data["criteria"]] == [60, 40]
        assert auth_client.get("/api/courses/3/project").status_code == 404


class TestQuizzesAPI:
    def test_list(self, auth_client, seeded_quiz):
        data = auth_client.get("/api/quizzes").get_json()
        assert [q["id"] for q in data["quizzes"]] == [seeded_quiz["quiz_id"]]

    def test_detail_hides_answers(self, auth_client, seeded_quiz):
        data = auth_client.get(f"/api/quizzes/{seeded_quiz['quiz_id']}").get_json()
        assert len(data["questions"]) == 2
        for q in data["questions"]:
            assert "correct_answer" not in q
            assert "explanation" not in q
            assert q["options"]

    def test_detail_missing(self, auth_client):
        assert auth_client.get("/api/quizzes/999").status_code == 404

    def test_submit_pass(self, auth_client, seeded_quiz):
        q1, q2 = seeded_quiz["question_ids"]
        resp = auth_client.post(f"/api/quizzes/{seeded_quiz['quiz_id']}/attempts", json={
            "answers": {str(q1): "Aperture", str(q2): "true"},
            "time_taken_minutes": 4,
        })
        assert resp.status_code == 201
        data = resp.get_json()
        assert data["attempt"]["passed"] is True
        assert data["attempt"]["percentage"] == 100.0
        assert data["profile"]["total_points"] == 25

    def test_submit_fail(self, auth_client, seeded_quiz):
        q1, _ = seeded_quiz["question_ids"]
        resp = auth_client.post(f"/api/quizzes/{seeded_quiz['quiz_id']}/attempts", json={
            "answers": {str(q1): "Aperture"},
        })
        data = resp.get_json()
        assert data["attempt"]["score"] == 5
        assert data["attempt"]["passed"] is False
        assert data["profile"]["total_points"] == 0

    def test_submit_requires_answers(self, auth_client, seeded_quiz):
        resp = auth_client.post(f"/api/quizzes/{seeded_quiz['quiz_id']}/attempts", json={})
        assert resp.status_code == 400

    def test_submit_oversized_time_rejected(self, auth_client, seeded_quiz):
        q1, q2 = seeded_quiz["question_ids"]
        resp = auth_client.post(f"/api/quizzes/{seeded_quiz['quiz_id']}/attempts", json={
            "answers": {str(q1): "Aperture", str(q2): "true"},
            "time_taken_minutes": 10**19,
        })
        assert resp.status_code == 400
        assert "error" in resp.get_json()
        assert auth_client.get("/api/quiz-attempts").get_json()["attempts"] == []

    def test_submit_zero_point_quiz(self, auth_client, legacy_zero_point_quiz):
        resp = auth_client.post(f"/api/quizzes/{legacy_zero_point_quiz}/attempts", json={"answers": {}})
        assert resp.status_code == 400

    def test_attempt_history_and_best(self, auth_client, seeded_quiz):
        quiz_id = seeded_quiz["quiz_id"]
        q1, q2 = seeded_quiz["question_ids"]
        assert auth_client.get(f"/api/quizzes/{quiz_id}/best").get_json() == {"attempt": None}
        auth_client.post(f"/api/quizzes/{quiz_id}/attempts", json={"answers": {str(q1): "Aperture"}})
        auth_client.post(f"/api/quizzes/{quiz_id}/attempts", json={
            "answers": {str(q1): "Aperture", str(q2): "true"},
        })
        history = auth_client.get("/api/quiz-attempts").get_json()["attempts"]
        assert len(history) == 2
        best = auth_client.get(f"/api/quizzes/{quiz_id}/best").get_json()["attempt"]
        assert best["score"] == 10
