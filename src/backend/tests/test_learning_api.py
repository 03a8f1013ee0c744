"""
报名、学习进度、测验提交与学习看板 API 测试
"""
from app.models import CourseProgress, Enrollment, LessonCompletion


class TestEnroll:

    def test_enroll(self, client, student_headers, seeded_courses):
        response = client.post("/api/enroll", json={"course_id": "c-js-101"}, headers=student_headers)
        assert response.status_code == 201
        assert response.json()["course_id"] == "c-js-101"

    def test_enroll_is_idempotent(self, client, db_session, student, student_headers, seeded_courses):
        first = client.post("/api/enroll", json={"course_id": "c-js-101"}, headers=student_headers)
        second = client.post("/api/enroll", json={"course_id": "c-js-101"}, headers=student_headers)

        assert first.status_code == second.status_code == 201
        assert first.json()["id"] == second.json()["id"]
        assert db_session.query(Enrollment).filter(
            Enrollment.user_id == student.id,
            Enrollment.course_id == "c-js-101"
        ).count() == 1

    def test_enroll_requires_login(self, client, seeded_courses):
        response = client.post("/api/enroll", json={"course_id": "c-js-101"})
        assert response.status_code == 401

    def test_instructor_can_enroll(self, client, instructor_headers, seeded_courses):
        response = client.post("/api/enroll", json={"course_id": "c-ui-201"}, headers=instructor_headers)
        assert response.status_code == 201

    def test_unknown_course(self, client, student_headers, seeded_courses):
        response = client.post("/api/enroll", json={"course_id": "nope"}, headers=student_headers)
        assert response.status_code == 404

    def test_list_enrollments(self, client, student_headers, seeded_courses):
        client.post("/api/enroll", json={"course_id": "c-ui-201"}, headers=student_headers)
        response = client.get("/api/enroll", headers=student_headers)
        assert response.status_code == 200
        data = response.json()
        assert [e["course_slug"] for e in data] == ["ui-ux-essentials"]


class TestProgress:

    def test_lessons_merge_as_set(self, client, db_session, student, student_headers, seeded_courses):
        for lesson_id in ["l-js-1", "l-js-2", "l-js-1"]:
            response = client.post(
                "/api/progress",
                json={"course_id": "c-js-101", "completed_lesson_id": lesson_id},
                headers=student_headers,
            )
            assert response.status_code == 201

        assert response.json()["completed_lesson_ids"] == ["l-js-1", "l-js-2"]
        assert db_session.query(LessonCompletion).filter(
            LessonCompletion.user_id == student.id
        ).count() == 2
        assert db_session.query(CourseProgress).filter(
            CourseProgress.user_id == student.id
        ).count() == 1

    def test_score_overwrites_and_keeps_lessons(self, client, student_headers, seeded_courses):
        client.post(
            "/api/progress",
            json={"course_id": "c-js-101", "completed_lesson_id": "l-js-1", "score": 40},
            headers=student_headers,
        )
        response = client.post(
            "/api/progress", json={"course_id": "c-js-101", "score": 90}, headers=student_headers
        )
        data = response.json()
        assert data["quiz_score"] == 90
        assert data["completed_lesson_ids"] == ["l-js-1"]

    def test_lesson_without_score_keeps_score(self, client, student_headers, seeded_courses):
        client.post("/api/progress", json={"course_id": "c-js-101", "score": 70}, headers=student_headers)
        response = client.post(
            "/api/progress",
            json={"course_id": "c-js-101", "completed_lesson_id": "l-js-3"},
            headers=student_headers,
        )
        assert response.json()["quiz_score"] == 70

    def test_score_out_of_range(self, client, student_headers, seeded_courses):
        response = client.post(
            "/api/progress", json={"course_id": "c-js-101", "score": 101}, headers=student_headers
        )
        assert response.status_code == 400
        assert "score" in response.json()["errors"]

    def test_unknown_course(self, client, student_headers, seeded_courses):
        response = client.post(
            "/api/progress", json={"course_id": "nope", "completed_lesson_id": "x"}, headers=student_headers
        )
        assert response.status_code == 404

    def test_requires_login(self, client, seeded_courses):
        response = client.post("/api/progress", json={"course_id": "c-js-101", "score": 50})
        assert response.status_code == 401

    def test_get_progress_not_started(self, client, student_headers, seeded_courses):
        response = client.get("/api/progress/c-ui-201", headers=student_headers)
        assert response.status_code == 200
        assert response.json() == {"course_id": "c-ui-201", "completed_lesson_ids": [], "quiz_score": None}

    def test_progress_is_per_user(self, client, student_headers, instructor_headers, seeded_courses):
        client.post(
            "/api/progress",
            json={"course_id": "c-ui-201", "completed_lesson_id": "l-ui-1"},
            headers=student_headers,
        )
        response = client.get("/api/progress/c-ui-201", headers=instructor_headers)
        assert response.json()["completed_lesson_ids"] == []


class TestQuizSubmit:

    def test_all_correct(self, client, student_headers, seeded_courses):
        response = client.post(
            "/api/courses/c-js-101/quiz/submit", json={"answers": [1, 3]}, headers=student_headers
        )
        assert response.status_code == 201
        data = response.json()
        assert data["score"] == 100
        assert data["correct"] == 2
        assert data["total"] == 2
        assert data["passed"] is True
        assert data["progress"]["quiz_score"] == 100

    def test_partial_answers(self, client, student_headers, seeded_courses):
        response = client.post(
            "/api/courses/c-js-101/quiz/submit", json={"answers": [1, 0]}, headers=student_headers
        )
        assert response.json()["score"] == 50
        assert response.json()["passed"] is False

    def test_no_answers_scores_zero(self, client, student_headers, seeded_courses):
        response = client.post("/api/courses/c-js-101/quiz/submit", json={"answers": []}, headers=student_headers)
        assert response.json()["score"] == 0

    def test_latest_score_wins(self, client, student_headers, seeded_courses):
        client.post("/api/courses/c-js-101/quiz/submit", json={"answers": [1, 3]}, headers=student_headers)
        client.post("/api/courses/c-js-101/quiz/submit", json={"answers": [0, 0]}, headers=student_headers)
        response = client.get("/api/progress/c-js-101", headers=student_headers)
        assert response.json()["quiz_score"] == 0

    def test_course_without_quiz(self, client, instructor_headers, student_headers, seeded_courses):
        client.delete("/api/courses/c-ui-201/quiz", headers=instructor_headers)
        response = client.post(
            "/api/courses/c-ui-201/quiz/submit", json={"answers": [2]}, headers=student_headers
        )
        assert response.status_code == 404

    def test_requires_login(self, client, seeded_courses):
        response = client.post("/api/courses/c-js-101/quiz/submit", json={"answers": [1, 3]})
        assert response.status_code == 401


class TestDashboard:

    def test_catalog_wide_totals(self, client, student_headers, seeded_courses):
        client.post("/api/enroll", json={"course_id": "c-js-101"}, headers=student_headers)
        for lesson_id in ["l-js-1", "l-js-2"]:
            client.post(
                "/api/progress",
                json={"course_id": "c-js-101", "completed_lesson_id": lesson_id},
                headers=student_headers,
            )

        response = client.get("/api/dashboard", headers=student_headers)
        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["enrolled_count"] == 1
        assert summary["total_lessons"] == 5
        assert summary["completed_count"] >= 2
        assert summary["average_score"] is None

        cards = response.json()["courses"]
        assert len(cards) == 1
        assert cards[0]["course_id"] == "c-js-101"
        assert cards[0]["completed_lessons"] == 2
        assert cards[0]["completion_percentage"] == 67

    def test_zero_score_counts_in_average(self, client, student_headers, seeded_courses):
        client.post("/api/courses/c-js-101/quiz/submit", json={"answers": [0, 0]}, headers=student_headers)
        client.post("/api/courses/c-ui-201/quiz/submit", json={"answers": [2]}, headers=student_headers)

        summary = client.get("/api/dashboard", headers=student_headers).json()["summary"]
        assert summary["average_score"] == 50

    def test_empty_dashboard(self, client, student_headers, seeded_courses):
        data = client.get("/api/dashboard", headers=student_headers).json()
        assert data["summary"] == {
            "enrolled_count": 0,
            "total_lessons": 5,
            "completed_count": 0,
            "average_score": None,
        }
        assert data["courses"] == []

    def test_requires_login(self, client):
        assert client.get("/api/dashboard").status_code == 401
