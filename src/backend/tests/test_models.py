"""
数据模型约束测试
"""
import pytest
from sqlalchemy.exc import IntegrityError

from app.models import Course, CourseProgress, Enrollment, LessonCompletion
from app.services import CourseService, EnrollmentService, ProgressService


class TestUniqueConstraints:

    def test_enrollment_unique_per_user_course(self, db_session, student, seeded_courses):
        db_session.add(Enrollment(id="e1", user_id=student.id, course_id="c-js-101"))
        db_session.commit()
        db_session.add(Enrollment(id="e2", user_id=student.id, course_id="c-js-101"))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_lesson_completion_unique(self, db_session, student, seeded_courses):
        for row_id in ("lc1", "lc2"):
            db_session.add(LessonCompletion(
                id=row_id, user_id=student.id, course_id="c-js-101", lesson_id="l-js-1"
            ))
        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()


class TestCourseRelationships:

    def test_lessons_ordered(self, db_session, seeded_courses):
        course = db_session.query(Course).filter(Course.id == "c-js-101").one()
        assert [lesson.order for lesson in course.lessons] == [1, 2, 3]
        assert [q.id for q in course.quiz.questions] == ["q1", "q2"]

    def test_delete_removes_learning_records(self, db_session, student, seeded_courses):
        EnrollmentService.enroll(db_session, student.id, "c-ui-201")
        ProgressService.submit_progress(db_session, student.id, "c-ui-201", completed_lesson_id="l-ui-1", score=80)

        CourseService.delete_course(db_session, "c-ui-201")

        assert db_session.query(Enrollment).count() == 0
        assert db_session.query(CourseProgress).count() == 0
        assert db_session.query(LessonCompletion).count() == 0
