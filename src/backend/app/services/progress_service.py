"""
学习进度服务

写入全部走数据库原子 upsert：
- 进度记录：(user_id, course_id) 唯一，测验得分 ON CONFLICT DO UPDATE 覆盖
- 已完成课时：(user_id, course_id, lesson_id) 唯一，ON CONFLICT DO NOTHING 即集合并集
"""
import logging
import uuid
from dataclasses import asdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from app.core.database import dialect_insert
from app.core.errors import NotFoundError, ValidationFailed
from app.core.progress import (
    ProgressState,
    QuizResult,
    aggregate_dashboard,
    completion_percentage,
    quiz_result,
)
from app.models import CourseProgress, LessonCompletion
from app.services.course_service import CourseService
from app.services.enrollment_service import EnrollmentService

logger = logging.getLogger(__name__)


class ProgressService:
    """学习进度服务"""

    @staticmethod
    def get_progress(db: Session, user_id: str, course_id: str) -> Optional[ProgressState]:
        """
        获取用户在某课程的进度

        Returns:
            Optional[ProgressState]: 从未产生进度时为 None
        """
        record = db.query(CourseProgress).filter(
            CourseProgress.user_id == user_id,
            CourseProgress.course_id == course_id
        ).first()
        if record is None:
            return None

        rows = db.query(LessonCompletion.lesson_id).filter(
            LessonCompletion.user_id == user_id,
            LessonCompletion.course_id == course_id
        ).all()
        return ProgressState(
            completed_lesson_ids=frozenset(row.lesson_id for row in rows),
            quiz_score=record.quiz_score,
        )

    @staticmethod
    def progress_by_course(db: Session, user_id: str) -> Dict[str, ProgressState]:
        """用户全部课程进度，按课程ID索引"""
        completed: Dict[str, set] = {}
        for row in db.query(LessonCompletion.course_id, LessonCompletion.lesson_id).filter(
            LessonCompletion.user_id == user_id
        ).all():
            completed.setdefault(row.course_id, set()).add(row.lesson_id)

        result = {}
        for record in db.query(CourseProgress).filter(CourseProgress.user_id == user_id).all():
            result[record.course_id] = ProgressState(
                completed_lesson_ids=frozenset(completed.get(record.course_id, ())),
                quiz_score=record.quiz_score,
            )
        return result

    @staticmethod
    def submit_progress(
        db: Session,
        user_id: str,
        course_id: str,
        completed_lesson_id: Optional[str] = None,
        score: Optional[int] = None,
    ) -> ProgressState:
        """
        合并一次进度提交

        Args:
            db: 数据库会话
            user_id: 用户ID
            course_id: 课程ID
            completed_lesson_id: 新完成的课时（可选，不校验是否属于该课程）
            score: 最新测验得分（可选，0-100，覆盖旧值）

        Returns:
            ProgressState: 合并后的进度

        Raises:
            NotFoundError: 课程不存在
            ValidationFailed: 得分超出范围
        """
        if score is not None and (isinstance(score, bool) or not 0 <= score <= 100):
            raise ValidationFailed.single("score", "得分必须在 0-100 之间")
        if not CourseService.course_exists(db, course_id):
            raise NotFoundError(f"课程 {course_id} 不存在")

        now = datetime.utcnow()
        stmt = dialect_insert(db, CourseProgress).values(
            id=str(uuid.uuid4()),
            user_id=user_id,
            course_id=course_id,
            quiz_score=score,
            started_at=now,
            updated_at=now,
        )
        if score is not None:
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "course_id"],
                set_={"quiz_score": stmt.excluded.quiz_score, "updated_at": stmt.excluded.updated_at},
            )
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=["user_id", "course_id"])
        db.execute(stmt)

        if completed_lesson_id:
            db.execute(
                dialect_insert(db, LessonCompletion).values(
                    id=str(uuid.uuid4()),
                    user_id=user_id,
                    course_id=course_id,
                    lesson_id=completed_lesson_id,
                    completed_at=now,
                ).on_conflict_do_nothing(index_elements=["user_id", "course_id", "lesson_id"])
            )

        db.commit()
        logger.info(
            f"进度已更新: user={user_id}, course={course_id}, "
            f"lesson={completed_lesson_id}, score={score}"
        )
        return ProgressService.get_progress(db, user_id, course_id)

    @staticmethod
    def submit_quiz(
        db: Session,
        user_id: str,
        course_id: str,
        answers: Sequence[int],
    ) -> Tuple[QuizResult, ProgressState]:
        """
        提交测验答案，服务端计分并记录最新得分

        Raises:
            NotFoundError: 课程或测验不存在
            ValidationFailed: 测验没有题目
        """
        course = CourseService.require_course(db, course_id)
        if course.quiz is None:
            raise NotFoundError(f"课程 {course_id} 没有测验")

        try:
            result = quiz_result(course.quiz, answers)
        except ValueError as e:
            raise ValidationFailed.single("answers", str(e))

        progress = ProgressService.submit_progress(db, user_id, course_id, score=result.score)
        return result, progress

    @staticmethod
    def progress_to_dict(course_id: str, progress: Optional[ProgressState]) -> Dict:
        completed: List[str] = sorted(progress.completed_lesson_ids) if progress else []
        return {
            "course_id": course_id,
            "completed_lesson_ids": completed,
            "quiz_score": progress.quiz_score if progress else None,
        }

    @staticmethod
    def get_dashboard(db: Session, user_id: str) -> Dict:
        """
        学习看板

        统计口径：课时总数为全部课程目录之和；已完成数为所有进度记录之和；
        平均分只统计存在得分的课程（0 分计入）。
        """
        courses = CourseService.get_courses(db)
        progress_map = ProgressService.progress_by_course(db, user_id)
        enrollments = EnrollmentService.list_enrollments(db, user_id)

        summary = aggregate_dashboard(
            courses,
            progress_map,
            [enrollment.course_id for enrollment in enrollments],
        )

        lesson_counts = {course.id: len(course.lessons) for course in courses}
        cards = []
        for enrollment in enrollments:
            course = enrollment.course
            progress = progress_map.get(course.id)
            cards.append({
                "course_id": course.id,
                "slug": course.slug,
                "title": course.title,
                "category": course.category,
                "level": course.level,
                "quiz_score": progress.quiz_score if progress else None,
                "completed_lessons": len(progress.completed_lesson_ids) if progress else 0,
                "completion_percentage": completion_percentage(progress, lesson_counts.get(course.id, 0)),
            })

        return {"summary": asdict(summary), "courses": cards}
