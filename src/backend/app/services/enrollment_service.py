"""
报名服务
"""
import logging
import uuid
from datetime import datetime
from typing import List

from sqlalchemy.orm import Session, joinedload

from app.core.database import dialect_insert
from app.core.errors import NotFoundError
from app.models import Enrollment
from app.services.course_service import CourseService

logger = logging.getLogger(__name__)


class EnrollmentService:
    """报名服务"""

    @staticmethod
    def enroll(db: Session, user_id: str, course_id: str) -> Enrollment:
        """
        报名课程（幂等）

        使用 INSERT ... ON CONFLICT DO NOTHING，重复报名不会产生第二条记录，
        也不会修改已有记录。

        Args:
            db: 数据库会话
            user_id: 用户ID
            course_id: 课程ID

        Returns:
            Enrollment: 报名记录（新建或已存在的）

        Raises:
            NotFoundError: 课程不存在
        """
        if not CourseService.course_exists(db, course_id):
            raise NotFoundError(f"课程 {course_id} 不存在")

        stmt = dialect_insert(db, Enrollment).values(
            id=str(uuid.uuid4()),
            user_id=user_id,
            course_id=course_id,
            created_at=datetime.utcnow(),
        ).on_conflict_do_nothing(index_elements=["user_id", "course_id"])
        result = db.execute(stmt)
        db.commit()

        if result.rowcount:
            logger.info(f"报名成功: user={user_id}, course={course_id}")

        return db.query(Enrollment).filter(
            Enrollment.user_id == user_id,
            Enrollment.course_id == course_id
        ).one()

    @staticmethod
    def list_enrollments(db: Session, user_id: str) -> List[Enrollment]:
        """列出用户的报名记录（附带课程），按报名时间排序"""
        return db.query(Enrollment).options(
            joinedload(Enrollment.course)
        ).filter(
            Enrollment.user_id == user_id
        ).order_by(Enrollment.created_at.asc()).all()

    @staticmethod
    def to_dict(enrollment: Enrollment) -> dict:
        return {
            "id": enrollment.id,
            "user_id": enrollment.user_id,
            "course_id": enrollment.course_id,
            "created_at": enrollment.created_at.isoformat() if enrollment.created_at else None,
        }
