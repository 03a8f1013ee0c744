"""
CourseHub 数据模型
课程目录、报名与学习进度
"""

from .base import Base
from .user import User
from .course import Course
from .lesson import Lesson
from .quiz import Quiz, Question
from .enrollment import Enrollment
from .course_progress import CourseProgress, LessonCompletion

__all__ = [
    "Base",
    "User",
    "Course",
    "Lesson",
    "Quiz",
    "Question",
    "Enrollment",
    "CourseProgress",
    "LessonCompletion",
]
def init_db():
    """创建 CourseHub 全部数据表（已存在的表保持不变）"""
    from ..core.database import engine

    Base.metadata.create_all(bind=engine)
    print(f"✅ 已创建/确认 {len(Base.metadata.tables)} 张数据表")


def drop_all():
    """删除所有表，课程、报名与学习进度一并清空（仅开发用）"""
    from ..core.database import engine

    Base.metadata.drop_all(bind=engine)
    print("⚠️  已删除所有数据表")
