"""
用户课程进度模型
每个 (用户, 课程) 一条进度记录，已完成课时单独成行，保证并发下的集合并集语义
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint
from datetime import datetime

from .base import Base


class CourseProgress(Base):
    """用户课程进度（最新测验得分）"""
    __tablename__ = "course_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_progress_user_course"),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    quiz_score = Column(Integer, nullable=True)  # 最新测验得分 0-100，每次提交覆盖
    started_at = Column(DateTime, default=datetime.utcnow)  # 第一次产生进度的时间
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<CourseProgress(user='{self.user_id}' course='{self.course_id}' score={self.quiz_score})>"


class LessonCompletion(Base):
    """已完成课时"""
    __tablename__ = "lesson_completions"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", "lesson_id", name="uq_completion_user_course_lesson"),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_id = Column(String(36), nullable=False)  # 不做外键：不校验课时归属
    completed_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<LessonCompletion(user='{self.user_id}' course='{self.course_id}' lesson='{self.lesson_id}')>"
