"""
课程模型
删除课程时级联删除课时、测验、报名和学习进度
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from .base import Base


class Course(Base):
    """课程模型"""
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, index=True)
    slug = Column(String(120), unique=True, nullable=False, index=True)  # URL 友好的唯一标识
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False, index=True)
    level = Column(String(20), nullable=False, index=True)  # beginner | intermediate | advanced
    duration_mins = Column(Integer, nullable=False)
    created_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # 关系
    lessons = relationship(
        "Lesson",
        back_populates="course",
        order_by="Lesson.order",
        cascade="all, delete-orphan",
    )
    quiz = relationship(
        "Quiz",
        back_populates="course",
        uselist=False,
        cascade="all, delete-orphan",
    )
    enrollments = relationship(
        "Enrollment", back_populates="course", cascade="all, delete-orphan"
    )
    progresses = relationship(
        "CourseProgress", cascade="all, delete-orphan"
    )
    lesson_completions = relationship(
        "LessonCompletion", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Course(id='{self.id}' slug='{self.slug}' title='{self.title}')>"
