"""
课时模型
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from .base import Base


class Lesson(Base):
    """课时模型"""
    __tablename__ = "lessons"

    id = Column(String(36), primary_key=True, index=True)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    resources = Column(JSON, nullable=True, default=list)  # [{"label": "...", "url": "..."}]
    order = Column(Integer, default=0)  # 课程内显示顺序
    created_at = Column(DateTime, default=datetime.utcnow)

    # 关系
    course = relationship("Course", back_populates="lessons")

    def __repr__(self):
        return f"<Lesson(id='{self.id}' course_id='{self.course_id}' order={self.order})>"
