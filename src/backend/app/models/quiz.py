"""
测验与题目模型
每门课程最多一个测验，题目按 position 排序
"""
from sqlalchemy import Column, String, Integer, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime

from .base import Base


class Quiz(Base):
    """测验模型"""
    __tablename__ = "quizzes"

    id = Column(String(36), primary_key=True, index=True)
    course_id = Column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    title = Column(String(200), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # 关系
    course = relationship("Course", back_populates="quiz")
    questions = relationship(
        "Question",
        back_populates="quiz",
        order_by="Question.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Quiz(id='{self.id}' course_id='{self.course_id}' title='{self.title}')>"


class Question(Base):
    """单选题模型"""
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True, index=True)
    quiz_id = Column(String(36), ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False, index=True)
    prompt = Column(Text, nullable=False)
    choices = Column(JSON, nullable=False)  # ["var", "let", ...]，至少两个选项
    answer_index = Column(Integer, nullable=False)  # 正确选项下标（从0开始）
    position = Column(Integer, nullable=False, default=0)  # 题目在测验中的位置

    # 关系
    quiz = relationship("Quiz", back_populates="questions")

    def __repr__(self):
        return f"<Question(id='{self.id}' quiz_id='{self.quiz_id}' position={self.position})>"
