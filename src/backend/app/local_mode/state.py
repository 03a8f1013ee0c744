"""
本地模式数据结构

用户资料和课程目录在本地以 JSON 文本保存，读取时用 pydantic 校验，
校验失败即视为数据损坏。
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, model_validator

from app.core.course_fields import (
    Category,
    Description,
    DurationMins,
    LessonContent,
    LessonTitle,
    Level,
    Prompt,
    QuizTitle,
    Slug,
    Title,
)
from app.core.permissions import Role
from app.core.progress import ProgressState


class LocalResource(BaseModel):
    label: str
    url: HttpUrl


class LocalLesson(BaseModel):
    id: str
    title: LessonTitle
    content: LessonContent
    resources: List[LocalResource] = Field(default_factory=list)
    order: int = 0


class LocalQuestion(BaseModel):
    id: str
    prompt: Prompt
    choices: List[str] = Field(..., min_length=2)
    answer_index: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _answer_in_choices(self):
        if self.answer_index >= len(self.choices):
            raise ValueError("answer_index 超出选项范围")
        return self


class LocalQuiz(BaseModel):
    id: str
    title: QuizTitle
    questions: List[LocalQuestion] = Field(..., min_length=1)


class LocalCourse(BaseModel):
    """与服务端创建课程相同的字段规则"""
    id: str = Field(..., min_length=1)
    slug: Slug
    title: Title
    description: Description
    category: Category
    level: Level
    duration_mins: DurationMins
    lessons: List[LocalLesson] = Field(default_factory=list)
    quiz: Optional[LocalQuiz] = None


class LocalProgress(BaseModel):
    """单门课程的本地进度"""
    completed_lesson_ids: List[str] = Field(default_factory=list)
    quiz_score: Optional[int] = Field(None, ge=0, le=100)

    def to_state(self) -> ProgressState:
        return ProgressState(
            completed_lesson_ids=frozenset(self.completed_lesson_ids),
            quiz_score=self.quiz_score,
        )

    @classmethod
    def from_state(cls, state: ProgressState) -> "LocalProgress":
        return cls(
            completed_lesson_ids=sorted(state.completed_lesson_ids),
            quiz_score=state.quiz_score,
        )


class UserProfile(BaseModel):
    """本地登录用户"""
    name: str = Field(..., min_length=2)
    role: Role
    enrolled: List[str] = Field(default_factory=list)
    progress: Dict[str, LocalProgress] = Field(default_factory=dict)


CourseList = TypeAdapter(List[LocalCourse])


@dataclass
class AppState:
    """应用状态：当前用户 + 课程目录，由 LocalLMS 显式持久化"""
    current_user: Optional[UserProfile] = None
    courses: List[LocalCourse] = field(default_factory=list)

    def find_course(self, course_id: str) -> Optional[LocalCourse]:
        return next((c for c in self.courses if c.id == course_id), None)
