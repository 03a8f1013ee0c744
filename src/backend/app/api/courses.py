"""
课程管理API

课程目录与详情对所有人开放；课程、课时、测验的增删改仅限讲师和管理员。
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field, HttpUrl, model_validator
from sqlalchemy.orm import Session

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
from app.core.database import get_db
from app.core.errors import NotFoundError
from app.core.permissions import Action, can_manage_content
from app.core.progress import PASSING_SCORE
from app.core.security import require_permission
from app.models import User
from app.services import CourseService, ProgressService

router = APIRouter(prefix="/courses", tags=["课程管理"])


# ==================== Schemas ====================

class ResourceLink(BaseModel):
    """课时参考链接"""
    label: str
    url: HttpUrl


class LessonRequest(BaseModel):
    """课时"""
    id: Optional[str] = Field(None, max_length=36)
    title: LessonTitle
    content: LessonContent
    resources: Optional[List[ResourceLink]] = None
    order: Optional[int] = Field(None, ge=0)


class LessonUpdateRequest(BaseModel):
    """课时更新（只更新传入字段）"""
    title: Optional[LessonTitle] = None
    content: Optional[LessonContent] = None
    resources: Optional[List[ResourceLink]] = None
    order: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def _required_not_null(self):
        for name in ("title", "content", "order"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} 不能为空")
        return self


class QuestionRequest(BaseModel):
    """单选题"""
    id: Optional[str] = Field(None, max_length=36)
    prompt: Prompt
    choices: List[str] = Field(..., min_length=2)
    answer_index: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _answer_in_choices(self):
        if self.answer_index >= len(self.choices):
            raise ValueError("answer_index 超出选项范围")
        return self


class QuizRequest(BaseModel):
    """测验（至少一道题）"""
    id: Optional[str] = Field(None, max_length=36)
    title: QuizTitle
    questions: List[QuestionRequest] = Field(..., min_length=1)


class CourseCreateRequest(BaseModel):
    """创建课程请求"""
    slug: Slug
    title: Title
    description: Description
    category: Category
    level: Level
    duration_mins: DurationMins
    lessons: Optional[List[LessonRequest]] = None
    quiz: Optional[QuizRequest] = None


class CourseUpdateRequest(BaseModel):
    """更新课程请求（PUT/PATCH 均只更新传入字段）"""
    slug: Optional[Slug] = None
    title: Optional[Title] = None
    description: Optional[Description] = None
    category: Optional[Category] = None
    level: Optional[Level] = None
    duration_mins: Optional[DurationMins] = None

    @model_validator(mode="after")
    def _not_null(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} 不能为空")
        return self


class QuizSubmitRequest(BaseModel):
    """测验提交：answers 与题目按位置对应，-1 表示未作答"""
    answers: List[int] = Field(default_factory=list)


# ==================== 课程目录 ====================

@router.get("", response_model=List[dict])
def get_courses(
    q: Optional[str] = None,
    category: Optional[str] = None,
    level: Optional[str] = None,
    user: Optional[User] = Depends(require_permission(Action.VIEW_CATALOG)),
    db: Session = Depends(get_db)
):
    """
    获取课程目录

    Args:
        q: 关键字（标题/描述/分类/难度）
        category: 分类
        level: 难度
        db: 数据库会话

    Returns:
        List[dict]: 课程列表（不含课时正文）
    """
    courses = CourseService.get_courses(db, search=q, category=category, level=level)
    return [CourseService.course_summary(c) for c in courses]


@router.get("/by-slug/{slug}", response_model=dict)
def get_course_by_slug(
    slug: str,
    user: Optional[User] = Depends(require_permission(Action.VIEW_COURSE)),
    db: Session = Depends(get_db)
):
    """通过 slug 获取课程详情"""
    course = CourseService.get_course_by_slug(db, slug)
    if not course:
        raise HTTPException(status_code=404, detail="课程不存在")
    return CourseService.course_to_dict(course, include_answers=can_manage_content(user.role if user else None))


@router.get("/{course_id}", response_model=dict)
def get_course(
    course_id: str,
    user: Optional[User] = Depends(require_permission(Action.VIEW_COURSE)),
    db: Session = Depends(get_db)
):
    """
    获取课程详情（含课时与测验）

    正确答案只对讲师和管理员返回。
    """
    course = CourseService.get_course_by_id(db, course_id)
    if not course:
        raise HTTPException(status_code=404, detail="课程不存在")
    return CourseService.course_to_dict(course, include_answers=can_manage_content(user.role if user else None))


# ==================== 课程增删改 ====================

@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_course(
    request: CourseCreateRequest,
    user: User = Depends(require_permission(Action.CREATE_COURSE)),
    db: Session = Depends(get_db)
):
    """创建课程（可同时创建课时与测验）"""
    course = CourseService.create_course(db, request.model_dump(mode="json"), created_by=user.id)
    return CourseService.course_to_dict(course, include_answers=True)


def _update_course(course_id: str, request: CourseUpdateRequest, db: Session) -> dict:
    try:
        course = CourseService.update_course(db, course_id, request.model_dump(mode="json", exclude_unset=True))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CourseService.course_to_dict(course, include_answers=True)


@router.put("/{course_id}", response_model=dict)
def update_course(
    course_id: str,
    request: CourseUpdateRequest,
    user: User = Depends(require_permission(Action.EDIT_COURSE)),
    db: Session = Depends(get_db)
):
    """更新课程"""
    return _update_course(course_id, request, db)


@router.patch("/{course_id}", response_model=dict)
def patch_course(
    course_id: str,
    request: CourseUpdateRequest,
    user: User = Depends(require_permission(Action.EDIT_COURSE)),
    db: Session = Depends(get_db)
):
    """部分更新课程"""
    return _update_course(course_id, request, db)


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(
    course_id: str,
    user: User = Depends(require_permission(Action.DELETE_COURSE)),
    db: Session = Depends(get_db)
):
    """删除课程（级联删除课时、测验、报名与进度）"""
    try:
        CourseService.delete_course(db, course_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== 课时 ====================

@router.post("/{course_id}/lessons", response_model=dict, status_code=status.HTTP_201_CREATED)
def add_lesson(
    course_id: str,
    request: LessonRequest,
    user: User = Depends(require_permission(Action.EDIT_COURSE)),
    db: Session = Depends(get_db)
):
    """添加课时"""
    try:
        lesson = CourseService.add_lesson(db, course_id, request.model_dump(mode="json"))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CourseService.lesson_to_dict(lesson)


@router.put("/{course_id}/lessons/{lesson_id}", response_model=dict)
def update_lesson(
    course_id: str,
    lesson_id: str,
    request: LessonUpdateRequest,
    user: User = Depends(require_permission(Action.EDIT_COURSE)),
    db: Session = Depends(get_db)
):
    """更新课时"""
    try:
        lesson = CourseService.update_lesson(
            db, course_id, lesson_id, request.model_dump(mode="json", exclude_unset=True)
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CourseService.lesson_to_dict(lesson)


@router.delete("/{course_id}/lessons/{lesson_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lesson(
    course_id: str,
    lesson_id: str,
    user: User = Depends(require_permission(Action.EDIT_COURSE)),
    db: Session = Depends(get_db)
):
    """删除课时"""
    try:
        CourseService.delete_lesson(db, course_id, lesson_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== 测验 ====================

@router.put("/{course_id}/quiz", response_model=dict)
def replace_quiz(
    course_id: str,
    request: QuizRequest,
    user: User = Depends(require_permission(Action.EDIT_COURSE)),
    db: Session = Depends(get_db)
):
    """设置课程测验（整体替换）"""
    try:
        quiz = CourseService.replace_quiz(db, course_id, request.model_dump(mode="json"))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return CourseService.quiz_to_dict(quiz, include_answers=True)


@router.delete("/{course_id}/quiz", status_code=status.HTTP_204_NO_CONTENT)
def delete_quiz(
    course_id: str,
    user: User = Depends(require_permission(Action.EDIT_COURSE)),
    db: Session = Depends(get_db)
):
    """删除课程测验"""
    try:
        CourseService.delete_quiz(db, course_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{course_id}/quiz/submit", response_model=dict, status_code=status.HTTP_201_CREATED)
def submit_quiz(
    course_id: str,
    request: QuizSubmitRequest,
    user: User = Depends(require_permission(Action.SUBMIT_QUIZ)),
    db: Session = Depends(get_db)
):
    """
    提交测验

    服务端按位置对齐计分，得分覆盖该课程的最新测验成绩。
    """
    try:
        result, progress = ProgressService.submit_quiz(db, user.id, course_id, request.answers)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {
        "score": result.score,
        "correct": result.correct,
        "total": result.total,
        "passed": result.passed,
        "passing_score": PASSING_SCORE,
        "progress": ProgressService.progress_to_dict(course_id, progress),
    }
