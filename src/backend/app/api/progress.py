"""
学习进度API
进度提交与学习看板
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import NotFoundError
from app.core.permissions import Action
from app.core.security import require_permission
from app.models import User
from app.services import CourseService, ProgressService

router = APIRouter(tags=["学习进度"])


class ProgressSubmitRequest(BaseModel):
    """进度提交：可同时携带新完成的课时和最新测验得分"""
    course_id: str = Field(..., min_length=1)
    completed_lesson_id: Optional[str] = None
    score: Optional[int] = Field(None, ge=0, le=100)


@router.post("/progress", response_model=dict, status_code=status.HTTP_201_CREATED)
def submit_progress(
    request: ProgressSubmitRequest,
    user: User = Depends(require_permission(Action.SUBMIT_PROGRESS)),
    db: Session = Depends(get_db)
):
    """
    提交学习进度

    已完成课时按集合合并（重复提交无影响），得分覆盖旧值；
    都不携带时只确保进度记录存在。
    """
    try:
        progress = ProgressService.submit_progress(
            db,
            user.id,
            request.course_id,
            completed_lesson_id=request.completed_lesson_id,
            score=request.score,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ProgressService.progress_to_dict(request.course_id, progress)


@router.get("/progress/{course_id}", response_model=dict)
def get_progress(
    course_id: str,
    user: User = Depends(require_permission(Action.VIEW_DASHBOARD)),
    db: Session = Depends(get_db)
):
    """获取当前用户在某课程的进度（未开始时返回空进度）"""
    if not CourseService.course_exists(db, course_id):
        raise HTTPException(status_code=404, detail="课程不存在")
    progress = ProgressService.get_progress(db, user.id, course_id)
    return ProgressService.progress_to_dict(course_id, progress)


@router.get("/dashboard", response_model=dict)
def get_dashboard(
    user: User = Depends(require_permission(Action.VIEW_DASHBOARD)),
    db: Session = Depends(get_db)
):
    """
    学习看板

    Returns:
        dict: summary（报名数、课时总数、已完成数、平均分）与已报名课程卡片
    """
    return ProgressService.get_dashboard(db, user.id)
