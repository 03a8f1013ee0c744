"""
报名API
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import NotFoundError
from app.core.permissions import Action
from app.core.security import require_permission
from app.models import User
from app.services import EnrollmentService

router = APIRouter(prefix="/enroll", tags=["报名"])


class EnrollRequest(BaseModel):
    """报名请求"""
    course_id: str = Field(..., min_length=1)


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def enroll(
    request: EnrollRequest,
    user: User = Depends(require_permission(Action.ENROLL)),
    db: Session = Depends(get_db)
):
    """
    报名课程

    幂等：重复报名返回已有记录，不会新增。
    """
    try:
        enrollment = EnrollmentService.enroll(db, user.id, request.course_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return EnrollmentService.to_dict(enrollment)


@router.get("", response_model=List[dict])
def list_enrollments(
    user: User = Depends(require_permission(Action.VIEW_DASHBOARD)),
    db: Session = Depends(get_db)
):
    """列出当前用户已报名的课程"""
    result = []
    for enrollment in EnrollmentService.list_enrollments(db, user.id):
        item = EnrollmentService.to_dict(enrollment)
        item["course_title"] = enrollment.course.title
        item["course_slug"] = enrollment.course.slug
        result.append(item)
    return result
