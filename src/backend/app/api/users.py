"""
用户管理API路由
注册、登录、获取当前用户
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.permissions import Role
from app.core.security import create_access_token, get_current_user
from app.models import User
from app.services.user_service import UserService


router = APIRouter(prefix="/users", tags=["用户管理"])


# Schemas
class RegisterRequest(BaseModel):
    """注册请求"""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    role: Role = Role.STUDENT

    @field_validator("password")
    @classmethod
    def _bcrypt_limit(cls, value: str) -> str:
        # bcrypt 只接受不超过 72 字节的密码
        if len(value.encode("utf-8")) > 72:
            raise ValueError("密码不能超过 72 字节")
        return value


class LoginRequest(BaseModel):
    """登录请求"""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """用户响应"""
    id: str
    name: str
    email: str
    role: Role
    created_at: Optional[datetime]
    last_login: Optional[datetime]

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    """登录响应"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


# Endpoints
@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    注册用户

    未开放角色自选时（OPEN_ROLE_SIGNUP=false），只能注册学生账号。
    """
    if request.role != Role.STUDENT and not get_settings().open_role_signup:
        raise HTTPException(status_code=403, detail="不允许自助注册讲师或管理员账号")

    return UserService.register_user(
        db,
        name=request.name,
        email=request.email,
        password=request.password,
        role=request.role,
    )


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Session = Depends(get_db)):
    """邮箱密码登录，返回访问令牌"""
    user = UserService.authenticate(db, request.email, request.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="邮箱或密码错误",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(
        access_token=create_access_token(user.id, user.role),
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    """获取当前登录用户"""
    return user
