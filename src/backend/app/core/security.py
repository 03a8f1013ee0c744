"""
认证与鉴权模块

提供密码哈希、访问令牌签发/校验，以及 FastAPI 依赖：
    get_current_user_optional  读取调用者身份（可为空）
    get_current_user           必须登录
    require_permission(action) 在处理函数执行前经过权限判定

使用方式：
    @router.post("", dependencies=[Depends(require_permission(Action.CREATE_COURSE))])
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.permissions import Action, Decision, can_perform
from app.models import User

JWT_ALGORITHM = "HS256"

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """生成 bcrypt 密码哈希"""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """校验密码，哈希格式异常时视为不匹配"""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(user_id: str, role: str) -> str:
    """
    签发访问令牌

    Args:
        user_id: 用户ID（写入 sub）
        role: 用户角色

    Returns:
        str: HS256 JWT
    """
    settings = get_settings()
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.access_token_expire_hours)
    to_encode = {"sub": user_id, "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    """校验令牌，过期或签名错误返回 None"""
    try:
        return jwt.decode(token, get_settings().jwt_secret_key, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        return None


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """
    获取当前调用者

    缺少令牌、令牌无效或用户已删除时返回 None（视为未登录）。
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        return None

    user = db.query(User).filter(
        User.id == payload["sub"],
        User.is_deleted == False
    ).first()
    return user


def _raise_for_decision(decision: Decision) -> None:
    if decision is Decision.UNAUTHENTICATED:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="请先登录",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if decision is Decision.FORBIDDEN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="当前角色无权执行该操作",
        )


def get_current_user(
    user: Optional[User] = Depends(get_current_user_optional),
) -> User:
    """必须登录的接口使用"""
    if user is None:
        _raise_for_decision(Decision.UNAUTHENTICATED)
    return user


def require_permission(action: Action):
    """
    生成权限判定依赖

    判定通过时返回调用者（公开动作下可能为 None），否则抛出 401/403。
    """

    def dependency(user: Optional[User] = Depends(get_current_user_optional)) -> Optional[User]:
        decision = can_perform(user.role if user else None, action)
        _raise_for_decision(decision)
        return user

    return dependency
