"""
用户管理模块
注册和登录校验
"""
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.core.errors import ValidationFailed
from app.core.permissions import Role
from app.core.security import hash_password, verify_password
from app.models import User

logger = logging.getLogger(__name__)


class UserService:
    """用户服务"""

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(
            User.email == UserService.normalize_email(email),
            User.is_deleted == False
        ).first()

    @staticmethod
    def register_user(
        db: Session,
        name: str,
        email: str,
        password: str,
        role: Role = Role.STUDENT,
    ) -> User:
        """
        注册新用户

        Args:
            db: 数据库会话
            name: 显示名称
            email: 邮箱（唯一，统一转小写）
            password: 明文密码，仅保存 bcrypt 哈希
            role: 角色，创建后不可修改

        Returns:
            User: 新用户

        Raises:
            ValidationFailed: 邮箱已被注册
        """
        email = UserService.normalize_email(email)
        if db.query(User).filter(User.email == email).first():
            raise ValidationFailed.single("email", "该邮箱已注册")

        user = User(
            id=str(uuid.uuid4()),
            name=name.strip(),
            email=email,
            password_hash=hash_password(password),
            role=Role(role).value,
            created_at=datetime.utcnow(),
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"用户注册成功: user_id={user.id}, role={user.role}")
        return user

    @staticmethod
    def authenticate(db: Session, email: str, password: str) -> Optional[User]:
        """
        校验邮箱和密码

        Returns:
            Optional[User]: 校验通过返回用户，否则 None
        """
        user = UserService.get_user_by_email(db, email)
        if not user or not verify_password(password, user.password_hash):
            return None

        user.last_login = datetime.utcnow()
        db.commit()
        return user
