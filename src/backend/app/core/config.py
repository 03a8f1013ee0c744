"""
应用配置管理模块

统一管理数据库、令牌、跨域和本地模式的配置。
配置优先级：环境变量 > 默认值
"""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

logger = logging.getLogger(__name__)

# 仅用于本地开发，生产环境必须通过 JWT_SECRET_KEY 覆盖
DEV_JWT_SECRET = "coursehub-dev-secret-change-me"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass
class Settings:
    """
    应用配置

    Attributes:
        database_url: 数据库连接串（SQLite 开发 / PostgreSQL 生产）
        jwt_secret_key: 访问令牌签名密钥
        access_token_expire_hours: 访问令牌有效期（小时）
        allowed_origins: CORS 允许的源
        dev_mode: 是否开发模式
        open_role_signup: 自助注册时是否允许选择讲师/管理员角色
        local_store_path: 本地模式键值存储文件路径
    """
    database_url: str = "sqlite:///./data/app.db"
    jwt_secret_key: str = DEV_JWT_SECRET
    access_token_expire_hours: int = 6
    allowed_origins: List[str] = field(default_factory=list)
    dev_mode: bool = False
    open_role_signup: bool = False
    local_store_path: str = "./data/local_store.json"

    def uses_default_secret(self) -> bool:
        return self.jwt_secret_key == DEV_JWT_SECRET


def load_settings() -> Settings:
    """
    从环境变量构建配置

    环境变量：
        DATABASE_URL: 数据库连接串
        JWT_SECRET_KEY: 令牌签名密钥
        ACCESS_TOKEN_EXPIRE_HOURS: 令牌有效期（小时）
        ALLOWED_ORIGINS: 逗号分隔的 CORS 源
        DEV_MODE: 是否开发模式
        OPEN_ROLE_SIGNUP: 是否开放角色自选（默认跟随 DEV_MODE）
        LOCAL_STORE_PATH: 本地模式存储文件

    Raises:
        ValueError: 当数值型配置无法解析或不合法时
    """
    raw_hours = os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "6")
    try:
        expire_hours = int(raw_hours)
    except ValueError:
        raise ValueError(f"ACCESS_TOKEN_EXPIRE_HOURS 必须是整数: {raw_hours}")
    if expire_hours <= 0:
        raise ValueError("ACCESS_TOKEN_EXPIRE_HOURS 必须大于 0")

    dev_mode = _env_bool("DEV_MODE", False)

    settings = Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///./data/app.db"),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", DEV_JWT_SECRET),
        access_token_expire_hours=expire_hours,
        allowed_origins=_split_origins(os.getenv("ALLOWED_ORIGINS", "")),
        dev_mode=dev_mode,
        open_role_signup=_env_bool("OPEN_ROLE_SIGNUP", dev_mode),
        local_store_path=os.getenv("LOCAL_STORE_PATH", "./data/local_store.json"),
    )

    if settings.uses_default_secret():
        logger.warning("未配置 JWT_SECRET_KEY，正在使用开发默认密钥")

    return settings


@lru_cache
def get_settings() -> Settings:
    """获取进程级配置（首次调用时读取环境变量）"""
    return load_settings()
