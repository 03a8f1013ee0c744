"""
数据库配置
支持SQLite（开发）和PostgreSQL（生产）
"""
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.core.config import get_settings

# 数据库连接配置
DATABASE_URL = get_settings().database_url


def _ensure_sqlite_dir(url: str) -> None:
    """确保 SQLite 文件所在目录存在"""
    prefix = "sqlite:///"
    if not url.startswith(prefix):
        return
    db_path = url[len(prefix):]
    if db_path and db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)


def enable_sqlite_foreign_keys(target: Engine) -> None:
    """SQLite 默认不启用外键约束，需在每个连接上打开"""

    @event.listens_for(target, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


_ensure_sqlite_dir(DATABASE_URL)

# 创建引擎
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if "sqlite" in DATABASE_URL else {}
)
if engine.dialect.name == "sqlite":
    enable_sqlite_foreign_keys(engine)

# 创建会话工厂
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 依赖注入
def get_db():
    """数据库会话依赖注入"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def dialect_insert(db, model):
    """
    获取支持 ON CONFLICT 的方言 insert 构造器

    报名和学习进度依赖数据库的原子 upsert，避免"先查后写"在并发下丢失更新。

    Args:
        db: 数据库会话
        model: ORM 模型类

    Returns:
        Insert: 带 on_conflict_do_nothing / on_conflict_do_update 的 insert 语句

    Raises:
        ValueError: 数据库方言不支持原子 upsert
    """
    dialect = db.get_bind().dialect.name
    if dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    elif dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        raise ValueError(f"不支持的数据库方言（需要 ON CONFLICT 支持）: {dialect}")
    return insert(model)
