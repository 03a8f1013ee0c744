"""
Pytest 配置和通用 Fixtures

- 每个测试使用独立的内存 SQLite（StaticPool 保证所有会话共享同一连接）
- 覆盖 get_db 依赖，TestClient 走测试数据库
- 提供各角色的用户和认证请求头
"""
import os
import sys

# 必须在导入 app 之前设置，避免创建默认的文件数据库
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-pytest-only-0123456789")
os.environ.setdefault("OPEN_ROLE_SIGNUP", "true")

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import enable_sqlite_foreign_keys, get_db
from app.core.permissions import Role
from app.core.security import create_access_token
from app.models import Base
from app.seed_data import seed_courses
from app.services import CourseService, UserService


# ==================== 数据库 ====================

@pytest.fixture
def engine():
    """内存数据库引擎"""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """数据库会话"""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    """创建测试客户端（覆盖 get_db 依赖）"""
    from fastapi.testclient import TestClient
    from main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ==================== 用户与认证 ====================

def _make_user(db, role: Role, email: str):
    return UserService.register_user(
        db,
        name=f"Test {role.value}",
        email=email,
        password="password123",
        role=role,
    )


def _headers(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture
def student(db_session):
    return _make_user(db_session, Role.STUDENT, "student@test.dev")


@pytest.fixture
def instructor(db_session):
    return _make_user(db_session, Role.INSTRUCTOR, "instructor@test.dev")


@pytest.fixture
def admin(db_session):
    return _make_user(db_session, Role.ADMIN, "admin@test.dev")


@pytest.fixture
def student_headers(student):
    return _headers(student)


@pytest.fixture
def instructor_headers(instructor):
    return _headers(instructor)


@pytest.fixture
def admin_headers(admin):
    return _headers(admin)


# ==================== 测试数据 ====================

@pytest.fixture
def seeded_courses(db_session):
    """写入两门种子课程：c-js-101（3 课时）和 c-ui-201（2 课时）"""
    return [CourseService.create_course(db_session, data) for data in seed_courses()]


@pytest.fixture
def course_payload():
    """合法的创建课程请求体"""
    return {
        "slug": "python-basics",
        "title": "Python Basics",
        "description": "Learn Python syntax, data types and functions.",
        "category": "Programming",
        "level": "beginner",
        "duration_mins": 90,
    }
