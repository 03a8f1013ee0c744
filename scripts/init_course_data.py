#!/usr/bin/env python3
"""
数据库初始化脚本
创建所有数据表，并写入演示账号和演示课程

执行方式：
    python scripts/init_course_data.py            # 建表 + 写入种子数据（已存在的跳过）
    python scripts/init_course_data.py --reset    # 删除所有表后重建（仅开发用）

说明：
    1. 脚本会自动添加 src/backend 到 Python 路径
    2. 脚本会自动切换工作目录到 src/backend/（确保 SQLite 相对路径正常工作）
    3. 演示账号密码均为 "password"
"""
import argparse
import os
import sys

# 添加后端目录到 Python 路径，以便导入 app.models 等模块
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src', 'backend'))

# 切换工作目录到后端目录，确保数据库相对路径正常工作
os.chdir(os.path.join(os.path.dirname(__file__), '..', 'src', 'backend'))

from dotenv import load_dotenv

load_dotenv(os.path.join('..', '..', '.env'))

from sqlalchemy.orm import Session

from app.core.database import SessionLocal
from app.core.permissions import Role
from app.models import Course, User, drop_all, init_db
from app.seed_data import DEMO_PASSWORD, DEMO_USERS, seed_courses
from app.services import CourseService, UserService


def init_users(db: Session) -> int:
    """写入演示账号，已存在的邮箱跳过"""
    created = 0
    for account in DEMO_USERS:
        if UserService.get_user_by_email(db, account["email"]):
            print(f"  - 账号已存在，跳过: {account['email']}")
            continue
        UserService.register_user(
            db,
            name=account["name"],
            email=account["email"],
            password=DEMO_PASSWORD,
            role=Role(account["role"]),
        )
        created += 1
        print(f"  ✓ 账号: {account['email']} ({account['role']})")
    return created


def init_courses(db: Session) -> int:
    """写入演示课程（含课时与测验），已存在的 slug 跳过"""
    instructor = db.query(User).filter(User.role == Role.INSTRUCTOR.value).first()
    created = 0
    for data in seed_courses():
        if db.query(Course.id).filter(Course.slug == data["slug"]).first():
            print(f"  - 课程已存在，跳过: {data['slug']}")
            continue
        course = CourseService.create_course(db, data, created_by=instructor.id if instructor else None)
        created += 1
        print(f"  ✓ 课程: {course.slug} ({len(course.lessons)} 课时)")
    return created


def main():
    parser = argparse.ArgumentParser(description="初始化数据库和演示数据")
    parser.add_argument("--reset", action="store_true", help="删除所有表后重建")
    args = parser.parse_args()

    if args.reset:
        drop_all()

    print("初始化数据库...")
    init_db()

    db = SessionLocal()
    try:
        print("写入演示账号...")
        users = init_users(db)
        print("写入演示课程...")
        courses = init_courses(db)
    finally:
        db.close()

    print(f"完成！新增账号 {users} 个，新增课程 {courses} 门")


if __name__ == "__main__":
    main()
