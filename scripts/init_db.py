#!/usr/bin/env python3
"""
建表脚本
只创建数据表，不写入演示数据（演示数据见 init_course_data.py）

执行方式：
    python scripts/init_db.py
    python scripts/init_db.py --drop    # 先删除所有表
"""
import argparse
import os
import sys
from pathlib import Path

backend_dir = Path(__file__).resolve().parent.parent / "src" / "backend"
sys.path.insert(0, str(backend_dir))

# SQLite 默认路径 ./data/app.db 相对于后端目录
os.chdir(str(backend_dir))

from dotenv import load_dotenv

load_dotenv(backend_dir.parent.parent / ".env")

from app.core.config import get_settings
from app.models import Base, drop_all, init_db


def main():
    parser = argparse.ArgumentParser(description="创建 CourseHub 数据表")
    parser.add_argument("--drop", action="store_true", help="建表前删除所有表")
    args = parser.parse_args()

    print(f"数据库: {get_settings().database_url}")
    if args.drop:
        drop_all()
    init_db()
    print("数据表: " + ", ".join(sorted(Base.metadata.tables)))


if __name__ == "__main__":
    main()
