"""
本地模式：无服务端时以本地键值存储运行
"""

from .storage import LocalStorage
from .state import AppState, LocalCourse, LocalProgress, UserProfile
from .lms import LocalLMS, USER_KEY, COURSES_KEY

__all__ = [
    "LocalStorage",
    "AppState",
    "LocalCourse",
    "LocalProgress",
    "UserProfile",
    "LocalLMS",
    "USER_KEY",
    "COURSES_KEY",
]
