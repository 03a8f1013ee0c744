"""
Services package
"""

from .user_service import UserService
from .course_service import CourseService
from .enrollment_service import EnrollmentService
from .progress_service import ProgressService

__all__ = [
    "UserService",
    "CourseService",
    "EnrollmentService",
    "ProgressService",
]
