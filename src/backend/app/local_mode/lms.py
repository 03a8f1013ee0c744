"""
本地模式（无服务端）

与服务端相同的业务语义，数据保存在本地键值存储中：
    coursehub:user     当前登录用户
    coursehub:courses  课程目录

读取失败（缺失或损坏）时回退到内置种子课程、无登录用户。
每次变更后显式写回对应的键。
"""
import logging
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from app.core.config import get_settings
from app.core.errors import AuthenticationRequired, NotFoundError, PermissionDenied, ValidationFailed
from app.core.permissions import Action, Decision, Role, can_perform
from app.core.progress import (
    DashboardSummary,
    QuizResult,
    aggregate_dashboard,
    completion_percentage,
    mark_lesson_complete,
    quiz_result,
    record_quiz_score,
)
from app.local_mode.state import AppState, CourseList, LocalCourse, LocalProgress, UserProfile
from app.local_mode.storage import LocalStorage
from app.seed_data import seed_courses

logger = logging.getLogger(__name__)

USER_KEY = "coursehub:user"
COURSES_KEY = "coursehub:courses"


def _field_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """("lessons", 0, "title") -> "lessons.0.title"，与服务端 400 响应的字段名一致"""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        name = ".".join(str(p) for p in error["loc"]) or "course"
        errors.setdefault(name, []).append(error["msg"])
    return errors


class LocalLMS:
    """本地模式应用"""

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.state = self.load()

    @classmethod
    def from_settings(cls) -> "LocalLMS":
        """使用 LOCAL_STORE_PATH 指定的存储文件"""
        return cls(LocalStorage(get_settings().local_store_path))

    # ==================== 加载与持久化 ====================

    def load(self) -> AppState:
        """从存储加载状态，缺失或损坏时使用默认值"""
        return AppState(current_user=self._load_user(), courses=self._load_courses())

    def _load_courses(self) -> List[LocalCourse]:
        raw = self.storage.get_item(COURSES_KEY)
        if raw is not None:
            try:
                return CourseList.validate_json(raw)
            except ValidationError as e:
                logger.warning(f"本地课程数据损坏，回退到种子课程: {e.error_count()} 个错误")
        return CourseList.validate_python(seed_courses())

    def _load_user(self) -> Optional[UserProfile]:
        raw = self.storage.get_item(USER_KEY)
        if raw is None or raw == "null":
            return None
        try:
            return UserProfile.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"本地用户数据损坏，已视为未登录: {e.error_count()} 个错误")
            return None

    def _save_user(self) -> None:
        user = self.state.current_user
        self.storage.set_item(USER_KEY, user.model_dump_json() if user else "null")

    def _save_courses(self) -> None:
        self.storage.set_item(COURSES_KEY, CourseList.dump_json(self.state.courses).decode("utf-8"))

    # ==================== 身份与权限 ====================

    @property
    def user(self) -> Optional[UserProfile]:
        return self.state.current_user

    def _check(self, action: Action) -> Optional[UserProfile]:
        user = self.state.current_user
        decision = can_perform(user.role if user else None, action)
        if decision is Decision.UNAUTHENTICATED:
            raise AuthenticationRequired("请先登录")
        if decision is Decision.FORBIDDEN:
            raise PermissionDenied("当前角色无权执行该操作")
        return user

    def _course(self, course_id: str) -> LocalCourse:
        course = self.state.find_course(course_id)
        if course is None:
            raise NotFoundError(f"课程 {course_id} 不存在")
        return course

    def login(self, name: str, role: Role | str = Role.STUDENT) -> UserProfile:
        """
        以新的空白资料登录（本地模式不校验密码）

        Raises:
            ValidationFailed: 名字少于两个字符
        """
        try:
            profile = UserProfile(name=name.strip(), role=Role(role))
        except ValidationError as e:
            raise ValidationFailed(_field_errors(e))
        self.state.current_user = profile
        self._save_user()
        return self.state.current_user

    def logout(self) -> None:
        self.state.current_user = None
        self._save_user()

    # ==================== 学习 ====================

    def enroll(self, course_id: str) -> List[str]:
        """报名课程（幂等），返回已报名课程ID"""
        user = self._check(Action.ENROLL)
        self._course(course_id)
        if course_id not in user.enrolled:
            user.enrolled.append(course_id)
            self._save_user()
        return list(user.enrolled)

    def progress_for(self, course_id: str) -> Optional[LocalProgress]:
        user = self.state.current_user
        return user.progress.get(course_id) if user else None

    def mark_lesson_done(self, course_id: str, lesson_id: str) -> LocalProgress:
        """标记课时完成（重复标记无影响，不校验课时归属）"""
        user = self._check(Action.SUBMIT_PROGRESS)
        current = user.progress.get(course_id)
        updated = mark_lesson_complete(current.to_state() if current else None, lesson_id)
        user.progress[course_id] = LocalProgress.from_state(updated)
        self._save_user()
        return user.progress[course_id]

    def submit_quiz(self, course_id: str, answers: Sequence[int]) -> QuizResult:
        """
        提交测验答案并覆盖最新得分

        Raises:
            NotFoundError: 课程或测验不存在
            ValueError: 测验没有题目
        """
        user = self._check(Action.SUBMIT_QUIZ)
        course = self._course(course_id)
        if course.quiz is None:
            raise NotFoundError(f"课程 {course_id} 没有测验")

        result = quiz_result(course.quiz, answers)
        current = user.progress.get(course_id)
        updated = record_quiz_score(current.to_state() if current else None, result.score)
        user.progress[course_id] = LocalProgress.from_state(updated)
        self._save_user()
        return result

    def course_completion(self, course_id: str) -> int:
        course = self._course(course_id)
        progress = self.progress_for(course_id)
        return completion_percentage(progress.to_state() if progress else None, len(course.lessons))

    def analytics(self) -> DashboardSummary:
        """学习看板统计，未登录时只有课时总数"""
        user = self.state.current_user
        progress: Dict = {}
        enrolled: List[str] = []
        if user:
            progress = {cid: p.to_state() for cid, p in user.progress.items()}
            enrolled = user.enrolled
        return aggregate_dashboard(self.state.courses, progress, enrolled)

    # ==================== 课程目录 ====================

    def search(self, query: str = "") -> List[LocalCourse]:
        """在标题、描述、分类、难度中不区分大小写搜索"""
        needle = (query or "").lower()
        return [
            c for c in self.state.courses
            if needle in " ".join([c.title, c.description, c.category, c.level]).lower()
        ]

    def upsert_course(self, course: LocalCourse | dict) -> LocalCourse:
        """
        新增或整体替换课程，新课程排在最前

        先做权限判定，再按服务端创建课程的规则校验字段。

        Raises:
            AuthenticationRequired: 未登录
            PermissionDenied: 学生角色
            ValidationFailed: 字段不合法（附带字段级错误）
        """
        data = course.model_dump() if isinstance(course, LocalCourse) else dict(course)
        exists = self.state.find_course(data.get("id")) is not None
        self._check(Action.EDIT_COURSE if exists else Action.CREATE_COURSE)

        try:
            course = LocalCourse.model_validate(data)
        except ValidationError as e:
            raise ValidationFailed(_field_errors(e))

        if exists:
            self.state.courses = [course if c.id == course.id else c for c in self.state.courses]
        else:
            self.state.courses = [course] + self.state.courses
        self._save_courses()
        return course

    def delete_course(self, course_id: str) -> None:
        self._check(Action.DELETE_COURSE)
        self._course(course_id)
        self.state.courses = [c for c in self.state.courses if c.id != course_id]
        self._save_courses()
