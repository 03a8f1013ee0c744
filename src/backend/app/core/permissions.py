"""
权限判定

所有写操作在执行前都经过 can_perform 判定，调用方不再各自判断角色。
判定只依赖 (是否有身份, 角色, 动作)，没有副作用，被拒绝的请求也不记录日志。
"""
from enum import Enum
from typing import Optional


class Role(str, Enum):
    """用户角色"""
    STUDENT = "student"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


class Action(str, Enum):
    """受控动作"""
    CREATE_COURSE = "create-course"
    EDIT_COURSE = "edit-course"
    DELETE_COURSE = "delete-course"
    ENROLL = "enroll"
    SUBMIT_PROGRESS = "submit-progress"
    SUBMIT_QUIZ = "submit-quiz"
    VIEW_DASHBOARD = "view-dashboard"
    VIEW_CATALOG = "view-catalog"
    VIEW_COURSE = "view-course"


class Decision(str, Enum):
    """判定结果：允许 / 未登录 / 无权限"""
    ALLOW = "allow"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"

    @property
    def allowed(self) -> bool:
        return self is Decision.ALLOW


# 课程内容管理（含课时、测验）
CONTENT_MANAGER_ROLES = frozenset({Role.INSTRUCTOR, Role.ADMIN})

CONTENT_ACTIONS = frozenset({
    Action.CREATE_COURSE,
    Action.EDIT_COURSE,
    Action.DELETE_COURSE,
})

AUTHENTICATED_ACTIONS = frozenset({
    Action.ENROLL,
    Action.SUBMIT_PROGRESS,
    Action.SUBMIT_QUIZ,
    Action.VIEW_DASHBOARD,
})

PUBLIC_ACTIONS = frozenset({
    Action.VIEW_CATALOG,
    Action.VIEW_COURSE,
})


def can_perform(role: Optional[Role | str], action: Action | str) -> Decision:
    """
    判断某角色能否执行某动作

    Args:
        role: 调用者角色，None 表示未登录
        action: 动作

    Returns:
        Decision: ALLOW / UNAUTHENTICATED / FORBIDDEN

    Raises:
        ValueError: 未知的角色或动作
    """
    action = Action(action)
    if role is not None:
        role = Role(role)

    if action in PUBLIC_ACTIONS:
        return Decision.ALLOW

    if role is None:
        return Decision.UNAUTHENTICATED

    if action in AUTHENTICATED_ACTIONS:
        return Decision.ALLOW

    if action in CONTENT_ACTIONS:
        return Decision.ALLOW if role in CONTENT_MANAGER_ROLES else Decision.FORBIDDEN

    raise ValueError(f"未配置权限规则的动作: {action}")


def can_manage_content(role: Optional[Role | str]) -> bool:
    """是否可以编辑课程内容（用于决定是否返回答案等管理字段）"""
    return can_perform(role, Action.EDIT_COURSE).allowed
