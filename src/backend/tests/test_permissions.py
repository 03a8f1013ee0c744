"""
权限判定测试
"""
import pytest

from app.core.permissions import Action, Decision, Role, can_manage_content, can_perform


CONTENT_ACTIONS = [Action.CREATE_COURSE, Action.EDIT_COURSE, Action.DELETE_COURSE]
LEARNER_ACTIONS = [Action.ENROLL, Action.SUBMIT_PROGRESS, Action.SUBMIT_QUIZ, Action.VIEW_DASHBOARD]
PUBLIC_ACTIONS = [Action.VIEW_CATALOG, Action.VIEW_COURSE]


class TestContentActions:
    """课程内容管理：仅讲师和管理员"""

    @pytest.mark.parametrize("action", CONTENT_ACTIONS)
    @pytest.mark.parametrize("role", [Role.INSTRUCTOR, Role.ADMIN])
    def test_managers_allowed(self, role, action):
        assert can_perform(role, action) is Decision.ALLOW

    @pytest.mark.parametrize("action", CONTENT_ACTIONS)
    def test_student_forbidden(self, action):
        assert can_perform(Role.STUDENT, action) is Decision.FORBIDDEN

    @pytest.mark.parametrize("action", CONTENT_ACTIONS)
    def test_anonymous_unauthenticated(self, action):
        assert can_perform(None, action) is Decision.UNAUTHENTICATED

    def test_delete_course_examples(self):
        assert not can_perform("student", "delete-course").allowed
        assert can_perform("instructor", "delete-course").allowed


class TestLearnerActions:
    """学习相关动作：任何已登录角色"""

    @pytest.mark.parametrize("action", LEARNER_ACTIONS)
    @pytest.mark.parametrize("role", list(Role))
    def test_any_role_allowed(self, role, action):
        assert can_perform(role, action) is Decision.ALLOW

    @pytest.mark.parametrize("action", LEARNER_ACTIONS)
    def test_anonymous_unauthenticated(self, action):
        assert can_perform(None, action) is Decision.UNAUTHENTICATED


class TestPublicActions:

    @pytest.mark.parametrize("action", PUBLIC_ACTIONS)
    @pytest.mark.parametrize("role", [None, *Role])
    def test_everyone_allowed(self, role, action):
        assert can_perform(role, action) is Decision.ALLOW


class TestInputs:

    def test_accepts_plain_strings(self):
        assert can_perform("admin", "edit-course") is Decision.ALLOW

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            can_perform("superuser", Action.ENROLL)

    def test_unknown_action_rejected(self):
        with pytest.raises(ValueError):
            can_perform(Role.ADMIN, "drop-database")

    def test_can_manage_content(self):
        assert can_manage_content(Role.INSTRUCTOR)
        assert not can_manage_content(Role.STUDENT)
        assert not can_manage_content(None)
