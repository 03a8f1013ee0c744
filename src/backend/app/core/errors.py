"""
业务异常定义

服务层抛出这些异常，API 层负责转换为对应的 HTTP 状态码：
    NotFoundError           -> 404
    ValidationFailed        -> 400（附带字段级错误）
    AuthenticationRequired  -> 401
    PermissionDenied        -> 403
"""
from typing import Dict, List, Optional


class NotFoundError(ValueError):
    """引用的课程/课时/测验不存在"""


class ValidationFailed(ValueError):
    """输入字段不合法"""

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message or "参数校验失败")

    @classmethod
    def single(cls, field: str, message: str) -> "ValidationFailed":
        return cls({field: [message]}, message)


class AuthenticationRequired(Exception):
    """缺少调用者身份（未登录）"""


class PermissionDenied(Exception):
    """已登录但角色权限不足"""
