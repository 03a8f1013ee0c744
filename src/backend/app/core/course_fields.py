"""
课程字段约束

服务端请求体（app.api.courses）与本地模式（app.local_mode.state）共用，
两端对课程数据的校验规则保持一致。
"""
from typing import Annotated, Literal

from pydantic import BeforeValidator, Field


def _lower(value):
    return value.strip().lower() if isinstance(value, str) else value


Slug = Annotated[str, Field(min_length=3, max_length=120, pattern=r"^[a-zA-Z0-9_\-]+$")]
Title = Annotated[str, Field(min_length=3, max_length=200)]
Description = Annotated[str, Field(min_length=10)]
Category = Annotated[str, Field(min_length=2, max_length=100)]
# 不区分大小写，统一存小写
Level = Annotated[Literal["beginner", "intermediate", "advanced"], BeforeValidator(_lower)]
# 数字字符串（如 "90"）按整数接受
DurationMins = Annotated[int, Field(gt=0)]

LessonTitle = Annotated[str, Field(min_length=2, max_length=200)]
LessonContent = Annotated[str, Field(min_length=1)]
QuizTitle = Annotated[str, Field(min_length=2, max_length=200)]
Prompt = Annotated[str, Field(min_length=2)]
