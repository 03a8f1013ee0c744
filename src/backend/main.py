"""
FastAPI应用入口
"""
from dotenv import load_dotenv
from pathlib import Path
import logging

# 加载环境变量 - 优先从根目录加载，回退到当前目录
root_env = Path(__file__).parent.parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)
else:
    load_dotenv()

logger = logging.getLogger(__name__)

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.api import users, courses, enroll, progress
from app.core.config import get_settings
from app.core.errors import ValidationFailed


def _get_cors_config() -> tuple[list[str], str | None]:
    """
    获取 CORS 配置

    Returns:
        (allow_origins, allow_origin_regex)
        - 生产环境：使用精确匹配的 origins 列表
        - 开发环境：使用正则匹配本地端口，方便本地开发
    """
    settings = get_settings()
    if settings.allowed_origins:
        return settings.allowed_origins, None

    # 开发环境：使用正则匹配所有本地端口
    if settings.dev_mode:
        return [], r"http://(localhost|127\.0\.0\.1)(:\d+)?"

    # 非开发环境且未配置 ALLOWED_ORIGINS：拒绝所有跨域
    logger.warning("未配置 ALLOWED_ORIGINS 且非开发模式，CORS 将拒绝所有跨域请求")
    return [], None


def _field_name(loc: tuple) -> str:
    """("body", "lessons", 0, "title") -> "lessons.0.title" """
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


app = FastAPI(
    title="CourseHub API",
    description="Course catalog, enrollment, lesson progress and quizzes",
    version="0.1.0"
)

# CORS配置 - 从环境变量读取允许的源
allow_origins, allow_origin_regex = _get_cors_config()
logger.info(f"CORS 配置: origins={allow_origins}, regex={allow_origin_regex}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_origin_regex=allow_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 参数校验失败统一返回 400 和字段级错误
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(tuple(error.get("loc", ()))), []).append(error.get("msg", ""))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "参数校验失败", "errors": errors},
    )


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "errors": exc.errors},
    )


# 包含所有路由
app.include_router(users.router, prefix="/api", tags=["用户管理"])
app.include_router(courses.router, prefix="/api", tags=["课程管理"])
app.include_router(enroll.router, prefix="/api", tags=["报名"])
app.include_router(progress.router, prefix="/api", tags=["学习进度"])


@app.get("/")
async def root():
    """根路径"""
    return {"message": "CourseHub API", "docs": "/docs"}


@app.get("/health")
async def health():
    """健康检查"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
