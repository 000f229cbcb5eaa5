"""
FastAPI 应用主入口
负责应用初始化、日志、CORS、异常处理、启动/关闭生命周期管理
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError

from app.config import settings
from app.core.errors import NewsroomError
from app.core.security import ensure_admin
from app.database.connection import close_db, init_db, session_scope
from app.api.router import api_router

# ========== 日志配置 ==========
_LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=_LOG_FORMAT,
    datefmt="%Y-%m-%d %H:%M:%S",
)
if settings.LOG_FILE:
    _file_handler = logging.FileHandler(settings.LOG_FILE, encoding="utf-8")
    _file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logging.getLogger().addHandler(_file_handler)

logger = logging.getLogger(__name__)

# 静默高频噪音日志
logging.getLogger("aiosqlite").setLevel(logging.WARNING)
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ========== 生命周期管理 ==========
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理
    启动时：初始化数据库 -> 创建启动管理员（可选）
    关闭时：关闭数据库连接
    """
    # ---- 启动 ----
    logger.info(f"正在启动 {settings.APP_NAME} v{settings.APP_VERSION}...")

    # 确保数据目录存在
    if settings.DATABASE_URL.startswith("sqlite"):
        os.makedirs(os.path.dirname(settings.DATABASE_PATH), exist_ok=True)
    os.makedirs(settings.UPLOADS_DIR, exist_ok=True)

    # 1. 初始化数据库（必须成功）
    await init_db()
    logger.info("数据库初始化完成")

    # 2. 创建启动管理员（失败不影响应用启动）
    try:
        async with session_scope() as session:
            await ensure_admin(session)
    except Exception as e:
        logger.error(f"创建管理员账号失败: {e}")

    logger.info(
        f"应用启动完成，监听 http://{settings.HOST}:{settings.PORT}"
    )
    logger.info(f"API 文档: http://127.0.0.1:{settings.PORT}/docs")

    yield

    # ---- 关闭 ----
    logger.info("正在关闭应用...")
    try:
        await close_db()
        logger.info("数据库连接已关闭")
    except Exception as e:
        logger.error(f"关闭数据库连接失败: {e}")

    logger.info("应用已关闭")


# ========== 创建 FastAPI 应用 ==========
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="新闻发布系统 - 文章、分类、收藏、作者/编辑后台",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ========== CORS 中间件 ==========
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ========== 异常处理 ==========
@app.exception_handler(NewsroomError)
async def newsroom_error_handler(request: Request, exc: NewsroomError):
    """业务异常统一转换为 {"detail": message}"""
    logger.info(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.__class__.__name__}: {exc.message}"
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    """数据库唯一约束等冲突"""
    logger.error(f"数据完整性冲突 {request.method} {request.url.path}: {exc.orig}")
    return JSONResponse(status_code=409, content={"detail": "数据冲突，请检查唯一字段"})


# ========== 注册路由 ==========
app.include_router(api_router)

# 上传目录在导入时挂载，StaticFiles 要求目录已存在
os.makedirs(settings.UPLOADS_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOADS_DIR), name="uploads")


# ========== 根路径 ==========
@app.get("/", tags=["系统"])
async def root():
    """系统信息"""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", tags=["系统"])
async def health_check():
    """健康检查"""
    return {"status": "ok"}


# ========== 直接运行入口 ==========
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
