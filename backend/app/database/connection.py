"""
数据库连接管理
- 异步引擎与会话工厂（默认 aiosqlite，可通过 DATABASE_URL_OVERRIDE 切换）
- session_scope(): 一次工作单元，成功提交、异常回滚
- get_db(): FastAPI 依赖，每个请求一个会话
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings

logger = logging.getLogger(__name__)

_IS_SQLITE = settings.DATABASE_URL.startswith("sqlite")

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False} if _IS_SQLITE else {},
)

if _IS_SQLITE:

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
        # SQLite 默认不检查外键，ondelete 规则需要显式开启
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# expire_on_commit=False：提交后仍可在异步上下文中读取对象属性
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """
    工作单元：块内无异常则提交，否则回滚并继续抛出
    用于启动任务等请求之外的数据库操作
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI 依赖注入：每个请求一个会话，请求结束时提交"""
    async with session_scope() as session:
        yield session


async def init_db():
    """启动时按模型创建缺失的表"""
    import app.models  # noqa: F401
    from app.models.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"数据表已就绪: {', '.join(sorted(Base.metadata.tables))}")


async def close_db():
    await engine.dispose()
