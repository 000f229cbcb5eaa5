"""
API 公共依赖：解析当前读者身份
"""

import logging
from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Forbidden, Unauthorized
from app.core.security import resolve_token
from app.database.connection import get_db
from app.models.user import User

logger = logging.getLogger(__name__)


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_viewer(
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """可选登录：无效或过期令牌按匿名处理"""
    token = extract_bearer(authorization)
    if token is None:
        return None
    user = await resolve_token(db, token)
    if user is None:
        logger.debug("无效或过期的令牌，按匿名读者处理")
    return user


async def require_viewer(
    viewer: Optional[User] = Depends(get_viewer),
) -> User:
    """必须登录"""
    if viewer is None:
        raise Unauthorized("请先登录")
    return viewer


def require_roles(*roles: str):
    """必须登录且角色在 roles 之内"""

    async def _dependency(viewer: User = Depends(require_viewer)) -> User:
        if viewer.role not in roles:
            raise Forbidden("权限不足")
        return viewer

    return _dependency
