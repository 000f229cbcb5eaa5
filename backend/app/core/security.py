"""
认证工具
- 密码哈希：PBKDF2-HMAC-SHA256 + 随机盐
- 登录令牌：不透明随机串，存储在 auth_tokens 表中
"""

import hashlib
import hmac
import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.base import utcnow
from app.models.user import User, AuthToken

logger = logging.getLogger(__name__)

_PBKDF2_ITERATIONS = 260_000


def hash_password(password: str) -> str:
    """生成密码哈希"""
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), _PBKDF2_ITERATIONS
    )
    return f"pbkdf2_sha256${_PBKDF2_ITERATIONS}${salt}${digest.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """校验密码，格式不合法时返回 False"""
    try:
        algorithm, iterations, salt, expected = password_hash.split("$", 3)
    except ValueError:
        return False
    if algorithm != "pbkdf2_sha256":
        return False
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), int(iterations)
    )
    return hmac.compare_digest(digest.hex(), expected)


async def authenticate(
    db: AsyncSession, identifier: str, password: str
) -> Optional[User]:
    """按邮箱（其次用户名）查找用户并校验密码"""
    result = await db.execute(
        select(User).where(or_(User.email == identifier, User.username == identifier))
    )
    # 邮箱匹配优先
    users = sorted(result.scalars().all(), key=lambda u: u.email != identifier)
    for user in users:
        if verify_password(password, user.password_hash):
            return user
    return None


async def issue_token(db: AsyncSession, user: User) -> str:
    """签发登录令牌"""
    token = secrets.token_urlsafe(32)
    db.add(
        AuthToken(
            token=token,
            user_id=user.id,
            expires_at=utcnow() + timedelta(hours=settings.AUTH_TOKEN_TTL_HOURS),
        )
    )
    await db.flush()
    return token


async def revoke_token(db: AsyncSession, token: str) -> None:
    await db.execute(delete(AuthToken).where(AuthToken.token == token))


async def resolve_token(db: AsyncSession, token: str) -> Optional[User]:
    """根据令牌查找用户，令牌不存在或已过期时返回 None"""
    result = await db.execute(
        select(AuthToken).where(
            AuthToken.token == token,
            AuthToken.expires_at > utcnow(),
        )
    )
    record = result.scalars().first()
    return record.user if record else None


async def ensure_admin(db: AsyncSession) -> Optional[User]:
    """
    按配置创建启动管理员账号
    已存在同邮箱用户时只提升角色，不修改密码
    """
    if not (settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD):
        return None

    result = await db.execute(select(User).where(User.email == settings.ADMIN_EMAIL))
    user = result.scalars().first()
    if user:
        if user.role != "admin":
            user.role = "admin"
            logger.info(f"已将用户提升为管理员: id={user.id}")
        return user

    user = User(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        password_hash=hash_password(settings.ADMIN_PASSWORD),
        role="admin",
    )
    db.add(user)
    await db.flush()
    logger.info(f"创建管理员账号: id={user.id}, email={user.email}")
    return user
