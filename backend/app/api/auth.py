"""
认证相关 API 路由
注册、登录、登出、当前用户、角色管理
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import extract_bearer, require_roles, require_viewer
from app.core.audit import record_event
from app.core.errors import BadRequest, NotFound
from app.core.security import authenticate, hash_password, issue_token, revoke_token
from app.database.connection import get_db
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RoleUpdateRequest,
    UserResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["用户认证"])


@router.post("/auth/local/register", response_model=AuthResponse, summary="注册")
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """注册新用户（默认角色 visitor），注册成功即登录"""
    result = await db.execute(
        select(User.id).where(
            or_(User.username == request.username, User.email == request.email)
        )
    )
    if result.first():
        raise BadRequest("用户名或邮箱已被使用")

    user = User(
        username=request.username,
        email=request.email,
        password_hash=hash_password(request.password),
        role="visitor",
    )
    db.add(user)
    await db.flush()
    token = await issue_token(db, user)
    record_event(db, "register", f"用户注册: {user.username}", actor=user)
    await db.commit()

    logger.info(f"用户注册: id={user.id}, username={user.username}")
    return AuthResponse(jwt=token, user=UserResponse.model_validate(user))


@router.post("/auth/local", response_model=AuthResponse, summary="登录")
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """使用邮箱（或用户名）+ 密码登录"""
    user = await authenticate(db, request.identifier, request.password)
    if user is None:
        logger.info(f"登录失败: identifier={request.identifier}")
        raise BadRequest("Invalid identifier or password")

    token = await issue_token(db, user)
    record_event(db, "login", f"用户登录: {user.username}", actor=user)
    await db.commit()

    logger.info(f"用户登录: id={user.id}")
    return AuthResponse(jwt=token, user=UserResponse.model_validate(user))


@router.post("/auth/logout", summary="登出")
async def logout(
    authorization: Optional[str] = Header(default=None),
    db: AsyncSession = Depends(get_db),
    viewer: User = Depends(require_viewer),
):
    """吊销当前令牌"""
    await revoke_token(db, extract_bearer(authorization))
    await db.commit()
    logger.info(f"用户登出: id={viewer.id}")
    return {"message": "已登出"}


@router.get("/users/me", response_model=UserResponse, summary="当前用户")
async def get_me(viewer: User = Depends(require_viewer)):
    return viewer


@router.put("/users/{user_id}/role", response_model=UserResponse, summary="修改用户角色")
async def update_role(
    user_id: int,
    request: RoleUpdateRequest,
    db: AsyncSession = Depends(get_db),
    viewer: User = Depends(require_roles("admin")),
):
    """仅管理员可修改用户角色"""
    user = await db.get(User, user_id)
    if not user:
        raise NotFound("用户不存在")

    user.role = request.role
    record_event(
        db,
        "role_update",
        f"修改角色: {user.username} -> {request.role}",
        actor=viewer,
        details={"user_id": user.id, "role": request.role},
    )
    await db.commit()

    logger.info(f"修改用户角色: id={user.id}, role={user.role}")
    return user
