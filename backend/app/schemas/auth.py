"""
认证相关的 Pydantic 请求/响应模型
"""

from datetime import datetime
from typing import Literal
from pydantic import BaseModel, Field

from app.schemas.common import CamelModel


# ==================== 请求模型 ====================

class RegisterRequest(BaseModel):
    """注册请求"""
    username: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    """登录请求，identifier 可为邮箱或用户名"""
    identifier: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RoleUpdateRequest(BaseModel):
    role: Literal["visitor", "author", "editor", "admin"]


# ==================== 响应模型 ====================

class UserResponse(CamelModel):
    """用户信息（不含密码）"""
    id: int
    username: str
    email: str
    role: str
    created_at: datetime


class AuthResponse(BaseModel):
    """登录/注册响应"""
    jwt: str
    user: UserResponse
