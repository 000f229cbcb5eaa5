"""
客户端登录状态
显式的会话上下文对象，登录时写入、登出时清除；
存储后端可替换（默认进程内字典），便于在没有浏览器存储的环境下测试
"""

import json
import logging
from collections.abc import MutableMapping
from typing import Any, Optional

logger = logging.getLogger(__name__)

STORAGE_KEY = "auth:user"

ROLES = ("public", "visitor", "author", "editor", "admin")
# 已登录但角色未知时的默认角色
DEFAULT_ROLE = "visitor"


def normalize_role(value: Any) -> str:
    """
    将服务端返回的角色统一为小写字符串
    支持字符串或 {"type": ...} / {"name": ...} 形式，无法识别时返回默认角色
    """
    if isinstance(value, dict):
        value = value.get("type") or value.get("name")
    if isinstance(value, str) and value.lower() in ROLES:
        return value.lower()
    return DEFAULT_ROLE


class AuthContext:
    """当前客户端的登录上下文"""

    def __init__(self, store: Optional[MutableMapping[str, str]] = None):
        self._store = store if store is not None else {}

    def save(self, jwt: str, user: dict) -> None:
        """登录成功后保存令牌与用户信息"""
        payload = {**user, "jwt": jwt, "role": normalize_role(user.get("role"))}
        self._store[STORAGE_KEY] = json.dumps(payload, ensure_ascii=False)
        logger.debug(f"保存登录状态: user={user.get('id')}")

    def load(self) -> Optional[dict]:
        """读取已保存的用户信息，数据损坏时视为未登录"""
        raw = self._store.get(STORAGE_KEY)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("登录状态数据损坏，已忽略")
            return None

    def clear(self) -> None:
        self._store.pop(STORAGE_KEY, None)

    @property
    def user(self) -> Optional[dict]:
        return self.load()

    @property
    def token(self) -> Optional[str]:
        user = self.load()
        return user.get("jwt") if user else None

    @property
    def role(self) -> Optional[str]:
        user = self.load()
        if not user:
            return None
        return normalize_role(user.get("role"))

    @property
    def is_authenticated(self) -> bool:
        return self.token is not None

    def headers(self) -> dict[str, str]:
        """附带 Authorization 头（未登录时为空）"""
        token = self.token
        return {"Authorization": f"Bearer {token}"} if token else {}
