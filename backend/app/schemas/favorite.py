"""
收藏相关的 Pydantic 请求/响应模型
"""

from typing import Optional
from pydantic import BaseModel

from app.schemas.common import CamelModel


class FavoriteCreateData(BaseModel):
    article: Optional[int] = None


class FavoriteCreateRequest(BaseModel):
    """添加收藏请求：{"data": {"article": <id>}}"""
    data: Optional[FavoriteCreateData] = None


class FavoriteStatus(CamelModel):
    """收藏状态：{"isFavorite": bool, "favoriteId": id}"""
    is_favorite: bool
    favorite_id: Optional[int] = None
