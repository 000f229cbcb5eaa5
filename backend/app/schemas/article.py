"""
文章相关的 Pydantic 请求/响应模型
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.common import CamelModel, ListMeta


# ==================== 请求模型 ====================

class ArticleCreateData(CamelModel):
    """创建文章字段"""
    title: str = Field(..., min_length=1, max_length=200, description="文章标题")
    content: str = Field(..., min_length=1, description="文章正文")
    excerpt: Optional[str] = Field(default="", description="文章摘要")
    slug: Optional[str] = Field(default=None, max_length=200, description="为空时由标题生成")
    category: Optional[int] = Field(default=None, description="分类 ID")
    cover_image: Optional[int] = Field(default=None, description="封面图 Media ID")
    publish_date: Optional[datetime] = Field(default=None, description="发布时间，默认当前时间")
    is_featured: bool = Field(default=False, description="是否推荐")


class ArticleUpdateData(CamelModel):
    """更新文章字段（仅更新提交的字段）"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1)
    excerpt: Optional[str] = None
    slug: Optional[str] = Field(None, max_length=200)
    category: Optional[int] = None
    cover_image: Optional[int] = None
    publish_date: Optional[datetime] = None
    is_featured: Optional[bool] = None


class ArticleCreateRequest(BaseModel):
    """创建文章请求，外层 data 信封"""
    data: ArticleCreateData


class ArticleUpdateRequest(BaseModel):
    """更新文章请求"""
    data: ArticleUpdateData


# ==================== 响应模型 ====================

class CategoryBrief(CamelModel):
    id: int
    name: str
    slug: str


class AuthorBrief(CamelModel):
    id: int
    username: str


class MediaBrief(CamelModel):
    id: int
    url: str
    alternative_text: Optional[str] = None


class ArticleResponse(CamelModel):
    """文章响应（附带当前读者的收藏标记）"""
    id: int
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = ""
    views: int = 0
    reading_time: int = 1
    is_featured: bool = False
    publish_date: datetime
    created_at: datetime
    updated_at: datetime
    category: Optional[CategoryBrief] = None
    author: Optional[AuthorBrief] = None
    cover_image: Optional[MediaBrief] = None
    # 收藏标记：始终存在，匿名读者为 False
    is_favorite: bool = False
    favorite_id: Optional[int] = None


class ArticleEnvelope(BaseModel):
    """单篇文章响应"""
    data: ArticleResponse


class ArticleListResponse(BaseModel):
    """文章列表响应"""
    data: list[ArticleResponse]
    meta: ListMeta
