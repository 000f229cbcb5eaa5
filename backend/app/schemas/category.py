"""
分类相关的 Pydantic 请求/响应模型
"""

from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.common import CamelModel


class CategoryCreateRequest(BaseModel):
    """创建分类请求"""
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=100, description="为空时由名称生成")
    description: Optional[str] = None


class CategoryResponse(CamelModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None


class CategoryListResponse(BaseModel):
    data: list[CategoryResponse]
