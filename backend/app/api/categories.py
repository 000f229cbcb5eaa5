"""
分类相关 API 路由
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_roles
from app.core.errors import Conflict
from app.core.text import slugify
from app.database.connection import get_db
from app.models.category import Category
from app.models.user import User, EDITOR_ROLES
from app.schemas.category import (
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/categories", tags=["分类"])


@router.get("", response_model=CategoryListResponse, summary="获取分类列表")
async def list_categories(
    db: AsyncSession = Depends(get_db),
):
    """获取全部分类，按名称排序"""
    result = await db.execute(select(Category).order_by(Category.name.asc()))
    return CategoryListResponse(
        data=[CategoryResponse.model_validate(c) for c in result.scalars().all()]
    )


@router.get("/{slug}", response_model=CategoryResponse, summary="获取分类详情")
async def get_category(
    slug: str,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(select(Category).where(Category.slug == slug))
    category = result.scalars().first()
    if not category:
        raise HTTPException(status_code=404, detail="分类不存在")
    return category


@router.post("", response_model=CategoryResponse, summary="创建分类")
async def create_category(
    request: CategoryCreateRequest,
    db: AsyncSession = Depends(get_db),
    viewer: User = Depends(require_roles(*EDITOR_ROLES)),
):
    """创建分类（编辑/管理员）"""
    slug = slugify(request.slug or request.name)
    result = await db.execute(
        select(Category.id).where(or_(Category.name == request.name, Category.slug == slug))
    )
    if result.first():
        raise Conflict("分类名称或 slug 已存在")

    category = Category(name=request.name, slug=slug, description=request.description)
    db.add(category)
    await db.commit()
    await db.refresh(category)

    logger.info(f"创建分类: id={category.id}, slug={category.slug}, by={viewer.id}")
    return category
