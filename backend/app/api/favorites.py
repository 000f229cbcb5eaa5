"""
收藏相关 API 路由
列出 / 添加 / 取消收藏，均要求登录
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_viewer
from app.core.favorites import add_favorite, list_favorite_articles, remove_favorite
from app.database.connection import get_db
from app.models.user import User
from app.schemas.article import ArticleListResponse
from app.schemas.common import ListMeta, Pagination
from app.schemas.favorite import FavoriteCreateRequest, FavoriteStatus

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/favorites", tags=["收藏"])


@router.get("/user", response_model=ArticleListResponse, summary="获取我的收藏")
async def list_user_favorites(
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_viewer),
):
    """当前用户收藏的全部文章，每篇都带 isFavorite=true 和对应 favoriteId"""
    items = await list_favorite_articles(db, viewer)
    return ArticleListResponse(
        data=items,
        meta=ListMeta(
            pagination=Pagination(page=1, page_size=len(items), page_count=1, total=len(items))
        ),
    )


@router.post("", response_model=FavoriteStatus, summary="添加收藏")
async def create_favorite(
    request: FavoriteCreateRequest,
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_viewer),
):
    """添加收藏，已收藏时返回已有记录"""
    article_id = request.data.article if request.data else None
    status = await add_favorite(db, viewer, article_id)
    await db.commit()
    return status


@router.delete("/{favorite_id}", response_model=FavoriteStatus, summary="取消收藏")
async def delete_favorite(
    favorite_id: int,
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_viewer),
):
    """取消收藏，记录不存在时同样返回成功"""
    status = await remove_favorite(db, viewer, favorite_id)
    await db.commit()
    return status
