"""
文章相关 API 路由
包含列表筛选、单篇读取（浏览量 +1）、CRUD 操作
"""

import logging
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_viewer, require_roles
from app.config import settings
from app.core.accounting import apply_reading_time, increment_views
from app.core.audit import record_event
from app.core.errors import BadRequest, Conflict, Forbidden, NotFound
from app.core.favorites import annotate_articles
from app.core.text import slugify
from app.database.connection import get_db
from app.models.article import Article
from app.models.category import Category
from app.models.favorite import Favorite
from app.models.media import Media
from app.models.user import User, WRITER_ROLES, EDITOR_ROLES
from app.schemas.article import (
    ArticleCreateRequest,
    ArticleUpdateRequest,
    ArticleEnvelope,
    ArticleListResponse,
)
from app.schemas.common import ListMeta, Pagination

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/articles", tags=["文章管理"])

# 支持的排序方式
_SORTS = {
    "publish_date:desc": (Article.publish_date.desc(), Article.id.desc()),
    "publish_date:asc": (Article.publish_date.asc(), Article.id.asc()),
    "views:desc": (Article.views.desc(), Article.id.desc()),
    "title:asc": (Article.title.asc(), Article.id.asc()),
}


async def _load_article(db: AsyncSession, article_id: int) -> Optional[Article]:
    """重新加载文章（覆盖会话中的旧状态，保证 views 等字段为最新值）"""
    result = await db.execute(
        select(Article)
        .where(Article.id == article_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def _ensure_unique_slug(
    db: AsyncSession, slug: str, exclude_id: Optional[int] = None
) -> None:
    stmt = select(Article.id).where(Article.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(Article.id != exclude_id)
    if (await db.execute(stmt)).first():
        raise Conflict(f"slug 已被使用: {slug}")


async def _resolve_references(db: AsyncSession, data: dict) -> dict:
    """将请求中的 category / cover_image ID 转换为外键字段，并校验存在性"""
    if "category" in data:
        category_id = data.pop("category")
        if category_id is not None and await db.get(Category, category_id) is None:
            raise BadRequest(f"分类不存在: {category_id}")
        data["category_id"] = category_id
    if "cover_image" in data:
        media_id = data.pop("cover_image")
        if media_id is not None and await db.get(Media, media_id) is None:
            raise BadRequest(f"封面图不存在: {media_id}")
        data["cover_image_id"] = media_id
    return data


def _check_ownership(article: Article, viewer: User) -> None:
    """编辑/管理员可操作任意文章，作者只能操作自己的文章"""
    if viewer.role in EDITOR_ROLES:
        return
    if article.author_id != viewer.id:
        raise Forbidden("只能修改自己的文章")


@router.get("", response_model=ArticleListResponse, summary="获取文章列表")
async def list_articles(
    page: int = Query(1, ge=1, description="页码"),
    page_size: int = Query(
        settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE, description="每页数量"
    ),
    category: Optional[str] = Query(None, description="分类 slug"),
    author: Optional[int] = Query(None, description="作者用户 ID"),
    featured: Optional[bool] = Query(None, description="是否推荐"),
    slug: Optional[str] = Query(None, description="文章 slug"),
    filters_slug: Optional[str] = Query(None, alias="filters[slug]"),
    sort: str = Query("publish_date:desc", description="排序方式"),
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_viewer),
):
    """
    分页获取文章列表

    按 slug 筛选视为单篇读取：命中的文章浏览量 +1。
    """
    if sort not in _SORTS:
        raise BadRequest(f"不支持的排序方式: {sort}")
    slug = slug or filters_slug

    conditions = []
    if slug:
        conditions.append(Article.slug == slug)
    if category:
        conditions.append(Article.category.has(Category.slug == category))
    if author is not None:
        conditions.append(Article.author_id == author)
    if featured is not None:
        conditions.append(Article.is_featured == featured)

    # 总数
    count_stmt = select(func.count(Article.id)).where(*conditions)
    total = (await db.execute(count_stmt)).scalar() or 0

    # 分页查询
    offset = (page - 1) * page_size
    stmt = (
        select(Article)
        .where(*conditions)
        .order_by(*_SORTS[sort])
        .offset(offset)
        .limit(page_size)
    )
    result = await db.execute(stmt)
    articles = list(result.scalars().all())

    if slug and articles:
        await increment_views(db, articles[0].id)
        await db.commit()
        articles = [await _load_article(db, articles[0].id)]

    items = await annotate_articles(db, viewer, articles)
    return ArticleListResponse(
        data=items,
        meta=ListMeta(
            pagination=Pagination(
                page=page,
                page_size=page_size,
                page_count=max(1, math.ceil(total / page_size)),
                total=total,
            )
        ),
    )


@router.get("/{article_id}", response_model=ArticleEnvelope, summary="获取文章详情")
async def get_article(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    viewer: Optional[User] = Depends(get_viewer),
):
    """根据 ID 获取文章详情，浏览量 +1"""
    if not await increment_views(db, article_id):
        raise HTTPException(status_code=404, detail="文章不存在")
    await db.commit()

    article = await _load_article(db, article_id)
    items = await annotate_articles(db, viewer, [article])
    return ArticleEnvelope(data=items[0])


@router.post("", response_model=ArticleEnvelope, summary="创建文章")
async def create_article(
    request: ArticleCreateRequest,
    db: AsyncSession = Depends(get_db),
    viewer: User = Depends(require_roles(*WRITER_ROLES)),
):
    """创建文章，作者为当前用户，阅读时长按正文自动计算"""
    data = request.data.model_dump(exclude_none=True)
    data["slug"] = slugify(data.get("slug") or data["title"])
    await _ensure_unique_slug(db, data["slug"])
    data = await _resolve_references(db, data)
    apply_reading_time(data)

    article = Article(author_id=viewer.id, **data)
    db.add(article)
    await db.flush()

    record_event(
        db,
        "article_create",
        f"创建文章: {article.title}",
        actor=viewer,
        article_id=article.id,
    )
    await db.commit()

    logger.info(f"创建文章: id={article.id}, slug={article.slug}, reading_time={article.reading_time}")
    article = await _load_article(db, article.id)
    items = await annotate_articles(db, viewer, [article])
    return ArticleEnvelope(data=items[0])


@router.put("/{article_id}", response_model=ArticleEnvelope, summary="更新文章")
async def update_article(
    article_id: int,
    request: ArticleUpdateRequest,
    db: AsyncSession = Depends(get_db),
    viewer: User = Depends(require_roles(*WRITER_ROLES)),
):
    """更新文章，只要提交了 content 就重新计算阅读时长"""
    article = await db.get(Article, article_id)
    if not article:
        raise NotFound("文章不存在")
    _check_ownership(article, viewer)

    data = request.data.model_dump(exclude_unset=True)
    # title / content / slug 不允许置空
    for field in ("title", "content", "slug", "is_featured", "publish_date"):
        if field in data and data[field] is None:
            data.pop(field)
    if "slug" in data:
        data["slug"] = slugify(data["slug"])
        await _ensure_unique_slug(db, data["slug"], exclude_id=article.id)
    data = await _resolve_references(db, data)
    apply_reading_time(data)

    for field, value in data.items():
        setattr(article, field, value)

    record_event(
        db,
        "article_update",
        f"更新文章: {article.title}",
        actor=viewer,
        article_id=article.id,
        details={"fields": sorted(data)},
    )
    await db.commit()

    logger.info(f"更新文章: id={article.id}")
    article = await _load_article(db, article.id)
    items = await annotate_articles(db, viewer, [article])
    return ArticleEnvelope(data=items[0])


@router.delete("/{article_id}", summary="删除文章")
async def delete_article(
    article_id: int,
    db: AsyncSession = Depends(get_db),
    viewer: User = Depends(require_roles(*WRITER_ROLES)),
):
    """删除文章及其收藏记录"""
    article = await db.get(Article, article_id)
    if not article:
        raise NotFound("文章不存在")
    _check_ownership(article, viewer)

    await db.execute(delete(Favorite).where(Favorite.article_id == article_id))
    await db.delete(article)
    record_event(
        db,
        "article_delete",
        f"删除文章: {article.title}",
        actor=viewer,
        article_id=article_id,
    )
    await db.commit()

    logger.info(f"删除文章: id={article_id}")
    return {"message": "文章已删除", "id": article_id}
