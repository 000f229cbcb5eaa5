"""
统计相关 API 路由
提供作者 / 编辑仪表盘数据
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_roles
from app.database.connection import get_db
from app.models.article import Article
from app.models.favorite import Favorite
from app.models.audit import AuditEvent
from app.models.user import User, WRITER_ROLES, EDITOR_ROLES
from app.schemas.stats import (
    AuditEventResponse,
    DashboardStats,
    TopArticleResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/stats", tags=["统计数据"])


@router.get("/dashboard", response_model=DashboardStats, summary="仪表盘统计")
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    viewer: User = Depends(require_roles(*WRITER_ROLES)),
):
    """
    获取仪表盘统计数据
    作者只统计自己的文章；编辑/管理员统计全站，并附带最近业务事件
    """
    site_wide = viewer.role in EDITOR_ROLES
    conditions = [] if site_wide else [Article.author_id == viewer.id]

    # ========== 文章统计 ==========
    result = await db.execute(
        select(
            func.count(Article.id),
            func.coalesce(func.sum(Article.views), 0),
            func.coalesce(func.avg(Article.reading_time), 0),
        ).where(*conditions)
    )
    total_articles, total_views, avg_reading_time = result.one()

    # 推荐文章数
    result = await db.execute(
        select(func.count(Article.id)).where(
            Article.is_featured == True,  # noqa: E712
            *conditions,
        )
    )
    featured_articles = result.scalar() or 0

    # ========== 收藏统计 ==========
    result = await db.execute(
        select(func.count(Favorite.id))
        .join(Article, Article.id == Favorite.article_id)
        .where(*conditions)
    )
    total_favorites = result.scalar() or 0

    # ========== 浏览量 Top 5 ==========
    favorites_count = (
        select(func.count(Favorite.id))
        .where(Favorite.article_id == Article.id)
        .correlate(Article)
        .scalar_subquery()
    )
    result = await db.execute(
        select(Article.id, Article.title, Article.slug, Article.views, favorites_count)
        .where(*conditions)
        .order_by(Article.views.desc(), Article.id.desc())
        .limit(5)
    )
    top_articles = [
        TopArticleResponse(id=row[0], title=row[1], slug=row[2], views=row[3], favorites=row[4])
        for row in result.all()
    ]

    # ========== 最近业务事件 ==========
    recent_events = []
    if site_wide:
        result = await db.execute(
            select(AuditEvent).order_by(AuditEvent.created_at.desc(), AuditEvent.id.desc()).limit(10)
        )
        recent_events = [
            AuditEventResponse.model_validate(event) for event in result.scalars().all()
        ]

    return DashboardStats(
        scope="site" if site_wide else "own",
        total_articles=total_articles or 0,
        featured_articles=featured_articles,
        total_views=int(total_views or 0),
        total_favorites=total_favorites,
        avg_reading_time=round(float(avg_reading_time or 0), 1),
        top_articles=top_articles,
        recent_events=recent_events,
    )
