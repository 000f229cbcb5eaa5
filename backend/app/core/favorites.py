"""
收藏业务逻辑

- 收藏标记：为一篇或多篇文章附加当前读者的 is_favorite / favorite_id
- 收藏切换：列出、添加、取消收藏，均要求登录

状态机（单个 user + article）：absent --add--> present --remove--> absent，
重复 add / remove 都是幂等的空操作。
"""

import logging
from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import BadRequest, NotFound, Unauthorized
from app.models.article import Article
from app.models.favorite import Favorite
from app.models.user import User
from app.schemas.article import ArticleResponse
from app.schemas.favorite import FavoriteStatus

logger = logging.getLogger(__name__)


# ==================== 收藏标记 ====================

async def resolve_favorite_ids(
    db: AsyncSession,
    viewer: Optional[User],
    article_ids: Iterable[int],
) -> dict[int, int]:
    """
    查询读者对给定文章的收藏记录

    Returns:
        {article_id: favorite_id}，匿名读者返回空字典
    """
    ids = set(article_ids)
    if viewer is None or not ids:
        return {}

    result = await db.execute(
        select(Favorite.article_id, Favorite.id).where(
            Favorite.user_id == viewer.id,
            Favorite.article_id.in_(ids),
        )
    )
    return {article_id: favorite_id for article_id, favorite_id in result.all()}


async def annotate_articles(
    db: AsyncSession,
    viewer: Optional[User],
    articles: Sequence[Article],
) -> list[ArticleResponse]:
    """
    将 ORM 文章转换为响应模型并附加收藏标记

    收藏查询失败不影响文章浏览：记录告警后全部标记为未收藏。
    查询放在 SAVEPOINT 中，失败只回滚这一步，请求的事务仍可提交。
    """
    # 先完成序列化，SAVEPOINT 回滚后不再读取 ORM 属性
    annotated = [ArticleResponse.model_validate(article) for article in articles]
    if viewer is None or not annotated:
        return annotated

    try:
        async with db.begin_nested():
            favorites = await resolve_favorite_ids(db, viewer, [a.id for a in annotated])
    except Exception as e:
        logger.warning(f"收藏标记查询失败，降级为未收藏: {e}", exc_info=True)
        favorites = {}

    for item in annotated:
        favorite_id = favorites.get(item.id)
        item.is_favorite = favorite_id is not None
        item.favorite_id = favorite_id
    return annotated


# ==================== 收藏切换 ====================

def _require_viewer(viewer: Optional[User]) -> User:
    if viewer is None:
        raise Unauthorized("请先登录")
    return viewer


async def list_favorite_articles(
    db: AsyncSession, viewer: Optional[User]
) -> list[ArticleResponse]:
    """列出读者收藏的全部文章（按收藏时间倒序），均标记为已收藏"""
    viewer = _require_viewer(viewer)

    result = await db.execute(
        select(Article, Favorite.id)
        .join(Favorite, Favorite.article_id == Article.id)
        .where(Favorite.user_id == viewer.id)
        .order_by(Favorite.created_at.desc(), Favorite.id.desc())
    )

    items = []
    for article, favorite_id in result.all():
        item = ArticleResponse.model_validate(article)
        item.is_favorite = True
        item.favorite_id = favorite_id
        items.append(item)
    return items


async def _find_favorite(
    db: AsyncSession, user_id: int, article_id: int
) -> Optional[Favorite]:
    result = await db.execute(
        select(Favorite).where(
            Favorite.user_id == user_id,
            Favorite.article_id == article_id,
        )
    )
    return result.scalars().first()


async def add_favorite(
    db: AsyncSession, viewer: Optional[User], article_id: Optional[int]
) -> FavoriteStatus:
    """
    添加收藏（幂等）

    已存在同一 (user, article) 记录时直接返回已有 favorite_id，不重复创建。
    并发添加撞上唯一约束时回滚，改为返回先写入的那条记录。
    """
    viewer = _require_viewer(viewer)
    if not article_id:
        raise BadRequest("未指定 article")
    # 回滚会让会话中的 viewer 过期，之后只能使用这里取出的 id
    user_id = viewer.id

    existing = await _find_favorite(db, user_id, article_id)
    if existing:
        return FavoriteStatus(is_favorite=True, favorite_id=existing.id)

    if await db.get(Article, article_id) is None:
        raise NotFound("文章不存在")

    favorite = Favorite(user_id=user_id, article_id=article_id)
    db.add(favorite)
    try:
        await db.flush()
    except IntegrityError:
        # 本次请求此前只有读操作，整体回滚不会丢失其他写入
        await db.rollback()
        existing = await _find_favorite(db, user_id, article_id)
        if existing is None:
            raise
        logger.info(f"并发收藏已由其他请求创建: user={user_id}, article={article_id}")
        return FavoriteStatus(is_favorite=True, favorite_id=existing.id)

    logger.info(f"添加收藏: id={favorite.id}, user={user_id}, article={article_id}")
    return FavoriteStatus(is_favorite=True, favorite_id=favorite.id)


async def remove_favorite(
    db: AsyncSession, viewer: Optional[User], favorite_id: Optional[int]
) -> FavoriteStatus:
    """
    取消收藏（幂等）

    记录不存在视为已取消；记录属于其他用户时拒绝删除。
    """
    viewer = _require_viewer(viewer)
    if not favorite_id:
        raise BadRequest("未指定 favoriteId")

    favorite = await db.get(Favorite, favorite_id)
    if favorite is None:
        return FavoriteStatus(is_favorite=False, favorite_id=favorite_id)
    if favorite.user_id != viewer.id:
        raise Unauthorized("该收藏记录不属于当前用户")

    await db.delete(favorite)
    await db.flush()

    logger.info(f"取消收藏: id={favorite_id}, user={viewer.id}")
    return FavoriteStatus(is_favorite=False, favorite_id=favorite_id)
