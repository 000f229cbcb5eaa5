"""
文章派生字段维护
- 阅读时长：写入前按正文词数重新计算
- 浏览量：单篇读取时自增
"""

import logging
import math
from typing import Any

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.text import count_words
from app.models.article import Article

logger = logging.getLogger(__name__)


def estimate_reading_time(content: str, words_per_minute: int | None = None) -> int:
    """
    阅读时长（分钟）= ceil(词数 / 每分钟词数)，最少 1 分钟
    """
    wpm = words_per_minute or settings.READING_WORDS_PER_MINUTE
    words = count_words(content)
    return max(1, math.ceil(words / wpm))


def apply_reading_time(data: dict[str, Any]) -> dict[str, Any]:
    """
    写入前钩子：只要本次提交包含非空 content 就重新计算 reading_time，
    不与库中已有正文做比较
    """
    content = data.get("content")
    if content:
        data["reading_time"] = estimate_reading_time(content)
    return data


async def increment_views(db: AsyncSession, article_id: int) -> bool:
    """
    浏览量 +1，使用单条 UPDATE 原子自增

    Returns:
        文章存在时返回 True
    """
    result = await db.execute(
        update(Article)
        .where(Article.id == article_id)
        .values(views=Article.views + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        logger.debug(f"文章浏览量 +1: id={article_id}")
        return True
    return False
