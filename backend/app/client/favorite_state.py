"""
单篇文章的收藏状态（客户端）

- busy 期间忽略重复点击，避免同一控件并发提交
- 失败时只记录 error，收藏状态保持调用前的值
- unmount() 之后返回的结果直接丢弃，不再修改状态
"""

import logging
from dataclasses import dataclass
from typing import Optional

from app.client.api import ApiError, NewsroomClient

logger = logging.getLogger(__name__)


@dataclass
class FavoriteState:
    article_id: int
    is_favorite: bool = False
    favorite_id: Optional[int] = None
    busy: bool = False
    error: Optional[str] = None

    @classmethod
    def from_article(cls, article: dict) -> "FavoriteState":
        """根据接口返回的文章（含 isFavorite / favoriteId）初始化"""
        return cls(
            article_id=article["id"],
            is_favorite=bool(article.get("isFavorite")),
            favorite_id=article.get("favoriteId"),
        )


class FavoriteToggle:
    """收藏按钮的状态控制器"""

    def __init__(self, client: NewsroomClient, state: FavoriteState):
        self.client = client
        self.state = state
        self.mounted = True

    def unmount(self) -> None:
        self.mounted = False

    async def toggle(self) -> FavoriteState:
        state = self.state
        if state.busy:
            logger.debug(f"收藏操作进行中，忽略重复点击: article={state.article_id}")
            return state
        if state.is_favorite and state.favorite_id is None:
            state.error = "缺少收藏记录 ID，请刷新后重试"
            logger.warning(f"已收藏但缺少 favoriteId，跳过取消收藏: article={state.article_id}")
            return state

        state.busy = True
        state.error = None
        try:
            if not state.is_favorite:
                result = await self.client.add_favorite(state.article_id)
                if self.mounted:
                    state.is_favorite = True
                    state.favorite_id = result.get("favoriteId")
            else:
                await self.client.remove_favorite(state.favorite_id)
                if self.mounted:
                    state.is_favorite = False
                    state.favorite_id = None
        except ApiError as e:
            if self.mounted:
                state.error = e.message or "收藏操作失败"
            logger.info(f"收藏操作失败: article={state.article_id}, status={e.status}")
        finally:
            if self.mounted:
                state.busy = False
        return state
