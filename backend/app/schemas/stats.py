"""
统计相关的 Pydantic 响应模型
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class TopArticleResponse(BaseModel):
    """浏览量排行"""
    id: int
    title: str
    slug: str
    views: int = 0
    favorites: int = 0


class AuditEventResponse(BaseModel):
    """最近业务事件"""
    id: int
    event_type: str
    level: str
    actor_id: Optional[int] = None
    article_id: Optional[int] = None
    message: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class DashboardStats(BaseModel):
    """仪表盘统计数据"""
    # 统计范围：own=作者本人文章, site=全站
    scope: str = "own"

    # 文章统计
    total_articles: int = 0
    featured_articles: int = 0
    total_views: int = 0
    total_favorites: int = 0
    avg_reading_time: float = 0.0

    top_articles: list[TopArticleResponse] = []
    # 仅编辑/管理员可见
    recent_events: list[AuditEventResponse] = []
