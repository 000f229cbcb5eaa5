"""
业务审计
将关键操作写入 audit_events 表，与 logging 输出互补；
编辑仪表盘读取最近的事件
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditEvent
from app.models.user import User

logger = logging.getLogger(__name__)


def record_event(
    db: AsyncSession,
    event_type: str,
    message: str,
    actor: Optional[User] = None,
    article_id: Optional[int] = None,
    details: Optional[dict] = None,
    level: str = "info",
) -> AuditEvent:
    """添加一条审计事件（随当前事务一起提交）"""
    event = AuditEvent(
        event_type=event_type,
        level=level,
        actor_id=actor.id if actor is not None else None,
        article_id=article_id,
        message=message,
        details=details,
    )
    db.add(event)
    logger.debug(f"审计事件: {event_type} - {message}")
    return event
