"""
审计事件模型
每条记录对应一次业务操作：谁（actor）对哪篇文章做了什么
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import Integer, String, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow


class AuditEvent(Base):
    """审计事件表（只追加，不修改）"""
    __tablename__ = "audit_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # register / login / role_update / article_create / article_update / article_delete
    event_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    level: Mapped[str] = mapped_column(String(20), nullable=False, default="info")
    # 操作人，用户删除后保留事件
    actor_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    # 涉及的文章；文章删除后仍需保留记录，因此不建外键
    article_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    details: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True, default=None)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )

    def __repr__(self):
        return f"<AuditEvent(id={self.id}, type={self.event_type!r}, actor={self.actor_id})>"
