"""
上传文件模型
文章封面图等媒体文件的元数据，文件本体存放在 UPLOADS_DIR
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, utcnow


class Media(Base):
    """媒体文件表"""
    __tablename__ = "media"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 原始文件名
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # 对外访问路径，如 /uploads/3f2a....png
    url: Mapped[str] = mapped_column(String(500), nullable=False)
    mime: Mapped[str] = mapped_column(String(100), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    alternative_text: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    uploaded_by_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
