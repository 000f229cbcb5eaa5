"""
文章模型
存储新闻文章及其派生字段（浏览量、阅读时长）
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import Integer, String, Text, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, utcnow
from app.models.category import Category
from app.models.media import Media
from app.models.user import User


class Article(Base):
    """文章表"""
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 文章标题
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    # URL 友好的唯一别名
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    # 文章正文
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # 文章摘要
    excerpt: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default="")
    # 浏览量，只增不减
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # 阅读时长（分钟），由正文词数推算
    reading_time: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    # 是否推荐到首页
    is_featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # 发布时间
    publish_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # ---- 关联字段 ----
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True
    )
    author_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    cover_image_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("media.id", ondelete="SET NULL"), nullable=True
    )

    category: Mapped[Optional[Category]] = relationship(lazy="selectin")
    author: Mapped[Optional[User]] = relationship(lazy="selectin")
    cover_image: Mapped[Optional[Media]] = relationship(lazy="selectin")

    def __repr__(self):
        return f"<Article(id={self.id}, slug={self.slug!r})>"
