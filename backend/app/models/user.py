"""
用户与登录令牌模型
用户仅作为文章作者和收藏归属的外键目标，身份管理保持最小化
"""

from datetime import datetime

from sqlalchemy import Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, utcnow

# 角色：visitor=普通读者, author=作者, editor=编辑, admin=管理员
ROLES = ("visitor", "author", "editor", "admin")
# 可以撰写文章的角色
WRITER_ROLES = ("author", "editor", "admin")
# 可以管理任意文章的角色
EDITOR_ROLES = ("editor", "admin")


class User(Base):
    """用户表"""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    # PBKDF2 哈希，格式 "pbkdf2_sha256$<iterations>$<salt>$<hash>"
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="visitor")
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username!r}, role={self.role})>"


class AuthToken(Base):
    """登录令牌表（不透明 Bearer token）"""
    __tablename__ = "auth_tokens"

    token: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    user: Mapped[User] = relationship(lazy="joined")
