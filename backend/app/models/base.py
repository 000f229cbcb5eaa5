"""
SQLAlchemy ORM 基类
所有模型都继承自此 Base
"""

from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow():
    """返回当前 UTC 时间（兼容 Python 3.12+ 弃用 datetime.utcnow）"""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """声明式基类"""
    pass
