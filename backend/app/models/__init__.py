"""
模型包初始化
在此处导入所有模型，确保 SQLAlchemy Base.metadata 能注册全部表。
init_db() 只需 import app.models 即可触发所有模型注册。
"""

from app.models.user import User, AuthToken  # noqa: F401
from app.models.category import Category  # noqa: F401
from app.models.media import Media  # noqa: F401
from app.models.article import Article  # noqa: F401
from app.models.favorite import Favorite  # noqa: F401
from app.models.audit import AuditEvent  # noqa: F401
