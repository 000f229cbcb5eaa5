"""
上传文件的 Pydantic 响应模型
"""

from datetime import datetime
from typing import Optional

from app.schemas.common import CamelModel


class MediaResponse(CamelModel):
    id: int
    name: str
    url: str
    mime: str
    size: int
    alternative_text: Optional[str] = None
    created_at: datetime
