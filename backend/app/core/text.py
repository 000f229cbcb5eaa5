"""
文本工具：词数统计、slug 生成
"""

import re
import unicodedata
import uuid


def count_words(text: str | None) -> int:
    """按空白字符切分统计词数"""
    if not text:
        return 0
    return len(text.split())


def slugify(value: str) -> str:
    """
    生成 URL 安全的 slug（仅 ASCII 小写字母、数字和连字符）
    无法转写的标题（如纯中文/俄文）回退为 article-<随机后缀>
    """
    normalized = unicodedata.normalize("NFKD", value or "")
    ascii_text = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_text)
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug or f"article-{uuid.uuid4().hex[:8]}"
