"""
展示用格式化工具
"""

from datetime import datetime

from app.core.text import count_words


def reading_time_label(text: str, wpm: int = 220) -> str:
    """列表卡片上的阅读时长，如 "3 min read"（四舍五入，至少 1 分钟）"""
    minutes = max(1, int(count_words(text) / wpm + 0.5))
    return f"{minutes} min read"


def format_date(value: str | datetime) -> str:
    """格式化为 "12 Mar 2025"，无法解析时原样返回"""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return f"{value.day} {value.strftime('%b %Y')}"
