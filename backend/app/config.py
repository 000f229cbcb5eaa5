"""
应用配置管理
使用 pydantic-settings 从环境变量和 .env 文件加载配置
"""

import os
from typing import Optional
from pydantic_settings import BaseSettings

_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


class Settings(BaseSettings):
    """全局配置"""

    # ========== 基础配置 ==========
    APP_NAME: str = "Newsroom"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    HOST: str = "0.0.0.0"
    PORT: int = 1337

    # ========== 日志配置 ==========
    LOG_LEVEL: str = "INFO"
    # 可选的日志文件路径，为空时只输出到控制台
    LOG_FILE: Optional[str] = None

    # ========== 数据库配置 ==========
    # SQLite 数据库文件路径
    DATABASE_PATH: str = os.path.join(_BACKEND_DIR, "data", "newsroom.db")
    # 完整的异步连接串（如 postgresql+asyncpg://...），设置后优先于 DATABASE_PATH
    DATABASE_URL_OVERRIDE: Optional[str] = None

    @property
    def DATABASE_URL(self) -> str:
        """异步数据库连接字符串"""
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"sqlite+aiosqlite:///{self.DATABASE_PATH}"

    # ========== 文章配置 ==========
    READING_WORDS_PER_MINUTE: int = 200  # 阅读时长估算：每分钟阅读词数
    DEFAULT_PAGE_SIZE: int = 9
    MAX_PAGE_SIZE: int = 100

    # ========== 认证配置 ==========
    AUTH_TOKEN_TTL_HOURS: int = 24 * 30
    # 启动时自动创建的管理员账号（配置邮箱和密码时生效）
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None

    # ========== 上传配置 ==========
    UPLOADS_DIR: str = os.path.join(_BACKEND_DIR, "uploads")
    UPLOAD_MAX_BYTES: int = 5 * 1024 * 1024  # 单文件上限 5MB

    # ========== CORS 配置 ==========
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]

    model_config = {
        "env_file": os.path.join(_BACKEND_DIR, ".env"),
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


# 全局配置单例
settings = Settings()
