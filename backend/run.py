"""
启动脚本

在 backend/ 目录下执行 python run.py，等价于
uvicorn app.main:app --host <HOST> --port <PORT> [--reload]
"""

import uvicorn

from app.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
