"""
API 路由聚合
将所有子路由挂载到统一的 /api 前缀下
"""

from fastapi import APIRouter

from app.api.articles import router as articles_router
from app.api.auth import router as auth_router
from app.api.categories import router as categories_router
from app.api.favorites import router as favorites_router
from app.api.stats import router as stats_router
from app.api.upload import router as upload_router

# 主路由器，统一 /api 前缀
api_router = APIRouter(prefix="/api")

# 挂载各子路由（子路由自身已带 prefix，此处不再重复）
api_router.include_router(articles_router)
api_router.include_router(auth_router)
api_router.include_router(categories_router)
api_router.include_router(favorites_router)
api_router.include_router(stats_router)
api_router.include_router(upload_router)
