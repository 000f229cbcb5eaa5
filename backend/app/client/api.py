"""
Newsroom HTTP 客户端
封装文章、分类、收藏、认证、上传接口，基于 httpx.AsyncClient
"""

import logging
from typing import Any, Optional

import httpx

from app.client.session import AuthContext

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:1337"
LATEST_PAGE_SIZE = 9


class ApiError(Exception):
    """接口调用失败（status=0 表示网络错误）"""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message

    def __str__(self):
        return self.message


class NewsroomClient:
    """
    新闻站点 API 客户端

    Args:
        base_url: 后端地址，如 http://localhost:1337
        auth: 登录上下文，未提供时创建一个内存上下文
        transport: 可选的 httpx 传输层（测试时可传入 ASGITransport）
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        auth: Optional[AuthContext] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.auth = auth if auth is not None else AuthContext()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            transport=transport,
            timeout=timeout,
        )

    async def close(self):
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    # ==================== 基础请求 ====================

    async def _request(
        self,
        method: str,
        path: str,
        *,
        auth: bool = False,
        **kwargs,
    ) -> Any:
        headers = kwargs.pop("headers", {})
        if auth:
            headers.update(self.auth.headers())
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"请求失败 {method} {path}: {e}")
            raise ApiError(0, str(e) or "网络错误") from e

        if response.is_error:
            raise ApiError(response.status_code, self._error_message(response))
        if not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict) and isinstance(body.get("detail"), str):
            return body["detail"]
        return response.text or response.reason_phrase

    def _absolute_media(self, article: dict) -> dict:
        """封面图地址补全为绝对 URL"""
        cover = article.get("coverImage")
        if cover and cover.get("url", "").startswith("/"):
            article["coverImage"] = {**cover, "url": f"{self.base_url}{cover['url']}"}
        return article

    # ==================== 认证 ====================

    async def login(self, identifier: str, password: str) -> dict:
        data = await self._request(
            "POST", "/api/auth/local", json={"identifier": identifier, "password": password}
        )
        self.auth.save(data["jwt"], data["user"])
        return data["user"]

    async def register(self, username: str, email: str, password: str) -> dict:
        data = await self._request(
            "POST",
            "/api/auth/local/register",
            json={"username": username, "email": email, "password": password},
        )
        self.auth.save(data["jwt"], data["user"])
        return data["user"]

    async def logout(self) -> None:
        """吊销服务端令牌并清除本地状态；服务端失败时仍清除本地状态"""
        try:
            if self.auth.is_authenticated:
                await self._request("POST", "/api/auth/logout", auth=True)
        finally:
            self.auth.clear()

    # ==================== 文章 ====================

    async def fetch_articles(
        self,
        page: int = 1,
        page_size: int = LATEST_PAGE_SIZE,
        category: Optional[str] = None,
        author: Optional[int] = None,
        featured: Optional[bool] = None,
        sort: str = "publish_date:desc",
    ) -> dict:
        """分页获取文章，返回 {"data": [...], "meta": {...}}"""
        params: dict[str, Any] = {"page": page, "page_size": page_size, "sort": sort}
        if category:
            params["category"] = category
        if author is not None:
            params["author"] = author
        if featured is not None:
            params["featured"] = str(featured).lower()
        data = await self._request("GET", "/api/articles", params=params, auth=True)
        data["data"] = [self._absolute_media(a) for a in data.get("data", [])]
        return data

    async def fetch_latest_articles(self) -> list[dict]:
        data = await self.fetch_articles(page_size=LATEST_PAGE_SIZE)
        return data["data"]

    async def fetch_article(self, slug: str) -> dict:
        """按 slug 获取单篇文章（服务端浏览量 +1）"""
        data = await self._request(
            "GET", "/api/articles", params={"filters[slug]": slug}, auth=True
        )
        items = data.get("data") or []
        if not items:
            raise ApiError(404, "Article not found")
        return self._absolute_media(items[0])

    async def create_article(self, fields: dict) -> dict:
        data = await self._request("POST", "/api/articles", json={"data": fields}, auth=True)
        return data["data"]

    async def update_article(self, article_id: int, fields: dict) -> dict:
        data = await self._request(
            "PUT", f"/api/articles/{article_id}", json={"data": fields}, auth=True
        )
        return data["data"]

    async def delete_article(self, article_id: int) -> None:
        await self._request("DELETE", f"/api/articles/{article_id}", auth=True)

    # ==================== 分类 ====================

    async def fetch_categories(self) -> list[dict]:
        data = await self._request("GET", "/api/categories")
        return data.get("data", [])

    # ==================== 收藏 ====================

    async def list_favorites(self) -> list[dict]:
        data = await self._request("GET", "/api/favorites/user", auth=True)
        return [self._absolute_media(a) for a in data.get("data", [])]

    async def add_favorite(self, article_id: int) -> dict:
        """返回 {"isFavorite": True, "favoriteId": id}"""
        return await self._request(
            "POST", "/api/favorites", json={"data": {"article": article_id}}, auth=True
        )

    async def remove_favorite(self, favorite_id: int) -> dict:
        """返回 {"isFavorite": False, "favoriteId": id}"""
        return await self._request("DELETE", f"/api/favorites/{favorite_id}", auth=True)

    # ==================== 上传 ====================

    async def upload_image(
        self, filename: str, content: bytes, content_type: str = "image/png"
    ) -> list[dict]:
        """上传单张图片，返回媒体记录列表（通常一个元素）"""
        data = await self._request(
            "POST",
            "/api/upload",
            files={"files": (filename, content, content_type)},
            auth=True,
        )
        for media in data:
            if media.get("url", "").startswith("/"):
                media["url"] = f"{self.base_url}{media['url']}"
        return data
