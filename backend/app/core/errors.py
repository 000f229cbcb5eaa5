"""
业务异常定义
API 层通过 main.py 中注册的异常处理器统一转换为 HTTP 响应
"""


class NewsroomError(Exception):
    """业务异常基类"""
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__name__


class BadRequest(NewsroomError):
    """请求缺少必要参数或参数非法"""
    status_code = 400


class Unauthorized(NewsroomError):
    """未登录，或操作不属于当前用户的记录"""
    status_code = 401


class Forbidden(NewsroomError):
    """已登录但角色权限不足"""
    status_code = 403


class NotFound(NewsroomError):
    """引用的资源不存在"""
    status_code = 404


class Conflict(NewsroomError):
    """唯一性冲突，如 slug 重复"""
    status_code = 409
