"""
公共 Pydantic 模型
对外 JSON 统一使用 camelCase 字段名，Python 侧仍使用 snake_case
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """camelCase 序列化基类，同时接受 snake_case 输入"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    """分页信息"""
    page: int = 1
    page_size: int = 0
    page_count: int = 1
    total: int = 0


class ListMeta(BaseModel):
    """列表响应元数据"""
    pagination: Pagination
