from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field, field_validator

from ..snowflake import parse_id

# 19 位十进制数字可容纳任意 63 位雪花 ID
ID_MAX_LENGTH = 19


class IdAllocator(Protocol):
    def next_id(self) -> str: ...


def _check_id_str(value: str) -> str:
    """校验雪花 ID 字符串并返回规范化后的值。"""
    return str(parse_id(value).value)


class CommonEntity(BaseModel):
    """
    通用实体基类：雪花 ID 主键 + 创建/更新时间。

    主键在插入前通过 ensure_id 分配，已有主键的记录不会被覆盖。
    """

    id: Optional[str] = Field(default=None, max_length=ID_MAX_LENGTH, description="主键ID（雪花ID）")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def ensure_id(self, allocator: IdAllocator) -> str:
        """插入前钩子：主键为空时向生成器申请一次 ID。"""
        if not self.id:
            self.id = allocator.next_id()
        return self.id


class CompleteEntity(CommonEntity):
    """带操作人字段的实体。"""

    create_by: Optional[str] = Field(default=None, max_length=ID_MAX_LENGTH, description="创建者")
    update_by: Optional[str] = Field(default=None, max_length=ID_MAX_LENGTH, description="更新者")


class IdsReq(BaseModel):
    """批量 ID 请求体（如批量删除），至少包含一个 ID。"""

    ids: List[str] = Field(..., min_length=1)

    @field_validator("ids")
    @classmethod
    def _valid_ids(cls, v: List[str]) -> List[str]:
        return [_check_id_str(x) for x in v]
