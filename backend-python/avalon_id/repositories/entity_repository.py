from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple

from psycopg2 import sql
from psycopg2.extras import RealDictCursor

from ..db import get_db_cursor
from ..id_generator import get_snowflake
from ..models.entity import CommonEntity, IdAllocator

# 为空时由数据库填充当前时间的列
_TIMESTAMP_COLUMNS = ("created_at", "updated_at")


def _build_insert(table: str, entity: CommonEntity) -> Tuple[sql.Composed, List[Any]]:
    """根据实体字段构造 INSERT 语句与参数，表名和列名均做标识符转义。"""
    row = entity.model_dump()
    columns: List[sql.Identifier] = []
    values: List[sql.Composable] = []
    params: List[Any] = []
    for name, value in row.items():
        columns.append(sql.Identifier(name))
        if value is None and name in _TIMESTAMP_COLUMNS:
            values.append(sql.SQL("NOW()"))
            continue
        values.append(sql.Placeholder())
        params.append(value)

    stmt = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values})").format(
        table=sql.Identifier(table),
        columns=sql.SQL(", ").join(columns),
        values=sql.SQL(", ").join(values),
    )
    return stmt, params


def insert_entity(
    table: str,
    entity: CommonEntity,
    allocator: Optional[IdAllocator] = None,
    cur: Optional[RealDictCursor] = None,
) -> str:
    """
    插入一条实体记录，返回主键。

    说明：
    - 插入前调用 ensure_id 分配雪花 ID（已有主键则保留）；
    - ID 分配失败（如时钟回退）时直接抛出，本次插入不执行任何 SQL；
    - 传入 cur 时复用调用方事务，否则新建连接并在结束时提交。
    """
    entity_id = entity.ensure_id(allocator or get_snowflake())
    stmt, params = _build_insert(table, entity)
    if cur is not None:
        cur.execute(stmt, params)
        return entity_id

    with get_db_cursor() as own_cur:
        own_cur.execute(stmt, params)
    return entity_id


def insert_entities(
    table: str,
    entities: Sequence[CommonEntity],
    allocator: Optional[IdAllocator] = None,
) -> List[str]:
    """在同一事务内批量插入实体，任一条失败则整体回滚。"""
    if not entities:
        return []
    alloc = allocator or get_snowflake()
    ids: List[str] = []
    with get_db_cursor() as cur:
        for entity in entities:
            ids.append(insert_entity(table, entity, alloc, cur))
    return ids
