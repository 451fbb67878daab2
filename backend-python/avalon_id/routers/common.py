from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Query, Request

from ..api_response import fail, fail_from_error, ok
from ..errors import ClockRegressionError, TimestampOverflowError
from ..models.entity import IdsReq
from ..snowflake import EPOCH_MS, Snowflake, SnowflakeId, parse_id

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_BATCH_SIZE = 1000


def _get_snowflake(request: Request) -> Snowflake:
    """取应用启动时创建的生成器实例。"""
    return request.app.state.snowflake


def _id_to_dict(sid: SnowflakeId) -> Dict[str, Any]:
    """解析结果转为前端结构，ID 一律以字符串返回。"""
    return {
        "id": str(sid.value),
        "timestamp": sid.timestamp,
        "createTime": sid.created_at.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3],
        "datacenterId": sid.datacenter_id,
        "workerId": sid.worker_id,
        "sequence": sid.sequence,
    }


@router.get("/common/id")
def generate_ids(request: Request, count: int = Query(1)):
    """生成雪花 ID：GET /common/id?count=N，返回 {"ids": [...]}。"""
    if count < 1 or count > MAX_BATCH_SIZE:
        return fail("400", f"count 取值范围为 1-{MAX_BATCH_SIZE}")

    snowflake = _get_snowflake(request)
    ids: List[str] = []
    try:
        for _ in range(count):
            ids.append(snowflake.next_id())
    except ClockRegressionError as e:
        logger.error("clock moved backwards by %d ms, id allocation refused", e.offset_ms)
        return fail_from_error(e)
    except TimestampOverflowError as e:
        logger.error("timestamp out of range: %s", e)
        return fail_from_error(e)

    return ok({"ids": ids})


@router.get("/common/id/config")
def get_id_config(request: Request):
    """当前进程的雪花 ID 节点配置：GET /common/id/config。"""
    snowflake = _get_snowflake(request)
    return ok(
        {
            "workerId": snowflake.worker_id,
            "datacenterId": snowflake.datacenter_id,
            "epoch": EPOCH_MS,
        }
    )


@router.get("/common/id/{snowflake_id}")
def parse_one(snowflake_id: str):
    """解析单个雪花 ID：GET /common/id/{id}。"""
    try:
        sid = parse_id(snowflake_id)
    except ValueError:
        return fail("400", "id 格式不正确")
    return ok(_id_to_dict(sid))


@router.post("/common/id/parse")
def parse_batch(body: IdsReq = Body(...)):
    """批量解析雪花 ID：POST /common/id/parse，请求体 {"ids": [...]}。"""
    return ok([_id_to_dict(parse_id(i)) for i in body.ids])
