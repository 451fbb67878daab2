"""
进程级雪花 ID 生成器实例。

说明：
- 每个进程只持有一个 Snowflake 实例，所有主键生成都经由它完成；
- 应用启动时由 main.create_app 显式创建（init_snowflake），
  脚本等场景首次调用 get_snowflake 时按配置懒加载；
- 节点坐标来自环境变量 SNOWFLAKE_WORKER_ID / SNOWFLAKE_DATACENTER_ID，默认 1/1。
"""

from __future__ import annotations

import threading
from typing import Optional

from .config import get_settings
from .snowflake import Snowflake

_lock = threading.Lock()
_instance: Optional[Snowflake] = None


def init_snowflake(
    worker_id: Optional[int] = None,
    datacenter_id: Optional[int] = None,
) -> Snowflake:
    """
    创建进程唯一的生成器实例。

    未指定的坐标从配置读取；实例已存在时，坐标一致（或未指定）则直接返回，
    否则抛出 RuntimeError，避免同一进程出现多个状态所有者。
    """
    global _instance
    with _lock:
        if _instance is not None:
            if (worker_id is None or worker_id == _instance.worker_id) and (
                datacenter_id is None or datacenter_id == _instance.datacenter_id
            ):
                return _instance
            raise RuntimeError(f"雪花 ID 生成器已初始化: {_instance!r}")

        s = get_settings()
        wid = s.snowflake_worker_id if worker_id is None else worker_id
        did = s.snowflake_datacenter_id if datacenter_id is None else datacenter_id
        _instance = Snowflake(wid, did)
        return _instance


def get_snowflake() -> Snowflake:
    """获取全局生成器实例，未初始化时按配置创建。"""
    if _instance is not None:
        return _instance
    return init_snowflake()


def next_id() -> str:
    """返回下一个全局唯一 ID（十进制字符串）。"""
    return get_snowflake().next_id()


def reset_snowflake() -> None:
    """丢弃当前实例，仅用于测试隔离与进程退出。"""
    global _instance
    with _lock:
        _instance = None
