from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool

from .config import get_settings

_pool_lock = threading.Lock()
_pool: Optional[ThreadedConnectionPool] = None


def _build_dsn() -> str:
    """构造 PostgreSQL 连接 DSN 字符串。"""
    s = get_settings()
    return (
        f"host={s.db_host} port={s.db_port} user={s.db_user} "
        f"password={s.db_password} dbname={s.db_name} sslmode={s.db_sslmode}"
    )


def get_pool() -> ThreadedConnectionPool:
    """获取全局连接池，首次使用时创建。"""
    global _pool
    if _pool is not None:
        return _pool
    with _pool_lock:
        if _pool is None:
            s = get_settings()
            _pool = ThreadedConnectionPool(
                minconn=1,
                maxconn=s.db_pool_size,
                dsn=_build_dsn(),
                cursor_factory=RealDictCursor,
            )
        return _pool


def close_pool() -> None:
    """关闭连接池，应用退出时调用。"""
    global _pool
    with _pool_lock:
        if _pool is not None:
            _pool.closeall()
            _pool = None


@contextmanager
def get_db_cursor() -> Iterator[RealDictCursor]:
    """
    从连接池借出连接并返回游标。

    代码块正常结束时提交，抛出异常时回滚，连接总是归还连接池。
    """
    pool = get_pool()
    conn = pool.getconn()
    try:
        with conn.cursor() as cursor:
            yield cursor
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        pool.putconn(conn)
