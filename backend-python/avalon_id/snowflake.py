"""
雪花 ID 生成器（Snowflake）。

ID 结构（64 位，高位到低位）：
- 1 位符号位，始终为 0；
- 41 位时间戳，自 EPOCH_MS 起的毫秒数，约可使用 69 年；
- 5 位数据中心 ID + 5 位机器 ID，最多 1024 个节点；
- 12 位毫秒内序列号，每毫秒最多 4096 个 ID。

说明：
- 所有位运算均使用 Python 整数，只在返回时转换为十进制字符串，
  避免前端 Number 精度丢失；
- 同一实例内的调用通过互斥锁串行化，保证单调递增且不重复；
- 不同进程需配置不同的 (datacenter_id, worker_id) 组合，生成器本身不做校验。
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from .errors import ClockRegressionError, ConfigurationError, TimestampOverflowError

# 起始时间戳：2024-01-01 00:00:00 UTC
EPOCH_MS = 1704067200000

WORKER_ID_BITS = 5
DATACENTER_ID_BITS = 5
SEQUENCE_BITS = 12

MAX_WORKER_ID = -1 ^ (-1 << WORKER_ID_BITS)
MAX_DATACENTER_ID = -1 ^ (-1 << DATACENTER_ID_BITS)
SEQUENCE_MASK = -1 ^ (-1 << SEQUENCE_BITS)

WORKER_ID_SHIFT = SEQUENCE_BITS
DATACENTER_ID_SHIFT = SEQUENCE_BITS + WORKER_ID_BITS
TIMESTAMP_SHIFT = SEQUENCE_BITS + WORKER_ID_BITS + DATACENTER_ID_BITS

MAX_TIMESTAMP = (1 << 41) - 1
MAX_ID = (1 << 63) - 1

Clock = Callable[[], int]


def current_millis() -> int:
    """当前 Unix 毫秒时间戳，整数运算避免浮点误差。"""
    return time.time_ns() // 1_000_000


def _check_coordinate(field: str, value: int, max_value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(field, value, f"{field} must be an integer")
    if value < 0 or value > max_value:
        raise ConfigurationError(
            field, value, f"{field} must be between 0 and {max_value}"
        )
    return value


def compose_id(timestamp: int, datacenter_id: int, worker_id: int, sequence: int) -> int:
    """按位拼接各字段为 64 位 ID，timestamp 为相对 EPOCH_MS 的毫秒数。"""
    if timestamp < 0 or timestamp > MAX_TIMESTAMP:
        raise ValueError(f"timestamp must be between 0 and {MAX_TIMESTAMP}")
    if datacenter_id < 0 or datacenter_id > MAX_DATACENTER_ID:
        raise ValueError(f"datacenter_id must be between 0 and {MAX_DATACENTER_ID}")
    if worker_id < 0 or worker_id > MAX_WORKER_ID:
        raise ValueError(f"worker_id must be between 0 and {MAX_WORKER_ID}")
    if sequence < 0 or sequence > SEQUENCE_MASK:
        raise ValueError(f"sequence must be between 0 and {SEQUENCE_MASK}")
    return (
        (timestamp << TIMESTAMP_SHIFT)
        | (datacenter_id << DATACENTER_ID_SHIFT)
        | (worker_id << WORKER_ID_SHIFT)
        | sequence
    )


@dataclass(frozen=True)
class SnowflakeId:
    """解析后的雪花 ID 各字段。"""

    value: int
    timestamp: int
    datacenter_id: int
    worker_id: int
    sequence: int

    @property
    def unix_millis(self) -> int:
        return self.timestamp + EPOCH_MS

    @property
    def created_at(self) -> datetime:
        """ID 生成时刻（UTC）。"""
        seconds, millis = divmod(self.unix_millis, 1000)
        return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(
            microsecond=millis * 1000
        )

    def __str__(self) -> str:
        return str(self.value)


def parse_id(value: str | int) -> SnowflakeId:
    """
    解析十进制字符串（或整数）形式的雪花 ID。

    不合法的输入（空串、非数字、负数、超出 63 位）抛出 ValueError。
    """
    if isinstance(value, bool):
        raise ValueError("id 格式不正确")
    if isinstance(value, int):
        n = value
    elif isinstance(value, str):
        s = value.strip()
        if not s or not s.isdigit() or not s.isascii():
            raise ValueError("id 格式不正确")
        n = int(s)
    else:
        raise ValueError("id 格式不正确")

    if n < 0 or n > MAX_ID:
        raise ValueError("id 超出范围")

    return SnowflakeId(
        value=n,
        timestamp=n >> TIMESTAMP_SHIFT,
        datacenter_id=(n >> DATACENTER_ID_SHIFT) & MAX_DATACENTER_ID,
        worker_id=(n >> WORKER_ID_SHIFT) & MAX_WORKER_ID,
        sequence=n & SEQUENCE_MASK,
    )


class Snowflake:
    """
    进程内雪花 ID 生成器，一个实例对应一个 (datacenter_id, worker_id) 组合。

    实例独占 last_timestamp / sequence 状态，所有调用在同一把锁内完成
    “读时钟 -> 校验 -> 更新状态 -> 编码”，并发调用不会交错。
    """

    def __init__(
        self,
        worker_id: int = 1,
        datacenter_id: int = 1,
        *,
        clock: Optional[Clock] = None,
    ) -> None:
        self._worker_id = _check_coordinate("worker_id", worker_id, MAX_WORKER_ID)
        self._datacenter_id = _check_coordinate(
            "datacenter_id", datacenter_id, MAX_DATACENTER_ID
        )
        self._clock: Clock = clock or current_millis
        self._sequence = 0
        self._last_timestamp = -1
        self._lock = threading.Lock()

    @property
    def worker_id(self) -> int:
        return self._worker_id

    @property
    def datacenter_id(self) -> int:
        return self._datacenter_id

    @property
    def last_timestamp(self) -> int:
        """最近一次生成 ID 使用的 Unix 毫秒时间戳，未生成过时为 -1。"""
        return self._last_timestamp

    def next_int(self) -> int:
        """生成下一个 ID（整数形式）。"""
        with self._lock:
            now = self._clock()
            last = self._last_timestamp

            # 时钟回退：直接失败，不修改任何状态
            if now < last:
                raise ClockRegressionError(last, now)

            if now == last:
                sequence = (self._sequence + 1) & SEQUENCE_MASK
                # 毫秒内序列溢出，等待下一毫秒
                if sequence == 0:
                    now = self._wait_next_millis(last)
            else:
                sequence = 0

            elapsed = now - EPOCH_MS
            if elapsed < 0 or elapsed > MAX_TIMESTAMP:
                raise TimestampOverflowError(elapsed)

            self._last_timestamp = now
            self._sequence = sequence

            return compose_id(elapsed, self._datacenter_id, self._worker_id, sequence)

    def next_id(self) -> str:
        """生成下一个 ID，返回十进制字符串。"""
        return str(self.next_int())

    def _wait_next_millis(self, last_timestamp: int) -> int:
        """阻塞到下一个毫秒，期间让出 CPU，返回新的时间戳。"""
        timestamp = self._clock()
        while timestamp <= last_timestamp:
            time.sleep(0)
            timestamp = self._clock()
        return timestamp

    def __repr__(self) -> str:
        return (
            f"Snowflake(worker_id={self._worker_id}, "
            f"datacenter_id={self._datacenter_id})"
        )
