from __future__ import annotations

from typing import Any


class ConfigurationError(ValueError):
    """雪花 ID 生成器配置错误（机器 ID / 数据中心 ID 越界或格式不正确）。"""

    def __init__(self, field: str, value: Any, message: str | None = None) -> None:
        self.field = field
        self.value = value
        super().__init__(message or f"{field} 配置不正确: {value!r}")


class ClockRegressionError(RuntimeError):
    """
    系统时钟回退，拒绝生成 ID。

    offset_ms 为回退的毫秒数（last_timestamp - now），便于排查 NTP 校时等问题。
    """

    def __init__(self, last_timestamp: int, now: int) -> None:
        self.last_timestamp = last_timestamp
        self.now = now
        self.offset_ms = last_timestamp - now
        super().__init__(
            f"Clock moved backwards. Refusing to generate id for {self.offset_ms} milliseconds"
        )


class TimestampOverflowError(RuntimeError):
    """当前时间超出 41 位时间戳可表示的范围（早于起始时间或超过约 69 年）。"""

    def __init__(self, elapsed_ms: int) -> None:
        self.elapsed_ms = elapsed_ms
        super().__init__(f"timestamp outside allowed range: {elapsed_ms} ms since epoch")
