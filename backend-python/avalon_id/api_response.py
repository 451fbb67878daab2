import time
from typing import Any, Dict, Optional


def _now_millis_str() -> str:
    """返回当前时间的毫秒时间戳字符串，兼容前端 `Number(res.timestamp)`。"""
    return str(time.time_ns() // 1_000_000)


def ok(data: Any) -> Dict[str, Any]:
    """成功响应包装。"""
    return {
        "code": "200",
        "data": data,
        "msg": "操作成功",
        "success": True,
        "timestamp": _now_millis_str(),
    }


def fail(code: str, msg: str, data: Optional[Any] = None) -> Dict[str, Any]:
    """失败响应包装，HTTP 层仍返回 200 状态码。"""
    return {
        "code": code,
        "data": data,
        "msg": msg,
        "success": False,
        "timestamp": _now_millis_str(),
    }


def fail_from_error(exc: Exception) -> Dict[str, Any]:
    """
    将业务异常转换为失败响应：
    - ValueError（参数 / 配置不正确）-> 400；
    - 其它异常（时钟回退等运行时错误）-> 500。
    """
    if isinstance(exc, ValueError):
        return fail("400", str(exc))
    return fail("500", str(exc) or "服务器内部错误")
