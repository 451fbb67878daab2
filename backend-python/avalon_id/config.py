import os
from functools import lru_cache

from .errors import ConfigurationError


def _env_int(name: str, default: int) -> int:
    """读取整数环境变量，未设置或为空时返回默认值。"""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(name, raw, f"{name} must be an integer") from None


class Settings:
    """应用配置，主要来自环境变量，变量名与 Node 版保持一致。"""

    def __init__(self) -> None:
        # 雪花 ID 节点坐标，多进程部署时每个进程必须唯一
        self.snowflake_worker_id: int = _env_int("SNOWFLAKE_WORKER_ID", 1)
        self.snowflake_datacenter_id: int = _env_int("SNOWFLAKE_DATACENTER_ID", 1)

        # 数据库配置
        self.db_host: str = os.getenv("DB_HOST", "127.0.0.1")
        self.db_port: str = os.getenv("DB_PORT", "5432")
        self.db_user: str = os.getenv("DB_USER", "postgres")
        self.db_password: str = os.getenv("DB_PWD", "123456")
        self.db_name: str = os.getenv("DB_NAME", "nv_admin")
        self.db_sslmode: str = os.getenv("DB_SSLMODE", "disable")
        self.db_pool_size: int = _env_int("DB_POOL_SIZE", 10)

        self.log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()


@lru_cache()
def get_settings() -> Settings:
    """获取单例配置实例。"""
    return Settings()
