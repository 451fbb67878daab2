"""
FastAPI 启动入口。

运行命令示例：

    cd backend-python
    SNOWFLAKE_WORKER_ID=1 SNOWFLAKE_DATACENTER_ID=1 uvicorn main:app --port 4398

说明：
- 多实例部署时，每个进程必须配置不同的 SNOWFLAKE_WORKER_ID / SNOWFLAKE_DATACENTER_ID 组合；
- 数据库等其它配置参见 avalon_id/config.py。
"""

from avalon_id.main import app  # noqa: F401
