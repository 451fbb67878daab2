import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import get_settings
from .db import close_pool
from .id_generator import init_snowflake
from .routers import common

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """启动时创建进程唯一的雪花 ID 生成器，坐标配置不正确时直接终止启动。"""
    snowflake = init_snowflake()
    app.state.snowflake = snowflake
    logger.info(
        "snowflake id allocator ready: datacenter_id=%d worker_id=%d",
        snowflake.datacenter_id,
        snowflake.worker_id,
    )
    try:
        yield
    finally:
        close_pool()
        logger.info("avalon-id backend stopped")


def create_app() -> FastAPI:
    """创建 FastAPI 应用并注册路由。"""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    app = FastAPI(title="Avalon ID Backend (Python/FastAPI)", lifespan=lifespan)
    app.include_router(common.router)
    return app


app = create_app()
