from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from playerzero import db as db_module
from playerzero.config import Settings
from playerzero.db import init_db
from playerzero.logger import setup_logging
from playerzero.controllers import v1
from playerzero.services.feature_flags import FreeModeRefresher, initialize_flags

settings = Settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


def _seed_flags() -> None:
    with db_module.SessionLocal() as db:
        initialize_flags(db)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await asyncio.to_thread(init_db, settings)
    await asyncio.to_thread(_seed_flags)

    refresher = FreeModeRefresher(interval_s=settings.free_mode_refresh_s)
    app.state.free_mode_refresher = refresher
    if settings.free_mode_refresher_enabled:
        refresher.start()
    else:
        await refresher.refresh()
        logger.info("Free mode refresher disabled, flag loaded once")
    yield
    await refresher.stop()


app = FastAPI(
    title="PlayerZERO Progress API",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.free_mode_refresher = FreeModeRefresher(interval_s=settings.free_mode_refresh_s)

app.include_router(v1.router)

Instrumentator().instrument(app).expose(app)
