from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.realtime import router as realtime_router
from src.adapters.api.controllers.stops import router as stops_router
from src.adapters.api.dependencies import get_schedule_manager
from src.adapters.logging_config import configure_logging
from src.adapters.settings import ScheduleRuntimeConfig
from src.app.services.schedule_cache_manager import ScheduleCacheManager


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    cfg = ScheduleRuntimeConfig.from_env()
    configure_logging(cfg.log_dir)

    if not cfg.autostart:
        yield
        return

    manager = get_schedule_manager()
    # The first update may download the whole bundle; serve 503s meanwhile.
    startup = asyncio.create_task(manager.start())
    try:
        yield
    finally:
        manager.stop()
        if not startup.done():
            startup.cancel()


app = FastAPI(title="Transit Schedule Cache", lifespan=lifespan)
app.include_router(stops_router)
app.include_router(realtime_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return unhandled errors as JSON instead of Starlette's plain-text 500."""

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = (os.getenv("TRANSIT_REVEAL_ERRORS") or "").strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }

    if reveal or isinstance(exc, (FileNotFoundError, RuntimeError, ValueError)):
        detail = str(exc) or exc.__class__.__name__
    else:
        detail = "Internal Server Error"

    return JSONResponse(status_code=500, content={"detail": detail})


@app.get("/health")
def health(
    manager: ScheduleCacheManager = Depends(get_schedule_manager),
) -> dict[str, str]:
    return {
        "status": "ok",
        "schedule": "loaded" if manager.feed is not None else "loading",
    }
