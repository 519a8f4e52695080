"""FastAPI application entry point."""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from file_converter.api.routes import router
from file_converter.config import CORS_ORIGINS, SWEEP_INTERVAL_MINUTES, logger as config_logger
from file_converter.conversion.service import get_conversion_service
from file_converter.retention import run_periodic_sweeps

logging.getLogger("uvicorn").setLevel(logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    svc = get_conversion_service()
    svc.storage.ensure_directories()
    sweeper = None
    if SWEEP_INTERVAL_MINUTES > 0:
        sweeper = asyncio.create_task(
            run_periodic_sweeps(svc.storage, SWEEP_INTERVAL_MINUTES * 60, svc.storage.retention_hours)
        )
    config_logger.info("Converter API started")
    yield
    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
    config_logger.info("Converter API shutting down")


app = FastAPI(
    title="File Converter API",
    description="Convert images, audio, video, documents and archives between formats.",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)


def run():
    import uvicorn
    from file_converter.config import HOST, PORT
    uvicorn.run("file_converter.main:app", host=HOST, port=PORT)


if __name__ == "__main__":
    run()
