import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from packfile_manager.errors import (
    CorruptEntry,
    DuplicatePath,
    FieldTooLarge,
    InvalidPath,
    MalformedRow,
    NonEditableArchive,
    NotFound,
    OutOfBounds,
    PackFileError,
    SchemaLoadError,
    SiegeAIPatchError,
    TruncatedArchive,
    TypeMismatch,
    UnknownSchema,
    UnsupportedFormat,
)
from packfile_manager.routers import api_router
from packfile_manager.services.session_store import sessions
from packfile_manager.tables.registry import default_registry


def _configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
    for name in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)


_configure_logging()
logger = logging.getLogger(__name__)

_ERROR_STATUS: dict[type[PackFileError], int] = {
    NotFound: 404,
    DuplicatePath: 409,
    NonEditableArchive: 409,
    UnknownSchema: 422,
    InvalidPath: 400,
    TypeMismatch: 400,
    FieldTooLarge: 400,
    SiegeAIPatchError: 400,
    UnsupportedFormat: 422,
    TruncatedArchive: 422,
    CorruptEntry: 422,
    MalformedRow: 422,
    OutOfBounds: 422,
    SchemaLoadError: 500,
}


def status_for(exc: PackFileError) -> int:
    for cls in type(exc).__mro__:
        status = _ERROR_STATUS.get(cls)
        if status is not None:
            return status
    return 500


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    registry = default_registry()
    logger.info("Application started with %d table definitions", len(registry))
    yield
    logger.info("Shutting down...")
    if len(sessions):
        logger.info("Dropping %d open PackFile sessions", len(sessions))
    sessions.clear()
    logger.info("Shutdown complete")


app = FastAPI(
    title="PackFile Manager",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:1420", "https://tauri.localhost"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PackFileError)
async def packfile_error_handler(_request: Request, exc: PackFileError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("Unhandled PackFile error: %s", exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


app.include_router(api_router)


@app.get("/")
async def root() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
