import importlib
import logging
import os
import pkgutil
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from db.database import init_db
from services.exceptions import (
    AliasConflictError,
    GenerationExhaustedError,
    InvalidExpiryError,
    InvalidUrlError,
    ShortCodeNotFoundError,
)

# Import models to ensure they're registered with SQLAlchemy
from models import url as _  # noqa: F401

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)
logger = logging.getLogger("shortener")


def _include_all_routers(app: FastAPI) -> None:
    import routes

    for mod in pkgutil.iter_modules(list(routes.__path__)):
        module = importlib.import_module(f"routes.{mod.name}")
        for name in dir(module):
            attr = getattr(module, name)
            if isinstance(attr, APIRouter):
                app.include_router(attr)


@asynccontextmanager
async def lifespan(_: FastAPI):
    await init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(title="URL Shortening Service", lifespan=lifespan)

    # Include all routers from routes/* dynamically
    _include_all_routers(app)

    # Exception handlers mapping domain errors to HTTP responses
    @app.exception_handler(InvalidUrlError)
    async def invalid_url_handler(_, exc):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(InvalidExpiryError)
    async def invalid_expiry_handler(_, exc):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(AliasConflictError)
    async def alias_conflict_handler(_, exc):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    # Expired codes answer exactly like unknown ones
    @app.exception_handler(ShortCodeNotFoundError)
    async def not_found_handler(_, __):
        return JSONResponse(status_code=404, content={"detail": "Short code not found"})

    @app.exception_handler(GenerationExhaustedError)
    async def exhausted_handler(_, exc):
        logger.error("Short code generation failed: %s", exc)
        return JSONResponse(status_code=500, content={"detail": "Could not allocate a short code"})

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(_, exc):
        logger.error("Storage failure: %s", exc)
        return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})

    return app


app = create_app()
