import random
from functools import lru_cache

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_db
from schemas.url_schemas import (
    CleanupResponse,
    LabelSummaryResponse,
    UrlCreateRequest,
    UrlCreateResponse,
    UrlInfoResponse,
    UrlStatsResponse,
)
from services.code_generator import CodeGenerator
from services.expiry import utcnow
from services.settings import ShortenerSettings
from services.store import MappingStore, SQLAlchemyMappingStore
from services.url_service import (
    cleanup_expired_urls,
    get_label_summary,
    get_statistics,
    get_url_info,
    resolve_short_code,
    shorten_url,
)

router = APIRouter(prefix="/api", tags=["URL Management"])
redirect_router = APIRouter(tags=["Redirects"])

# Shared by every request; SystemRandom draws from the OS and needs no locking.
_rng = random.SystemRandom()


@lru_cache
def get_settings() -> ShortenerSettings:
    return ShortenerSettings.from_env()


def get_store(db: AsyncSession = Depends(get_db)) -> MappingStore:
    return SQLAlchemyMappingStore(db)


def get_generator(settings: ShortenerSettings = Depends(get_settings)) -> CodeGenerator:
    return CodeGenerator(length=settings.short_code_length, rng=_rng)


@router.post("/shorten", response_model=UrlCreateResponse, status_code=201)
async def create_url(
    url_request: UrlCreateRequest,
    store: MappingStore = Depends(get_store),
    generator: CodeGenerator = Depends(get_generator),
    settings: ShortenerSettings = Depends(get_settings),
) -> UrlCreateResponse:
    result = await shorten_url(
        url=url_request.url,
        store=store,
        generator=generator,
        settings=settings,
        expires_in_days=url_request.expires_in_days,
        custom_code=url_request.custom_code,
    )
    return UrlCreateResponse.model_validate(result)


@router.get("/info/{short_code}", response_model=UrlInfoResponse)
async def get_info(short_code: str, store: MappingStore = Depends(get_store)) -> UrlInfoResponse:
    info = await get_url_info(short_code=short_code, store=store)
    return UrlInfoResponse.model_validate(info)


@router.get("/stats", response_model=UrlStatsResponse)
async def get_stats(store: MappingStore = Depends(get_store)) -> UrlStatsResponse:
    stats = await get_statistics(store=store)
    return UrlStatsResponse.model_validate(stats)


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup(store: MappingStore = Depends(get_store)) -> CleanupResponse:
    deleted = await cleanup_expired_urls(store=store)
    return CleanupResponse(
        message="Cleanup completed successfully",
        deleted_count=deleted,
        timestamp=utcnow(),
    )


@router.get("/labels/{label}", response_model=LabelSummaryResponse)
async def get_label(label: str, store: MappingStore = Depends(get_store)) -> LabelSummaryResponse:
    summary = await get_label_summary(label=label, store=store)
    return LabelSummaryResponse.model_validate(summary)


@router.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@redirect_router.get("/{short_code}")
async def redirect_short_code(short_code: str, store: MappingStore = Depends(get_store)):
    original_url = await resolve_short_code(short_code=short_code, store=store)
    return RedirectResponse(url=original_url, status_code=301)
