import logging
from contextlib import aclosing
from dataclasses import dataclass, field
from datetime import datetime

from models.url import UrlMapping
from services.code_generator import CodeGenerator
from services.exceptions import (
    AliasConflictError,
    DuplicateKeyError,
    GenerationExhaustedError,
    InvalidUrlError,
    ShortCodeNotFoundError,
    UrlExpiredError,
)
from services.expiry import compute_expiry, utcnow
from services.settings import ShortenerSettings
from services.store import MappingStore
from utils.urls import build_short_url, is_valid_url, redact_url

logger = logging.getLogger(__name__)

RECENT_URLS_LIMIT = 10


@dataclass(frozen=True)
class ShortenResult:
    short_url: str
    short_code: str
    original_url: str
    created_at: datetime
    expires_at: datetime | None


@dataclass(frozen=True)
class UrlInfo:
    short_code: str
    original_url: str
    label: str
    created_at: datetime
    expires_at: datetime | None
    click_count: int
    is_active: bool


@dataclass(frozen=True)
class UrlStatistics:
    total_urls: int
    total_clicks: int
    active_urls: int
    expired_urls: int
    recent_urls: list[UrlInfo] = field(default_factory=list)


@dataclass(frozen=True)
class LabelSummary:
    label: str
    total_urls: int
    active_urls: int
    active_codes: list[str] = field(default_factory=list)


async def shorten_url(
    url: str,
    store: MappingStore,
    generator: CodeGenerator,
    settings: ShortenerSettings,
    expires_in_days: int | None = None,
    custom_code: str | None = None,
    now: datetime | None = None,
) -> ShortenResult:
    """Create a mapping for ``url`` under a custom alias or a generated code.

    Raises:
        InvalidUrlError: ``url`` is not an absolute http(s) URL.
        InvalidExpiryError: the expiry falls outside the date range.
        AliasConflictError: the custom alias is taken.
        GenerationExhaustedError: no free code within the retry budget.
    """
    if not is_valid_url(url):
        raise InvalidUrlError(f"Invalid URL format: {url!r}")

    now = now or utcnow()
    expiry = compute_expiry(now, expires_in_days, settings.default_expiry_days)
    label = settings.label

    def build(short_code: str) -> UrlMapping:
        return UrlMapping(
            short_code=short_code,
            original_url=url,
            label=label,
            created_at=now,
            expires_at=expiry.at,
            click_count=0,
        )

    if custom_code and custom_code.strip():
        alias = await generator.claim_alias(store, custom_code)
        try:
            mapping = await store.save(build(alias))
        except DuplicateKeyError as exc:
            logger.warning("Custom short code taken concurrently: %s", alias)
            raise AliasConflictError(alias) from exc
    else:
        mapping = await _save_with_generated_code(store, generator, build)

    result = ShortenResult(
        short_url=build_short_url(settings.base_url, mapping.short_code),
        short_code=mapping.short_code,
        original_url=mapping.original_url,
        created_at=mapping.created_at,
        expires_at=mapping.expires_at,
    )
    logger.info("Created short URL %s for %s", result.short_url, url)
    return result


async def _save_with_generated_code(store: MappingStore, generator: CodeGenerator, build) -> UrlMapping:
    # A duplicate on insert means another writer won the race; it costs one attempt.
    async with aclosing(generator.candidates(store)) as codes:
        async for short_code in codes:
            try:
                return await store.save(build(short_code))
            except DuplicateKeyError:
                logger.warning("Short code %s was taken before insert, retrying", short_code)
    logger.error("Short code generation exhausted after %d attempts", generator.max_attempts)
    raise GenerationExhaustedError(generator.max_attempts)


async def _find_live(store: MappingStore, short_code: str, now: datetime) -> UrlMapping:
    mapping = await store.find_by_code(short_code)
    if mapping is None:
        logger.warning("Short code not found: %s", short_code)
        raise ShortCodeNotFoundError(short_code)
    if mapping.is_expired(now):
        logger.warning("Short code has expired: %s", short_code)
        raise UrlExpiredError(short_code)
    return mapping


async def resolve_short_code(short_code: str, store: MappingStore, now: datetime | None = None) -> str:
    """Return the original URL and count the click; expired codes count as missing."""
    mapping = await _find_live(store, short_code, now or utcnow())
    original_url = mapping.original_url
    await store.increment_clicks(short_code)
    logger.debug("Resolved %s to %s", short_code, original_url)
    return original_url


async def get_url_info(short_code: str, store: MappingStore, now: datetime | None = None) -> UrlInfo:
    now = now or utcnow()
    mapping = await _find_live(store, short_code, now)
    return _to_info(mapping, now)


async def cleanup_expired_urls(store: MappingStore, now: datetime | None = None) -> int:
    logger.info("Starting cleanup of expired URLs")
    deleted = await store.delete_expired(now or utcnow())
    logger.info("Cleaned up %d expired URLs", deleted)
    return deleted


async def get_statistics(store: MappingStore, now: datetime | None = None) -> UrlStatistics:
    now = now or utcnow()
    mappings = await store.all()
    total = len(mappings)
    active = sum(1 for mapping in mappings if _is_active(mapping, now))
    recent = await store.find_recent(RECENT_URLS_LIMIT)
    return UrlStatistics(
        total_urls=total,
        total_clicks=sum(mapping.click_count or 0 for mapping in mappings),
        active_urls=active,
        expired_urls=total - active,
        recent_urls=[_to_info(mapping, now, redact=True) for mapping in recent],
    )


async def get_label_summary(label: str, store: MappingStore, now: datetime | None = None) -> LabelSummary:
    active = await store.find_active_by_label(label, now or utcnow())
    return LabelSummary(
        label=label,
        total_urls=await store.count_by_label(label),
        active_urls=len(active),
        active_codes=sorted(mapping.short_code for mapping in active),
    )


def _is_active(mapping: UrlMapping, now: datetime) -> bool:
    return mapping.expires_at is None or mapping.expires_at > now


def _to_info(mapping: UrlMapping, now: datetime, redact: bool = False) -> UrlInfo:
    return UrlInfo(
        short_code=mapping.short_code,
        original_url=redact_url(mapping.original_url) if redact else mapping.original_url,
        label=mapping.label,
        created_at=mapping.created_at,
        expires_at=mapping.expires_at,
        click_count=mapping.click_count or 0,
        is_active=_is_active(mapping, now),
    )
