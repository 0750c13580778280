"""Mapping store contract and its SQLAlchemy implementation."""

from abc import ABC, abstractmethod
from datetime import datetime

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models.url import UrlMapping
from services.exceptions import DuplicateKeyError
from services.expiry import utcnow


class MappingStore(ABC):
    """Persistence of URL mappings keyed by a unique short code."""

    @abstractmethod
    async def save(self, mapping: UrlMapping) -> UrlMapping:
        """Insert a new mapping, assigning ``id`` and ``created_at``.

        Raises:
            DuplicateKeyError: if the short code is already stored.
        """

    @abstractmethod
    async def find_by_code(self, short_code: str) -> UrlMapping | None:
        """Return the mapping for ``short_code`` or None, expired or not."""

    @abstractmethod
    async def exists_by_code(self, short_code: str) -> bool:
        ...

    @abstractmethod
    async def find_by_label(self, label: str) -> list[UrlMapping]:
        ...

    @abstractmethod
    async def find_active_by_label(self, label: str, now: datetime) -> list[UrlMapping]:
        """Mappings of ``label`` that never expire or expire after ``now``."""

    @abstractmethod
    async def count_by_label(self, label: str) -> int:
        ...

    @abstractmethod
    async def increment_clicks(self, short_code: str) -> None:
        """Add one to the click counter of ``short_code``."""

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete mappings whose expiry is before ``now``; return how many."""

    @abstractmethod
    async def find_recent(self, limit: int) -> list[UrlMapping]:
        """Newest mappings first."""

    @abstractmethod
    async def all(self) -> list[UrlMapping]:
        ...


def _active_clause(now: datetime):
    return or_(UrlMapping.expires_at.is_(None), UrlMapping.expires_at > now)


# SQLSTATE 23505 (PostgreSQL), errno 1062 (MySQL), message text (SQLite)
_UNIQUE_MARKERS = ("unique constraint", "duplicate key", "duplicate entry")


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "sqlstate", None) == "23505" or getattr(orig, "pgcode", None) == "23505":
        return True
    if getattr(orig, "args", None) and orig.args[0] == 1062:
        return True
    message = str(orig).lower()
    return any(marker in message for marker in _UNIQUE_MARKERS)


class SQLAlchemyMappingStore(MappingStore):
    """Store backed by an ``AsyncSession``; relies on the unique index on short_code."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def save(self, mapping: UrlMapping) -> UrlMapping:
        short_code = mapping.short_code
        if mapping.created_at is None:
            mapping.created_at = utcnow()
        if mapping.click_count is None:
            mapping.click_count = 0

        self.db.add(mapping)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if not _is_unique_violation(exc):
                raise
            raise DuplicateKeyError(short_code) from exc
        await self.db.refresh(mapping)
        return mapping

    async def find_by_code(self, short_code: str) -> UrlMapping | None:
        result = await self.db.execute(select(UrlMapping).where(UrlMapping.short_code == short_code))
        return result.scalar_one_or_none()

    async def exists_by_code(self, short_code: str) -> bool:
        result = await self.db.execute(
            select(UrlMapping.id).where(UrlMapping.short_code == short_code).limit(1)
        )
        return result.first() is not None

    async def find_by_label(self, label: str) -> list[UrlMapping]:
        result = await self.db.execute(select(UrlMapping).where(UrlMapping.label == label))
        return list(result.scalars().all())

    async def find_active_by_label(self, label: str, now: datetime) -> list[UrlMapping]:
        result = await self.db.execute(
            select(UrlMapping).where(UrlMapping.label == label, _active_clause(now))
        )
        return list(result.scalars().all())

    async def count_by_label(self, label: str) -> int:
        result = await self.db.execute(
            select(func.count(UrlMapping.id)).where(UrlMapping.label == label)
        )
        return result.scalar_one()

    async def increment_clicks(self, short_code: str) -> None:
        await self.db.execute(
            update(UrlMapping)
            .where(UrlMapping.short_code == short_code)
            .values(click_count=UrlMapping.click_count + 1)
        )
        await self.db.commit()

    async def delete_expired(self, now: datetime) -> int:
        result = await self.db.execute(
            delete(UrlMapping).where(
                UrlMapping.expires_at.is_not(None),
                UrlMapping.expires_at < now,
            )
        )
        await self.db.commit()
        return result.rowcount or 0

    async def find_recent(self, limit: int) -> list[UrlMapping]:
        result = await self.db.execute(
            select(UrlMapping)
            .order_by(UrlMapping.created_at.desc(), UrlMapping.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def all(self) -> list[UrlMapping]:
        result = await self.db.execute(select(UrlMapping))
        return list(result.scalars().all())
