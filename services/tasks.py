import asyncio
import logging
import os

from celery import Celery
from dotenv import load_dotenv

from db.database import AsyncSessionLocal
from services.store import SQLAlchemyMappingStore
from services.url_service import cleanup_expired_urls

load_dotenv()

logger = logging.getLogger(__name__)

celery_app = Celery(
    "url_shortening_service",
    broker=os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0"),
    backend=os.getenv("CELERY_RESULT_BACKEND"),
)

# Periodic expiry sweep; configurable via CLEANUP_INTERVAL_SECONDS
CLEANUP_INTERVAL = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "3600"))
celery_app.conf.beat_schedule = {
    "cleanup_expired_urls": {
        "task": "cleanup_expired_urls",
        "schedule": CLEANUP_INTERVAL,
    }
}
celery_app.conf.timezone = os.getenv("CELERY_TIMEZONE", "UTC")


@celery_app.task(name="cleanup_expired_urls")
def cleanup_expired_urls_task() -> int:
    async def _cleanup() -> int:
        # Import models so SQLAlchemy metadata is populated before queries
        from models import url  # noqa: F401

        async with AsyncSessionLocal() as session:
            return await cleanup_expired_urls(SQLAlchemyMappingStore(session))

    deleted = asyncio.run(_cleanup())
    logger.info("Scheduled cleanup removed %d expired URLs", deleted)
    return deleted
