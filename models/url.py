from sqlalchemy import Column, Integer, String, Text, DateTime

from db.database import Base
from services.expiry import Expiry, expiry_from, utcnow


class UrlMapping(Base):
    __tablename__ = "url_mappings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    short_code = Column(String(255), unique=True, index=True, nullable=False)
    original_url = Column(Text, nullable=False)
    label = Column(String(255), index=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True, nullable=False)
    expires_at = Column(DateTime, nullable=True, index=True)
    click_count = Column(Integer, default=0, nullable=False)

    @property
    def expiry(self) -> Expiry:
        return expiry_from(self.expires_at)

    def is_expired(self, now=None) -> bool:
        return self.expiry.is_past(now or utcnow())

    def __repr__(self) -> str:
        return f"UrlMapping(short_code={self.short_code!r}, label={self.label!r}, expires_at={self.expires_at!r})"
