"""SQLAlchemy model for persisted key-value entries."""

from sqlalchemy import Column, DateTime, String, Text

from dashboard_sync.infrastructure.database import Base
from dashboard_sync.utils import now_utc


class KeyValueEntryModel(Base):
    """Database representation of a single key-value pair."""

    __tablename__ = "key_value_entry"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc)


__all__ = ["KeyValueEntryModel"]
