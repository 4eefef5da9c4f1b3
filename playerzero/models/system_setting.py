from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text

from .base import Base


class SystemSetting(Base):
    """Runtime-tunable value stored as text, e.g. the Pokédex cap."""

    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True)
    key = Column(String(64), nullable=False, unique=True)
    value = Column(Text, nullable=False)
    description = Column(Text)
    updated_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_by = Column(BigInteger, nullable=True)


__all__ = ["SystemSetting"]
