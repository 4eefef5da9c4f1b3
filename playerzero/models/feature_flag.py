from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, Column, DateTime, Integer, String, Text

from .base import Base


class FeatureFlag(Base):
    """Global boolean switch toggled by administrators."""

    __tablename__ = "feature_flags"

    id = Column(Integer, primary_key=True)
    key = Column(String(64), nullable=False, unique=True)
    value = Column(Boolean, nullable=False, default=False)
    description = Column(Text)
    updated_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_by = Column(BigInteger, nullable=True)


__all__ = ["FeatureFlag"]
