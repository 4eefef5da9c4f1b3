from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    UniqueConstraint,
)

from .base import Base


class StatEntry(Base):
    """One recorded stat upload (snapshot of cumulative counters)."""

    __tablename__ = "stat_entries"
    __table_args__ = (
        UniqueConstraint("profile_id", "entry_date", name="uq_stat_entries_profile_day"),
    )

    id = Column(Integer, primary_key=True)
    profile_id = Column(
        Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    entry_date = Column(Date, nullable=False)
    total_xp = Column(BigInteger)
    pokemon_caught = Column(Integer)
    distance_walked = Column(Float)
    pokestops_visited = Column(Integer)
    unique_pokedex_entries = Column(Integer)
    trainer_level = Column(Integer)
    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


__all__ = ["StatEntry"]
