from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    Integer,
    String,
)

from .base import Base


def _now():
    return datetime.now(timezone.utc)


class Profile(Base):
    """Trainer profile; also carries the account's subscription state."""

    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, nullable=False, unique=True)
    trainer_name = Column(String(64), nullable=False)
    trainer_code = Column(String(32))
    trainer_code_private = Column(Boolean, nullable=False, default=False)
    social_links_private = Column(Boolean, nullable=False, default=False)
    country = Column(String(64))
    team_color = Column(String(16))
    is_paid_user = Column(Boolean, nullable=False, default=False)
    subscription_type = Column(String(32))
    subscription_expires_at = Column(DateTime(timezone=True))
    start_date = Column(Date)
    total_xp = Column(BigInteger, nullable=False, default=0)
    pokemon_caught = Column(Integer, nullable=False, default=0)
    distance_walked = Column(Float, nullable=False, default=0.0)
    pokestops_visited = Column(Integer, nullable=False, default=0)
    unique_pokedex_entries = Column(Integer, nullable=False, default=0)
    trainer_level = Column(Integer, nullable=False, default=1)
    instagram = Column(String(255))
    tiktok = Column(String(255))
    twitter = Column(String(255))
    youtube = Column(String(255))
    twitch = Column(String(255))
    reddit = Column(String(255))
    facebook = Column(String(255))
    snapchat = Column(String(255))
    github = Column(String(255))
    vimeo = Column(String(255))
    discord = Column(String(255))
    telegram = Column(String(255))
    whatsapp = Column(String(255))
    created_at = Column(DateTime(timezone=True), default=_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_now, onupdate=_now)


SOCIAL_FIELDS = (
    "instagram",
    "tiktok",
    "twitter",
    "youtube",
    "twitch",
    "reddit",
    "facebook",
    "snapchat",
    "github",
    "vimeo",
    "discord",
    "telegram",
    "whatsapp",
)

__all__ = ["Profile", "SOCIAL_FIELDS"]
