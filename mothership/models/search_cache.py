"""SearchCache model: per-niche TikTok scan results with TTL."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mothership.models.base import Base, JSONType, utcnow


class SearchCache(Base):
    """Database-backed cache for niche scan results.

    At most one live row per niche: writers delete older rows first.
    """

    __tablename__ = "search_cache"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    niche: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    results: Mapped[list] = mapped_column(JSONType, nullable=False)
    videos_analyzed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    queries_used: Mapped[list] = mapped_column(JSONType, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
