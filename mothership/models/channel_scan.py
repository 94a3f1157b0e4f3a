"""ChannelScan model: last scan bookkeeping per niche or subreddit."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mothership.models.base import Base, utcnow


class ChannelScan(Base):
    __tablename__ = "channel_scans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    channel_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    channel_name: Mapped[str] = mapped_column(String(200), nullable=False)
    last_scanned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    videos_analyzed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    problems_found: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )
