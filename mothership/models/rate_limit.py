"""RateLimitCounter model: sliding-window request counters."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mothership.models.base import Base, utcnow


class RateLimitCounter(Base):
    """Request count per identifier/endpoint inside the current window."""

    __tablename__ = "rate_limits"
    __table_args__ = (UniqueConstraint("identifier", "endpoint", name="uq_rate_limits_identifier_endpoint"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identifier: Mapped[str] = mapped_column(String(255), nullable=False)
    endpoint: Mapped[str] = mapped_column(String(100), nullable=False)
    request_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    window_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
