"""Problem and Solution models: the durable market-intelligence records."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mothership.models.base import Base, JSONType, utcnow


class Problem(Base):
    """A trending problem discovered by an ingestion run."""

    __tablename__ = "problems"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(Text, unique=True, nullable=False, index=True)
    subtitle: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    niche: Mapped[str] = mapped_column(String(100), nullable=False)
    sentiment: Mapped[str] = mapped_column(String(20), nullable=False, default="rising")
    opportunity_score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    demand_velocity: Mapped[int | None] = mapped_column(Integer)
    competition_gap: Mapped[int | None] = mapped_column(Integer)
    views: Mapped[int | None] = mapped_column(Integer, default=0)
    saves: Mapped[int | None] = mapped_column(Integer, default=0)
    shares: Mapped[int | None] = mapped_column(Integer, default=0)
    is_viral: Mapped[bool | None] = mapped_column(Boolean, default=False)
    pain_points: Mapped[list | None] = mapped_column(JSONType)
    hidden_insight: Mapped[dict | None] = mapped_column(JSONType)
    sources: Mapped[list | None] = mapped_column(JSONType)
    trending_rank: Mapped[int | None] = mapped_column(Integer)
    slots_total: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    slots_filled: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    discovered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )


class Solution(Base):
    """A suggested solution attached to a problem (human or AI authored)."""

    __tablename__ = "solutions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    problem_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("problems.id", ondelete="CASCADE"), index=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    approach: Mapped[str | None] = mapped_column(Text)
    tech_stack: Mapped[list | None] = mapped_column(JSONType)
    market_fit: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    ai_generated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(30), nullable=False, default="concept")
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    upvotes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
