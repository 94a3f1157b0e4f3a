"""BuilderVerification model: latest verification outcome per user."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mothership.models.base import Base, JSONType, utcnow


class BuilderVerification(Base):
    """One row per user, replaced on every verification attempt."""

    __tablename__ = "builder_verifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    github_username: Mapped[str | None] = mapped_column(String(100))
    stripe_public_key: Mapped[str | None] = mapped_column(String(200))
    polar_public_key: Mapped[str | None] = mapped_column(String(200))
    supabase_project_key: Mapped[str | None] = mapped_column(Text)
    verification_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    verification_result: Mapped[dict | None] = mapped_column(JSONType)
    verified_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
