"""Persistence helpers for problems, solutions, channel scans and verifications.

Every public method opens its own session and commits before returning, so
a failure in one write never rolls back another.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mothership.models import BuilderVerification, ChannelScan, Problem, Solution

logger = logging.getLogger(__name__)


def dialect_insert(session: AsyncSession):
    """`insert()` with ON CONFLICT support for the session's backend."""
    if session.get_bind().dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert


class ProblemStore:
    """Reads and writes against `problems` and `solutions`."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_id_by_title(self, title: str) -> uuid.UUID | None:
        async with self._session_factory() as session:
            return (await session.execute(
                select(Problem.id).where(Problem.title == title)
            )).scalar_one_or_none()

    async def insert_if_absent(self, values: dict[str, Any]) -> bool:
        """Insert unless a problem with the same title exists. True if inserted."""
        existing = await self.find_id_by_title(values["title"])
        if existing is not None:
            logger.info("Problem exists, skipping insert | title=%s", values["title"][:80])
            return False

        async with self._session_factory() as session:
            session.add(Problem(**values))
            await session.commit()
        logger.info("Problem inserted | title=%s", values["title"][:80])
        return True

    async def upsert_by_title(self, values: dict[str, Any]) -> uuid.UUID:
        """Insert or update the problem keyed by title; returns its id."""
        async with self._session_factory() as session:
            problem = (await session.execute(
                select(Problem).where(Problem.title == values["title"])
            )).scalar_one_or_none()
            if problem is None:
                problem = Problem(**values)
                session.add(problem)
            else:
                for key, value in values.items():
                    setattr(problem, key, value)
            await session.commit()
            return problem.id

    async def list_problems(self, problem_id: uuid.UUID | None = None) -> list[Problem]:
        query = select(Problem).order_by(Problem.created_at)
        if problem_id is not None:
            query = query.where(Problem.id == problem_id)
        async with self._session_factory() as session:
            return list((await session.execute(query)).scalars().all())

    async def update_problem(self, problem_id: uuid.UUID, values: dict[str, Any]) -> None:
        async with self._session_factory() as session:
            await session.execute(
                update(Problem)
                .where(Problem.id == problem_id)
                .values(**values, updated_at=datetime.now(timezone.utc))
            )
            await session.commit()

    async def has_ai_solutions(self, problem_id: uuid.UUID) -> bool:
        async with self._session_factory() as session:
            found = (await session.execute(
                select(Solution.id)
                .where(Solution.problem_id == problem_id, Solution.ai_generated.is_(True))
                .limit(1)
            )).scalar_one_or_none()
            return found is not None

    async def add_solutions(self, solutions: list[dict[str, Any]]) -> None:
        async with self._session_factory() as session:
            session.add_all([Solution(**values) for values in solutions])
            await session.commit()

    async def list_solutions(self, problem_id: uuid.UUID) -> list[Solution]:
        async with self._session_factory() as session:
            return list((await session.execute(
                select(Solution).where(Solution.problem_id == problem_id)
            )).scalars().all())


class ChannelScanStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def record_scan(
        self,
        channel_id: str,
        channel_name: str,
        items_analyzed: int,
        problems_found: int,
        scanned_at: datetime | None = None,
    ) -> None:
        scanned_at = scanned_at or datetime.now(timezone.utc)
        async with self._session_factory() as session:
            insert = dialect_insert(session)
            stmt = insert(ChannelScan).values(
                id=uuid.uuid4(),
                channel_id=channel_id,
                channel_name=channel_name,
                last_scanned_at=scanned_at,
                videos_analyzed=items_analyzed,
                problems_found=problems_found,
                created_at=scanned_at,
                updated_at=scanned_at,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["channel_id"],
                set_={
                    "channel_name": stmt.excluded.channel_name,
                    "last_scanned_at": stmt.excluded.last_scanned_at,
                    "videos_analyzed": stmt.excluded.videos_analyzed,
                    "problems_found": stmt.excluded.problems_found,
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            await session.execute(stmt)
            await session.commit()

    async def get(self, channel_id: str) -> ChannelScan | None:
        async with self._session_factory() as session:
            return (await session.execute(
                select(ChannelScan).where(ChannelScan.channel_id == channel_id)
            )).scalar_one_or_none()


class VerificationStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def upsert(self, user_id: str, values: dict[str, Any]) -> None:
        """Replace the user's verification row."""
        now = datetime.now(timezone.utc)
        row = {**values, "user_id": user_id, "updated_at": now}
        async with self._session_factory() as session:
            insert = dialect_insert(session)
            stmt = insert(BuilderVerification).values(id=uuid.uuid4(), created_at=now, **row)
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id"],
                set_={key: getattr(stmt.excluded, key) for key in row if key != "user_id"},
            )
            await session.execute(stmt)
            await session.commit()

    async def get(self, user_id: str) -> BuilderVerification | None:
        async with self._session_factory() as session:
            return (await session.execute(
                select(BuilderVerification).where(BuilderVerification.user_id == user_id)
            )).scalar_one_or_none()
