"""
Idea Board – persistence layer.

``IdeaStore`` owns the async engine for the SQLite file and every query
against the ``ideas`` / ``notes`` / ``files`` tables. The application
constructs one instance at startup and passes it to the routers; nothing
here is a module-level global.

Each mutating operation is a single INSERT or UPDATE committed in its own
session, so SQLite's statement atomicity is all the transactional
guarantee we need.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ideaboard.database import Base, make_engine, utcnow
from ideaboard.errors import IdeaNotFoundError
from ideaboard.models import Idea, IdeaFile, Note

logger = logging.getLogger(__name__)


class IdeaStore:
    """Async data access for ideas, notes and file metadata."""

    def __init__(self, db_path: str, echo: bool = False):
        self.db_path = db_path
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    # ── Lifecycle ──

    async def init(self) -> None:
        """Open the database and create tables if they do not exist yet."""
        if self._engine is not None:
            return None

        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        engine = make_engine(self.db_path, echo=self.echo)
        # create_all only issues CREATE TABLE for missing tables.
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self._engine = engine
        self._session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info(f"Idea store ready at {self.db_path}")

    async def close(self) -> None:
        """Release the engine. Safe to call when never opened."""
        if self._engine is None:
            return None
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Idea store closed")

    def _session(self) -> AsyncSession:
        if self._session_factory is None:
            raise RuntimeError("IdeaStore is not initialized. Call init() on startup.")
        return self._session_factory()

    # ── Ideas ──

    async def create_idea(self, idea_id: str, title: str, description: str) -> Idea:
        now = utcnow()
        idea = Idea(
            id=idea_id,
            title=title,
            description=description,
            votes=0,
            created_at=now,
            updated_at=now,
        )
        async with self._session() as session:
            session.add(idea)
            await session.commit()
        return idea

    async def get_all_ideas(self) -> List[Idea]:
        """Every idea, most votes first, newest first among equal votes."""
        async with self._session() as session:
            result = await session.execute(
                select(Idea).order_by(Idea.votes.desc(), Idea.created_at.desc())
            )
            return list(result.scalars().all())

    async def get_idea_by_id(self, idea_id: str) -> Optional[Idea]:
        """Return the idea, or None when no row matches."""
        async with self._session() as session:
            result = await session.execute(select(Idea).where(Idea.id == idea_id))
            return result.scalar_one_or_none()

    async def vote_for_idea(self, idea_id: str) -> None:
        """
        Increment ``votes`` by one in a single UPDATE.

        SQLite does not complain about an UPDATE that matches nothing, so the
        affected-row count decides whether the idea exists.
        """
        async with self._session() as session:
            result = await session.execute(
                update(Idea)
                .where(Idea.id == idea_id)
                .values(votes=Idea.votes + 1, updated_at=utcnow())
            )
            await session.commit()
            if result.rowcount == 0:
                raise IdeaNotFoundError(idea_id)

    # ── Notes ──

    async def add_note(self, note_id: str, idea_id: str, content: str) -> Note:
        # Idea existence is checked by the caller.
        note = Note(id=note_id, idea_id=idea_id, content=content, created_at=utcnow())
        async with self._session() as session:
            session.add(note)
            await session.commit()
        return note

    async def get_notes_by_idea_id(self, idea_id: str) -> List[Note]:
        async with self._session() as session:
            result = await session.execute(
                select(Note)
                .where(Note.idea_id == idea_id)
                .order_by(Note.created_at.asc())
            )
            return list(result.scalars().all())

    # ── Files ──

    async def add_file(
        self,
        file_id: str,
        idea_id: str,
        filename: str,
        original_name: str,
        file_path: str,
        mime_type: Optional[str],
        size: int,
    ) -> IdeaFile:
        record = IdeaFile(
            id=file_id,
            idea_id=idea_id,
            filename=filename,
            original_name=original_name,
            file_path=file_path,
            mime_type=mime_type,
            size=size,
            created_at=utcnow(),
        )
        async with self._session() as session:
            session.add(record)
            await session.commit()
        return record

    async def get_files_by_idea_id(self, idea_id: str) -> List[IdeaFile]:
        async with self._session() as session:
            result = await session.execute(
                select(IdeaFile)
                .where(IdeaFile.idea_id == idea_id)
                .order_by(IdeaFile.created_at.asc())
            )
            return list(result.scalars().all())
