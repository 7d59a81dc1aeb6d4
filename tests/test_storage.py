import uuid

import pytest
from sqlalchemy import delete, func, select

from ideaboard.errors import IdeaNotFoundError
from ideaboard.models import Idea, IdeaFile, Note
from ideaboard.storage import IdeaStore


def new_id() -> str:
    return str(uuid.uuid4())


# ── Lifecycle ──

async def test_init_creates_data_directory(tmp_path):
    db_path = tmp_path / "nested" / "data" / "ideas.db"
    s = IdeaStore(str(db_path))
    await s.init()
    try:
        assert db_path.parent.is_dir()
        assert db_path.exists()
    finally:
        await s.close()


async def test_schema_setup_keeps_existing_data(tmp_path):
    db_path = str(tmp_path / "ideas.db")
    first = IdeaStore(db_path)
    await first.init()
    idea_id = new_id()
    await first.create_idea(idea_id, "Survives restarts", "")
    await first.close()

    second = IdeaStore(db_path)
    await second.init()
    try:
        idea = await second.get_idea_by_id(idea_id)
        assert idea is not None
        assert idea.title == "Survives restarts"
    finally:
        await second.close()


async def test_close_without_init_is_safe(tmp_path):
    s = IdeaStore(str(tmp_path / "ideas.db"))
    await s.close()
    await s.close()


async def test_queries_before_init_fail(tmp_path):
    s = IdeaStore(str(tmp_path / "ideas.db"))
    with pytest.raises(RuntimeError):
        await s.get_all_ideas()


# ── Ideas ──

async def test_create_idea(store):
    idea_id = new_id()
    idea = await store.create_idea(idea_id, "Test Idea", "A description")
    assert idea.id == idea_id
    assert idea.title == "Test Idea"
    assert idea.description == "A description"
    assert idea.votes == 0
    assert idea.created_at is not None


async def test_get_all_ideas_empty(store):
    assert await store.get_all_ideas() == []


async def test_get_idea_round_trip(store):
    idea_id = new_id()
    await store.create_idea(idea_id, "Round trip", "details")
    idea = await store.get_idea_by_id(idea_id)
    assert (idea.title, idea.description, idea.votes) == ("Round trip", "details", 0)


async def test_get_missing_idea_returns_none(store):
    assert await store.get_idea_by_id("does-not-exist") is None


async def test_vote_increments_by_one(store):
    idea_id = new_id()
    await store.create_idea(idea_id, "Vote me", "")
    before = await store.get_idea_by_id(idea_id)

    await store.vote_for_idea(idea_id)
    after_one = await store.get_idea_by_id(idea_id)
    await store.vote_for_idea(idea_id)
    after_two = await store.get_idea_by_id(idea_id)

    assert after_one.votes == 1
    assert after_two.votes == 2
    assert after_two.updated_at >= before.updated_at


async def test_vote_missing_idea_raises_and_changes_nothing(store):
    idea_id = new_id()
    await store.create_idea(idea_id, "Untouched", "")

    with pytest.raises(IdeaNotFoundError):
        await store.vote_for_idea("does-not-exist")

    ideas = await store.get_all_ideas()
    assert [i.votes for i in ideas] == [0]


async def test_ideas_ordered_by_votes_then_newest(store):
    ids = {}
    for title in ("Idea 1", "Idea 2", "Idea 3"):
        ids[title] = new_id()
        await store.create_idea(ids[title], title, "")

    await store.vote_for_idea(ids["Idea 2"])
    await store.vote_for_idea(ids["Idea 2"])
    await store.vote_for_idea(ids["Idea 3"])

    ideas = await store.get_all_ideas()
    assert [i.title for i in ideas] == ["Idea 2", "Idea 3", "Idea 1"]
    assert [i.votes for i in ideas] == [2, 1, 0]


async def test_equal_votes_newest_first(store):
    for title in ("Oldest", "Middle", "Newest"):
        await store.create_idea(new_id(), title, "")

    ideas = await store.get_all_ideas()
    assert [i.title for i in ideas] == ["Newest", "Middle", "Oldest"]


# ── Notes ──

async def test_notes_listed_in_creation_order(store):
    idea_id = new_id()
    await store.create_idea(idea_id, "With notes", "")

    first = await store.add_note(new_id(), idea_id, "First note")
    second = await store.add_note(new_id(), idea_id, "Second note")
    assert first.idea_id == idea_id

    notes = await store.get_notes_by_idea_id(idea_id)
    assert [n.id for n in notes] == [first.id, second.id]
    assert [n.content for n in notes] == ["First note", "Second note"]


async def test_notes_empty_for_idea_without_notes(store):
    idea_id = new_id()
    await store.create_idea(idea_id, "Quiet", "")
    assert await store.get_notes_by_idea_id(idea_id) == []


# ── Files ──

async def test_files_listed_with_metadata(store):
    idea_id = new_id()
    await store.create_idea(idea_id, "With files", "")

    record = await store.add_file(
        new_id(), idea_id, "abc.pdf", "spec.pdf", "/tmp/uploads/abc.pdf", "application/pdf", 1024
    )
    await store.add_file(
        new_id(), idea_id, "def.png", "shot.png", "/tmp/uploads/def.png", "image/png", 2048
    )

    files = await store.get_files_by_idea_id(idea_id)
    assert [f.filename for f in files] == ["abc.pdf", "def.png"]
    assert files[0].id == record.id
    assert files[0].original_name == "spec.pdf"
    assert files[0].mime_type == "application/pdf"
    assert files[0].size == 1024


async def test_files_empty_for_idea_without_files(store):
    idea_id = new_id()
    await store.create_idea(idea_id, "No files", "")
    assert await store.get_files_by_idea_id(idea_id) == []


# ── Referential integrity ──

async def test_deleting_idea_cascades_notes_and_files(store):
    idea_id = new_id()
    await store.create_idea(idea_id, "Doomed", "")
    await store.add_note(new_id(), idea_id, "gone soon")
    await store.add_file(new_id(), idea_id, "x.txt", "x.txt", "/tmp/x.txt", "text/plain", 1)

    # No API path deletes ideas; go through a raw session.
    async with store._session() as session:
        await session.execute(delete(Idea).where(Idea.id == idea_id))
        await session.commit()

        note_count = await session.scalar(select(func.count()).select_from(Note))
        file_count = await session.scalar(select(func.count()).select_from(IdeaFile))

    assert note_count == 0
    assert file_count == 0
