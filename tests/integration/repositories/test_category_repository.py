# tests/integration/repositories/test_category_repository.py
# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""
Integration tests for the SQLAlchemy category repository.

These run against a throwaway sqlite database (aiosqlite) created per test and
exercise the audit hooks, optimistic locking, tree loading and the soft-delete
helpers inherited from ``BaseRepository``.
"""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from personal_blog.adapters.repositories.category_repository import SqlAlchemyCategoryRepository
from personal_blog.domain.entities.category import Category
from personal_blog.domain.exceptions import (
    ConcurrencyConflictError,
    DuplicateSlugError,
    EntityNotFoundError,
    PersistenceError,
)
from personal_blog.infrastructure.database.models.blog import CategoryModel


async def _seed(session: AsyncSession) -> dict[str, Category]:
    """Persist tech -> (go, python -> asyncio) and life."""
    repo = SqlAlchemyCategoryRepository(session)
    tech = Category("Tech", "tech")
    python = Category("Python", "python", display_order=1, parent=tech)
    go = Category("Go", "go", display_order=0, parent=tech)
    asyncio_ = Category("Asyncio", "asyncio", parent=python)
    life = Category("Life", "life", display_order=1)
    await repo.save_all([tech, python, go, asyncio_, life])
    return {"tech": tech, "python": python, "go": go, "asyncio": asyncio_, "life": life}


# ----------------------------------------------------------------------
# save()
# ----------------------------------------------------------------------


@pytest.mark.anyio
async def test_save_new_category_assigns_id_version_and_timestamps(session: AsyncSession) -> None:
    repo = SqlAlchemyCategoryRepository(session)
    category = Category("Technology", "technology", "All things tech")

    saved = await repo.save(category)

    assert saved is category
    assert category.id is not None
    assert category.version == 1
    assert category.created_at is not None
    assert category.created_at == category.updated_at

    row = await session.get(CategoryModel, category.id)
    assert row is not None
    assert row.slug == "technology"
    assert row.description == "All things tech"
    assert row.color_code == "#ffffff"
    assert row.deleted is False


@pytest.mark.anyio
async def test_save_persists_unsaved_parents_first(session: AsyncSession) -> None:
    repo = SqlAlchemyCategoryRepository(session)
    parent = Category("Parent", "parent")
    child = Category("Child", "child", parent=parent)

    await repo.save(child)

    assert parent.id is not None
    assert child.id is not None
    row = await session.get(CategoryModel, child.id)
    assert row is not None and row.parent_id == parent.id
    # the parent's children set still finds the child after ids were assigned
    assert child in parent.children


@pytest.mark.anyio
async def test_update_bumps_version_and_updated_at(session: AsyncSession) -> None:
    repo = SqlAlchemyCategoryRepository(session)
    category = Category("Tech", "tech")
    await repo.save(category)
    created_at = category.created_at
    first_update: datetime | None = category.updated_at

    category.description = "changed"
    await repo.save(category)

    assert category.version == 2
    assert category.created_at == created_at
    assert category.updated_at is not None and first_update is not None
    assert category.updated_at > first_update


@pytest.mark.anyio
async def test_stale_version_is_rejected(session: AsyncSession) -> None:
    repo = SqlAlchemyCategoryRepository(session)
    category = Category("Tech", "tech")
    await repo.save(category)

    stale = await repo.get(category.id)  # type: ignore[arg-type]
    assert stale is not None

    category.description = "first writer"
    await repo.save(category)

    stale.description = "second writer"
    with pytest.raises(ConcurrencyConflictError):
        await repo.save(stale)


@pytest.mark.anyio
async def test_concurrent_sessions_conflict_through_version_column(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    async with session_factory() as setup:
        repo = SqlAlchemyCategoryRepository(setup)
        category = Category("Tech", "tech")
        await repo.save(category)
        await setup.commit()
    category_id = category.id
    assert category_id is not None

    async with session_factory() as first, session_factory() as second:
        a = await SqlAlchemyCategoryRepository(first).get(category_id)
        b = await SqlAlchemyCategoryRepository(second).get(category_id)
        assert a is not None and b is not None

        a.name = "Technology"
        await SqlAlchemyCategoryRepository(first).save(a)
        await first.commit()

        b.name = "Tech & Science"
        with pytest.raises(ConcurrencyConflictError):
            await SqlAlchemyCategoryRepository(second).save(b)


@pytest.mark.anyio
async def test_save_of_vanished_row_raises_not_found(session: AsyncSession) -> None:
    repo = SqlAlchemyCategoryRepository(session)
    ghost = Category("Ghost", "ghost", id=12345, version=1)

    with pytest.raises(EntityNotFoundError):
        await repo.save(ghost)


@pytest.mark.anyio
async def test_unique_slug_violation_surfaces_as_duplicate_slug(session: AsyncSession) -> None:
    repo = SqlAlchemyCategoryRepository(session)
    await repo.save(Category("Tech", "tech"))

    with pytest.raises(DuplicateSlugError) as excinfo:
        await repo.save(Category("Tech again", "tech"))

    assert excinfo.value.code == "CATEGORY_SLUG_TAKEN"
    assert excinfo.value.details["slug"] == "tech"


@pytest.mark.anyio
async def test_other_integrity_errors_surface_as_persistence_error(session: AsyncSession) -> None:
    repo = SqlAlchemyCategoryRepository(session)
    missing_parent = Category("Gone", "gone", id=999_999, version=1)
    orphan = Category("Orphan", "orphan", parent=missing_parent)

    with pytest.raises(PersistenceError) as excinfo:
        await repo.save(orphan)

    assert not isinstance(excinfo.value, DuplicateSlugError)
    assert excinfo.value.details["reason"] == "IntegrityError"


# ----------------------------------------------------------------------
# Reads
# ----------------------------------------------------------------------


@pytest.mark.anyio
async def test_get_returns_linked_tree(session: AsyncSession) -> None:
    nodes = await _seed(session)
    repo = SqlAlchemyCategoryRepository(session)

    asyncio_ = await repo.get(nodes["asyncio"].id)  # type: ignore[arg-type]

    assert asyncio_ is not None
    assert asyncio_ is not nodes["asyncio"]
    assert asyncio_ == nodes["asyncio"]
    assert [a.slug for a in asyncio_.ancestors()] == ["python", "tech"]
    assert asyncio_.depth == 2
    assert asyncio_.created_at is not None and asyncio_.created_at.tzinfo is not None


@pytest.mark.anyio
async def test_get_hides_deleted_unless_requested(session: AsyncSession) -> None:
    nodes = await _seed(session)
    repo = SqlAlchemyCategoryRepository(session)
    life = nodes["life"]
    life.mark_as_deleted()
    await repo.save(life)

    assert await repo.get(life.id) is None  # type: ignore[arg-type]
    found = await repo.get(life.id, include_deleted=True)  # type: ignore[arg-type]
    assert found is not None and found.is_deleted
    assert await repo.get(999_999) is None


@pytest.mark.anyio
async def test_find_by_slug_and_exists_by_slug(session: AsyncSession) -> None:
    nodes = await _seed(session)
    repo = SqlAlchemyCategoryRepository(session)

    python = await repo.find_by_slug("python")
    assert python is not None and python.id == nodes["python"].id
    assert await repo.find_by_slug("missing") is None

    assert await repo.exists_by_slug("python")
    assert not await repo.exists_by_slug("python", exclude_id=nodes["python"].id)
    assert not await repo.exists_by_slug("missing")

    go = nodes["go"]
    go.mark_as_deleted()
    await repo.save(go)
    assert await repo.find_by_slug("go") is None
    assert await repo.exists_by_slug("go")


@pytest.mark.anyio
async def test_roots_children_and_forest_are_ordered(session: AsyncSession) -> None:
    nodes = await _seed(session)
    repo = SqlAlchemyCategoryRepository(session)

    roots = await repo.find_roots()
    assert [r.slug for r in roots] == ["tech", "life"]

    children = await repo.find_children(nodes["tech"].id)  # type: ignore[arg-type]
    assert [c.slug for c in children] == ["go", "python"]
    assert await repo.find_children(999_999) == []

    forest = await repo.load_forest()
    assert [r.slug for r in forest] == ["tech", "life"]
    assert {c.slug for c in forest[0].children} == {"go", "python"}


@pytest.mark.anyio
async def test_load_forest_hides_subtrees_of_deleted_nodes(session: AsyncSession) -> None:
    nodes = await _seed(session)
    repo = SqlAlchemyCategoryRepository(session)
    python = nodes["python"]
    python.mark_as_deleted()
    await repo.save(python)

    forest = await repo.load_forest()
    tech = next(r for r in forest if r.slug == "tech")
    assert {c.slug for c in tech.children} == {"go"}

    full = await repo.load_forest(include_deleted=True)
    tech_full = next(r for r in full if r.slug == "tech")
    assert {c.slug for c in tech_full.children} == {"go", "python"}


@pytest.mark.anyio
async def test_max_display_order(session: AsyncSession) -> None:
    nodes = await _seed(session)
    repo = SqlAlchemyCategoryRepository(session)

    assert await repo.max_display_order(None) == 1
    assert await repo.max_display_order(nodes["tech"].id) == 1
    assert await repo.max_display_order(nodes["asyncio"].id) is None


# ----------------------------------------------------------------------
# BaseRepository soft-delete helpers
# ----------------------------------------------------------------------


@pytest.mark.anyio
async def test_counts_and_active_lookups(session: AsyncSession) -> None:
    nodes = await _seed(session)
    repo = SqlAlchemyCategoryRepository(session)

    assert await repo.count_active() == 5
    assert await repo.count_deleted() == 0

    assert await repo.soft_delete_by_id(nodes["life"].id)  # type: ignore[arg-type]
    assert not await repo.soft_delete_by_id(nodes["life"].id)  # type: ignore[arg-type]

    assert await repo.count_active() == 4
    assert await repo.count_deleted() == 1
    assert await repo.find_active_by_id(nodes["life"].id) is None  # type: ignore[arg-type]
    assert not await repo.exists_active_by_id(nodes["life"].id)  # type: ignore[arg-type]
    assert await repo.exists_active_by_id(nodes["tech"].id)  # type: ignore[arg-type]

    active_slugs = [row.slug for row in await repo.find_all_active()]
    deleted_slugs = [row.slug for row in await repo.find_all_deleted()]
    assert "life" not in active_slugs
    assert deleted_slugs == ["life"]


@pytest.mark.anyio
async def test_bulk_soft_delete_bumps_version_and_restore_reverts(session: AsyncSession) -> None:
    nodes = await _seed(session)
    repo = SqlAlchemyCategoryRepository(session)
    life_id = nodes["life"].id
    assert life_id is not None

    await repo.soft_delete_by_id(life_id)
    version_after_delete = await session.scalar(
        select(CategoryModel.version).where(CategoryModel.id == life_id)
    )
    assert version_after_delete == 2

    assert await repo.restore_by_id(life_id)
    assert not await repo.restore_by_id(life_id)
    assert await repo.find_active_by_id(life_id) is not None

    # the in-memory entity still carries version 1 and must now conflict
    stale = nodes["life"]
    stale.name = "Lifestyle"
    with pytest.raises(ConcurrencyConflictError):
        await repo.save(stale)


# ----------------------------------------------------------------------
# Search and SEO queries
# ----------------------------------------------------------------------


@pytest.mark.anyio
async def test_search_is_case_insensitive_over_name_and_description(session: AsyncSession) -> None:
    repo = SqlAlchemyCategoryRepository(session)
    tech = Category("Tech", "tech", "Gadgets and PYTHON tooling")
    python = Category("Python", "python", display_order=1, parent=tech)
    snakes = Category("Snakes", "snakes", "Pythons in the wild", display_order=2)
    await repo.save_all([tech, python, snakes])

    matches = await repo.search("python")
    assert [c.slug for c in matches] == ["tech", "python", "snakes"]
    assert matches[1].parent is not None and matches[1].parent.slug == "tech"

    names_only = await repo.search("PYTHON", include_description=False)
    assert [c.slug for c in names_only] == ["python"]

    assert await repo.search("100%") == []


@pytest.mark.anyio
async def test_search_skips_soft_deleted_categories(session: AsyncSession) -> None:
    nodes = await _seed(session)
    repo = SqlAlchemyCategoryRepository(session)
    go = nodes["go"]
    go.mark_as_deleted()
    await repo.save(go)

    assert await repo.search("go") == []


@pytest.mark.anyio
async def test_find_needing_seo_flags_blank_title_or_description(session: AsyncSession) -> None:
    repo = SqlAlchemyCategoryRepository(session)
    complete = Category("Tech", "tech", meta_title="Tech", meta_description="All tech")
    no_title = Category("Life", "life", display_order=1, meta_description="Life posts")
    empty_description = Category(
        "Travel", "travel", display_order=2, meta_title="Travel", meta_description=""
    )
    deleted = Category("Old", "old", display_order=3)
    deleted.mark_as_deleted()
    await repo.save_all([complete, no_title, empty_description, deleted])

    gaps = await repo.find_needing_seo()

    assert [c.slug for c in gaps] == ["life", "travel"]
