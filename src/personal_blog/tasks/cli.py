# Copyright (c) Personal Blog.
# SPDX-License-Identifier: MIT
"""Personal Blog CLI: database bootstrap and category maintenance.

Commands:
    init-db                  Create missing tables on the configured database.
    categories add           Create a category (optionally under a parent).
    categories move          Re-parent a category (``--root`` detaches it).
    categories delete        Soft-delete a category and its subtree.
    categories restore       Undo a soft delete (``--cascade`` for the subtree).
    categories tree          Print the active category forest.
    categories breadcrumb    Print the root-to-node path of a category.
    categories search        Case-insensitive search over names and descriptions.
    categories seo-gaps      List categories missing a meta title or description.

Environment:
    DATABASE_URL   Async SQLAlchemy URL (overridable with ``--database-url``).
    LOG_LEVEL      Root log level.
    SERVICE_NAME   Service name stamped on log lines.

Exit codes:
    0 on success, 1 on a domain error (the error code is printed to stderr),
    2 on invalid input.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

import typer

from personal_blog.adapters.uow.sqlalchemy_uow import sqlalchemy_uow_factory
from personal_blog.application.services.category_service import (
    CategoryService,
    CreateCategoryRequest,
)
from personal_blog.config.settings import Settings, get_settings
from personal_blog.domain.entities.category import Category
from personal_blog.domain.exceptions.base import DomainError
from personal_blog.domain.services.category_tree import sorted_children
from personal_blog.infrastructure.database.session import (
    create_schema,
    dispose_engine,
    get_engine,
    get_sessionmaker,
    init_engine_and_sessionmaker,
)
from personal_blog.infrastructure.logging.logger import configure_root_logging, get_json_logger

log = get_json_logger(__name__)

T = TypeVar("T")

app = typer.Typer(add_completion=False, no_args_is_help=True)
categories_app = typer.Typer(no_args_is_help=True)
app.add_typer(categories_app, name="categories", help="Manage the category hierarchy.")


@app.callback()
def main(
    ctx: typer.Context,
    database_url: str | None = typer.Option(  # noqa: B008
        None, "--database-url", help="Async SQLAlchemy URL (defaults to DATABASE_URL)."
    ),
) -> None:
    """Personal blog maintenance commands."""
    settings = Settings(database_url=database_url) if database_url else get_settings()
    configure_root_logging(settings.log_level, service=settings.service_name)
    ctx.obj = settings


def _run(ctx: typer.Context, fn: Callable[[CategoryService], Awaitable[T]]) -> T:
    """Run ``fn`` against a service bound to the process engine.

    Domain errors are logged and turned into exit code 1; invalid input into
    exit code 2.
    """
    settings: Settings = ctx.obj

    async def _go() -> T:
        init_engine_and_sessionmaker(settings)
        try:
            service = CategoryService(sqlalchemy_uow_factory(get_sessionmaker()))
            return await fn(service)
        finally:
            await dispose_engine()

    try:
        return asyncio.run(_go())
    except DomainError as exc:
        log.error(
            "cli.domain_error",
            extra={"extra": {"code": exc.code, "details": exc.details}},
        )
        typer.echo(f"error: {exc.code}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    except ValueError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2) from exc


def _label(category: Category) -> str:
    return f"{category.name} ({category.slug}) [id={category.id}]"


def _render_tree(roots: Sequence[Category]) -> list[str]:
    lines: list[str] = []
    stack = [(root, 0) for root in reversed(roots)]
    while stack:
        node, depth = stack.pop()
        lines.append(f"{'  ' * depth}{_label(node)}")
        stack.extend((child, depth + 1) for child in reversed(sorted_children(node)))
    return lines


@app.command("init-db")
def init_db(ctx: typer.Context) -> None:
    """Create any missing tables on the configured database."""
    settings: Settings = ctx.obj

    async def _go() -> None:
        init_engine_and_sessionmaker(settings)
        try:
            await create_schema(get_engine())
        finally:
            await dispose_engine()

    asyncio.run(_go())
    log.info("init_db.done", extra={"extra": {"environment": settings.environment.value}})
    typer.echo("database initialized")


@categories_app.command("add")
def add_category(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Display name."),  # noqa: B008
    slug: str = typer.Argument(..., help="URL-friendly identifier."),  # noqa: B008
    parent_id: int | None = typer.Option(None, "--parent", help="Parent category id."),  # noqa: B008
    description: str | None = typer.Option(None, help="Description."),  # noqa: B008
    color_code: str | None = typer.Option(None, "--color", help="UI color, e.g. #ff8800."),  # noqa: B008
    display_order: int | None = typer.Option(None, "--order", help="Rank among siblings."),  # noqa: B008
    meta_title: str | None = typer.Option(None, "--meta-title", help="SEO title."),  # noqa: B008
    meta_description: str | None = typer.Option(  # noqa: B008
        None, "--meta-description", help="SEO description."
    ),
) -> None:
    """Create a category."""
    category = _run(
        ctx,
        lambda service: service.create_category(
            CreateCategoryRequest(
                name=name,
                slug=slug,
                parent_id=parent_id,
                description=description,
                color_code=color_code,
                display_order=display_order,
                meta_title=meta_title,
                meta_description=meta_description,
            )
        ),
    )
    typer.echo(f"created {_label(category)}")


@categories_app.command("move")
def move_category(
    ctx: typer.Context,
    category_id: int = typer.Argument(..., help="Category to move."),  # noqa: B008
    parent_id: int | None = typer.Option(None, "--parent", help="New parent id."),  # noqa: B008
    root: bool = typer.Option(False, "--root", help="Detach into a root category."),  # noqa: B008
) -> None:
    """Re-parent a category."""
    if (parent_id is None) == (not root):
        typer.echo("error: pass exactly one of --parent or --root", err=True)
        raise typer.Exit(code=2)
    category = _run(ctx, lambda service: service.move_category(category_id, parent_id))
    typer.echo(f"moved {_label(category)}")


@categories_app.command("delete")
def delete_category(
    ctx: typer.Context,
    category_id: int = typer.Argument(..., help="Category to soft-delete."),  # noqa: B008
) -> None:
    """Soft-delete a category and everything below it."""
    changed = _run(ctx, lambda service: service.delete_category(category_id))
    typer.echo(f"deleted {len(changed)} categories")


@categories_app.command("restore")
def restore_category(
    ctx: typer.Context,
    category_id: int = typer.Argument(..., help="Category to restore."),  # noqa: B008
    cascade: bool = typer.Option(False, "--cascade", help="Also restore descendants."),  # noqa: B008
) -> None:
    """Restore a soft-deleted category."""
    changed = _run(ctx, lambda service: service.restore_category(category_id, cascade=cascade))
    typer.echo(f"restored {len(changed)} categories")


@categories_app.command("tree")
def show_tree(ctx: typer.Context) -> None:
    """Print the active category forest."""
    roots = _run(ctx, lambda service: service.get_tree())
    if not roots:
        typer.echo("no categories")
        return
    for line in _render_tree(roots):
        typer.echo(line)


@categories_app.command("breadcrumb")
def show_breadcrumb(
    ctx: typer.Context,
    category_id: int = typer.Argument(..., help="Category id."),  # noqa: B008
) -> None:
    """Print the path from the root down to a category."""
    path = _run(ctx, lambda service: service.get_breadcrumb(category_id))
    typer.echo(" > ".join(node.name or "" for node in path))


@categories_app.command("search")
def search_categories(
    ctx: typer.Context,
    term: str = typer.Argument(..., help="Text to look for."),  # noqa: B008
    names_only: bool = typer.Option(False, "--names-only", help="Ignore descriptions."),  # noqa: B008
) -> None:
    """Print active categories matching a search term."""
    matches = _run(
        ctx,
        lambda service: service.search_categories(term, include_description=not names_only),
    )
    if not matches:
        typer.echo("no matches")
        return
    for category in matches:
        typer.echo(_label(category))


@categories_app.command("seo-gaps")
def show_seo_gaps(ctx: typer.Context) -> None:
    """Print active categories missing a meta title or meta description."""
    gaps = _run(ctx, lambda service: service.find_categories_needing_seo())
    if not gaps:
        typer.echo("all categories have SEO metadata")
        return
    for category in gaps:
        typer.echo(_label(category))


if __name__ == "__main__":
    app()
