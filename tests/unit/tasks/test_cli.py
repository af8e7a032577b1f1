# tests/unit/tasks/test_cli.py
from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from personal_blog.tasks.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Iterator[None]:
    """The CLI installs a JSON handler bound to the runner's stderr; drop it after."""
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def cli(tmp_path: Path) -> Callable[..., object]:
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"

    def _invoke(*args: str):
        return runner.invoke(app, ["--database-url", url, *args])

    result = _invoke("init-db")
    assert result.exit_code == 0, result.output
    assert "database initialized" in result.output
    return _invoke


def test_add_and_render_tree(cli) -> None:
    assert cli("categories", "add", "Tech", "tech").exit_code == 0
    result = cli("categories", "add", "Python", "python", "--parent", "1")
    assert result.exit_code == 0, result.output
    assert "created Python (python) [id=2]" in result.output

    tree = cli("categories", "tree")
    assert tree.exit_code == 0
    assert "Tech (tech) [id=1]" in tree.output
    assert "  Python (python) [id=2]" in tree.output


def test_breadcrumb(cli) -> None:
    cli("categories", "add", "Tech", "tech")
    cli("categories", "add", "Python", "python", "--parent", "1")

    result = cli("categories", "breadcrumb", "2")

    assert result.exit_code == 0
    assert "Tech > Python" in result.output


def test_domain_errors_exit_with_code_1(cli) -> None:
    cli("categories", "add", "Tech", "tech")
    cli("categories", "add", "Python", "python", "--parent", "1")

    cycle = cli("categories", "move", "1", "--parent", "2")
    assert cycle.exit_code == 1
    assert "CATEGORY_CYCLE" in cycle.output

    duplicate = cli("categories", "add", "Other", "tech")
    assert duplicate.exit_code == 1
    assert "CATEGORY_SLUG_TAKEN" in duplicate.output

    missing = cli("categories", "breadcrumb", "99")
    assert missing.exit_code == 1
    assert "ENTITY_NOT_FOUND" in missing.output


def test_invalid_input_exits_with_code_2(cli) -> None:
    blank = cli("categories", "add", " ", "blank")
    assert blank.exit_code == 2

    ambiguous = cli("categories", "move", "1")
    assert ambiguous.exit_code == 2
    assert "exactly one of --parent or --root" in ambiguous.output


def test_move_delete_and_restore(cli) -> None:
    cli("categories", "add", "Tech", "tech")
    cli("categories", "add", "Python", "python", "--parent", "1")

    moved = cli("categories", "move", "2", "--root")
    assert moved.exit_code == 0, moved.output
    assert "moved Python (python) [id=2]" in moved.output

    cli("categories", "move", "2", "--parent", "1")
    deleted = cli("categories", "delete", "1")
    assert "deleted 2 categories" in deleted.output
    assert "no categories" in cli("categories", "tree").output

    restored = cli("categories", "restore", "1", "--cascade")
    assert restored.exit_code == 0
    assert "restored 2 categories" in restored.output
    assert "  Python (python) [id=2]" in cli("categories", "tree").output


def test_search_and_seo_gaps(cli) -> None:
    cli(
        "categories", "add", "Tech", "tech",
        "--description", "Python tooling",
        "--meta-title", "Tech", "--meta-description", "Tech posts",
    )
    cli("categories", "add", "Python", "python")

    found = cli("categories", "search", "python")
    assert found.exit_code == 0, found.output
    assert "Tech (tech) [id=1]" in found.output
    assert "Python (python) [id=2]" in found.output

    names_only = cli("categories", "search", "python", "--names-only")
    assert "Tech (tech)" not in names_only.output

    assert "no matches" in cli("categories", "search", "cooking").output
    assert cli("categories", "search", " ").exit_code == 2

    gaps = cli("categories", "seo-gaps")
    assert gaps.exit_code == 0
    assert "Python (python) [id=2]" in gaps.output
    assert "Tech (tech)" not in gaps.output
