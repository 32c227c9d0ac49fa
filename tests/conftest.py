"""Shared pytest fixtures for dotai tests."""

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from dotai.catalog import Catalog
from dotai.config import CONTENT_FILES, Environment


class FakeHost:
    """Detection host backed by explicit sets instead of the real machine."""

    def __init__(self, dirs=(), files=(), commands=()):
        self.dirs = {Path(d) for d in dirs}
        self.files = {Path(f) for f in files}
        self.commands = set(commands)

    def is_dir(self, path):
        return Path(path) in self.dirs

    def is_file(self, path):
        return Path(path) in self.files

    def which(self, command):
        return f"/usr/bin/{command}" if command in self.commands else None


def write_item(root: Path, content_type: str, item_id: str, frontmatter: str, body: str = "Body text.\n") -> Path:
    """Write a template item directory and return it."""
    item_dir = root / content_type / item_id
    item_dir.mkdir(parents=True, exist_ok=True)
    (item_dir / CONTENT_FILES[content_type]).write_text(
        f"---\n{frontmatter}\n---\n{body}", encoding="utf-8"
    )
    return item_dir


@pytest.fixture
def cli_runner():
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def templates_root(tmp_path):
    """Create a small template catalog.

    Holds one valid item per content type, an id shared by a skill and a
    rule, and directories the loader must skip.
    """
    root = tmp_path / "templates"

    alpha = write_item(
        root,
        "skills",
        "alpha",
        "name: alpha\n"
        "description: Alpha skill. Use when testing the catalog.\n"
        "category: testing\n"
        "tags: [one, two]",
    )
    (alpha / "reference.md").write_text("Extra reference file.\n")

    write_item(
        root,
        "skills",
        "shared",
        "name: shared\ndescription: Shared skill. Use when testing ambiguity.\n"
        "category: testing\ntags: [shared]",
    )
    write_item(
        root,
        "rules",
        "shared",
        "name: shared\ndescription: Shared rule. Use when testing ambiguity.\n"
        "category: testing\ntags: [shared]",
    )
    write_item(
        root,
        "agents",
        "helper",
        "name: Helper Bot\ndescription: Helpful agent persona for searching.\n"
        "category: personas",
    )
    write_item(
        root,
        "commands",
        "deploy",
        "name: deploy\ndescription: Deploy the app. Use when shipping.\n"
        "category: ops\ntags: [release]",
    )
    write_item(
        root,
        "prompts",
        "summary",
        "name: summary\ndescription: Summarize text. Use for long documents.\n"
        "category: writing\ntags: [writing]",
    )

    # Skipped by the loader: no content file, and a stray file
    (root / "skills" / "empty").mkdir()
    (root / "skills" / "README.md").write_text("not an item\n")

    return root


@pytest.fixture
def catalog(templates_root):
    """Catalog over the sample templates."""
    return Catalog(templates_root)


@pytest.fixture
def project(tmp_path):
    """An empty project directory."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def env(tmp_path, project):
    """Environment rooted in a temporary home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return Environment.from_mapping({}, home=home, cwd=project)


@pytest.fixture
def fake_host():
    """A host on which nothing is installed."""
    return FakeHost()


@pytest.fixture
def mock_dotai_env(templates_root, env):
    """Point the CLI at the sample templates and temporary home."""
    with (
        patch("dotai.config.TEMPLATES_ROOT", templates_root),
        patch("dotai.config.get_environment", return_value=env),
        patch("dotai.assistants.SystemHost", FakeHost),
    ):
        yield env
