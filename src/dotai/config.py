"""
config:
    Configuration, constants and environment paths for dotai
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Mapping, Optional

from dotai.exceptions import UnknownContentTypeError

# Bundled template corpus (override with DOTAI_TEMPLATES)
PACKAGE_TEMPLATES = Path(__file__).parent / "templates"
TEMPLATES_ROOT = Path(os.environ.get("DOTAI_TEMPLATES", PACKAGE_TEMPLATES))

# Canonical directory that holds all installed content
CANONICAL_DIR = ".ai"

# Installation tracking file (lives inside CANONICAL_DIR)
LOCK_FILE_NAME = ".skill-lock.json"
LOCK_FILE_VERSION = "1.0.0"

# Catalog index format version
CATALOG_INDEX_VERSION = "1.0.0"

# Content types, in catalog order
SKILLS = "skills"
AGENTS = "agents"
COMMANDS = "commands"
RULES = "rules"
PROMPTS = "prompts"
CONTENT_TYPES = (SKILLS, AGENTS, COMMANDS, RULES, PROMPTS)

# Content file expected inside each item directory
CONTENT_FILES = {
    SKILLS: "SKILL.md",
    AGENTS: "AGENT.md",
    COMMANDS: "COMMAND.md",
    RULES: "RULE.md",
    PROMPTS: "PROMPT.md",
}

SCOPES = ("project", "global")
METHODS = ("symlink", "copy")

DEFAULT_SCOPE = "project"
DEFAULT_METHOD = "copy"


@dataclass(frozen=True)
class Environment:
    """Snapshot of the paths that assistant configuration depends on.

    Built once per process from os.environ; tests construct their own.
    """

    home: Path
    config_home: Path
    claude_home: Path
    codex_home: Path
    cwd: Path

    @classmethod
    def from_mapping(
        cls,
        environ: Mapping[str, str],
        home: Optional[Path] = None,
        cwd: Optional[Path] = None,
    ) -> "Environment":
        """Build an environment from an env-var mapping."""
        home = Path(home) if home else Path.home()

        xdg = environ.get("XDG_CONFIG_HOME", "").strip()
        claude = environ.get("CLAUDE_CONFIG_DIR", "").strip()
        codex = environ.get("CODEX_HOME", "").strip()

        return cls(
            home=home,
            config_home=Path(xdg) if xdg else home / ".config",
            claude_home=Path(claude) if claude else home / ".claude",
            codex_home=Path(codex) if codex else home / ".codex",
            cwd=Path(cwd) if cwd else Path.cwd(),
        )


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Get the process-wide environment snapshot."""
    return Environment.from_mapping(os.environ)


def project_base(
    project_root: Optional[Path] = None, env: Optional[Environment] = None
) -> Path:
    """Get the project root, defaulting to the environment's working directory."""
    if project_root:
        return Path(project_root)
    return (env or get_environment()).cwd


def get_content_file(content_type: str) -> str:
    """Get the content file name for a content type (e.g. SKILL.md)."""
    try:
        return CONTENT_FILES[content_type]
    except KeyError:
        raise UnknownContentTypeError(content_type) from None
