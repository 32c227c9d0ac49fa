"""
bridge:
    Editor-specific context files that point to .ai/.

Instead of duplicating content into each editor's config directory, one
small "bridge" file per assistant family tells that assistant to read
.ai/ for all of its instructions. Several assistants share the generic
AGENTS.md family.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

import yaml

from dotai.assistants import AssistantConfig
from dotai.config import (
    AGENTS,
    CANONICAL_DIR,
    COMMANDS,
    PROMPTS,
    RULES,
    SKILLS,
    Environment,
    project_base,
)

logger = logging.getLogger(__name__)

CONTEXT_DIR = "context"

# Order in which canonical subdirectories are listed
BRIDGE_DIRS = (SKILLS, RULES, AGENTS, COMMANDS, PROMPTS, CONTEXT_DIR)

# Used when .ai/ has no content yet
DEFAULT_DIRS = [SKILLS, RULES]

DIR_DESCRIPTIONS = {
    SKILLS: "Coding best practices, patterns, and playbooks",
    RULES: "Hard constraints and conventions (always follow these)",
    AGENTS: "Specialized AI personas for specific tasks",
    COMMANDS: "Reusable command templates and macros",
    PROMPTS: "Pre-built prompt templates",
    CONTEXT_DIR: "Project context, architecture, and domain knowledge",
}

UNIVERSAL = "universal"


@dataclass
class BridgeFile:
    """A bridge file ready to be written."""

    editor_id: str
    file_path: str  # relative to the project root
    content: str
    description: str


@dataclass
class BridgeWriteResult:
    written: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


# =============================================================================
# Content
# =============================================================================


def existing_dirs(project_root: Path) -> list[str]:
    """List the canonical subdirectories that exist under <project>/.ai/."""
    ai_dir = Path(project_root) / CANONICAL_DIR
    return [d for d in BRIDGE_DIRS if (ai_dir / d).is_dir()]


def build_directory_section(dirs: list[str]) -> str:
    if not dirs:
        return ""

    lines = [
        f"- `{CANONICAL_DIR}/{d}/` - {DIR_DESCRIPTIONS.get(d, d)}" for d in dirs
    ]
    return (
        "\n## AI Configuration\n\n"
        f"This project uses `{CANONICAL_DIR}/` as the single source of truth for AI behavior.\n"
        "Always read and follow the guidelines in:\n\n" + "\n".join(lines) + "\n"
    )


def build_core_instructions(dirs: list[str]) -> str:
    sections = []

    if RULES in dirs:
        sections.append(
            f"Before writing any code, read all files in `{CANONICAL_DIR}/rules/`. "
            "These are hard constraints. Never violate them."
        )
    if SKILLS in dirs:
        sections.append(
            f"When working on code, check `{CANONICAL_DIR}/skills/` for relevant "
            "guidelines. Apply matching skill files to your work."
        )
    if CONTEXT_DIR in dirs:
        sections.append(
            "For project context (architecture, conventions, domain), consult "
            f"`{CANONICAL_DIR}/context/`."
        )
    if COMMANDS in dirs:
        sections.append(
            f"Reusable command templates are in `{CANONICAL_DIR}/commands/`. "
            "Use them when the user references a command by name."
        )

    if not sections:
        return ""
    return "\n## Instructions\n\n" + "\n\n".join(sections) + "\n"


def _body(dirs: list[str]) -> str:
    return build_directory_section(dirs) + build_core_instructions(dirs)


# =============================================================================
# Families
# =============================================================================


def claude_bridge(dirs: list[str]) -> BridgeFile:
    return BridgeFile(
        editor_id="claude",
        file_path="CLAUDE.md",
        description="Claude Code context file",
        content="# CLAUDE.md\n" + _body(dirs),
    )


def cursor_bridge(dirs: list[str]) -> BridgeFile:
    frontmatter = yaml.safe_dump(
        {
            "description": f"AI configuration, read {CANONICAL_DIR}/ for all guidelines",
            "globs": None,
            "alwaysApply": True,
        },
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    ).rstrip()
    return BridgeFile(
        editor_id="cursor",
        file_path=".cursor/rules/ai-config.mdc",
        description="Cursor rules file",
        content=f"---\n{frontmatter}\n---\n" + _body(dirs),
    )


def copilot_bridge(dirs: list[str]) -> BridgeFile:
    return BridgeFile(
        editor_id="copilot",
        file_path=".github/copilot-instructions.md",
        description="GitHub Copilot instructions",
        content="# Copilot Instructions\n" + _body(dirs),
    )


def gemini_bridge(dirs: list[str]) -> BridgeFile:
    return BridgeFile(
        editor_id="gemini",
        file_path="GEMINI.md",
        description="Gemini CLI context file",
        content="# GEMINI.md\n" + _body(dirs),
    )


def windsurf_bridge(dirs: list[str]) -> BridgeFile:
    return BridgeFile(
        editor_id="windsurf",
        file_path=".windsurfrules",
        description="Windsurf rules file",
        content="# Windsurf Rules\n" + _body(dirs),
    )


def agents_bridge(dirs: list[str]) -> BridgeFile:
    return BridgeFile(
        editor_id=UNIVERSAL,
        file_path="AGENTS.md",
        description="Universal agents context file (Codex, Amp, OpenCode, etc.)",
        content="# AGENTS.md\n" + _body(dirs),
    )


BRIDGE_GENERATORS: dict[str, Callable[[list[str]], BridgeFile]] = {
    "claude": claude_bridge,
    "cursor": cursor_bridge,
    "copilot": copilot_bridge,
    "gemini": gemini_bridge,
    "windsurf": windsurf_bridge,
    UNIVERSAL: agents_bridge,
}

ASSISTANT_TO_BRIDGE = {
    "claude": "claude",
    "cursor": "cursor",
    "copilot": "copilot",
    "gemini": "gemini",
    "antigravity": "gemini",
    "windsurf": "windsurf",
    "codex": UNIVERSAL,
    "amp": UNIVERSAL,
    "opencode": UNIVERSAL,
    "cline": UNIVERSAL,
    "roo": UNIVERSAL,
    "continue": UNIVERSAL,
    "goose": UNIVERSAL,
    "kiro": UNIVERSAL,
    "trae": UNIVERSAL,
    "augment": UNIVERSAL,
    "droid": UNIVERSAL,
    "kilo": UNIVERSAL,
}


def bridge_family(assistant_id: str) -> Optional[str]:
    return ASSISTANT_TO_BRIDGE.get(assistant_id)


def available_bridge_types() -> list[str]:
    return list(BRIDGE_GENERATORS)


# =============================================================================
# Public API
# =============================================================================


def generate_bridge_files(
    assistants: Iterable[AssistantConfig],
    project_root: Optional[Path] = None,
    env: Optional[Environment] = None,
) -> list[BridgeFile]:
    """
    Generate bridge files for the given assistants.

    One file per family, in the order families are first requested, and
    the universal AGENTS.md is always included.

    Args:
        assistants: Assistants to generate bridge files for
        project_root: Project root (default: the environment's working directory)

    Returns:
        List of bridge files (not yet written)
    """
    root = project_base(project_root, env)
    dirs = existing_dirs(root) or list(DEFAULT_DIRS)

    families: dict[str, None] = {}
    for assistant in assistants:
        family = bridge_family(assistant.id)
        if family:
            families[family] = None
    families[UNIVERSAL] = None

    return [BRIDGE_GENERATORS[family](dirs) for family in families]


def write_bridge_files(
    files: Iterable[BridgeFile],
    project_root: Optional[Path] = None,
    overwrite: bool = False,
    env: Optional[Environment] = None,
) -> BridgeWriteResult:
    """
    Write bridge files to disk.

    Existing files are left untouched unless overwrite is set, so user
    customizations survive repeated runs.

    Raises:
        OSError: If a file cannot be written.
    """
    root = project_base(project_root, env)
    result = BridgeWriteResult()

    for bridge in files:
        target = root / bridge.file_path
        if not overwrite and target.exists():
            result.skipped.append(bridge.file_path)
            continue

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(bridge.content, encoding="utf-8")
        result.written.append(bridge.file_path)
        logger.debug("Wrote bridge file %s", target)

    return result
