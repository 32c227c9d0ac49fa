"""
assistants:
    Registry of supported AI assistants, their detection probes and
    per-content-type path tables.

Content is only ever copied into the canonical .ai/ directory. The
per-assistant path tables here describe where each assistant would look
on its own; they drive bridge generation and informational listings.

Detection is a pure function of a ProbeSpec and a Host capability, so
tests can substitute a fake filesystem without touching real paths.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

from dotai import config
from dotai.config import (
    AGENTS,
    CANONICAL_DIR,
    COMMANDS,
    PROMPTS,
    RULES,
    SKILLS,
    Environment,
    get_environment,
    project_base,
)
from dotai.exceptions import ConfigurationError, UnknownAssistantError

CONTENT_TYPE_NAMES = {
    SKILLS: "Skills",
    AGENTS: "Agents",
    COMMANDS: "Commands",
    RULES: "Rules",
    PROMPTS: "Prompts",
}


def content_type_display_name(content_type: str) -> str:
    return CONTENT_TYPE_NAMES.get(content_type, content_type)


# =============================================================================
# Detection
# =============================================================================


class Host(Protocol):
    """Filesystem and PATH lookups used by detection probes."""

    def is_dir(self, path: Path) -> bool: ...

    def is_file(self, path: Path) -> bool: ...

    def which(self, command: str) -> Optional[str]: ...


class SystemHost:
    """Host backed by the real filesystem and PATH."""

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def is_file(self, path: Path) -> bool:
        return Path(path).is_file()

    def which(self, command: str) -> Optional[str]:
        return shutil.which(command)


@dataclass(frozen=True)
class ProbeSpec:
    """What to look for to decide whether an assistant is installed.

    Any single hit counts as installed.
    """

    dirs: tuple[Path, ...] = ()
    files: tuple[Path, ...] = ()
    commands: tuple[str, ...] = ()


def detect(spec: ProbeSpec, host: Host) -> bool:
    """Evaluate a probe against a host. No side effects, no caching."""
    return (
        any(host.is_dir(d) for d in spec.dirs)
        or any(host.is_file(f) for f in spec.files)
        or any(host.which(c) for c in spec.commands)
    )


# =============================================================================
# Assistant definitions
# =============================================================================


@dataclass(frozen=True)
class AssistantConfig:
    """Static descriptor for one AI assistant target."""

    id: str
    name: str
    description: str
    probe: ProbeSpec
    paths: dict[str, str] = field(default_factory=dict)
    global_paths: dict[str, Path] = field(default_factory=dict)
    is_universal: bool = False
    context_file: Optional[str] = None

    def supports(self, content_type: str) -> bool:
        return content_type in self.paths

    def detect_installed(self, host: Optional[Host] = None) -> bool:
        return detect(self.probe, host or SystemHost())


def _canonical(content_type: str) -> str:
    return f"{CANONICAL_DIR}/{content_type}"


def build_assistants(env: Environment) -> tuple[AssistantConfig, ...]:
    """
    Build the assistant table for an environment.

    Global paths honour CLAUDE_CONFIG_DIR (Claude), CODEX_HOME (Codex) and
    XDG_CONFIG_HOME (Amp, Goose, OpenCode) through the Environment.
    """
    home = env.home
    applications = Path("/Applications")

    return (
        AssistantConfig(
            id="claude",
            name="Claude Code",
            description="Anthropic's Claude AI assistant for coding",
            context_file="CLAUDE.md",
            probe=ProbeSpec(dirs=(env.claude_home,), commands=("claude",)),
            paths={
                SKILLS: ".claude/skills",
                AGENTS: ".claude/agents",
                COMMANDS: ".claude/commands",
            },
            global_paths={
                SKILLS: env.claude_home / "skills",
                AGENTS: env.claude_home / "agents",
                COMMANDS: env.claude_home / "commands",
            },
        ),
        AssistantConfig(
            id="copilot",
            name="GitHub Copilot",
            description="GitHub's AI pair programmer for VS Code, JetBrains, and more",
            context_file="AGENTS.md",
            probe=ProbeSpec(
                dirs=(home / ".copilot",),
                files=(home / ".config" / "github-copilot" / "hosts.json",),
            ),
            paths={
                SKILLS: _canonical(SKILLS),
                AGENTS: _canonical(AGENTS),
                PROMPTS: _canonical(PROMPTS),
            },
            global_paths={
                SKILLS: home / ".copilot" / "skills",
                AGENTS: home / ".copilot" / "agents",
                PROMPTS: home / ".copilot" / "prompts",
            },
            is_universal=True,
        ),
        AssistantConfig(
            id="cursor",
            name="Cursor",
            description="AI-first code editor with built-in assistant",
            context_file="AGENTS.md",
            probe=ProbeSpec(dirs=(home / ".cursor", applications / "Cursor.app")),
            paths={SKILLS: ".cursor/skills", RULES: ".cursor/rules"},
            global_paths={
                SKILLS: home / ".cursor" / "skills",
                RULES: home / ".cursor" / "rules",
            },
        ),
        AssistantConfig(
            id="windsurf",
            name="Windsurf",
            description="Codeium's AI-powered IDE (formerly Codeium Editor)",
            probe=ProbeSpec(
                dirs=(
                    home / ".codeium" / "windsurf",
                    home / ".windsurf",
                    applications / "Windsurf.app",
                )
            ),
            paths={SKILLS: ".windsurf/skills", RULES: ".windsurf/rules"},
            global_paths={
                SKILLS: home / ".codeium" / "windsurf" / "skills",
                RULES: home / ".codeium" / "windsurf" / "rules",
            },
        ),
        AssistantConfig(
            id="gemini",
            name="Gemini CLI",
            description="Google's Gemini AI command-line interface",
            context_file="GEMINI.md",
            probe=ProbeSpec(dirs=(home / ".gemini",), commands=("gemini",)),
            paths={SKILLS: _canonical(SKILLS)},
            global_paths={SKILLS: home / ".gemini" / "skills"},
            is_universal=True,
        ),
        AssistantConfig(
            id="antigravity",
            name="Antigravity",
            description="Google's Antigravity AI coding assistant",
            probe=ProbeSpec(dirs=(home / ".gemini" / "antigravity",)),
            paths={SKILLS: _canonical(SKILLS), AGENTS: _canonical(AGENTS)},
            global_paths={
                SKILLS: home / ".gemini" / "antigravity" / "skills",
                AGENTS: home / ".gemini" / "antigravity" / "agents",
            },
            is_universal=True,
        ),
        AssistantConfig(
            id="codex",
            name="Codex",
            description="OpenAI Codex CLI assistant",
            context_file="AGENTS.md",
            probe=ProbeSpec(
                dirs=(env.codex_home, Path("/etc/codex")), commands=("codex",)
            ),
            paths={SKILLS: _canonical(SKILLS), AGENTS: _canonical(AGENTS)},
            global_paths={
                SKILLS: env.codex_home / "skills",
                AGENTS: env.codex_home / "agents",
            },
            is_universal=True,
        ),
        AssistantConfig(
            id="amp",
            name="Amp",
            description="Sourcegraph's Amp AI coding agent",
            probe=ProbeSpec(dirs=(env.config_home / "amp",), commands=("amp",)),
            paths={SKILLS: _canonical(SKILLS)},
            global_paths={SKILLS: env.config_home / "agents" / "skills"},
            is_universal=True,
        ),
        AssistantConfig(
            id="cline",
            name="Cline",
            description="Autonomous AI coding agent for VS Code",
            probe=ProbeSpec(dirs=(home / ".cline",)),
            paths={SKILLS: ".cline/skills", RULES: ".cline/rules"},
            global_paths={
                SKILLS: home / ".cline" / "skills",
                RULES: home / ".cline" / "rules",
            },
        ),
        AssistantConfig(
            id="roo",
            name="Roo Code",
            description="AI coding assistant for VS Code (fork of Cline)",
            probe=ProbeSpec(dirs=(home / ".roo",)),
            paths={SKILLS: ".roo/skills", RULES: ".roo/rules"},
            global_paths={
                SKILLS: home / ".roo" / "skills",
                RULES: home / ".roo" / "rules",
            },
        ),
        AssistantConfig(
            id="continue",
            name="Continue",
            description="Open-source AI code assistant for VS Code and JetBrains",
            probe=ProbeSpec(dirs=(home / ".continue",)),
            paths={SKILLS: ".continue/skills", RULES: ".continue/rules"},
            global_paths={
                SKILLS: home / ".continue" / "skills",
                RULES: home / ".continue" / "rules",
            },
        ),
        AssistantConfig(
            id="goose",
            name="Goose",
            description="Block's open-source AI developer agent",
            probe=ProbeSpec(dirs=(env.config_home / "goose",), commands=("goose",)),
            paths={SKILLS: ".goose/skills"},
            global_paths={SKILLS: env.config_home / "goose" / "skills"},
        ),
        AssistantConfig(
            id="opencode",
            name="OpenCode",
            description="Open-source AI coding assistant (terminal-based)",
            probe=ProbeSpec(
                dirs=(env.config_home / "opencode",), commands=("opencode",)
            ),
            paths={SKILLS: _canonical(SKILLS)},
            global_paths={SKILLS: env.config_home / "opencode" / "skills"},
            is_universal=True,
        ),
        AssistantConfig(
            id="kiro",
            name="Kiro",
            description="AWS Kiro AI assistant with spec-driven development",
            probe=ProbeSpec(dirs=(home / ".kiro",), commands=("kiro",)),
            paths={SKILLS: ".kiro/skills", RULES: ".kiro/rules"},
            global_paths={
                SKILLS: home / ".kiro" / "skills",
                RULES: home / ".kiro" / "rules",
            },
        ),
        AssistantConfig(
            id="trae",
            name="Trae",
            description="ByteDance's Trae AI coding assistant",
            probe=ProbeSpec(dirs=(home / ".trae",), commands=("trae",)),
            paths={SKILLS: ".trae/skills", RULES: ".trae/rules"},
            global_paths={
                SKILLS: home / ".trae" / "skills",
                RULES: home / ".trae" / "rules",
            },
        ),
        AssistantConfig(
            id="augment",
            name="Augment",
            description="Augment Code AI development platform",
            probe=ProbeSpec(dirs=(home / ".augment",)),
            paths={SKILLS: ".augment/skills"},
            global_paths={SKILLS: home / ".augment" / "skills"},
        ),
        AssistantConfig(
            id="droid",
            name="Droid",
            description="Droid AI coding agent (Factory)",
            probe=ProbeSpec(dirs=(home / ".factory",)),
            paths={SKILLS: ".factory/skills"},
            global_paths={SKILLS: home / ".factory" / "skills"},
        ),
        AssistantConfig(
            id="kilo",
            name="Kilo Code",
            description="Kilo Code AI assistant for VS Code",
            probe=ProbeSpec(dirs=(home / ".kilocode",)),
            paths={SKILLS: ".kilocode/skills"},
            global_paths={SKILLS: home / ".kilocode" / "skills"},
        ),
    )


def check_assistant(assistant: AssistantConfig) -> list[str]:
    """Return the table invariants an assistant definition breaks."""
    problems = []
    if not assistant.paths:
        problems.append(f"{assistant.id}: no content type paths")
    for content_type in assistant.paths:
        if content_type not in config.CONTENT_TYPES:
            problems.append(f"{assistant.id}: unknown content type {content_type}")
        if content_type not in assistant.global_paths:
            problems.append(f"{assistant.id}: no global path for {content_type}")
        if assistant.is_universal and assistant.paths[content_type] != _canonical(
            content_type
        ):
            problems.append(
                f"{assistant.id}: universal assistants must use "
                f"{_canonical(content_type)} for {content_type}"
            )
    return problems


# =============================================================================
# Registry
# =============================================================================


class AssistantRegistry:
    """Immutable lookup table over a set of assistant definitions."""

    def __init__(self, assistants: tuple[AssistantConfig, ...]):
        problems = [p for a in assistants for p in check_assistant(a)]
        if problems:
            raise ConfigurationError(
                "Invalid assistant table:\n" + "\n".join(f"  - {p}" for p in problems)
            )
        self._assistants = tuple(assistants)
        self._by_id = {a.id: a for a in self._assistants}

    def __iter__(self):
        return iter(self._assistants)

    def __len__(self) -> int:
        return len(self._assistants)

    def all(self) -> list[AssistantConfig]:
        return list(self._assistants)

    def ids(self) -> list[str]:
        return [a.id for a in self._assistants]

    def get(self, assistant_id: str) -> Optional[AssistantConfig]:
        return self._by_id.get(assistant_id)

    def require(self, assistant_id: str) -> AssistantConfig:
        """Get an assistant by id.

        Raises:
            UnknownAssistantError: If the assistant is not supported.
        """
        assistant = self._by_id.get(assistant_id)
        if assistant is None:
            raise UnknownAssistantError(assistant_id, self.ids())
        return assistant

    def for_content_type(self, content_type: str) -> list[AssistantConfig]:
        return [a for a in self._assistants if a.supports(content_type)]

    def universal(self) -> list[AssistantConfig]:
        return [a for a in self._assistants if a.is_universal]

    def detect_installed(self, host: Optional[Host] = None) -> list[AssistantConfig]:
        """Probe every assistant in one batch and return those found."""
        host = host or SystemHost()
        return [a for a in self._assistants if detect(a.probe, host)]


def get_registry(env: Optional[Environment] = None) -> AssistantRegistry:
    """Build the assistant registry for an environment (default: this process)."""
    return AssistantRegistry(build_assistants(env or get_environment()))


# =============================================================================
# Path resolution
# =============================================================================


def get_content_path(
    assistant: AssistantConfig,
    content_type: str,
    scope: str,
    project_root: Optional[Path] = None,
    env: Optional[Environment] = None,
) -> Optional[Path]:
    """
    Get where an assistant keeps a content type.

    Returns:
        The absolute path, or None if the assistant does not support the
        content type
    """
    if scope == "global":
        return assistant.global_paths.get(content_type)

    relative = assistant.paths.get(content_type)
    if relative is None:
        return None
    return project_base(project_root, env) / relative


def canonical_type_dir(
    content_type: str,
    scope: str,
    project_root: Optional[Path] = None,
    env: Optional[Environment] = None,
) -> Path:
    """Get <base>/.ai/<type>, the directory holding every item of a type."""
    if scope == "global":
        base = (env or get_environment()).home
    else:
        base = project_base(project_root, env)
    return base / CANONICAL_DIR / content_type


def get_canonical_path(
    content_type: str,
    item_id: str,
    scope: str,
    project_root: Optional[Path] = None,
    env: Optional[Environment] = None,
) -> Path:
    """
    Get the canonical location of an installed item: <base>/.ai/<type>/<id>.

    <base> is the home directory for global scope and the project root
    (default: the environment's working directory) for project scope.
    No assistant table affects the result.
    """
    return canonical_type_dir(content_type, scope, project_root, env) / item_id
