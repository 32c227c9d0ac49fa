"""
models:
    Data models for catalog items, validation results, lock files and
    installation results
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from dotai.config import CONTENT_TYPES, LOCK_FILE_VERSION, METHODS, SCOPES

if TYPE_CHECKING:
    from dotai.assistants import AssistantConfig


def item_key(content_type: str, item_id: str) -> str:
    """Build the lock file key for an item (e.g. skills/foo)."""
    return f"{content_type}/{item_id}"


def utc_timestamp() -> str:
    """Current time as an ISO-8601 string with a Z suffix."""
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return now.replace("+00:00", "Z")


# =============================================================================
# Catalog
# =============================================================================


@dataclass
class CatalogItem:
    """A single template in the content catalog."""

    id: str
    name: str
    type: str
    path: str
    description: str = ""
    category: Optional[str] = None
    tags: Optional[list[str]] = None
    source_dir: Optional[Path] = None
    content: Optional[str] = None

    @property
    def key(self) -> str:
        return item_key(self.type, self.id)

    def to_dict(self, include_content: bool = False) -> dict:
        """Convert to the catalog index representation."""
        result = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type,
            "path": self.path,
        }
        if self.category is not None:
            result["category"] = self.category
        if self.tags is not None:
            result["tags"] = list(self.tags)
        if include_content and self.content is not None:
            result["content"] = self.content
        return result


@dataclass
class ValidationIssue:
    """A single frontmatter validation issue."""

    field: str
    severity: str  # error or warning
    message: str


@dataclass
class ValidationResult:
    """Result of validating a template's frontmatter."""

    valid: bool
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == "warning"]


# =============================================================================
# Lock file
# =============================================================================


@dataclass
class InstalledItem:
    """Record of one (type, id) pair's installation state."""

    type: str
    id: str
    source: str
    hash: str
    installed_at: str
    assistants: list[str] = field(default_factory=list)
    scope: str = "project"
    method: str = "copy"

    @property
    def key(self) -> str:
        return item_key(self.type, self.id)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": self.type,
            "id": self.id,
            "source": self.source,
            "hash": self.hash,
            "installedAt": self.installed_at,
            "assistants": list(self.assistants),
            "scope": self.scope,
            "method": self.method,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "InstalledItem":
        """Create from dictionary.

        Raises:
            ValueError: If the entry does not have the expected shape.
        """
        if not isinstance(data, dict):
            raise ValueError("installed entry must be an object")

        assistants = data.get("assistants", [])
        if not isinstance(assistants, list) or not all(
            isinstance(a, str) for a in assistants
        ):
            raise ValueError("assistants must be a list of strings")

        content_type = data["type"]
        if content_type not in CONTENT_TYPES:
            raise ValueError(f"unknown content type: {content_type}")

        scope = data.get("scope", "project")
        if scope not in SCOPES:
            raise ValueError(f"unknown scope: {scope}")

        method = data.get("method", "copy")
        if method not in METHODS:
            raise ValueError(f"unknown method: {method}")

        return cls(
            type=content_type,
            id=str(data["id"]),
            source=str(data.get("source", "builtin")),
            hash=str(data.get("hash", "")),
            installed_at=str(data.get("installedAt", "")),
            assistants=list(assistants),
            scope=scope,
            method=method,
        )


@dataclass
class Preferences:
    """User preferences stored alongside installation state."""

    default_assistants: Optional[list[str]] = None
    default_scope: Optional[str] = None
    default_method: Optional[str] = None

    def is_empty(self) -> bool:
        return (
            self.default_assistants is None
            and self.default_scope is None
            and self.default_method is None
        )

    def merged(self, other: "Preferences") -> "Preferences":
        """Return a copy with every field set in `other` overriding ours."""
        return Preferences(
            default_assistants=(
                other.default_assistants
                if other.default_assistants is not None
                else self.default_assistants
            ),
            default_scope=other.default_scope or self.default_scope,
            default_method=other.default_method or self.default_method,
        )

    def to_dict(self) -> dict:
        result: dict = {}
        if self.default_assistants is not None:
            result["defaultAssistants"] = list(self.default_assistants)
        if self.default_scope is not None:
            result["defaultScope"] = self.default_scope
        if self.default_method is not None:
            result["defaultMethod"] = self.default_method
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "Preferences":
        """Create from dictionary.

        Raises:
            ValueError: If a field does not have the expected type.
        """
        if not isinstance(data, dict):
            raise ValueError("preferences must be an object")

        assistants = data.get("defaultAssistants")
        if assistants is not None and (
            not isinstance(assistants, list)
            or not all(isinstance(a, str) for a in assistants)
        ):
            raise ValueError("defaultAssistants must be a list of strings")

        scope = data.get("defaultScope")
        if scope is not None and scope not in SCOPES:
            raise ValueError(f"unknown default scope: {scope}")

        method = data.get("defaultMethod")
        if method is not None and method not in METHODS:
            raise ValueError(f"unknown default method: {method}")

        return cls(
            default_assistants=assistants,
            default_scope=scope,
            default_method=method,
        )


@dataclass
class LockFile:
    """Root lock file document."""

    version: str = LOCK_FILE_VERSION
    installed: dict[str, InstalledItem] = field(default_factory=dict)
    last_update_check: Optional[str] = None
    preferences: Optional[Preferences] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result: dict = {"version": self.version}
        if self.last_update_check:
            result["lastUpdateCheck"] = self.last_update_check
        result["installed"] = {
            key: entry.to_dict() for key, entry in self.installed.items()
        }
        if self.preferences is not None:
            result["preferences"] = self.preferences.to_dict()
        return result

    @classmethod
    def from_dict(cls, data: dict) -> "LockFile":
        """Create from dictionary.

        Entries with no assistants are dropped so the in-memory document
        always satisfies the lock file invariants.

        Raises:
            ValueError: If the document does not have the expected shape.
        """
        if not isinstance(data, dict):
            raise ValueError("lock file must be a JSON object")

        raw_installed = data.get("installed", {})
        if not isinstance(raw_installed, dict):
            raise ValueError("installed must be an object")

        installed: dict[str, InstalledItem] = {}
        for raw in raw_installed.values():
            entry = InstalledItem.from_dict(raw)
            if entry.assistants:
                installed[entry.key] = entry

        preferences = None
        if data.get("preferences") is not None:
            preferences = Preferences.from_dict(data["preferences"])

        return cls(
            version=str(data.get("version", LOCK_FILE_VERSION)),
            installed=installed,
            last_update_check=data.get("lastUpdateCheck"),
            preferences=preferences,
        )


# =============================================================================
# Installation results
# =============================================================================


@dataclass
class InstallResult:
    """Result of installing one catalog item."""

    success: bool
    item: CatalogItem
    assistant: Optional["AssistantConfig"]
    path: str
    error: Optional[str] = None


@dataclass
class InstallSummary:
    """Summary of a batch installation."""

    results: list[InstallResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total - self.successful
