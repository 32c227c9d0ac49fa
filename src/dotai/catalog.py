"""
catalog:
    Discovery, lookup and search over the template catalog.

The template root holds one directory per content type, and one item
directory per template inside it:

    templates/
        skills/code-review/SKILL.md
        rules/no-secrets/RULE.md

A directory only counts as an item if it holds its type's content file.
The lazy loader silently skips anything it cannot read; lint() is the
strict counterpart that reports every problem.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotai import config
from dotai import frontmatter as fm
from dotai.exceptions import (
    AmbiguousItemError,
    ItemNotFoundError,
    UnknownContentTypeError,
)
from dotai.models import CatalogItem, ValidationIssue, item_key, utc_timestamp

logger = logging.getLogger(__name__)


def is_valid_item_id(item_id: str) -> bool:
    """Check that an id names a single directory below its type root."""
    return (
        item_id not in ("", ".", "..")
        and "/" not in item_id
        and "\\" not in item_id
    )


@dataclass
class LintReport:
    """Strict validation outcome for one item directory."""

    type: str
    id: str
    path: Path
    issues: list[ValidationIssue] = field(default_factory=list)
    load_error: Optional[str] = None

    @property
    def key(self) -> str:
        return item_key(self.type, self.id)

    @property
    def ok(self) -> bool:
        return self.load_error is None and not any(
            i.severity == "error" for i in self.issues
        )


def _check_type(content_type: str) -> None:
    if content_type not in config.CONTENT_TYPES:
        raise UnknownContentTypeError(content_type)


def _as_str(value) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_list(value) -> Optional[list[str]]:
    if isinstance(value, list):
        return value
    if isinstance(value, str) and value:
        return [value]
    return None


class Catalog:
    """Read-only view of a template root directory."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"Catalog({str(self.root)!r})"

    # -------------------------------------------------------------------------
    # Paths
    # -------------------------------------------------------------------------

    def type_dir(self, content_type: str) -> Path:
        _check_type(content_type)
        return self.root / content_type

    def item_file_path(self, content_type: str, item_id: str) -> Path:
        """Get the path to an item's content file (it may not exist)."""
        return self.type_dir(content_type) / item_id / config.get_content_file(
            content_type
        )

    def item_exists(self, content_type: str, item_id: str) -> bool:
        return self.item_file_path(content_type, item_id).is_file()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def load_item(self, content_type: str, item_id: str) -> Optional[CatalogItem]:
        """
        Load a single item from the catalog.

        Args:
            content_type: One of config.CONTENT_TYPES
            item_id: Item directory name

        Returns:
            The item, or None if its content file is missing or unreadable
        """
        file_path = self.item_file_path(content_type, item_id)
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping %s/%s: %s", content_type, item_id, e)
            return None

        metadata, _ = fm.parse(content)
        item_dir = file_path.parent

        return CatalogItem(
            id=item_id,
            name=_as_str(metadata.get("name")) or item_id,
            description=_as_str(metadata.get("description")) or "",
            type=content_type,
            category=_as_str(metadata.get("category")),
            tags=_as_list(metadata.get("tags")),
            path=item_dir.relative_to(self.root).as_posix(),
            source_dir=item_dir,
            content=content,
        )

    def load_type(self, content_type: str) -> list[CatalogItem]:
        """Load all items of a content type, sorted by display name."""
        type_dir = self.type_dir(content_type)
        if not type_dir.is_dir():
            return []

        items = []
        for entry in type_dir.iterdir():
            if not entry.is_dir():
                continue
            item = self.load_item(content_type, entry.name)
            if item:
                items.append(item)

        return sorted(items, key=lambda i: (i.name.casefold(), i.id))

    def load(self) -> dict[str, list[CatalogItem]]:
        """Load the full catalog, keyed by content type."""
        return {t: self.load_type(t) for t in config.CONTENT_TYPES}

    def items(self, content_type: Optional[str] = None) -> list[CatalogItem]:
        """List items of one type, or of every type in catalog order."""
        if content_type:
            return self.load_type(content_type)
        result: list[CatalogItem] = []
        for type_items in self.load().values():
            result.extend(type_items)
        return result

    def get_item_content(self, content_type: str, item_id: str) -> Optional[str]:
        item = self.load_item(content_type, item_id)
        return item.content if item else None

    def resolve(self, ref: str) -> CatalogItem:
        """
        Resolve an item reference.

        Accepts ``type/id`` or a bare ``id``; a bare id must match exactly
        one content type.

        Raises:
            ItemNotFoundError: If nothing matches.
            AmbiguousItemError: If a bare id matches several types.
            UnknownContentTypeError: If the type part is not a content type.
        """
        if "/" in ref:
            content_type, item_id = ref.split("/", 1)
            if not is_valid_item_id(item_id):
                raise ItemNotFoundError(ref)
            item = self.load_item(content_type, item_id)
            if item is None:
                raise ItemNotFoundError(ref)
            return item

        matches = [
            item
            for item in (self.load_item(t, ref) for t in config.CONTENT_TYPES)
            if item is not None
        ]
        if not matches:
            raise ItemNotFoundError(ref)
        if len(matches) > 1:
            raise AmbiguousItemError(ref, [m.key for m in matches])
        return matches[0]

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def search(self, query: str) -> list[CatalogItem]:
        """Case-insensitive substring search over name, description, tags and category."""
        needle = query.lower()

        def matches(item: CatalogItem) -> bool:
            if needle in item.name.lower() or needle in item.description.lower():
                return True
            if item.tags and any(needle in tag.lower() for tag in item.tags):
                return True
            return bool(item.category and needle in item.category.lower())

        return [item for item in self.items() if matches(item)]

    def stats(self) -> dict[str, int]:
        """Count items per content type, plus a total."""
        stats = {"total": 0}
        for content_type, type_items in self.load().items():
            stats[content_type] = len(type_items)
            stats["total"] += len(type_items)
        return stats

    def index(self) -> dict:
        """Build the serializable catalog index (content omitted)."""
        return {
            "version": config.CATALOG_INDEX_VERSION,
            "generatedAt": utc_timestamp(),
            "items": [item.to_dict() for item in self.items()],
        }

    # -------------------------------------------------------------------------
    # Strict validation
    # -------------------------------------------------------------------------

    def lint(self) -> list[LintReport]:
        """
        Validate every item directory in the catalog.

        Unlike the loader, directories missing their content file or
        holding unreadable text are reported rather than skipped.
        """
        reports: list[LintReport] = []

        for content_type in config.CONTENT_TYPES:
            type_dir = self.type_dir(content_type)
            if not type_dir.is_dir():
                continue

            for entry in sorted(type_dir.iterdir()):
                if not entry.is_dir():
                    continue

                report = LintReport(type=content_type, id=entry.name, path=entry)
                content_file = entry / config.get_content_file(content_type)

                if not content_file.is_file():
                    report.load_error = f"Missing {content_file.name}"
                else:
                    try:
                        metadata, _ = fm.parse_file(content_file)
                    except (OSError, UnicodeDecodeError) as e:
                        report.load_error = f"Cannot read {content_file.name}: {e}"
                    else:
                        result = fm.validate_frontmatter(metadata, entry.name)
                        report.issues = result.issues

                reports.append(report)

        return reports


def get_catalog(root: Optional[Path] = None) -> Catalog:
    """Get the catalog for the configured template root."""
    return Catalog(root or config.TEMPLATES_ROOT)
