"""
exceptions:
    Custom exception hierarchy for dotai.

All dotai-specific exceptions inherit from DotAIError, so the CLI layer
can catch every library error with a single except clause.

Usage:
    - Raise specific exceptions in library code
    - Catch DotAIError at CLI boundaries
    - Convert to user-friendly messages and exit codes at the CLI layer

Catalog listing, lock file reads and per-item install failures do not
raise; they degrade to empty results or failure entries instead.
"""

from pathlib import Path
from typing import Optional


class DotAIError(Exception):
    """Base exception for all dotai-specific errors."""

    pass


# =============================================================================
# Catalog exceptions
# =============================================================================


class CatalogError(DotAIError):
    """Raised when the template catalog cannot answer a request."""

    pass


class ItemNotFoundError(CatalogError):
    """Raised when a catalog item reference does not resolve."""

    def __init__(self, ref: str, message: Optional[str] = None):
        self.ref = ref
        if message is None:
            message = f"Item '{ref}' not found in catalog"
        super().__init__(message)


class AmbiguousItemError(CatalogError):
    """Raised when a bare item id matches items of several content types."""

    def __init__(self, ref: str, candidates: list[str]):
        self.ref = ref
        self.candidates = candidates
        message = (
            f"Item '{ref}' is ambiguous, use one of: " + ", ".join(candidates)
        )
        super().__init__(message)


class UnknownContentTypeError(CatalogError):
    """Raised when an unknown content type is specified."""

    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"Unknown content type: {content_type}")


# =============================================================================
# Configuration exceptions
# =============================================================================


class ConfigurationError(DotAIError):
    """Raised when there's a configuration problem."""

    pass


class UnknownAssistantError(ConfigurationError):
    """Raised when an unknown assistant is specified."""

    def __init__(self, assistant: str, supported: list[str]):
        self.assistant = assistant
        self.supported = supported
        message = f"Unknown assistant: {assistant}. Supported: {', '.join(supported)}"
        super().__init__(message)


# =============================================================================
# Installation exceptions
# =============================================================================


class InstallationError(DotAIError):
    """Raised when copying an item into canonical storage fails."""

    def __init__(
        self,
        item_key: str,
        destination: Optional[Path] = None,
        reason: Optional[str] = None,
    ):
        self.item_key = item_key
        self.destination = destination
        self.reason = reason

        parts = [f"Failed to install '{item_key}'"]
        if destination:
            parts.append(f"destination: {destination}")
        if reason:
            parts.append(f"reason: {reason}")
        super().__init__(" - ".join(parts))


class UninstallError(DotAIError):
    """Raised when an item's canonical directory cannot be removed safely."""

    def __init__(self, item_key: str, path: Path, reason: str):
        self.item_key = item_key
        self.path = path
        self.reason = reason
        super().__init__(f"Refusing to uninstall '{item_key}' ({path}): {reason}")


class LockFileError(DotAIError):
    """Raised when the lock file cannot be written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write lock file {path}: {reason}")
