"""
Installation logic for dotai.

Every item is installed once, to its canonical .ai/<type>/<id>/
directory. No editor-specific directories are created; bridge files
tell each editor where to look. The assistants passed to install_items
only feed the lock file.
"""

import hashlib
import logging
import shutil
from pathlib import Path
from typing import Optional, Sequence

from dotai.assistants import AssistantConfig, canonical_type_dir, get_canonical_path
from dotai.catalog import Catalog
from dotai.config import Environment
from dotai.exceptions import DotAIError, InstallationError, UninstallError
from dotai.lock import HashResolver, get_lock_store
from dotai.models import (
    CatalogItem,
    InstalledItem,
    InstallResult,
    InstallSummary,
    utc_timestamp,
)

logger = logging.getLogger(__name__)

BUILTIN_SOURCE = "builtin"


def content_hash(directory: Path) -> str:
    """
    Fingerprint an item directory for change detection.

    BLAKE2b over every file's relative path and bytes, in sorted order.
    The value is an opaque comparison token, not a security primitive.
    """
    digest = hashlib.blake2b(digest_size=8)
    for path in sorted(p for p in Path(directory).rglob("*") if p.is_file()):
        digest.update(path.relative_to(directory).as_posix().encode("utf-8"))
        digest.update(b"\0")
        digest.update(path.read_bytes())
        digest.update(b"\0")
    return digest.hexdigest()


def catalog_hash_resolver(catalog: Catalog) -> HashResolver:
    """Resolve current hashes for builtin items from the catalog."""

    def resolve(item: InstalledItem) -> Optional[str]:
        if item.source != BUILTIN_SOURCE:
            return None
        source = catalog.load_item(item.type, item.id)
        if source is None or source.source_dir is None:
            return None
        return content_hash(source.source_dir)

    return resolve


def _install_to_canonical(
    item: CatalogItem,
    scope: str,
    project_root: Optional[Path],
    env: Optional[Environment],
) -> Path:
    """Copy an item's directory tree into canonical storage.

    Files already present are overwritten.

    Raises:
        InstallationError: If the item has no source or the copy fails.
    """
    destination = get_canonical_path(item.type, item.id, scope, project_root, env)

    if item.source_dir is None or not Path(item.source_dir).is_dir():
        raise InstallationError(item.key, destination, "source directory not found")

    try:
        shutil.copytree(item.source_dir, destination, dirs_exist_ok=True)
    except (OSError, shutil.Error) as e:
        raise InstallationError(item.key, destination, str(e)) from e

    return destination


def install_items(
    items: Sequence[CatalogItem],
    assistants: Sequence[AssistantConfig],
    scope: str,
    method: str,
    project_root: Optional[Path] = None,
    env: Optional[Environment] = None,
) -> InstallSummary:
    """
    Install catalog items into canonical storage and record them.

    Items are processed one at a time; a failure is recorded for that
    item and the rest still run.

    Args:
        items: Catalog items to install
        assistants: Assistants to record against each item
        scope: project or global
        method: symlink or copy (recorded in the lock file)
        project_root: Project root for project scope (default: env.cwd)
        env: Environment for global scope (default: this process)

    Returns:
        InstallSummary with one result per item
    """
    summary = InstallSummary()
    assistant_ids = [a.id for a in assistants]
    representative = assistants[0] if assistants else None
    store = get_lock_store(scope, project_root, env)

    for item in items:
        try:
            destination = _install_to_canonical(item, scope, project_root, env)
            store.update(
                InstalledItem(
                    type=item.type,
                    id=item.id,
                    source=BUILTIN_SOURCE,
                    hash=content_hash(item.source_dir),
                    installed_at=utc_timestamp(),
                    assistants=assistant_ids,
                    scope=scope,
                    method=method,
                )
            )
        except (DotAIError, OSError) as e:
            logger.debug("Install of %s failed: %s", item.key, e)
            summary.results.append(
                InstallResult(
                    success=False,
                    item=item,
                    assistant=representative,
                    path="",
                    error=str(e),
                )
            )
            continue

        summary.results.append(
            InstallResult(
                success=True,
                item=item,
                assistant=representative,
                path=str(destination),
            )
        )

    return summary


def uninstall_item(
    item: CatalogItem,
    assistant: Optional[AssistantConfig],
    scope: str,
    project_root: Optional[Path] = None,
    env: Optional[Environment] = None,
) -> bool:
    """
    Remove an item's canonical directory.

    Content is stored once, so this removes it for every assistant. Lock
    file bookkeeping is a separate LockStore.remove() call.

    Returns:
        True if the directory was removed; False if it was absent or could
        not be removed

    Raises:
        UninstallError: If the path does not resolve to a directory
            directly below <base>/.ai/<type>/
    """
    type_dir = canonical_type_dir(item.type, scope, project_root, env)
    path = type_dir / item.id
    if path.resolve().parent != type_dir.resolve():
        raise UninstallError(item.key, path, "path is outside the canonical directory")

    try:
        shutil.rmtree(path)
    except OSError as e:
        logger.debug(
            "Uninstall of %s for %s failed: %s",
            item.key,
            assistant.id if assistant else "all assistants",
            e,
        )
        return False
    return True


def is_item_installed(
    item: CatalogItem,
    assistant: Optional[AssistantConfig],  # noqa: ARG001
    scope: str,
    project_root: Optional[Path] = None,
    env: Optional[Environment] = None,
) -> bool:
    """Check whether an item's canonical directory exists.

    This looks at the filesystem only; it is not reconciled with the
    lock file.
    """
    return get_canonical_path(item.type, item.id, scope, project_root, env).exists()
