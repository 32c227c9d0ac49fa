"""
lock:
    Lock file management.

Tracks installed items for update and removal in
~/.ai/.skill-lock.json (global scope) or <project>/.ai/.skill-lock.json
(project scope). The two files are independent and never merged.

Every mutation is a full read-modify-write of the document. Mutations
are serialized by an in-process lock per file and an advisory fcntl lock
on a sidecar file, and the new document replaces the old one with an
atomic rename, so readers never see a torn file.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

from dotai.config import (
    CANONICAL_DIR,
    LOCK_FILE_NAME,
    LOCK_FILE_VERSION,
    Environment,
    get_environment,
    project_base,
)
from dotai.exceptions import LockFileError
from dotai.models import InstalledItem, LockFile, Preferences, item_key, utc_timestamp

logger = logging.getLogger(__name__)

# Returns the current source hash for an installed item, or None if unknown
HashResolver = Callable[[InstalledItem], Optional[str]]

_path_locks: dict[Path, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def _thread_lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _path_locks_guard:
        if key not in _path_locks:
            _path_locks[key] = threading.Lock()
        return _path_locks[key]


def lock_file_path(
    scope: str,
    project_root: Optional[Path] = None,
    env: Optional[Environment] = None,
) -> Path:
    """Get the lock file path for a scope."""
    if scope == "global":
        base = (env or get_environment()).home
    else:
        base = project_base(project_root, env)
    return base / CANONICAL_DIR / LOCK_FILE_NAME


class LockStore:
    """Reads and writes one lock file.

    Nothing is cached between calls: every query re-reads the file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"LockStore({str(self.path)!r})"

    # -------------------------------------------------------------------------
    # Raw document access
    # -------------------------------------------------------------------------

    def read(self) -> LockFile:
        """
        Read the lock file.

        A missing, unreadable or malformed file yields an empty lock file
        with the current schema version.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return LockFile(version=LOCK_FILE_VERSION)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable lock file %s: %s", self.path, e)
            return LockFile(version=LOCK_FILE_VERSION)

        try:
            return LockFile.from_dict(json.loads(text))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring malformed lock file %s: %s", self.path, e)
            return LockFile(version=LOCK_FILE_VERSION)

    def write(self, lock: LockFile) -> None:
        """
        Write the lock file atomically (temp file + rename).

        Raises:
            LockFileError: If the file cannot be written.
        """
        data = json.dumps(lock.to_dict(), indent=2) + "\n"
        temp_path: Optional[Path] = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            mode = self._file_mode()
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                temp_path = Path(tmp.name)
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(temp_path, mode)
            os.replace(temp_path, self.path)
        except OSError as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise LockFileError(self.path, str(e)) from e

    def _file_mode(self) -> int:
        """Permissions for a rewrite: the current file's, else 0666 minus umask."""
        try:
            return self.path.stat().st_mode & 0o777
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Hold the in-process and cross-process write locks for this file."""
        with _thread_lock_for(self.path):
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                handle = open(self.path.with_name(self.path.name + ".lock"), "w")
            except OSError as e:
                raise LockFileError(self.path, str(e)) from e
            with handle:
                fcntl.flock(handle, fcntl.LOCK_EX)
                try:
                    yield
                finally:
                    fcntl.flock(handle, fcntl.LOCK_UN)

    @contextmanager
    def transaction(self) -> Iterator[LockFile]:
        """
        Read-modify-write the lock file under the write locks.

        The yielded document is written back when the block exits
        without an exception.
        """
        with self._exclusive():
            lock = self.read()
            yield lock
            self.write(lock)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def update(self, item: InstalledItem) -> None:
        """
        Record an installed item.

        If the item is already recorded, its assistants are unioned with
        the new ones and every other field takes the new value.
        """
        with self.transaction() as lock:
            existing = lock.installed.get(item.key)
            assistants = list(item.assistants)
            if existing:
                assistants = list(existing.assistants) + [
                    a for a in item.assistants if a not in existing.assistants
                ]

            if not assistants:
                lock.installed.pop(item.key, None)
                return

            lock.installed[item.key] = InstalledItem(
                type=item.type,
                id=item.id,
                source=item.source,
                hash=item.hash,
                installed_at=item.installed_at,
                assistants=assistants,
                scope=item.scope,
                method=item.method,
            )
        logger.debug("Recorded %s in %s", item.key, self.path)

    def remove(self, content_type: str, item_id: str, assistant_id: str) -> None:
        """
        Remove one assistant from an item's entry.

        The entry is deleted once no assistants remain.
        """
        key = item_key(content_type, item_id)
        with self.transaction() as lock:
            entry = lock.installed.get(key)
            if entry is None:
                return
            entry.assistants = [a for a in entry.assistants if a != assistant_id]
            if not entry.assistants:
                del lock.installed[key]

    def forget(self, content_type: str, item_id: str) -> bool:
        """Delete an item's entry outright. Returns True if one existed."""
        key = item_key(content_type, item_id)
        with self.transaction() as lock:
            return lock.installed.pop(key, None) is not None

    def update_last_check(self) -> None:
        with self.transaction() as lock:
            lock.last_update_check = utc_timestamp()

    def save_preferences(self, preferences: Preferences) -> Preferences:
        """Merge preferences into the stored ones and return the result."""
        with self.transaction() as lock:
            current = lock.preferences or Preferences()
            lock.preferences = current.merged(preferences)
            return lock.preferences

    def clear(self) -> None:
        """Delete the lock file entirely."""
        with _thread_lock_for(self.path):
            self.path.unlink(missing_ok=True)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def installed_items(self) -> list[InstalledItem]:
        return list(self.read().installed.values())

    def installed_items_by_type(self, content_type: str) -> list[InstalledItem]:
        return [i for i in self.installed_items() if i.type == content_type]

    def is_installed(self, content_type: str, item_id: str) -> bool:
        return item_key(content_type, item_id) in self.read().installed

    def get_install_info(
        self, content_type: str, item_id: str
    ) -> Optional[InstalledItem]:
        return self.read().installed.get(item_key(content_type, item_id))

    def get_preferences(self) -> Optional[Preferences]:
        return self.read().preferences

    def check_for_updates(
        self, resolver: Optional[HashResolver] = None
    ) -> list[InstalledItem]:
        """
        Find installed items whose source has changed since install.

        Args:
            resolver: Returns the current source hash for an item, or None
                when the source cannot be checked. Without a resolver no
                source of truth is available and nothing is reported.

        Returns:
            Installed items whose recorded hash differs from the source
        """
        if resolver is None:
            return []

        outdated = []
        for item in self.installed_items():
            current = resolver(item)
            if current is not None and current != item.hash:
                outdated.append(item)
        return outdated


def get_lock_store(
    scope: str,
    project_root: Optional[Path] = None,
    env: Optional[Environment] = None,
) -> LockStore:
    """Get the lock store for a scope."""
    return LockStore(lock_file_path(scope, project_root, env))
