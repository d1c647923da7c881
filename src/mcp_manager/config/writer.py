"""Backup-protected, atomic client config writes.

Invariants:
  1. An existing file is copied byte-for-byte to ``<name>.backup.<YYYYmmdd-HHMMSS>``
     (``.1``, ``.2``, ... appended within the same second) before anything else
     happens; a failed backup aborts the write.
  2. Writes are atomic: write to unique temp file, then os.replace().
  3. The full config dict is written -- foreign keys are preserved.
  4. Concurrent writes are safe via threading.Lock (in-process) + fcntl.flock (cross-process).
"""

from __future__ import annotations

import contextlib
import fcntl
import json
import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from mcp_manager.errors import BackupError, ConfigWriteError

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

_path_locks: dict[str, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def _get_path_lock(path: Path) -> threading.Lock:
    """Get or create an in-process threading.Lock for *path*."""
    key = str(path.resolve())
    with _path_locks_guard:
        if key not in _path_locks:
            _path_locks[key] = threading.Lock()
        return _path_locks[key]


@contextlib.contextmanager
def client_file_lock(path: Path) -> Iterator[None]:
    """Hold the in-process and inter-process locks for one client file.

    Not re-entrant: code running under this lock must call
    replace_client_config, never write_client_config.
    """
    lock_path = path.with_suffix(".lock")
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        msg = f"Failed to create config directory {lock_path.parent}: {exc}"
        raise ConfigWriteError(msg) from exc

    with _get_path_lock(path), open(lock_path, "w") as lock_fd:
        fcntl.flock(lock_fd, fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(lock_fd, fcntl.LOCK_UN)


def backup_path_for(path: Path, now: datetime | None = None) -> Path:
    stamp = (now or datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    return path.with_name(f"{path.name}.backup.{stamp}")


def _unused_backup_path(path: Path, now: datetime | None) -> Path:
    """First free backup name for *now*; same-second backups get a ``.N`` suffix."""
    base = backup_path_for(path, now)
    backup = base
    counter = 0
    while backup.exists():
        counter += 1
        backup = base.with_name(f"{base.name}.{counter}")
    return backup


def backup_config(path: Path, now: datetime | None = None) -> Path | None:
    """Copy the current file next to itself. Returns the backup path, or None if nothing existed.

    Existing backups are never overwritten. Callers hold the file lock.
    """
    if not path.exists():
        return None

    backup = _unused_backup_path(path, now)
    try:
        backup.write_bytes(path.read_bytes())
    except OSError as exc:
        raise BackupError(f"Failed to back up {path} to {backup}: {exc}") from exc

    logger.info("Backed up %s to %s", path, backup)
    return backup


def write_client_config(
    config_path: Path | str,
    data: dict[str, object],
    *,
    now: datetime | None = None,
) -> Path | None:
    """Back up and overwrite a client config file under its locks."""
    path = Path(config_path)
    with client_file_lock(path):
        return replace_client_config(path, data, now=now)


def replace_client_config(
    path: Path,
    data: dict[str, object],
    *,
    now: datetime | None = None,
) -> Path | None:
    """Back up, then write *data* atomically. Caller holds client_file_lock.

    Returns the backup path, or None when there was no prior file.
    """
    backup = backup_config(path, now)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigWriteError(f"Failed to create config directory {path.parent}: {exc}") from exc

    _atomic_write(path, data)
    return backup


def _atomic_write(path: Path, data: dict[str, object]) -> None:
    """Write JSON atomically: write to unique temp file then rename."""
    try:
        content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as exc:
        raise ConfigWriteError(f"Client config for {path} is not JSON serializable: {exc}") from exc

    fd = None
    tmp_path: str | None = None
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            suffix=".tmp",
            prefix=f".{path.stem}_",
        )
        os.write(fd, content.encode("utf-8"))
        os.close(fd)
        fd = None
        os.replace(tmp_path, str(path))
        tmp_path = None
    except PermissionError as exc:
        raise ConfigWriteError(f"Permission denied writing to {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigWriteError(f"Failed to write {path}: {exc}") from exc
    finally:
        if fd is not None:
            os.close(fd)
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
