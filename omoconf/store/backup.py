from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from omoconf.core.errors import BackupError, ConfigWriteError

from .config_store import AGENT, PROVIDER, ConfigPaths, read_json_file, write_json_file

logger = logging.getLogger("omoconf.store.backup")

DEFAULT_KEEP = 5
TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

BACKUP_PREFIXES: Dict[str, str] = {
    AGENT: "agent-backup-",
    PROVIDER: "opencode-backup-",
}

Clock = Callable[[], datetime]


def backup_kind(name: str) -> Optional[str]:
    """Config kind a backup filename belongs to, or None for foreign files."""
    for kind, prefix in BACKUP_PREFIXES.items():
        if name.startswith(prefix):
            return kind
    return None


def _sort_key(name: str) -> Tuple[str, str]:
    # "<kind>-backup-YYYYMMDD-HHMMSS.ext": order by the timestamp part first
    # so both kinds interleave chronologically.
    _, _, rest = name.partition("-backup-")
    return (rest, name)


@dataclass(frozen=True)
class BackupResult:
    archive_dir: Path
    timestamp: str
    agent_backup: Optional[str] = None
    provider_backup: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)
    pruned: Tuple[str, ...] = ()

    def name_for(self, kind: str) -> Optional[str]:
        return self.agent_backup if kind == AGENT else self.provider_backup

    def succeeded(self, kind: str) -> bool:
        return self.name_for(kind) is not None

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def any_ok(self) -> bool:
        return self.agent_backup is not None or self.provider_backup is not None


class BackupManager:
    """
    Timestamped snapshots of both live config documents.

    Hard rules:
    - each file is copied independently; one failure never blocks the other.
    - a missing live file is archived as an empty-object placeholder.
    - retention keeps the newest `keep` files across both kinds; deletion is best-effort.
    """

    def __init__(self, paths: ConfigPaths, archive_dir: Path, *, keep: int = DEFAULT_KEEP, clock: Optional[Clock] = None):
        self._paths = paths
        self._archive_dir = archive_dir
        self._keep = keep
        self._clock: Clock = clock or datetime.now

    @property
    def archive_dir(self) -> Path:
        return self._archive_dir

    def backup_path(self, name: str) -> Path:
        return self._archive_dir / name

    def _copy_one(self, kind: str, timestamp: str) -> str:
        src = self._paths.for_kind(kind)
        ext = src.suffix or ".json"
        name = f"{BACKUP_PREFIXES[kind]}{timestamp}{ext}"
        dst = self.backup_path(name)
        try:
            shutil.copyfile(src, dst)
        except FileNotFoundError:
            if dst.parent.is_dir():
                # Nothing to archive yet; record that no config existed at this time.
                write_json_file(dst, {})
            else:
                raise
        return name

    def create_backup(self) -> BackupResult:
        timestamp = self._clock().strftime(TIMESTAMP_FORMAT)
        try:
            self._archive_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Cannot create archive directory {self._archive_dir}: {e}"
            logger.warning(msg)
            return BackupResult(archive_dir=self._archive_dir, timestamp=timestamp, errors={AGENT: msg, PROVIDER: msg})

        names: Dict[str, str] = {}
        errors: Dict[str, str] = {}
        for kind in (AGENT, PROVIDER):
            try:
                names[kind] = self._copy_one(kind, timestamp)
            except (OSError, ConfigWriteError) as e:
                errors[kind] = str(e)
                logger.warning("backup of %s config failed: %s", kind, e)

        pruned: List[str] = []
        if names:
            pruned = self.prune()

        return BackupResult(
            archive_dir=self._archive_dir,
            timestamp=timestamp,
            agent_backup=names.get(AGENT),
            provider_backup=names.get(PROVIDER),
            errors=errors,
            pruned=tuple(pruned),
        )

    def list_backups(self, limit: Optional[int] = DEFAULT_KEEP) -> List[str]:
        """
        Backup filenames, newest first, truncated to `limit` (None = all).
        A missing archive directory lists as empty.
        """
        try:
            entries = [p.name for p in self._archive_dir.iterdir() if p.is_file()]
        except (FileNotFoundError, NotADirectoryError):
            return []
        except OSError as e:
            raise BackupError(
                code="backup.list_failed",
                message=f"Failed to list backups in {self._archive_dir}: {e}",
                data={"archive_dir": str(self._archive_dir)},
            ) from e

        backups = sorted((n for n in entries if backup_kind(n) is not None), key=_sort_key, reverse=True)
        return backups if limit is None else backups[:limit]

    def prune(self) -> List[str]:
        """Delete everything beyond the newest `keep` backups; returns deleted names."""
        try:
            stale = self.list_backups(limit=None)[self._keep :]
        except BackupError as e:
            logger.warning("retention sweep skipped: %s", e)
            return []

        deleted: List[str] = []
        for name in stale:
            try:
                self.backup_path(name).unlink()
                deleted.append(name)
            except OSError as e:
                logger.warning("could not delete old backup %s: %s", name, e)
        return deleted

    def read_backup(self, name: str) -> Dict[str, object]:
        path = self.backup_path(name)
        if not path.exists():
            raise BackupError(code="backup.missing", message=f"Backup not found: {name}", data={"name": name})
        return read_json_file(path, {})
