from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from omoconf.store.backup import DEFAULT_KEEP
from omoconf.store.paths import archive_dir


@dataclass(frozen=True)
class RuntimeContext:
    """
    Per-request configuration.

    Hard rules:
    - No state survives between requests; everything is re-read from disk.
    - Tracing is off unless trace_path is set.
    """

    run_id: str
    config_dir: Path
    cwd: Path = field(default_factory=Path.cwd)
    trace_path: Optional[Path] = None
    backup_keep: int = DEFAULT_KEEP
    clock: Callable[[], datetime] = field(default=datetime.now)

    @property
    def archive_dir(self) -> Path:
        return archive_dir(self.config_dir)
