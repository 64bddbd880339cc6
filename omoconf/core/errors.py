from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class OmoconfError(Exception):
    code: str
    message: str
    data: dict[str, Any] | None = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ValidationError(OmoconfError):
    pass


class ConfigReadError(OmoconfError):
    pass


class ConfigParseError(OmoconfError):
    pass


class ConfigWriteError(OmoconfError):
    pass


class BackupError(OmoconfError):
    pass
