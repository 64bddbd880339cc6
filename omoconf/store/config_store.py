from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from omoconf.core.errors import ConfigParseError, ConfigReadError, ConfigWriteError

from .jsonc import dumps_canonical, loads_lenient
from .paths import resolve_agent_config_path, resolve_provider_config_path

logger = logging.getLogger("omoconf.store.config_store")

AGENT = "agent"
PROVIDER = "provider"


def read_json_file(path: Path, default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Read a JSON/JSONC object document.

    - Missing file: returns a copy of `default` (or {}).
    - Any other read failure raises ConfigReadError.
    - Unparseable content, or a root that is not an object, raises ConfigParseError.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return copy.deepcopy(default) if default is not None else {}
    except OSError as e:
        raise ConfigReadError(
            code="config.read_failed",
            message=f"Failed to read {path}: {e}",
            data={"path": str(path)},
        ) from e

    try:
        data = loads_lenient(text)
    except json.JSONDecodeError as e:
        raise ConfigParseError(
            code="config.parse_failed",
            message=f"Failed to parse {path} as JSON/JSONC: {e}",
            data={"path": str(path)},
        ) from e

    if not isinstance(data, dict):
        raise ConfigParseError(
            code="config.not_object",
            message=f"Expected a JSON object at the top level of {path}",
            data={"path": str(path), "type": type(data).__name__},
        )
    return data


def write_json_file(path: Path, data: Dict[str, Any]) -> None:
    """
    Write canonical two-space JSON with a trailing newline.

    The document is written to a temp file beside the target and moved into
    place, so readers see either the old or the new content.
    """
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(dumps_canonical(data))
        os.replace(tmp_name, path)
        tmp_name = None
    except (OSError, TypeError, ValueError) as e:
        raise ConfigWriteError(
            code="config.write_failed",
            message=f"Failed to write {path}: {e}",
            data={"path": str(path)},
        ) from e
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug("could not remove temp file %s", tmp_name)


@dataclass(frozen=True)
class ConfigPaths:
    agent: Path
    provider: Path

    @classmethod
    def resolve(cls, config_dir: Path) -> "ConfigPaths":
        return cls(agent=resolve_agent_config_path(config_dir), provider=resolve_provider_config_path(config_dir))

    def for_kind(self, kind: str) -> Path:
        if kind == AGENT:
            return self.agent
        if kind == PROVIDER:
            return self.provider
        raise KeyError(kind)


class ConfigStore:
    """
    Reads and writes the two live config documents.

    Notes:
    - Documents are plain dicts; unknown keys pass through untouched.
    - Writes never emit comments, so a JSONC source becomes plain JSON after the first write.
    """

    def __init__(self, paths: ConfigPaths):
        self._paths = paths

    @property
    def paths(self) -> ConfigPaths:
        return self._paths

    def read(self, kind: str) -> Dict[str, Any]:
        return read_json_file(self._paths.for_kind(kind), {})

    def write(self, kind: str, data: Dict[str, Any]) -> Path:
        path = self._paths.for_kind(kind)
        write_json_file(path, data)
        logger.info("wrote %s config: %s", kind, path)
        return path

    def read_agent(self) -> Dict[str, Any]:
        return self.read(AGENT)

    def read_provider(self) -> Dict[str, Any]:
        return self.read(PROVIDER)
