from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import List, Mapping, Optional

AGENT_CONFIG_NAME = "oh-my-opencode"
PROVIDER_CONFIG_NAME = "opencode"
ARCHIVE_DIR_NAME = "archive"


def _non_empty(env: Mapping[str, str], key: str) -> Optional[str]:
    v = env.get(key)
    if isinstance(v, str) and v.strip():
        return v.strip()
    return None


def default_config_dir(env: Optional[Mapping[str, str]] = None, *, platform: Optional[str] = None) -> Path:
    """
    Per-user config directory of the harness.

    - OMOCONF_CONFIG_DIR wins when set.
    - Windows: %APPDATA%/opencode, else ~/AppData/Roaming/opencode
    - Elsewhere: $XDG_CONFIG_HOME/opencode, else ~/.config/opencode
    """
    env = os.environ if env is None else env
    platform = sys.platform if platform is None else platform

    explicit = _non_empty(env, "OMOCONF_CONFIG_DIR")
    if explicit:
        return Path(explicit).expanduser()

    if platform.startswith("win"):
        base = _non_empty(env, "APPDATA")
        if base:
            return Path(base) / "opencode"
        return Path("~").expanduser() / "AppData" / "Roaming" / "opencode"

    base = _non_empty(env, "XDG_CONFIG_HOME")
    if base:
        return Path(base).expanduser() / "opencode"
    return Path("~/.config").expanduser() / "opencode"


def _candidates(config_dir: Path, stem: str) -> List[Path]:
    return [config_dir / f"{stem}.json", config_dir / f"{stem}.jsonc"]


def _first_existing(candidates: List[Path]) -> Path:
    for p in candidates:
        if p.exists():
            return p
    return candidates[0]


def resolve_agent_config_path(config_dir: Path) -> Path:
    return _first_existing(_candidates(config_dir, AGENT_CONFIG_NAME))


def resolve_provider_config_path(config_dir: Path) -> Path:
    return _first_existing(_candidates(config_dir, PROVIDER_CONFIG_NAME))


def archive_dir(config_dir: Path) -> Path:
    return config_dir / ARCHIVE_DIR_NAME
