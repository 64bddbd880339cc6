from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

import yaml

logger = logging.getLogger("omoconf.skills")

SKILL_FILE = "SKILL.md"


class SkillParseError(Exception):
    pass


@dataclass(frozen=True)
class SkillInfo:
    name: str
    description: str
    source: str  # global|project
    path: Path


def parse_frontmatter(content: str) -> Tuple[Dict[str, Any], str]:
    """
    Split a SKILL.md into (frontmatter, body).

    Content without a leading `---` block has empty frontmatter.
    Raises SkillParseError when the block is not a YAML mapping.
    """
    if not content.startswith("---"):
        return {}, content

    end_match = re.search(r"\n---[ \t]*(?:\r?\n|$)", content[3:])
    if not end_match:
        return {}, content

    frontmatter_str = content[3 : end_match.start() + 3]
    body = content[end_match.end() + 3 :]

    try:
        frontmatter = yaml.safe_load(frontmatter_str) or {}
    except yaml.YAMLError as e:
        raise SkillParseError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(frontmatter, dict):
        raise SkillParseError("Frontmatter must be a mapping")
    return frontmatter, body.strip()


def _str_field(fm: Dict[str, Any], key: str, default: str) -> str:
    v = fm.get(key)
    if v is None:
        return default
    return str(v).strip()


def load_skill(skill_dir: Path, source: str) -> SkillInfo:
    path = skill_dir / SKILL_FILE
    fm, _ = parse_frontmatter(path.read_text(encoding="utf-8"))
    return SkillInfo(
        name=_str_field(fm, "name", skill_dir.name) or skill_dir.name,
        description=_str_field(fm, "description", ""),
        source=source,
        path=path,
    )


def scan_skills_dir(root: Path, source: str) -> List[SkillInfo]:
    """Skills under `root/*/SKILL.md`. Missing directories and bad files are skipped."""
    try:
        children = sorted(p for p in root.iterdir() if p.is_dir())
    except OSError:
        return []

    out: List[SkillInfo] = []
    for child in children:
        try:
            out.append(load_skill(child, source))
        except (OSError, UnicodeDecodeError, SkillParseError) as e:
            logger.debug("skipping skill %s: %s", child, e)
    return out


def discover_skills(dirs: Iterable[Tuple[Path, str]]) -> List[SkillInfo]:
    found: List[SkillInfo] = []
    for root, source in dirs:
        found.extend(scan_skills_dir(root, source))
    return sorted(found, key=lambda s: (s.name.lower(), s.source))


def default_skill_dirs(config_dir: Path, cwd: Path) -> List[Tuple[Path, str]]:
    return [
        (config_dir / "skills", "global"),
        (cwd / ".opencode" / "skills", "project"),
    ]
