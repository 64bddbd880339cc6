from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional

from . import actions as A
from .errors import ValidationError
from .hooks import find_known_hook

_KEY = r"[a-z0-9][a-z0-9_-]{0,63}"

# Words that sit next to "agent"/"category" without naming one.
_NOT_A_NAME = frozenset(
    {
        "a", "an", "the", "my", "new", "this", "that", "with", "and", "to", "for", "of", "please",
        "add", "modify", "change", "edit", "update", "list", "show", "what", "disable", "enable",
        "named", "called", "set",
    }
)


@dataclass(frozen=True)
class ActionParams:
    """
    Structured parameters for one action.

    Absent fields stay None (or empty for the nested data groups); handlers
    decide which fields are required.
    """

    backup_index: Optional[int] = None
    agent_name: Optional[str] = None
    category_name: Optional[str] = None
    hook_name: Optional[str] = None
    agent_data: Dict[str, Any] = field(default_factory=dict)
    category_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Optional[Mapping[str, Any]]) -> "ActionParams":
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise ValidationError(code="params.invalid", message="params must be an object")

        known = {f.name for f in fields(cls)}
        unknown = sorted(k for k in raw.keys() if k not in known)
        if unknown:
            raise ValidationError(code="params.invalid", message="Unknown params: {}".format(", ".join(unknown)))

        backup_index = raw.get("backup_index")
        if backup_index is not None and (isinstance(backup_index, bool) or not isinstance(backup_index, int)):
            raise ValidationError(code="params.invalid", message="backup_index must be an integer")
        for name in ("agent_name", "category_name", "hook_name"):
            v = raw.get(name)
            if v is not None and not isinstance(v, str):
                raise ValidationError(code="params.invalid", message=f"{name} must be a string")
        for name in ("agent_data", "category_data"):
            v = raw.get(name)
            if v is not None and not isinstance(v, Mapping):
                raise ValidationError(code="params.invalid", message=f"{name} must be an object")

        return cls(
            backup_index=backup_index,
            agent_name=raw.get("agent_name"),
            category_name=raw.get("category_name"),
            hook_name=raw.get("hook_name"),
            agent_data=dict(raw.get("agent_data") or {}),
            category_data=dict(raw.get("category_data") or {}),
        )

    def merged_with(self, explicit: Optional["ActionParams"]) -> "ActionParams":
        """Explicit values win field-by-field; data groups merge key-by-key."""
        if explicit is None:
            return self
        return replace(
            self,
            backup_index=explicit.backup_index if explicit.backup_index is not None else self.backup_index,
            agent_name=explicit.agent_name if explicit.agent_name is not None else self.agent_name,
            category_name=explicit.category_name if explicit.category_name is not None else self.category_name,
            hook_name=explicit.hook_name if explicit.hook_name is not None else self.hook_name,
            agent_data={**self.agent_data, **explicit.agent_data},
            category_data={**self.category_data, **explicit.category_data},
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for f in fields(self):
            v = getattr(self, f.name)
            if v is None or v == {}:
                continue
            out[f.name] = dict(v) if isinstance(v, dict) else v
        return out


def _first_int(request: str) -> Optional[int]:
    m = re.search(r"\b(\d{1,3})\b", request)
    return int(m.group(1)) if m else None


def _first_name(pattern: str, request: str) -> Optional[str]:
    for m in re.finditer(pattern, request, re.IGNORECASE):
        raw = next(g for g in m.groups() if g is not None)
        name = raw.strip("\"'").rstrip(".,;:!?")
        if name and name.lower() not in _NOT_A_NAME:
            return name
    return None


def _key_after(request: str, word: str) -> Optional[str]:
    # "agent oracle", "agent named oracle", "category called quick".
    # After named/called the whole token is taken, even when it is not a safe key.
    return _first_name(rf"\b{word}\b\s+(?:(?:named|called)\s+(\S+)|({_KEY})\b)", request)


def _key_before(request: str, word: str) -> Optional[str]:
    # "oracle agent", "data-science category"
    return _first_name(rf"\b({_KEY})\s+{word}\b", request)


def _entity_name(request: str, singular: str, plural: str) -> Optional[str]:
    for found in (
        _key_after(request, singular),
        _key_after(request, plural),
        _key_before(request, singular),
        _key_before(request, plural),
    ):
        if found:
            return found
    return None


def _hook_name(request: str) -> Optional[str]:
    return _key_after(request, "hook") or find_known_hook(request)


def _model(request: str) -> Optional[str]:
    quoted = re.search(r"""\bmodel\b\s*(?:to\s+)?(?:"([^"]+)"|'([^']+)')""", request, re.IGNORECASE)
    if quoted:
        raw = quoted.group(1) if quoted.group(1) is not None else quoted.group(2)
    else:
        bare = re.search(r"\bmodel\b\s*(?:to\s+)?([A-Za-z0-9._/-]+)", request, re.IGNORECASE)
        raw = bare.group(1) if bare else None
    if raw is None:
        return None
    # Trailing sentence punctuation is not part of a model id.
    raw = raw.strip().rstrip(".")
    return raw or None


def _temperature(request: str) -> Optional[float]:
    m = re.search(r"\btemperature\b\s*(?:to\s+)?(-?[0-9]+(?:\.[0-9]+)?)\b", request, re.IGNORECASE)
    return float(m.group(1)) if m else None


def _quoted_field(request: str, name: str) -> Optional[str]:
    m = re.search(rf"""\b{name}\b\s*[:=]?\s*(?:"([^"]+)"|'([^']+)')""", request, re.IGNORECASE)
    if not m:
        return None
    raw = m.group(1) if m.group(1) is not None else m.group(2)
    return raw.strip()


def extract(action: str, request: str) -> ActionParams:
    """
    Pull structured fields out of a request. Never fails; absent fields are omitted.
    """
    text = str(request or "")

    model = _model(text)
    temperature = _temperature(text)
    description = _quoted_field(text, "description")
    prompt_append = (
        _quoted_field(text, "prompt_append") or _quoted_field(text, "prompt") or _quoted_field(text, "instructions")
    )

    agent_data: Dict[str, Any] = {}
    category_data: Dict[str, Any] = {}
    if model is not None:
        agent_data["model"] = model
        category_data["model"] = model
    if temperature is not None:
        agent_data["temperature"] = temperature
        category_data["temperature"] = temperature
    if description is not None:
        agent_data["description"] = description
    if prompt_append is not None:
        agent_data["prompt_append"] = prompt_append
        category_data["prompt_append"] = prompt_append

    if action == A.MODIFY_AGENT and not re.search(r"\bhook\b", text, re.IGNORECASE):
        if re.search(r"\bdisable\b", text, re.IGNORECASE):
            agent_data["disable"] = True
        elif re.search(r"\benable\b", text, re.IGNORECASE):
            agent_data["disable"] = False

    return ActionParams(
        backup_index=_first_int(text),
        agent_name=_entity_name(text, "agent", "agents"),
        category_name=_entity_name(text, "category", "categories"),
        hook_name=_hook_name(text),
        agent_data=agent_data,
        category_data=category_data,
    )
