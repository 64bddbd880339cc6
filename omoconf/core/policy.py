from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from omoconf.contract_store import ContractStore

from .errors import ValidationError
from .hooks import KNOWN_HOOKS, is_known_hook

FORBIDDEN_KEYS = frozenset({"__proto__", "prototype", "constructor"})
_SAFE_KEY_RE = re.compile(r"^[a-z0-9][a-z0-9_-]{0,63}$", re.IGNORECASE)

TEMPERATURE_MIN = 0.0
TEMPERATURE_MAX = 1.0


def is_safe_config_key(key: Any) -> bool:
    if not isinstance(key, str) or not key:
        return False
    if key.lower() in FORBIDDEN_KEYS:
        return False
    return _SAFE_KEY_RE.match(key) is not None


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


@dataclass(frozen=True)
class PolicyResult:
    decision: str  # allow|deny
    reason_codes: List[str]
    summary: Optional[str] = None


_ALLOW = PolicyResult(decision="allow", reason_codes=["ok"])


class MutationPolicy:
    """
    Gate in front of every config mutation.

    Invariant:
    - deny means nothing is backed up and nothing is written.
    """

    def __init__(self, contracts: ContractStore):
        self._contracts = contracts

    @property
    def contracts(self) -> ContractStore:
        return self._contracts

    def evaluate_key(self, label: str, key: Any) -> PolicyResult:
        if is_safe_config_key(key):
            return _ALLOW
        return PolicyResult(
            decision="deny",
            reason_codes=["key.unsafe"],
            summary=(
                f'Invalid {label} name: "{key}".\n\n'
                'Use only letters, numbers, hyphen, underscore (max 64 chars) and avoid reserved keys like "__proto__".'
            ),
        )

    def evaluate_hook(self, name: Any) -> PolicyResult:
        key = self.evaluate_key("hook", name)
        if key.decision != "allow":
            return key
        if not is_known_hook(name):
            return PolicyResult(
                decision="deny",
                reason_codes=["hook.unknown"],
                summary=f'Unknown hook: "{name}"\n\nAvailable hooks: {", ".join(KNOWN_HOOKS)}',
            )
        return _ALLOW

    def evaluate_entry(self, schema_name: str, data: Mapping[str, Any], *, require_model: bool) -> PolicyResult:
        temperature = data.get("temperature")
        if _is_number(temperature) and not (TEMPERATURE_MIN <= temperature <= TEMPERATURE_MAX):
            return PolicyResult(
                decision="deny",
                reason_codes=["entry.temperature_range"],
                summary="Temperature must be between 0.0 and 1.0.",
            )

        if require_model and not data.get("model"):
            return PolicyResult(decision="deny", reason_codes=["entry.model_missing"], summary="Missing required field: model.")

        errors = self._contracts.validate(schema_name, dict(data))
        if errors:
            return PolicyResult(
                decision="deny",
                reason_codes=["entry.schema_invalid"],
                summary="Invalid configuration values:\n" + "\n".join(f"- {e}" for e in errors),
            )
        return _ALLOW

    def require_allow(self, result: PolicyResult) -> None:
        if result.decision != "allow":
            raise ValidationError(
                code=result.reason_codes[0] if result.reason_codes else "policy.denied",
                message=result.summary or "Denied by policy",
                data={"reasons": result.reason_codes},
            )
