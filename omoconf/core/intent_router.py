from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from . import actions as A


@dataclass(frozen=True)
class Words:
    """
    Lower-cased whitespace tokens of a request.

    `has("categor")` is true when some token equals or starts with the stem,
    so "categories" and "category" both match.
    """

    tokens: Tuple[str, ...]

    @classmethod
    def of(cls, request: str) -> "Words":
        return cls(tokens=tuple(str(request or "").lower().split()))

    def has(self, word: str) -> bool:
        return any(t == word or t.startswith(word) for t in self.tokens)

    def any_of(self, *words: str) -> bool:
        return any(self.has(w) for w in words)


Predicate = Callable[[Words], bool]


@dataclass(frozen=True)
class Rule:
    rule_id: str
    predicate: Predicate
    action: str


@dataclass(frozen=True)
class Route:
    action: str
    rule_id: Optional[str] = None


def _listing(w: Words) -> bool:
    return w.any_of("list", "show", "what")


def _editing(w: Words) -> bool:
    return w.any_of("modify", "change", "edit", "update")


# First match wins. More specific multi-word rules sit ahead of the
# single-word rules they would otherwise collide with.
RULES: Sequence[Rule] = (
    Rule("list.agents", lambda w: _listing(w) and w.has("agent"), A.LIST_AGENTS),
    Rule("list.categories", lambda w: _listing(w) and w.has("categor"), A.LIST_CATEGORIES),
    Rule("list.skills", lambda w: _listing(w) and w.has("skill"), A.LIST_SKILLS),
    Rule("list.models", lambda w: w.any_of("list", "show") and w.any_of("model", "oc-model"), A.LIST_MODELS),
    Rule("update.agent", lambda w: w.has("update") and w.has("agent"), A.MODIFY_AGENT),
    Rule("update.category", lambda w: w.has("update") and w.has("categor"), A.MODIFY_CATEGORY),
    Rule("updates", lambda w: w.has("update"), A.CHECK_UPDATES),
    Rule("diagnostics", lambda w: w.has("diagnostic"), A.RUN_DIAGNOSTICS),
    Rule("validate", lambda w: w.has("valid") or (w.has("check") and not w.has("update")), A.RUN_DIAGNOSTICS),
    Rule("backup.restore", lambda w: w.has("restore"), A.RESTORE_BACKUP),
    Rule("backup.compare", lambda w: w.any_of("compare", "diff"), A.COMPARE_BACKUP),
    Rule("backup.create", lambda w: w.has("backup"), A.BACKUP_CONFIGS),
    Rule("permissions", lambda w: w.any_of("permission", "perm"), A.SHOW_PERMISSIONS),
    Rule("agent.add", lambda w: w.has("add") and w.has("agent"), A.ADD_AGENT),
    Rule("agent.modify", lambda w: _editing(w) and w.has("agent"), A.MODIFY_AGENT),
    Rule("category.add", lambda w: w.has("add") and w.has("categor"), A.ADD_CATEGORY),
    Rule("category.modify", lambda w: _editing(w) and w.has("categor"), A.MODIFY_CATEGORY),
    Rule("hook.disable", lambda w: w.has("disable") and w.has("hook"), A.DISABLE_HOOK),
    Rule("hook.enable", lambda w: w.has("enable") and w.has("hook"), A.ENABLE_HOOK),
)


class IntentRouter:
    """
    Resolves a free-text request to a single action id.

    Notes:
    - Fixed vocabulary only; no semantic understanding.
    - Total: anything unmatched resolves to `unknown`.
    """

    def __init__(self, rules: Optional[Sequence[Rule]] = None):
        self._rules: List[Rule] = list(RULES if rules is None else rules)

    def route(self, request: str) -> Route:
        words = Words.of(request)
        for rule in self._rules:
            if rule.predicate(words):
                return Route(action=rule.action, rule_id=rule.rule_id)
        return Route(action=A.UNKNOWN)


def classify(request: str) -> str:
    return IntentRouter().route(request).action
