from __future__ import annotations

from typing import Optional, Tuple

# Hook identifiers understood by the harness. Order matters for substring
# scanning in the parameter extractor.
KNOWN_HOOKS: Tuple[str, ...] = (
    "todo-continuation-enforcer",
    "context-window-monitor",
    "session-recovery",
    "session-notification",
    "comment-checker",
    "grep-output-truncator",
    "tool-output-truncator",
    "directory-agents-injector",
    "directory-readme-injector",
    "empty-task-response-detector",
    "think-mode",
    "anthropic-context-window-limit-recovery",
    "rules-injector",
    "background-notification",
    "auto-update-checker",
    "startup-toast",
    "keyword-detector",
    "agent-usage-reminder",
    "non-interactive-env",
    "interactive-bash-session",
    "compaction-context-injector",
    "thinking-block-validator",
    "claude-code-hooks",
    "ralph-loop",
    "preemptive-compaction",
)

_KNOWN = frozenset(KNOWN_HOOKS)


def is_known_hook(name: str) -> bool:
    return name in _KNOWN


def find_known_hook(text: str) -> Optional[str]:
    lower = text.lower()
    for hook in KNOWN_HOOKS:
        if hook in lower:
            return hook
    return None
