from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from omoconf.core.executor import ActionRequest


ActionHandler = Callable[["ActionRequest"], str]


class ActionRegistry:
    """
    Dispatch table: action id -> definition + handler.
    """

    def __init__(self) -> None:
        self._defs: dict[str, dict[str, Any]] = {}
        self._impls: dict[str, ActionHandler] = {}

    def register(self, action_def: dict[str, Any], impl: ActionHandler) -> None:
        action_id = action_def["action_id"]
        self._defs[action_id] = action_def
        self._impls[action_id] = impl

    def get(self, action_id: str) -> dict[str, Any] | None:
        return self._defs.get(action_id)

    def call(self, action_id: str, req: "ActionRequest") -> str:
        impl = self._impls.get(action_id)
        if impl is None:
            raise KeyError(action_id)
        return impl(req)

    def list_actions(self) -> list[dict[str, Any]]:
        return [self._defs[k] for k in sorted(self._defs.keys())]
