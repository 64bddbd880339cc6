from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from .trace_store_jsonl import TraceStoreJSONL


class TraceEmitter:
    """
    Appends audit events for one request. With no store, events are dropped
    so read-only requests leave the filesystem untouched.
    """

    def __init__(self, store: Optional[TraceStoreJSONL], run_id: str):
        self._store = store
        self._run_id = run_id

    def emit(
        self,
        event_type: str,
        *,
        action: str | None = None,
        rule_id: str | None = None,
        message: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> None:
        if self._store is None:
            return
        event: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "run_id": self._run_id,
            "event_type": event_type,
        }
        if action is not None:
            event["action"] = action
        if rule_id is not None:
            event["rule_id"] = rule_id
        if message is not None:
            event["message"] = message
        if data is not None:
            event["data"] = data

        self._store.append(event)
