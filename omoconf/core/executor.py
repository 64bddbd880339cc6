from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from omoconf.registry.action_registry import ActionRegistry
from omoconf.store.backup import BackupManager, BackupResult
from omoconf.store.config_store import AGENT, PROVIDER, ConfigStore
from omoconf.trace.trace_emitter import TraceEmitter

from . import render
from .errors import BackupError, OmoconfError, ValidationError
from .params import ActionParams
from .policy import MutationPolicy
from .runtime_context import RuntimeContext

logger = logging.getLogger("omoconf.core.executor")


@dataclass(frozen=True)
class ActionRequest:
    """
    Everything one handler may touch.

    The two documents are the dicts loaded for this request; handlers mutate
    them in place and persist through `save`.
    """

    ctx: RuntimeContext
    action: str
    request: str
    params: ActionParams
    store: ConfigStore
    backups: BackupManager
    agent_config: Dict[str, Any]
    provider_config: Dict[str, Any]
    existing_backups: List[str]
    policy: MutationPolicy
    trace: TraceEmitter

    def now(self) -> datetime:
        return self.ctx.clock()

    def document(self, kind: str) -> Dict[str, Any]:
        if kind == AGENT:
            return self.agent_config
        if kind == PROVIDER:
            return self.provider_config
        raise KeyError(kind)

    def record_backup(self, result: BackupResult) -> None:
        data = {
            "agent_backup": result.agent_backup,
            "provider_backup": result.provider_backup,
            "pruned": list(result.pruned),
        }
        if result.any_ok:
            self.trace.emit("backup_created", action=self.action, data=data)
        if result.errors:
            self.trace.emit("backup_failed", action=self.action, data={**data, "errors": dict(result.errors)})

    def backup_before_write(self, target: str) -> BackupResult:
        """
        Back up both documents. Raises BackupError when the copy of `target`
        failed, in which case nothing may be written.
        """
        result = self.backups.create_backup()
        self.record_backup(result)
        if not result.succeeded(target):
            reason = result.errors.get(target, "unknown error")
            raise BackupError(
                code="backup.failed",
                message=f"Backup of the {target} config failed, nothing was changed: {reason}",
                data={"errors": dict(result.errors)},
            )
        return result

    def save(self, kind: str, data: Optional[Dict[str, Any]] = None) -> Path:
        doc = self.document(kind) if data is None else data
        path = self.store.write(kind, doc)
        self.trace.emit("config_written", action=self.action, data={"kind": kind, "path": str(path)})
        return path


class Executor:
    """
    Runs one action handler and turns expected failures into report text.

    Hard rules:
    - ValidationError never escapes; it renders as `❌ message`.
    - write and backup failures render the same way.
    """

    def __init__(self, action_registry: ActionRegistry, trace: TraceEmitter):
        self._actions = action_registry
        self._trace = trace

    def execute(self, req: ActionRequest) -> str:
        action_def = self._actions.get(req.action)
        if action_def is None:
            raise OmoconfError(code="action.unregistered", message=f"No handler for action: {req.action}")
        title = str(action_def.get("title") or req.action)

        try:
            return self._actions.call(req.action, req)
        except ValidationError as e:
            self._trace.emit(
                "validation_failed",
                action=req.action,
                message=e.message,
                data={"code": e.code, **(e.data or {})},
            )
            return render.failure(title, e.message)
        except OmoconfError as e:
            logger.warning("%s failed: %s", req.action, e)
            self._trace.emit("error", action=req.action, message=e.message, data={"code": e.code})
            return render.failure(title, e.message)
