from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from omoconf.contract_store import default_contracts
from omoconf.registry.action_registry import ActionRegistry
from omoconf.store.backup import BackupManager
from omoconf.store.config_store import ConfigPaths, ConfigStore
from omoconf.trace.trace_emitter import TraceEmitter
from omoconf.trace.trace_store_jsonl import TraceStoreJSONL

from .errors import OmoconfError
from .executor import ActionRequest, Executor
from .intent_router import IntentRouter, Route
from .params import ActionParams, extract
from .policy import MutationPolicy
from .runtime_context import RuntimeContext

logger = logging.getLogger("omoconf.core.kernel")


class Kernel:
    """
    Request pipeline: load -> classify -> extract -> merge -> dispatch -> trace.

    Hard rules:
    - configs are re-read for every request.
    - a config that exists but cannot be read or parsed aborts the request.
    - every write is preceded by a backup attempt (enforced in the handlers via ActionRequest).
    """

    def __init__(self, action_registry: ActionRegistry, router: Optional[IntentRouter] = None):
        self._actions = action_registry
        self._router = router or IntentRouter()

    def classify(self, request: str, explicit: Optional[ActionParams] = None) -> tuple[Route, ActionParams]:
        route = self._router.route(request)
        params = extract(route.action, request).merged_with(explicit)
        return route, params

    def run_request(self, ctx: RuntimeContext, request: str, explicit: Optional[ActionParams] = None) -> str:
        store = TraceStoreJSONL(ctx.trace_path) if ctx.trace_path is not None else None
        trace = TraceEmitter(store=store, run_id=ctx.run_id)
        # Request text may carry prompt_append content; only its size is recorded.
        trace.emit(
            "request_received",
            message="Request received",
            data={"config_dir": str(ctx.config_dir), "request_chars": len(request)},
        )

        paths = ConfigPaths.resolve(ctx.config_dir)
        config_store = ConfigStore(paths)
        backups = BackupManager(paths, ctx.archive_dir, keep=ctx.backup_keep, clock=ctx.clock)
        try:
            agent_config = config_store.read_agent()
            provider_config = config_store.read_provider()
            existing_backups = backups.list_backups(limit=ctx.backup_keep)
        except OmoconfError as e:
            trace.emit("error", message=e.message, data={"code": e.code, **(e.data or {})})
            raise

        route, params = self.classify(request, explicit)
        trace.emit(
            "action_resolved",
            action=route.action,
            rule_id=route.rule_id,
            data={"params": _params_for_trace(params)},
        )
        logger.info("request resolved to %s (rule %s)", route.action, route.rule_id)

        req = ActionRequest(
            ctx=ctx,
            action=route.action,
            request=request,
            params=params,
            store=config_store,
            backups=backups,
            agent_config=agent_config,
            provider_config=provider_config,
            existing_backups=existing_backups,
            policy=MutationPolicy(default_contracts()),
            trace=trace,
        )
        report = Executor(self._actions, trace).execute(req)
        trace.emit("run_finished", action=route.action, data={"report_chars": len(report)})
        return report


def _params_for_trace(params: ActionParams) -> Dict[str, Any]:
    out = params.to_dict()
    for group in ("agent_data", "category_data"):
        data = out.get(group)
        if isinstance(data, dict) and isinstance(data.get("prompt_append"), str):
            data["prompt_append"] = f"<redacted: {len(data['prompt_append'])} chars>"
    return out
