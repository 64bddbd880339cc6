from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Optional

from omoconf.bootstrap_actions import build_action_registry
from omoconf.core.errors import OmoconfError, ValidationError
from omoconf.core.kernel import Kernel
from omoconf.core.params import ActionParams
from omoconf.core.runtime_context import RuntimeContext
from omoconf.store.backup import BackupManager
from omoconf.store.config_store import ConfigPaths
from omoconf.store.paths import default_config_dir
from omoconf.trace.replay import Replay


def _format_cli_error(e: Exception) -> str:
    """
    Print-friendly error formatting for CLI commands.
    - Always includes code/message (via __str__) when it's an OmoconfError
    - Includes structured `data` payload when present
    """
    if isinstance(e, OmoconfError) and isinstance(e.data, dict) and e.data:
        return str(e) + "\n" + json.dumps(e.data, ensure_ascii=False, indent=2, default=str)
    return str(e)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")


def _config_dir(args: argparse.Namespace) -> Path:
    if args.config_dir:
        return Path(args.config_dir).expanduser()
    return default_config_dir()


def _build_context(args: argparse.Namespace) -> RuntimeContext:
    return RuntimeContext(
        run_id=args.run_id or f"run_{uuid.uuid4().hex[:12]}",
        config_dir=_config_dir(args),
        cwd=Path.cwd(),
        trace_path=Path(args.trace) if args.trace else None,
    )


def _read_request(words: list[str]) -> Optional[str]:
    if words == ["-"]:
        text = sys.stdin.read()
    else:
        text = " ".join(words)
    text = text.strip()
    return text or None


def _parse_params(raw: Optional[str]) -> Optional[ActionParams]:
    if not raw:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(code="params.invalid", message=f"--params is not valid JSON: {e}") from e
    return ActionParams.from_dict(data)


def cmd_run(args: argparse.Namespace) -> int:
    request = _read_request(args.request)
    if request is None:
        print("A request is required, e.g.: omoconf run list my agents", file=sys.stderr)
        return 2
    explicit = _parse_params(args.params)
    kernel = Kernel(build_action_registry())
    print(kernel.run_request(_build_context(args), request, explicit))
    return 0


def cmd_classify(args: argparse.Namespace) -> int:
    request = _read_request(args.request)
    if request is None:
        print("A request is required, e.g.: omoconf classify backup my configs", file=sys.stderr)
        return 2
    kernel = Kernel(build_action_registry())
    route, params = kernel.classify(request, _parse_params(args.params))
    out = {"action": route.action, "rule_id": route.rule_id, "params": params.to_dict()}
    print(json.dumps(out, ensure_ascii=False, indent=2))
    return 0


def cmd_list_actions(args: argparse.Namespace) -> int:
    actions = build_action_registry().list_actions()
    if args.json:
        print(json.dumps(actions, ensure_ascii=False, indent=2))
        return 0
    for a in actions:
        flag = "writes" if a["mutating"] else "read-only"
        print(f"{a['action_id']:<18} {flag:<10} {a['example']}")
    return 0


def cmd_list_backups(args: argparse.Namespace) -> int:
    config_dir = _config_dir(args)
    ctx = RuntimeContext(run_id="list-backups", config_dir=config_dir)
    manager = BackupManager(ConfigPaths.resolve(config_dir), ctx.archive_dir)
    limit = args.limit if args.limit is not None and args.limit >= 0 else None
    names = manager.list_backups(limit=limit)
    if args.json:
        print(json.dumps({"archive_dir": str(ctx.archive_dir), "backups": names}, ensure_ascii=False, indent=2))
        return 0
    if not names:
        print(f"No backups found in {ctx.archive_dir}")
        return 0
    for i, name in enumerate(names, start=1):
        print(f"{i}. {name}")
    return 0


def cmd_show_trace(args: argparse.Namespace) -> int:
    path = Path(args.trace)
    replay = Replay(path)
    events = list(replay.iter_events())

    if args.event_type:
        events = [e for e in events if e.get("event_type") == args.event_type]

    if args.tail is not None and args.tail >= 0:
        events = events[-args.tail :] if args.tail else []

    if args.pretty:
        for e in events:
            print(json.dumps(e, ensure_ascii=False, indent=2))
    else:
        for e in events:
            print(json.dumps(e, ensure_ascii=False))
    return 0


def main(argv=None) -> int:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config-dir", help="Config directory (default: OMOCONF_CONFIG_DIR, then the opencode config dir)")
    common.add_argument("--trace", help="Append JSONL audit events to this path (default: no trace)")
    common.add_argument("--run-id", help="Run id recorded in trace events")
    common.add_argument("-v", "--verbose", action="count", default=0, help="-v for INFO logs, -vv for DEBUG")

    parser = argparse.ArgumentParser(prog="omoconf", description="Manage oh-my-opencode / opencode configs in plain language")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", parents=[common], help="Classify a request and execute it")
    p_run.add_argument("request", nargs="*", help='Request words, or "-" to read it from stdin')
    p_run.add_argument("--params", help="Explicit params as JSON; they override values extracted from the request")
    p_run.set_defaults(func=cmd_run)

    p_classify = sub.add_parser("classify", parents=[common], help="Show the action and params a request resolves to")
    p_classify.add_argument("request", nargs="*", help='Request words, or "-" to read it from stdin')
    p_classify.add_argument("--params", help="Explicit params as JSON")
    p_classify.set_defaults(func=cmd_classify)

    p_list_actions = sub.add_parser("list-actions", parents=[common], help="List registered actions")
    p_list_actions.add_argument("--json", action="store_true", help="Output JSON")
    p_list_actions.set_defaults(func=cmd_list_actions)

    p_list_backups = sub.add_parser("list-backups", parents=[common], help="List config backups, newest first")
    p_list_backups.add_argument("--limit", type=int, default=5, help="Show at most N backups (negative: all)")
    p_list_backups.add_argument("--json", action="store_true", help="Output JSON")
    p_list_backups.set_defaults(func=cmd_list_backups)

    p_show_trace = sub.add_parser("show-trace", help="Show trace events from a JSONL file")
    p_show_trace.add_argument("--trace", required=True, help="Trace path (jsonl)")
    p_show_trace.add_argument("--event-type", help="Filter by event_type")
    p_show_trace.add_argument("--tail", type=int, help="Show only last N events")
    p_show_trace.add_argument("--pretty", action="store_true", help="Pretty-print each event as JSON")
    p_show_trace.set_defaults(func=cmd_show_trace)

    ns = parser.parse_args(argv)
    _setup_logging(getattr(ns, "verbose", 0))
    try:
        return int(ns.func(ns))
    except OmoconfError as e:
        print(_format_cli_error(e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
