import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

from omoconf.cli.main import main as omoconf_main
from omoconf.core import actions as A


def _run(argv):
    out, err = io.StringIO(), io.StringIO()
    with redirect_stdout(out), redirect_stderr(err):
        rc = omoconf_main(argv)
    return rc, out.getvalue(), err.getvalue()


class TestOmoconfCli(unittest.TestCase):
    def test_run_prints_report(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            rc, out, _ = _run(["run", "--config-dir", td, "list", "my", "agents"])
            self.assertEqual(rc, 0)
            self.assertIn("## OMO Agents", out)
            self.assertEqual(list(Path(td).iterdir()), [])

    def test_run_with_explicit_params(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            params = json.dumps({"agent_name": "debugger", "agent_data": {"model": "a/b", "temperature": 0.4}})
            rc, out, _ = _run(["run", "--config-dir", td, "--params", params, "add an agent"])
            self.assertEqual(rc, 0)
            self.assertIn('Successfully added agent "debugger"', out)
            doc = json.loads((Path(td) / "oh-my-opencode.json").read_text(encoding="utf-8"))
            self.assertEqual(doc["agents"]["debugger"], {"model": "a/b", "temperature": 0.4})

    def test_run_without_request(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            rc, _, err = _run(["run", "--config-dir", td])
            self.assertEqual(rc, 2)
            self.assertIn("request is required", err)

    def test_fatal_error_exit_code(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            (Path(td) / "opencode.json").write_text("[]", encoding="utf-8")
            rc, _, err = _run(["run", "--config-dir", td, "list", "my", "agents"])
            self.assertEqual(rc, 1)
            self.assertIn("config.not_object", err)
            self.assertIn('"path"', err)

    def test_bad_params_json(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            rc, _, err = _run(["run", "--config-dir", td, "--params", "{oops", "list agents"])
            self.assertEqual(rc, 1)
            self.assertIn("params.invalid", err)

    def test_classify_does_not_execute(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            rc, out, _ = _run(["classify", "--config-dir", td, "disable", "comment-checker", "hook"])
            self.assertEqual(rc, 0)
            data = json.loads(out)
            self.assertEqual(data["action"], A.DISABLE_HOOK)
            self.assertEqual(data["rule_id"], "hook.disable")
            self.assertEqual(data["params"], {"hook_name": "comment-checker"})
            self.assertEqual(list(Path(td).iterdir()), [])

    def test_list_actions(self) -> None:
        rc, out, _ = _run(["list-actions", "--json"])
        self.assertEqual(rc, 0)
        ids = {a["action_id"] for a in json.loads(out)}
        self.assertEqual(ids, set(A.ALL_ACTIONS))

    def test_list_backups(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            rc, out, _ = _run(["list-backups", "--config-dir", td])
            self.assertEqual(rc, 0)
            self.assertIn("No backups found", out)

            _run(["run", "--config-dir", td, "backup", "my", "configs"])
            rc, out, _ = _run(["list-backups", "--config-dir", td, "--json"])
            data = json.loads(out)
            self.assertEqual(len(data["backups"]), 2)
            self.assertEqual(data["archive_dir"], str(Path(td) / "archive"))

    def test_trace_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            trace = Path(td) / "trace.jsonl"
            _run(["run", "--config-dir", td, "--trace", str(trace), "--run-id", "r1", "list", "categories"])
            rc, out, _ = _run(["show-trace", "--trace", str(trace), "--event-type", "action_resolved"])
            self.assertEqual(rc, 0)
            lines = [l for l in out.splitlines() if l.strip()]
            self.assertEqual(len(lines), 1)
            event = json.loads(lines[0])
            self.assertEqual(event["run_id"], "r1")
            self.assertEqual(event["action"], A.LIST_CATEGORIES)

            rc, out, _ = _run(["show-trace", "--trace", str(trace), "--tail", "1"])
            self.assertEqual(json.loads(out)["event_type"], "run_finished")


if __name__ == "__main__":
    unittest.main()
