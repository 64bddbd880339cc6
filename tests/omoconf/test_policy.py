import unittest

from omoconf.contract_store import AGENT_ENTRY, CATEGORY_ENTRY, default_contracts
from omoconf.core.errors import ValidationError
from omoconf.core.policy import MutationPolicy, is_safe_config_key


class TestSafeKey(unittest.TestCase):
    def test_accepts(self) -> None:
        for key in ("oracle", "data-science", "a_b", "X1", "9lives", "a" * 64):
            with self.subTest(key=key):
                self.assertTrue(is_safe_config_key(key))

    def test_rejects(self) -> None:
        for key in ("", "__proto__", "Constructor", "PROTOTYPE", "-lead", "_lead", "has space", "a.b", "a" * 65, None, 3):
            with self.subTest(key=key):
                self.assertFalse(is_safe_config_key(key))


class TestMutationPolicy(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = MutationPolicy(default_contracts())

    def test_temperature_bounds(self) -> None:
        for t in (0.0, 1.0, 0, 1, 0.5):
            with self.subTest(t=t):
                self.assertEqual(self.policy.evaluate_entry(AGENT_ENTRY, {"temperature": t}, require_model=False).decision, "allow")
        for t in (-0.01, 1.01):
            with self.subTest(t=t):
                r = self.policy.evaluate_entry(AGENT_ENTRY, {"model": "a/b", "temperature": t}, require_model=True)
                self.assertEqual(r.decision, "deny")
                self.assertEqual(r.summary, "Temperature must be between 0.0 and 1.0.")

    def test_temperature_checked_before_model(self) -> None:
        r = self.policy.evaluate_entry(AGENT_ENTRY, {"temperature": 2}, require_model=True)
        self.assertEqual(r.reason_codes, ["entry.temperature_range"])

    def test_model_required(self) -> None:
        r = self.policy.evaluate_entry(AGENT_ENTRY, {"temperature": 0.2}, require_model=True)
        self.assertEqual(r.summary, "Missing required field: model.")

    def test_schema_errors_listed(self) -> None:
        r = self.policy.evaluate_entry(CATEGORY_ENTRY, {"model": "a/b", "top_p": 1.5, "maxTokens": 0}, require_model=True)
        self.assertEqual(r.decision, "deny")
        self.assertIn("top_p", r.summary or "")
        self.assertIn("maxTokens", r.summary or "")

    def test_unknown_hook(self) -> None:
        r = self.policy.evaluate_hook("not-a-hook")
        self.assertEqual(r.reason_codes, ["hook.unknown"])
        self.assertIn("comment-checker", r.summary or "")
        self.assertEqual(self.policy.evaluate_hook("__proto__").reason_codes, ["key.unsafe"])
        self.assertEqual(self.policy.evaluate_hook("think-mode").decision, "allow")

    def test_require_allow_raises(self) -> None:
        with self.assertRaises(ValidationError) as cm:
            self.policy.require_allow(self.policy.evaluate_key("agent", "__proto__"))
        self.assertEqual(cm.exception.code, "key.unsafe")
        self.assertIn('Invalid agent name: "__proto__"', cm.exception.message)


if __name__ == "__main__":
    unittest.main()
