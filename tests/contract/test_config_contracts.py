import unittest

from omoconf.contract_store import (
    AGENT_CONFIG,
    AGENT_ENTRY,
    CATEGORY_ENTRY,
    PROVIDER_CONFIG,
    ContractStore,
    default_contracts,
)
from omoconf.resources import contracts_schemas_dir


class TestConfigContracts(unittest.TestCase):
    def test_schemas_are_valid(self) -> None:
        store = ContractStore(contracts_schemas_dir())
        store.load()
        self.assertEqual(store.check_schemas(), [])
        self.assertEqual(
            store.list_schema_names(),
            sorted([AGENT_CONFIG, AGENT_ENTRY, CATEGORY_ENTRY, PROVIDER_CONFIG]),
        )

    def test_entry_schema(self) -> None:
        c = default_contracts()
        self.assertEqual(c.validate(AGENT_ENTRY, {"model": "a/b", "temperature": 0.2, "future_key": 1}), [])
        errors = c.validate(AGENT_ENTRY, {"temperature": 1.5, "disable": "yes"})
        self.assertEqual(len(errors), 2)
        self.assertTrue(errors[0].startswith("disable: "))
        self.assertTrue(errors[1].startswith("temperature: "))

    def test_root_schema_follows_entry_refs(self) -> None:
        c = default_contracts()
        doc = {
            "agents": {"oracle": {"model": "a/b", "temperature": 3}},
            "categories": {"quick": {"maxTokens": 0}},
            "disabled_hooks": ["think-mode"],
        }
        errors = c.validate(AGENT_CONFIG, doc)
        self.assertTrue(any(e.startswith("agents.oracle.temperature: ") for e in errors))
        self.assertTrue(any(e.startswith("categories.quick.maxTokens: ") for e in errors))

    def test_provider_schema(self) -> None:
        c = default_contracts()
        ok = {
            "provider": {"ollama": {"models": {"qwen": {"name": "Qwen", "tools": True, "options": {"num_ctx": 32768}}}}},
            "permission": {"bash": "ask"},
            "plugin": ["oh-my-opencode"],
        }
        self.assertEqual(c.validate(PROVIDER_CONFIG, ok), [])
        self.assertNotEqual(c.validate(PROVIDER_CONFIG, {"plugin": "oh-my-opencode"}), [])

    def test_unknown_schema_name(self) -> None:
        with self.assertRaises(KeyError):
            default_contracts().validate("nope.schema.json", {})


if __name__ == "__main__":
    unittest.main()
