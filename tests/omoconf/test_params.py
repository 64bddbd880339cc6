import unittest

from omoconf.core import actions as A
from omoconf.core.errors import ValidationError
from omoconf.core.params import ActionParams, extract


class TestExtract(unittest.TestCase):
    def test_add_agent_request(self) -> None:
        p = extract(A.ADD_AGENT, "add agent debugger with model opencode/gpt-5.2 and temperature 0.2")
        self.assertEqual(p.agent_name, "debugger")
        self.assertEqual(p.agent_data, {"model": "opencode/gpt-5.2", "temperature": 0.2})
        self.assertEqual(p.category_data, {"model": "opencode/gpt-5.2", "temperature": 0.2})

    def test_name_variants(self) -> None:
        self.assertEqual(extract(A.ADD_AGENT, "add a new agent called debugger").agent_name, "debugger")
        self.assertEqual(extract(A.ADD_AGENT, "add agent named fixer").agent_name, "fixer")
        self.assertEqual(extract(A.MODIFY_AGENT, "modify oracle agent").agent_name, "oracle")
        self.assertEqual(extract(A.ADD_CATEGORY, "add category data-science").category_name, "data-science")

    def test_named_token_taken_whole(self) -> None:
        self.assertEqual(extract(A.ADD_AGENT, "add agent called __proto__ with model a/b").agent_name, "__proto__")
        self.assertEqual(extract(A.ADD_AGENT, "add agent named " + "x" * 65).agent_name, "x" * 65)
        self.assertEqual(extract(A.ADD_AGENT, "add an agent called debugger.").agent_name, "debugger")
        self.assertEqual(extract(A.MODIFY_AGENT, "modify oracle agent set temperature to 0.3").agent_name, "oracle")

    def test_negative_temperature_is_kept(self) -> None:
        p = extract(A.ADD_AGENT, "add agent x with model a/b temperature -0.01")
        self.assertEqual(p.agent_data["temperature"], -0.01)

    def test_absent_fields_are_omitted(self) -> None:
        p = extract(A.LIST_AGENTS, "list my agents")
        self.assertIsNone(p.backup_index)
        self.assertIsNone(p.hook_name)
        self.assertEqual(p.agent_data, {})
        self.assertEqual(p.to_dict(), {})

    def test_quoted_model_wins(self) -> None:
        p = extract(A.MODIFY_AGENT, "modify agent oracle model to \"anthropic/claude opus\"")
        self.assertEqual(p.agent_data["model"], "anthropic/claude opus")

    def test_model_trailing_period_stripped(self) -> None:
        p = extract(A.ADD_AGENT, "add agent x with model openai/gpt-4.1.")
        self.assertEqual(p.agent_data["model"], "openai/gpt-4.1")

    def test_backup_index(self) -> None:
        self.assertEqual(extract(A.RESTORE_BACKUP, "restore backup 12").backup_index, 12)
        self.assertIsNone(extract(A.RESTORE_BACKUP, "restore backup 1234").backup_index)

    def test_hook_name(self) -> None:
        self.assertEqual(extract(A.DISABLE_HOOK, "disable hook startup-toast").hook_name, "startup-toast")
        self.assertEqual(extract(A.DISABLE_HOOK, "disable comment-checker hook").hook_name, "comment-checker")

    def test_quoted_text_fields(self) -> None:
        p = extract(A.ADD_AGENT, "add agent x model a/b description: 'Finds bugs' prompt \"Be terse\"")
        self.assertEqual(p.agent_data["description"], "Finds bugs")
        self.assertEqual(p.agent_data["prompt_append"], "Be terse")
        self.assertNotIn("description", p.category_data)

    def test_disable_enable_only_for_modify_agent(self) -> None:
        self.assertIs(extract(A.MODIFY_AGENT, "disable agent oracle").agent_data["disable"], True)
        self.assertIs(extract(A.MODIFY_AGENT, "enable agent oracle").agent_data["disable"], False)
        self.assertNotIn("disable", extract(A.MODIFY_AGENT, "disable hook on agent oracle").agent_data)
        self.assertNotIn("disable", extract(A.DISABLE_HOOK, "disable agent oracle").agent_data)


class TestActionParams(unittest.TestCase):
    def test_merge_explicit_wins_field_by_field(self) -> None:
        extracted = extract(A.ADD_AGENT, "add agent debugger with model a/b and temperature 0.2")
        explicit = ActionParams.from_dict({"agent_name": "fixer", "agent_data": {"temperature": 0.7}})
        merged = extracted.merged_with(explicit)
        self.assertEqual(merged.agent_name, "fixer")
        self.assertEqual(merged.agent_data, {"model": "a/b", "temperature": 0.7})

    def test_merge_with_none(self) -> None:
        p = ActionParams(backup_index=3)
        self.assertIs(p.merged_with(None), p)

    def test_from_dict_rejects_unknown_and_bad_types(self) -> None:
        with self.assertRaises(ValidationError):
            ActionParams.from_dict({"agentName": "x"})
        with self.assertRaises(ValidationError):
            ActionParams.from_dict({"backup_index": "1"})
        with self.assertRaises(ValidationError):
            ActionParams.from_dict({"backup_index": True})
        with self.assertRaises(ValidationError):
            ActionParams.from_dict({"agent_data": []})

    def test_to_dict(self) -> None:
        p = ActionParams.from_dict({"hook_name": "think-mode", "backup_index": 2})
        self.assertEqual(p.to_dict(), {"hook_name": "think-mode", "backup_index": 2})


if __name__ == "__main__":
    unittest.main()
