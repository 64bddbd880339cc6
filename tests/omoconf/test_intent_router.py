import unittest

from omoconf.core import actions as A
from omoconf.core.intent_router import RULES, IntentRouter, Rule, Words, classify


class TestWords(unittest.TestCase):
    def test_has_matches_prefix(self) -> None:
        w = Words.of("List My CATEGORIES please")
        self.assertTrue(w.has("categor"))
        self.assertTrue(w.has("list"))
        self.assertFalse(w.has("agent"))

    def test_empty_request(self) -> None:
        self.assertEqual(Words.of("").tokens, ())


class TestIntentRouter(unittest.TestCase):
    def test_examples(self) -> None:
        cases = {
            "list my agents": A.LIST_AGENTS,
            "show agents config": A.LIST_AGENTS,
            "what categories do I have?": A.LIST_CATEGORIES,
            "list skills": A.LIST_SKILLS,
            "list my opencode models": A.LIST_MODELS,
            "check for updates": A.CHECK_UPDATES,
            "validate my config": A.RUN_DIAGNOSTICS,
            "run diagnostics": A.RUN_DIAGNOSTICS,
            "backup my configs": A.BACKUP_CONFIGS,
            "show permissions": A.SHOW_PERMISSIONS,
            "restore from backup": A.RESTORE_BACKUP,
            "restore backup 1": A.RESTORE_BACKUP,
            "compare backup 2": A.COMPARE_BACKUP,
            "diff backup 1": A.COMPARE_BACKUP,
            "add a new agent called debugger": A.ADD_AGENT,
            "modify oracle agent": A.MODIFY_AGENT,
            "update my agent": A.MODIFY_AGENT,
            "update the quick category": A.MODIFY_CATEGORY,
            "add a category called data-science": A.ADD_CATEGORY,
            "edit category quick": A.MODIFY_CATEGORY,
            "disable comment-checker hook": A.DISABLE_HOOK,
            "enable hook comment-checker": A.ENABLE_HOOK,
            "hello there": A.UNKNOWN,
            "": A.UNKNOWN,
        }
        for request, action in cases.items():
            with self.subTest(request=request):
                self.assertEqual(classify(request), action)

    def test_listing_word_with_agent_always_lists_agents(self) -> None:
        for verb in ("list", "show", "what"):
            for tail in ("agents", "agent config", "my agents and backups", "agents to add"):
                request = f"{verb} {tail}"
                with self.subTest(request=request):
                    self.assertEqual(classify(request), A.LIST_AGENTS)

    def test_route_reports_rule_id(self) -> None:
        route = IntentRouter().route("backup my configs")
        self.assertEqual(route.action, A.BACKUP_CONFIGS)
        self.assertEqual(route.rule_id, "backup.create")
        self.assertIsNone(IntentRouter().route("gibberish").rule_id)

    def test_rules_are_independently_testable(self) -> None:
        by_id = {r.rule_id: r for r in RULES}
        self.assertTrue(by_id["hook.disable"].predicate(Words.of("disable hook x")))
        self.assertFalse(by_id["hook.disable"].predicate(Words.of("disable agent x")))
        self.assertTrue(by_id["validate"].predicate(Words.of("check my config")))
        self.assertFalse(by_id["validate"].predicate(Words.of("check for updates")))

    def test_custom_rules(self) -> None:
        router = IntentRouter(rules=[Rule("only", lambda w: w.has("ping"), A.CHECK_UPDATES)])
        self.assertEqual(router.route("ping").action, A.CHECK_UPDATES)
        self.assertEqual(router.route("list agents").action, A.UNKNOWN)

    def test_every_rule_targets_a_known_action(self) -> None:
        for rule in RULES:
            self.assertIn(rule.action, A.ALL_ACTIONS)


if __name__ == "__main__":
    unittest.main()
