from __future__ import annotations

from omoconf.core import actions as A
from omoconf.core import handlers as H
from omoconf.registry.action_registry import ActionHandler, ActionRegistry


def build_action_registry() -> ActionRegistry:
    """
    Register every built-in action handler.
    """
    reg = ActionRegistry()

    def reg_action(action_id: str, title: str, mutating: bool, example: str, impl: ActionHandler) -> None:
        reg.register(
            {
                "action_id": action_id,
                "title": title,
                "mutating": mutating,
                "example": example,
            },
            impl,
        )

    reg_action(A.LIST_AGENTS, "OMO Agents", False, "list my agents", H.list_agents)
    reg_action(A.LIST_CATEGORIES, "OMO Categories", False, "list categories", H.list_categories)
    reg_action(A.LIST_SKILLS, "Available Skills", False, "list skills", H.list_skills)
    reg_action(A.LIST_MODELS, "OpenCode Configured Models", False, "list my opencode models", H.list_models)
    reg_action(A.CHECK_UPDATES, "Checking for Updates", False, "check for updates", H.check_updates)
    reg_action(A.RUN_DIAGNOSTICS, "Running Diagnostics", False, "run diagnostics", H.run_diagnostics)
    reg_action(A.BACKUP_CONFIGS, "Backup Configuration", True, "backup my configs", H.backup_configs)
    reg_action(A.SHOW_PERMISSIONS, "Permission Settings", False, "show permissions", H.show_permissions)
    reg_action(A.COMPARE_BACKUP, "Compare with Backup", False, "compare backup 1", H.compare_backup)
    reg_action(A.RESTORE_BACKUP, "Restore from Backup", True, "restore backup 2", H.restore_backup)
    reg_action(
        A.ADD_AGENT,
        "Add New Agent",
        True,
        "add agent debugger with model opencode/gpt-5.2 and temperature 0.2",
        H.add_agent,
    )
    reg_action(A.MODIFY_AGENT, "Modify Agent", True, "modify agent oracle temperature 0.3", H.modify_agent)
    reg_action(
        A.ADD_CATEGORY,
        "Add New Category",
        True,
        "add category data-science with model anthropic/claude-sonnet-4.5",
        H.add_category,
    )
    reg_action(A.MODIFY_CATEGORY, "Modify Category", True, "modify category quick temperature 0.1", H.modify_category)
    reg_action(A.DISABLE_HOOK, "Disable Hook", True, "disable hook comment-checker", H.disable_hook)
    reg_action(A.ENABLE_HOOK, "Enable Hook", True, "enable hook comment-checker", H.enable_hook)
    reg_action(A.UNKNOWN, "OMO Configuration Manager", False, "help", H.unknown)
    return reg
