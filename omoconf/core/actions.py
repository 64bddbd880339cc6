from __future__ import annotations

LIST_AGENTS = "list-agents"
LIST_CATEGORIES = "list-categories"
LIST_SKILLS = "list-skills"
LIST_MODELS = "list-models"
CHECK_UPDATES = "check-updates"
RUN_DIAGNOSTICS = "run-diagnostics"
BACKUP_CONFIGS = "backup-configs"
SHOW_PERMISSIONS = "show-permissions"
COMPARE_BACKUP = "compare-backup"
RESTORE_BACKUP = "restore-backup"
ADD_AGENT = "add-agent"
MODIFY_AGENT = "modify-agent"
ADD_CATEGORY = "add-category"
MODIFY_CATEGORY = "modify-category"
DISABLE_HOOK = "disable-hook"
ENABLE_HOOK = "enable-hook"
UNKNOWN = "unknown"

ALL_ACTIONS = (
    LIST_AGENTS,
    LIST_CATEGORIES,
    LIST_SKILLS,
    LIST_MODELS,
    CHECK_UPDATES,
    RUN_DIAGNOSTICS,
    BACKUP_CONFIGS,
    SHOW_PERMISSIONS,
    COMPARE_BACKUP,
    RESTORE_BACKUP,
    ADD_AGENT,
    MODIFY_AGENT,
    ADD_CATEGORY,
    MODIFY_CATEGORY,
    DISABLE_HOOK,
    ENABLE_HOOK,
    UNKNOWN,
)
