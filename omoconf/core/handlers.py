from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Mapping, Optional, Tuple

from omoconf.contract_store import AGENT_CONFIG, AGENT_ENTRY, CATEGORY_ENTRY, PROVIDER_CONFIG
from omoconf.skills import default_skill_dirs, discover_skills
from omoconf.store.backup import backup_kind
from omoconf.store.config_store import AGENT

from . import render
from .errors import ValidationError
from .executor import ActionRequest
from .hooks import KNOWN_HOOKS, is_known_hook
from .params import ActionParams
from .policy import is_safe_config_key

RELEASES_URL = "https://api.github.com/repos/code-yeongyu/oh-my-opencode/releases/latest"


def _mapping(v: Any) -> Dict[str, Any]:
    return v if isinstance(v, dict) else {}


def _str_list(v: Any) -> List[str]:
    if not isinstance(v, list):
        return []
    return [x for x in v if isinstance(x, str)]


def _footer(req: ActionRequest) -> str:
    return render.stamp(req.now())


# ---- read-only ----


def list_agents(req: ActionRequest) -> str:
    rows = []
    for name, cfg in _mapping(req.agent_config.get("agents")).items():
        cfg = _mapping(cfg)
        rows.append(
            [
                name,
                cfg.get("model") or "N/A",
                render.fmt_number(cfg.get("temperature")),
                "Disabled" if cfg.get("disable") else "Enabled",
            ]
        )
    return render.heading("OMO Agents") + render.table(
        ["Name", "Model", "Temperature", "Status"], rows, empty="*No agents configured*"
    )


def list_categories(req: ActionRequest) -> str:
    rows = []
    for name, cfg in _mapping(req.agent_config.get("categories")).items():
        cfg = _mapping(cfg)
        purpose = cfg.get("prompt_append")
        purpose = purpose[:40] if isinstance(purpose, str) and purpose else "N/A"
        rows.append([name, cfg.get("model") or "N/A", render.fmt_number(cfg.get("temperature")), purpose])
    return render.heading("OMO Categories") + render.table(
        ["Name", "Model", "Temperature", "Purpose"], rows, empty="*No categories configured*"
    )


def list_skills(req: ActionRequest) -> str:
    skills = discover_skills(default_skill_dirs(req.ctx.config_dir, req.ctx.cwd))
    rows = [[s.name, s.description, s.source] for s in skills]
    return render.heading("Available Skills") + render.table(
        ["Skill", "Description", "Source"], rows, empty="*No skills found*"
    )


def list_models(req: ActionRequest) -> str:
    out = render.heading("OpenCode Configured Models")
    providers = _mapping(req.provider_config.get("provider"))
    if not providers:
        out += "*No providers configured*\n"
    for provider_name, provider_cfg in providers.items():
        out += f"\n### {provider_name}\n"
        models = _mapping(_mapping(provider_cfg).get("models"))
        if not models:
            out += "*No models configured*\n"
            continue
        for model_id, model_cfg in models.items():
            model_cfg = _mapping(model_cfg)
            num_ctx = _mapping(model_cfg.get("options")).get("num_ctx")
            out += (
                f"- {model_cfg.get('name') or model_id} (ID: {model_id})\n"
                f"  - Tools: {'Yes' if model_cfg.get('tools') else 'No'}\n"
                f"  - Reasoning: {'Yes' if model_cfg.get('reasoning') else 'No'}\n"
                f"  - Context: {num_ctx if num_ctx else 'N/A'}\n"
            )
    return out + "\n" + _footer(req)


def show_permissions(req: ActionRequest) -> str:
    out = render.heading("Permission Settings") + "### Global Permissions (opencode.json)\n"
    global_perms = req.provider_config.get("permission")
    if isinstance(global_perms, str) and global_perms:
        out += f"- *: {global_perms}\n"
    elif isinstance(global_perms, dict) and global_perms:
        for tool, perm in global_perms.items():
            out += f"- {tool}: {perm}\n"
    else:
        out += "*No global permissions configured*\n"

    out += "\n### Agent Permissions (oh-my-opencode.json)\n"
    found = False
    for name, cfg in _mapping(req.agent_config.get("agents")).items():
        perms = _mapping(_mapping(cfg).get("permission"))
        if not perms:
            continue
        found = True
        out += f"\n**{name}**:\n"
        for tool, perm in perms.items():
            out += f"  {tool}: {perm}\n"
    if not found:
        out += "*No agent-specific permissions configured*\n"
    return out + "\n" + _footer(req)


def check_updates(req: ActionRequest) -> str:
    return (
        render.heading("Checking for Updates")
        + f"This would check {RELEASES_URL}\nand compare it with your installed version.\n\n"
        + "No network request was made.\n\n"
        + _footer(req)
    )


def _model_provider(model: Any) -> Optional[str]:
    if not isinstance(model, str) or "/" not in model:
        return None
    provider, _, model_id = model.partition("/")
    return provider if provider and model_id else None


def run_diagnostics(req: ActionRequest) -> str:
    contracts = req.policy.contracts
    paths = req.store.paths
    problems: List[str] = []
    warnings: List[str] = []

    for err in contracts.validate(AGENT_CONFIG, req.agent_config):
        problems.append(f"{paths.agent.name}: {err}")
    for err in contracts.validate(PROVIDER_CONFIG, req.provider_config):
        problems.append(f"{paths.provider.name}: {err}")

    configured = set(_mapping(req.provider_config.get("provider")).keys())
    sections = (("agents", "agent"), ("categories", "category"))
    counts: Dict[str, int] = {}
    for section, label in sections:
        entries = _mapping(req.agent_config.get(section))
        counts[section] = len(entries)
        for name, entry in entries.items():
            if not is_safe_config_key(name):
                problems.append(f"Unsafe {label} name: {name!r}")
            model = _mapping(entry).get("model")
            if not isinstance(model, str) or not model:
                continue
            provider = _model_provider(model)
            if provider is None:
                warnings.append(f'{label} "{name}": model "{model}" is not in provider/model-id form')
            elif configured and provider not in configured:
                warnings.append(
                    f'{label} "{name}": provider "{provider}" is not configured in {paths.provider.name} '
                    "(fine for built-in providers)"
                )

    disabled = _str_list(req.agent_config.get("disabled_hooks"))
    for hook in disabled:
        if not is_known_hook(hook):
            problems.append(f"Unknown disabled hook: {hook}")

    out = render.heading("Running Diagnostics")
    out += (
        f"Checked {paths.agent} and {paths.provider}: "
        f"{counts['agents']} agents, {counts['categories']} categories, {len(disabled)} disabled hooks.\n\n"
    )
    if problems:
        out += "### Problems\n" + "".join(f"- ❌ {p}\n" for p in problems) + "\n"
    else:
        out += "✅ No problems found.\n\n"
    if warnings:
        out += "### Warnings\n" + "".join(f"- ⚠️ {w}\n" for w in warnings) + "\n"
    return out + _footer(req)


def unknown(req: ActionRequest) -> str:
    now = req.now()
    return (
        render.heading("OMO Configuration Manager")
        + "I didn't understand your request. Here are some examples:\n\n"
        "- `list my agents` or `show agents config`\n"
        "- `list categories` or `what categories do I have?`\n"
        "- `check for updates` or `validate my config`\n"
        "- `backup my configs` or `run diagnostics`\n"
        "- `show permissions` or `restore from backup`\n"
        "- `add a new agent called debugger`\n"
        "- `modify oracle agent`\n"
        "- `add a category called data-science`\n"
        "- `disable comment-checker hook`\n"
        "- `list my opencode models`\n\n"
        f"Context:\n- Current date: {now.strftime('%Y-%m-%d')}\n- Current time: {now.strftime('%H:%M:%S')}\n\n"
        "Or be more specific about what you want to do with your OMO/OpenCode configuration."
    )


# ---- backups ----


def backup_configs(req: ActionRequest) -> str:
    title = "Backup Configuration"
    result = req.backups.create_backup()
    req.record_backup(result)

    if not result.any_ok:
        reasons = "; ".join(f"{k}: {v}" for k, v in sorted(result.errors.items()))
        return render.failure(title, f"Error creating backup: {reasons}")

    names = [n for n in (result.agent_backup, result.provider_backup) if n]
    out = render.heading(title)
    out += "✅ Successfully backed up configs!\n\n" if result.ok else "⚠️ Backup partially completed.\n\n"
    out += "Files backed up:\n" + "".join(f"- {n}\n" for n in names)
    if result.errors:
        out += "\nFailed:\n" + "".join(f"- {k} config: {v}\n" for k, v in sorted(result.errors.items()))
    out += f"\nLocation: {result.archive_dir}\n\n"
    return out + _footer(req)


def _backup_menu(req: ActionRequest, title: str, verb: str, example: str) -> str:
    out = render.heading(title) + "Available backups:\n"
    if not req.existing_backups:
        return out + "No backups found in archive/\n"
    out += render.numbered(req.existing_backups)
    out += f'\nTo {verb}, specify which backup number to use (e.g. "{example}").\n\n'
    return out + _footer(req)


def _pick_backup(req: ActionRequest, index: int) -> Tuple[str, str]:
    backups = req.existing_backups
    if not backups:
        raise ValidationError(code="backup.none", message="No backups found in archive/.")
    if index < 1 or index > len(backups):
        raise ValidationError(
            code="backup.index_invalid",
            message=f"Invalid backup number. Please choose between 1 and {len(backups)}.",
            data={"index": index},
        )
    name = backups[index - 1]
    kind = backup_kind(name)
    if kind is None:
        raise ValidationError(code="backup.unknown_type", message=f"Unknown backup type: {name}")
    return name, kind


def _diff_keys(current: Mapping[str, Any], backup: Mapping[str, Any]) -> Tuple[List[str], List[str], List[str]]:
    added = [k for k in current if k not in backup]
    removed = [k for k in backup if k not in current]
    changed = [k for k in current if k in backup and current[k] != backup[k]]
    return added, removed, changed


def _diff_block(heading: str, current: Mapping[str, Any], backup: Mapping[str, Any]) -> str:
    added, removed, changed = _diff_keys(current, backup)
    return (
        f"### {heading}\n"
        f"- Added: {render.join_or_none(added)}\n"
        f"- Removed: {render.join_or_none(removed)}\n"
        f"- Changed: {render.join_or_none(changed)}\n\n"
    )


def compare_backup(req: ActionRequest) -> str:
    title = "Compare with Backup"
    if req.params.backup_index is None:
        return _backup_menu(req, title, "compare", "compare backup 1")

    name, kind = _pick_backup(req, req.params.backup_index)
    backup = req.backups.read_backup(name)
    current = req.document(kind)

    if kind == AGENT:
        out = render.heading(title) + f"Comparing current OMO config with **{name}**\n\n"
        out += _diff_block("Agents", _mapping(current.get("agents")), _mapping(backup.get("agents")))
        out += _diff_block("Categories", _mapping(current.get("categories")), _mapping(backup.get("categories")))

        cur_hooks = _str_list(current.get("disabled_hooks"))
        bak_hooks = _str_list(backup.get("disabled_hooks"))
        if set(cur_hooks) != set(bak_hooks):
            out += "### Disabled hooks\n"
            out += f"- Current disabled: {render.join_or_none(cur_hooks)}\n"
            out += f"- Backup disabled: {render.join_or_none(bak_hooks)}\n"
            out += f"- Disabled since backup: {render.join_or_none(h for h in cur_hooks if h not in bak_hooks)}\n"
            out += f"- Enabled since backup: {render.join_or_none(h for h in bak_hooks if h not in cur_hooks)}\n\n"
        return out + _footer(req)

    out = render.heading(title) + f"Comparing current OpenCode config with **{name}**\n\n"
    cur_plugins = _str_list(current.get("plugin"))
    bak_plugins = _str_list(backup.get("plugin"))
    if cur_plugins != bak_plugins:
        out += "### Plugins\n"
        out += f"- Current: {render.join_or_none(cur_plugins)}\n"
        out += f"- Backup: {render.join_or_none(bak_plugins)}\n\n"

    added, removed, _ = _diff_keys(_mapping(current.get("provider")), _mapping(backup.get("provider")))
    out += "### Providers\n"
    out += f"- Added: {render.join_or_none(added)}\n"
    out += f"- Removed: {render.join_or_none(removed)}\n\n"
    return out + _footer(req)


def restore_backup(req: ActionRequest) -> str:
    title = "Restore from Backup"
    if req.params.backup_index is None:
        return _backup_menu(req, title, "restore", "restore backup 2")

    name, kind = _pick_backup(req, req.params.backup_index)
    # Read first: the safety backup below may prune the chosen file.
    data = req.backups.read_backup(name)
    req.backup_before_write(kind)
    req.save(kind, data)

    label = "OMO config" if kind == AGENT else "OpenCode config"
    return render.heading(title) + f"✅ Successfully restored {label} from {name}\n\n" + _footer(req)


# ---- agents / categories ----


@dataclass(frozen=True)
class _Entity:
    label: str
    section: str
    fields: Tuple[str, ...]
    schema: str
    add_title: str
    modify_title: str
    add_example: str
    modify_example: str

    def name_of(self, params: ActionParams) -> Optional[str]:
        return params.agent_name if self.label == "agent" else params.category_name

    def data_of(self, params: ActionParams) -> Dict[str, Any]:
        raw = params.agent_data if self.label == "agent" else params.category_data
        return {k: raw[k] for k in self.fields if k in raw}


AGENT_ENTITY = _Entity(
    label="agent",
    section="agents",
    fields=("model", "temperature", "prompt_append", "permission", "description", "disable"),
    schema=AGENT_ENTRY,
    add_title="Add New Agent",
    modify_title="Modify Agent",
    add_example='"add agent debugger with model opencode/gpt-5.2 and temperature 0.2"',
    modify_example='"modify agent oracle temperature 0.3"',
)

CATEGORY_ENTITY = _Entity(
    label="category",
    section="categories",
    fields=("model", "temperature", "top_p", "maxTokens", "prompt_append"),
    schema=CATEGORY_ENTRY,
    add_title="Add New Category",
    modify_title="Modify Category",
    add_example='"add category data-science with model anthropic/claude-sonnet-4.5"',
    modify_example='"modify category quick temperature 0.1"',
)


def _current_names(req: ActionRequest, ent: _Entity) -> str:
    names = list(_mapping(req.agent_config.get(ent.section)).keys())
    if not names:
        return f"*No {ent.section} configured*\n"
    return "".join(f"- {n}\n" for n in names)


def _section_for_write(req: ActionRequest, ent: _Entity) -> Dict[str, Any]:
    section = req.agent_config.get(ent.section)
    if section is None:
        section = req.agent_config[ent.section] = {}
    if not isinstance(section, dict):
        raise ValidationError(
            code="config.section_invalid",
            message=f'"{ent.section}" in {req.store.paths.agent.name} is not an object. Fix it before editing {ent.section}.',
        )
    return section


def _add_entry(req: ActionRequest, ent: _Entity) -> str:
    name = ent.name_of(req.params)
    if not name:
        return (
            render.heading(ent.add_title)
            + f"Current {ent.section}:\n"
            + _current_names(req, ent)
            + f"\nTo add {'an' if ent.label == 'agent' else 'a'} {ent.label}, provide:\n"
            f"- {ent.label.capitalize()} name\n"
            "- Model (e.g., opencode/gpt-5.2, anthropic/claude-opus-4.5)\n"
            "- Temperature (0.0-1.0, optional)\n"
            "- Prompt append instructions (optional)\n\n"
            f"Example: {ent.add_example}"
        )

    policy = req.policy
    policy.require_allow(policy.evaluate_key(ent.label, name))
    data = ent.data_of(req.params)
    verdict = policy.evaluate_entry(ent.schema, data, require_model=True)
    if "entry.model_missing" in verdict.reason_codes:
        verdict = replace(verdict, summary=f"{verdict.summary}\n\nExample: {ent.add_example}")
    policy.require_allow(verdict)

    section = _section_for_write(req, ent)
    req.backup_before_write(AGENT)
    replaced = name in section
    section[name] = data
    req.save(AGENT)

    note = " (replaced the existing entry)" if replaced else ""
    return (
        render.heading(ent.add_title)
        + f'✅ Successfully added {ent.label} "{name}"{note}\n\n'
        + f"Configuration:\n{render.entry_json(data)}\n\n"
        + _footer(req)
    )


def _modify_entry(req: ActionRequest, ent: _Entity) -> str:
    name = ent.name_of(req.params)
    if not name:
        return (
            render.heading(ent.modify_title)
            + f"Current {ent.section}:\n"
            + _current_names(req, ent)
            + f"\nTo modify {'an' if ent.label == 'agent' else 'a'} {ent.label}, name it and the fields to change.\n\n"
            f"Example: {ent.modify_example}"
        )

    policy = req.policy
    policy.require_allow(policy.evaluate_key(ent.label, name))
    data = ent.data_of(req.params)
    policy.require_allow(policy.evaluate_entry(ent.schema, data, require_model=False))

    section = _mapping(req.agent_config.get(ent.section))
    if name not in section:
        raise ValidationError(
            code="entry.not_found",
            message=f'{ent.label.capitalize()} "{name}" not found.',
            data={"name": name},
        )
    if not data:
        raise ValidationError(
            code="entry.no_changes",
            message=f'Nothing to change for {ent.label} "{name}".\n\nExample: {ent.modify_example}',
        )

    section = _section_for_write(req, ent)
    entry = section[name]
    if not isinstance(entry, dict):
        raise ValidationError(
            code="entry.invalid",
            message=f'{ent.label.capitalize()} "{name}" in {req.store.paths.agent.name} is not an object. Fix it before modifying it.',
            data={"name": name},
        )
    req.backup_before_write(AGENT)
    entry.update(data)
    req.save(AGENT)

    return (
        render.heading(ent.modify_title)
        + f'✅ Successfully modified {ent.label} "{name}"\n\n'
        + f"Updated configuration:\n{render.entry_json(entry)}\n\n"
        + _footer(req)
    )


def add_agent(req: ActionRequest) -> str:
    return _add_entry(req, AGENT_ENTITY)


def modify_agent(req: ActionRequest) -> str:
    return _modify_entry(req, AGENT_ENTITY)


def add_category(req: ActionRequest) -> str:
    return _add_entry(req, CATEGORY_ENTITY)


def modify_category(req: ActionRequest) -> str:
    return _modify_entry(req, CATEGORY_ENTITY)


# ---- hooks ----


def _hooks_for_write(req: ActionRequest) -> List[Any]:
    raw = req.agent_config.get("disabled_hooks")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationError(
            code="config.section_invalid",
            message=f'"disabled_hooks" in {req.store.paths.agent.name} is not a list. Fix it before changing hooks.',
        )
    return list(raw)


def disable_hook(req: ActionRequest) -> str:
    title = "Disable Hook"
    hook = req.params.hook_name
    if not hook:
        return (
            render.heading(title)
            + "Available hooks:\n"
            + "".join(f"- {h}\n" for h in KNOWN_HOOKS)
            + '\nTo disable a hook, specify the hook name.\nExample: "disable hook comment-checker"'
        )

    req.policy.require_allow(req.policy.evaluate_hook(hook))
    disabled = _hooks_for_write(req)
    if hook in disabled:
        return render.heading(title) + f'ℹ️ Hook "{hook}" is already disabled.\n\n' + _footer(req)

    req.backup_before_write(AGENT)
    req.agent_config["disabled_hooks"] = disabled + [hook]
    req.save(AGENT)
    return render.heading(title) + f'✅ Successfully disabled hook "{hook}"\n\n' + _footer(req)


def enable_hook(req: ActionRequest) -> str:
    title = "Enable Hook"
    hook = req.params.hook_name
    if not hook:
        disabled = _str_list(req.agent_config.get("disabled_hooks"))
        out = render.heading(title) + "Currently disabled hooks:\n"
        out += "".join(f"- {h}\n" for h in disabled) if disabled else "*No hooks disabled*\n"
        return out + '\nTo enable a hook, specify the hook name.\nExample: "enable hook comment-checker"'

    req.policy.require_allow(req.policy.evaluate_hook(hook))
    disabled = _hooks_for_write(req)
    if hook not in disabled:
        return render.heading(title) + f'ℹ️ Hook "{hook}" is not currently disabled.'

    req.backup_before_write(AGENT)
    req.agent_config["disabled_hooks"] = [h for h in disabled if h != hook]
    req.save(AGENT)
    return render.heading(title) + f'✅ Successfully enabled hook "{hook}"\n\n' + _footer(req)
