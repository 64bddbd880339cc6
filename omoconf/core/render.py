from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Iterable, Mapping, Sequence


def heading(title: str) -> str:
    return f"## {title}\n\n"


def failure(title: str, message: str) -> str:
    return f"{heading(title)}❌ {message}"


def stamp(now: datetime) -> str:
    return f"Current date: {now.strftime('%Y-%m-%d')}\nCurrent time: {now.strftime('%H:%M:%S')}"


def cell(value: Any) -> str:
    # Pipes would split the Markdown cell.
    return str(value).replace("|", "\\|").replace("\n", " ")


def table(headers: Sequence[str], rows: Iterable[Sequence[Any]], *, empty: str) -> str:
    out = "| " + " | ".join(headers) + " |\n"
    out += "|" + "|".join("-" * (len(h) + 2) for h in headers) + "|\n"
    rendered = ["| " + " | ".join(cell(v) for v in row) + " |\n" for row in rows]
    if not rendered:
        rendered = ["| " + " | ".join([empty] + [""] * (len(headers) - 1)) + " |\n"]
    return out + "".join(rendered)


def join_or_none(items: Iterable[str]) -> str:
    items = list(items)
    return ", ".join(items) if items else "*none*"


def numbered(items: Iterable[str]) -> str:
    return "".join(f"{i}. {name}\n" for i, name in enumerate(items, start=1))


def fmt_number(v: Any) -> str:
    if isinstance(v, bool) or v is None:
        return "N/A"
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v)


def redact_for_display(entry: Mapping[str, Any]) -> dict:
    """
    Copy of an agent/category entry safe to echo back to the user.
    prompt_append becomes `<redacted: N chars>`; an empty string stays empty.
    """
    out = dict(entry)
    v = out.get("prompt_append")
    if isinstance(v, str):
        out["prompt_append"] = f"<redacted: {len(v)} chars>" if v else ""
    return out


def entry_json(entry: Mapping[str, Any]) -> str:
    return json.dumps(redact_for_display(entry), indent=2, ensure_ascii=False)
