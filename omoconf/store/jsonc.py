from __future__ import annotations

import json
from typing import Any

_WS = " \t\r\n"


def strip_comments(text: str) -> str:
    """
    Remove `//` line comments and `/* */` block comments outside string literals.
    Newlines that end a line comment are kept so error positions stay meaningful.
    """
    out = []
    i = 0
    n = len(text)
    quote = ""
    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if quote:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(nxt)
                i += 2
                continue
            if ch == quote:
                quote = ""
            i += 1
            continue

        if ch in ('"', "'"):
            quote = ch
            out.append(ch)
            i += 1
            continue

        if ch == "/" and nxt == "/":
            end = text.find("\n", i + 2)
            if end == -1:
                break
            i = end
            continue

        if ch == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
            continue

        out.append(ch)
        i += 1
    return "".join(out)


def strip_trailing_commas(text: str) -> str:
    """Drop commas that are followed (after whitespace) by `}` or `]`."""
    out = []
    i = 0
    n = len(text)
    quote = ""
    while i < n:
        ch = text[i]
        if quote:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = ""
            i += 1
            continue

        if ch in ('"', "'"):
            quote = ch
        elif ch == ",":
            j = i + 1
            while j < n and text[j] in _WS:
                j += 1
            if j < n and text[j] in "}]":
                i += 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def loads_lenient(text: str) -> Any:
    """
    Parse JSON, falling back to JSONC (comments + trailing commas).

    Strict JSON is always tried first. Raises json.JSONDecodeError from the
    JSONC attempt when both fail.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return json.loads(strip_trailing_commas(strip_comments(text)))


def dumps_canonical(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
