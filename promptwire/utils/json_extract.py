from __future__ import annotations

import json
import re
from typing import Any

_FENCE = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\s*```", flags=re.IGNORECASE)


def extract_json_value(text: str) -> Any:
    """
    Decode the JSON document a model was asked to reply with.

    Chat models that lack a native structured-output mode often wrap the
    document in prose or a code fence. Tried in order:
    - the whole text is JSON
    - the first ``` / ```json fenced block
    - the first balanced { ... } object somewhere in the text
    """
    stripped = text.strip()
    if not stripped:
        raise ValueError("empty model output")
    try:
        return json.loads(stripped)
    except json.JSONDecodeError:
        pass

    fenced = _FENCE.search(stripped)
    if fenced:
        try:
            return json.loads(fenced.group(1))
        except json.JSONDecodeError:
            pass

    for m in re.finditer(r"\{", stripped):
        block = balanced_object_at(stripped, m.start())
        if block is None:
            continue
        try:
            return json.loads(block)
        except json.JSONDecodeError:
            continue

    raise ValueError("no JSON document found in model output")


def balanced_object_at(s: str, start: int) -> str | None:
    """
    Smallest substring beginning at `start` whose braces balance.
    Braces inside string literals (including escaped quotes) are ignored.
    """
    if not 0 <= start < len(s) or s[start] != "{":
        return None
    depth = 0
    in_str = False
    esc = False
    for j in range(start, len(s)):
        ch = s[j]
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
        elif ch == '"':
            in_str = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return s[start : j + 1]
    return None
