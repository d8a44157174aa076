"""Isolate the first balanced JSON object from model text."""
from __future__ import annotations

import json
import re
from typing import Any, Dict

from .errors import PayloadExtractionError

_FENCE_RE = re.compile(r"```(?:json|JSON)?")


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def find_json_object(text: str) -> str:
    """Return the substring spanning the first balanced ``{...}``.

    Braces inside string literals are ignored and backslash escapes are
    honoured, so trailing prose after the object is never swallowed.
    """
    cleaned = strip_code_fences(text)
    start = cleaned.find("{")
    if start == -1:
        raise PayloadExtractionError("no structured payload found")

    depth = 0
    in_string = False
    escape_next = False
    for pos in range(start, len(cleaned)):
        ch = cleaned[pos]
        if escape_next:
            escape_next = False
            continue
        if ch == "\\" and in_string:
            escape_next = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return cleaned[start : pos + 1]
    raise PayloadExtractionError("truncated payload: unbalanced braces")


def extract_json_object(text: str) -> Dict[str, Any]:
    snippet = find_json_object(text)
    snippet = "".join(ch for ch in snippet if ch >= " " or ch in "\n\r\t")
    snippet = snippet.replace("\u0000", "")
    try:
        obj = json.loads(snippet)
    except json.JSONDecodeError as ex:
        raise PayloadExtractionError(f"invalid JSON object: {ex}") from ex
    if not isinstance(obj, dict):
        raise PayloadExtractionError("top-level JSON value must be an object")
    return obj
