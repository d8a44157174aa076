"""Dialogue cleanup applied before timing."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

_ACTION_RE = re.compile(r"\*+([^*]+?)\*+")
_BRACKET_PREFIX_RE = re.compile(r"^\s*\[[^\]\n]+\]:\s*")
_PLAIN_PREFIX_RE = re.compile(r"^\s*[A-Za-z][\w .'-]{0,40}:\s*(?=\*|[A-Z\"'])")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([.,!?;:])")
_WS_RE = re.compile(r"[ \t]+")
NAME_HEADER_RE = re.compile(r"\[([^\]\n]+)\]:")


@dataclass(frozen=True)
class CleanedDialogue:
    text: str
    actions: Tuple[str, ...] = ()


def clean_dialogue(text: str) -> CleanedDialogue:
    """Strip ``*stage directions*`` and return them separately as captions."""
    if not text:
        return CleanedDialogue("")
    actions: List[str] = []

    def _take(match: "re.Match[str]") -> str:
        caption = " ".join(match.group(1).split())
        if caption:
            actions.append(caption)
        return " "

    stripped = _ACTION_RE.sub(_take, text)
    stripped = stripped.replace("*", " ")
    return CleanedDialogue(normalize_spacing(stripped), tuple(actions))


def normalize_spacing(text: str) -> str:
    lines = []
    for line in text.splitlines():
        line = _WS_RE.sub(" ", line).strip()
        line = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", line)
        if line:
            lines.append(line)
    return " ".join(lines)


def strip_name_prefix(text: str, names: Optional[Iterable[str]] = None) -> str:
    """Remove a leading ``[Name]:`` or ``Name:`` speaker label.

    A bare ``Name:`` label is only removed when ``names`` is None or the label
    matches one of ``names`` (case-insensitive).
    """
    text = text or ""
    cleaned = _BRACKET_PREFIX_RE.sub("", text, count=1)
    if cleaned != text:
        return cleaned.strip()
    match = _PLAIN_PREFIX_RE.match(text)
    if match is None:
        return text.strip()
    label = match.group(0).strip().rstrip(":").strip().lower()
    if names is not None and label not in {n.strip().lower() for n in names if n}:
        return text.strip()
    return text[match.end() :].strip()


def name_headers(text: str) -> List[str]:
    return [m.group(1).strip() for m in NAME_HEADER_RE.finditer(text or "")]


def split_on_name_headers(text: str) -> List[Tuple[str, str]]:
    """``[(name, fragment)]`` for every ``[Name]:`` header in ``text``.

    Text before the first header is returned with an empty name.
    """
    pieces: List[Tuple[str, str]] = []
    matches = list(NAME_HEADER_RE.finditer(text or ""))
    if not matches:
        return [("", (text or "").strip())]
    lead = text[: matches[0].start()].strip()
    if lead:
        pieces.append(("", lead))
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        pieces.append((match.group(1).strip(), text[match.end() : end].strip()))
    return pieces
