"""Load the character bible and build rosters from it."""
import json
import os
from typing import Any, Dict, Iterable, Mapping, Optional

from .models import Roster

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
DEFAULT_CHARACTER_BIBLE = os.path.join(BASE_DIR, "data", "bibles", "character_bible.json")


def load_character_bible(path: Optional[str] = None) -> Dict[str, Any]:
    bible_path = path or os.getenv("CHOREO_CHARACTER_BIBLE", DEFAULT_CHARACTER_BIBLE)
    if not os.path.exists(bible_path):
        return {}
    with open(bible_path, "r", encoding="utf-8") as f:
        return json.load(f)


def display_names_from_bible(bible: Mapping[str, Any]) -> Dict[str, str]:
    names: Dict[str, str] = {}
    for entry in bible.get("characters") or []:
        if not isinstance(entry, dict):
            continue
        character_id = str(entry.get("character_id") or entry.get("id") or "").strip()
        display_name = str(entry.get("display_name") or entry.get("name") or "").strip()
        if character_id and display_name:
            names[character_id] = display_name
    return names


def roster_from_bible(actor_ids: Iterable[str], bible: Optional[Mapping[str, Any]] = None) -> Roster:
    """Roster for ``actor_ids`` (seating order kept) with names from the bible."""
    ids = [a.strip() for a in actor_ids if a and a.strip()]
    names = display_names_from_bible(bible if bible is not None else load_character_bible())
    return Roster(tuple(ids), {a: names[a] for a in ids if a in names})
