"""
Helpers for multilingual fields.

Titles, names and link captions are stored once per language with the
suffixes ``_en``, ``_ru`` and ``_ua`` next to an unsuffixed default.
"""

from typing import Any, Dict, Optional

from wedding_planner_api.app.state.preferences import DEFAULT_LANGUAGE, LANGUAGES


def localized(item: Dict[str, Any], field: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Return ``field`` in ``language`` with a fallback to any filled variant."""
    if language in LANGUAGES and item.get(f"{field}_{language}"):
        return item[f"{field}_{language}"]
    for candidate in (field, f"{field}_en", f"{field}_ru", f"{field}_ua"):
        if item.get(candidate):
            return item[candidate]
    return ""


def first_filled(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value and value.strip():
            return value.strip()
    return None


def main_name(names: Dict[str, Optional[str]]) -> Optional[str]:
    """Primary name of a document: the first filled of en, ru, ua."""
    return first_filled(names.get("name_en"), names.get("name_ru"), names.get("name_ua"))
