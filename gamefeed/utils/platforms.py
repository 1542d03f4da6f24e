"""
Platform helpers: collapse upstream platform rows into display families.
"""

from typing import Any, Dict, List


def _family(name: str) -> str:
    lowered = name.lower()
    if "playstation" in lowered:
        return "Sony PS"
    if "nintendo" in lowered:
        return "Nintendo"
    if "steam" in lowered:
        return "PC"
    if "xbox" in lowered:
        return "Xbox"
    return name


def normalize_platforms(entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Map rows shaped {"platform": {"id", "name"}} to unique {"id", "name"} families.

    The first row seen for a family supplies its id. Rows without a platform name are ignored.
    """
    result: List[Dict[str, Any]] = []
    seen = set()
    for entry in entries:
        platform = entry.get("platform") if isinstance(entry, dict) else None
        if not platform or not platform.get("name"):
            continue
        family = _family(platform["name"])
        if family in seen:
            continue
        seen.add(family)
        result.append({"id": platform.get("id"), "name": family})
    return result
