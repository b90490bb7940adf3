"""
Text normalization plus flattening of USAJOBS search results.

USAJOBS nests each posting under SearchResult.SearchResultItems[*].MatchedObjectDescriptor
with PascalCase field names. We only keep what the lens needs.
"""

from typing import Any, List


class PayloadShapeError(ValueError):
    """A search response whose nesting doesn't match what USAJOBS documents."""


def normalize_text(value: Any) -> str:
    """Trimmed, lowercased string form of anything; None becomes ""."""
    if value is None:
        return ""
    return str(value).strip().lower()


def _section(parent: dict, key: str, kind: type, default):
    value = parent.get(key)
    if value is None:
        return default
    if not isinstance(value, kind):
        raise PayloadShapeError(f"{key} is {type(value).__name__}, expected {kind.__name__}")
    return value


def normalize_usajobs(results_json: dict, limit: int) -> List[dict]:
    """
    Turn a USAJOBS search response into at most `limit` posting dicts:
    {"title": str, "organization": str}.

    Organization falls back to the department when the agency name is blank.
    Missing (or null) sections yield an empty list; sections of the wrong
    type raise PayloadShapeError.
    """
    if not results_json:
        return []
    if not isinstance(results_json, dict):
        raise PayloadShapeError(f"response is {type(results_json).__name__}, expected dict")
    search_result = _section(results_json, "SearchResult", dict, {})
    items = _section(search_result, "SearchResultItems", list, [])

    out: List[dict] = []
    for x in items[:max(0, limit)]:
        if x is None:
            x = {}
        if not isinstance(x, dict):
            raise PayloadShapeError(f"search result item is {type(x).__name__}, expected dict")
        d = _section(x, "MatchedObjectDescriptor", dict, {})
        out.append({
            "title": str(d.get("PositionTitle") or "").strip(),
            "organization": str(d.get("OrganizationName") or d.get("DepartmentName") or "").strip(),
        })
    return out
