"""
Top-N frequency counts.

Counts are kept in a dict, so insertion order is first-seen order; sorted()
is stable, so equal counts keep that order after sorting by count.
"""

from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from marketpulse.pipeline.classify import AI_TERMS, matched_terms

T = TypeVar("T")


def _ranked(counts: Dict[str, int], limit: int) -> List[tuple]:
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:max(0, limit)]


def top_counts(
    items: Iterable[T],
    get_key: Callable[[T], Optional[str]] = lambda v: v,
    limit: int = 5,
) -> List[dict]:
    """
    [{"name", "count"}, ...] sorted by count desc, at most `limit` entries.
    Items whose key is empty or None are skipped.
    """
    counts: Dict[str, int] = {}
    for it in items:
        k = get_key(it)
        if not k:
            continue
        counts[k] = counts.get(k, 0) + 1
    return [{"name": name, "count": count} for name, count in _ranked(counts, limit)]


def top_term_counts(
    titles: Iterable[str],
    terms: Sequence[str] = AI_TERMS,
    limit: int = 6,
) -> List[dict]:
    """
    [{"term", "count"}, ...] where each title adds one to every term it matches,
    so a "Generative AI Engineer" counts for both "ai" and "generative ai".
    """
    counts: Dict[str, int] = {}
    for title in titles:
        for term in matched_terms(title, terms):
            counts[term] = counts.get(term, 0) + 1
    return [{"term": term, "count": count} for term, count in _ranked(counts, limit)]
