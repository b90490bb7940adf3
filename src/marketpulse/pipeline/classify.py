"""
AI-term classifier for job titles.

"ai" is special-cased to whole words so "Chairperson" or "Said" don't count;
every other term is a plain substring check on the lowercased title.
"""

import re
from typing import List, Sequence

from marketpulse.pipeline.normalize import normalize_text

# Keep this list short + executive.
AI_TERMS: Sequence[str] = (
    "ai",
    "artificial intelligence",
    "generative ai",
    "chatgpt",
    "llm",
    "machine learning",
    "prompt",
)

WORD_TERM = "ai"
_WORD_AI_RE = re.compile(r"\bai\b")


def _term_in(term: str, text: str) -> bool:
    if term == WORD_TERM:
        return bool(_WORD_AI_RE.search(text))
    return term in text


def matched_terms(title, terms: Sequence[str] = AI_TERMS) -> List[str]:
    """Vocabulary terms found in `title`, in vocabulary order."""
    t = normalize_text(title)
    if not t:
        return []
    return [term for term in terms if _term_in(term, t)]


def title_has_ai(title, terms: Sequence[str] = AI_TERMS) -> bool:
    t = normalize_text(title)
    if not t:
        return False
    return any(_term_in(term, t) for term in terms)
