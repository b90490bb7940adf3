"""
Plain-function client for the USAJOBS Search API.

Returns raw JSON (dict); flattening happens in pipeline.normalize.
The API wants the caller's email as User-Agent plus an Authorization-Key.
"""

from __future__ import annotations

from typing import Dict, Optional

import httpx

from marketpulse.clients._http import client_scope, get

SEARCH_URL = "https://data.usajobs.gov/api/search"
HOST = "data.usajobs.gov"

# The API serves at most 500 results per page
MAX_PAGE_SIZE = 500

# Broad on purpose; titles are classified again locally.
AI_KEYWORD_QUERY = (
    'AI OR "artificial intelligence" OR "machine learning" OR LLM OR ChatGPT '
    'OR "generative AI" OR "prompt engineering"'
)


def _auth_headers(api_key: str, user_agent: str) -> Dict[str, str]:
    return {
        "Host": HOST,
        "User-Agent": user_agent,
        "Authorization-Key": api_key,
    }


def usajobs_search(
    api_key: str,
    user_agent: str,
    *,
    keyword: str = AI_KEYWORD_QUERY,
    window_days: int = 30,
    results_per_page: int = MAX_PAGE_SIZE,
    page: int = 1,
    client: Optional[httpx.Client] = None,
    timeout: float = 20.0,
    attempts: int = 1,
) -> Dict:
    """
    Fetch ONE page of search results and return the raw JSON dict.

    - window_days goes out as DatePosted (postings opened in the last N days).
    - results_per_page is capped at MAX_PAGE_SIZE.

    Raises httpx.HTTPStatusError on 4xx/5xx, httpx.TransportError when the
    host can't be reached, and ValueError when the body is not JSON.
    """
    params: Dict[str, str] = {
        "Keyword": keyword,
        "ResultsPerPage": str(min(results_per_page, MAX_PAGE_SIZE)),
        "Page": str(page),
        "DatePosted": str(window_days),
    }
    with client_scope(client, timeout) as c:
        resp = get(
            c,
            SEARCH_URL,
            params=params,
            headers=_auth_headers(api_key, user_agent),
            attempts=attempts,
        )
        return resp.json()
