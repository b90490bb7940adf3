"""
Client for the O*NET OnLine "Hot Technologies" export.

The download URL has moved around over time, so a short list of candidates
is tried in order and the first CSV that comes back wins.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import httpx

from marketpulse.clients._http import client_scope, get

log = logging.getLogger(__name__)

HOT_TECH_CANDIDATES: Tuple[str, ...] = (
    "https://www.onetonline.org/dl_files/hot_tech.csv",
    "https://www.onetonline.org/dl_files/hot_tech.xls",
    "https://www.onetonline.org/dl_files/hot_tech.xlsx",
)


class HotTechFetchError(RuntimeError):
    """No candidate URL produced a CSV payload."""

    def __init__(self, tried: Sequence[str], reasons: Sequence[str]):
        self.tried = list(tried)
        self.reasons = list(reasons)
        super().__init__(f"no hot technologies CSV from {len(self.tried)} candidate(s): {'; '.join(self.reasons)}")


def fetch_hot_technologies_csv(
    candidates: Sequence[str] = HOT_TECH_CANDIDATES,
    *,
    client: Optional[httpx.Client] = None,
    timeout: float = 20.0,
    attempts: int = 1,
) -> Tuple[str, str]:
    """
    Return (csv_text, url_used) for the first candidate that answers with a CSV.

    Non-CSV downloads (.xls/.xlsx) are reachable but not parsed here, so they
    are skipped. Raises HotTechFetchError once every candidate is exhausted.
    """
    reasons = []
    with client_scope(client, timeout) as c:
        for url in candidates:
            try:
                resp = get(c, url, attempts=attempts)
            except httpx.HTTPStatusError as e:
                reasons.append(f"{url} -> HTTP {e.response.status_code}")
                continue
            except httpx.HTTPError as e:
                reasons.append(f"{url} -> {type(e).__name__}")
                continue

            if not url.lower().endswith(".csv"):
                log.info(f"Skipping non-CSV export {url}")
                reasons.append(f"{url} -> not a CSV export")
                continue

            log.debug(f"Fetched hot technologies export from {url}")
            return resp.text, url

    raise HotTechFetchError(candidates, reasons)
