"""
Build the two market-pulse lenses.

Each builder always returns a lens dict. Source problems (missing keys,
HTTP errors, odd payloads) become a non-active status with a note; nothing
raised by a source escapes from here.
"""

from __future__ import annotations

import csv
import logging
import math
from typing import Iterable, List, Optional

import httpx
import pandas as pd

from marketpulse.clients.onet import HOT_TECH_CANDIDATES, HotTechFetchError, fetch_hot_technologies_csv
from marketpulse.clients.usajobs import usajobs_search
from marketpulse.config import Settings
from marketpulse.io.snapshot import utc_today
from marketpulse.models import (
    STATUS_ACTIVE,
    STATUS_DISABLED,
    STATUS_EMPTY,
    STATUS_UNAVAILABLE,
    PostingsLens,
    TaxonomyLens,
    TechPostings,
)
from marketpulse.pipeline.aggregate import top_counts, top_term_counts
from marketpulse.pipeline.classify import title_has_ai
from marketpulse.pipeline.normalize import PayloadShapeError, normalize_usajobs

log = logging.getLogger(__name__)

TOP_ORGANIZATIONS = 5
TOP_TERMS = 6
TOP_TECHNOLOGIES = 12


# ---- USAJOBS -----------------------------------------------------------------

def _postings_lens(status: str, window_days: int, note: str, **computed) -> PostingsLens:
    lens: PostingsLens = {
        "status": status,
        "enabled": status == STATUS_ACTIVE,
        "windowDays": window_days,
        "sampledResults": 0,
        "aiFlaggedResults": 0,
        "aiShareInSamplePct": 0.0,
        "topOrganizations": [],
        "topAITermsInTitles": [],
        "note": note,
    }
    lens.update(computed)
    return lens


def ai_share_pct(flagged: int, sampled: int) -> float:
    if not sampled:
        return 0.0
    return round(flagged / sampled * 100, 2)


def summarize_postings(postings: List[dict], window_days: int) -> PostingsLens:
    """Classify + aggregate an already-fetched sample into an active lens."""
    titles = [p.get("title") or "" for p in postings]
    flagged = sum(1 for t in titles if title_has_ai(t))
    return _postings_lens(
        STATUS_ACTIVE,
        window_days,
        "Computed from USAJOBS Search API (open federal postings).",
        sampledResults=len(postings),
        aiFlaggedResults=flagged,
        aiShareInSamplePct=ai_share_pct(flagged, len(postings)),
        topOrganizations=top_counts(postings, lambda p: p.get("organization"), TOP_ORGANIZATIONS),
        topAITermsInTitles=top_term_counts(titles, limit=TOP_TERMS),
    )


def build_usajobs_pulse(settings: Settings, *, client: Optional[httpx.Client] = None) -> PostingsLens:
    window = settings.window_days

    if not settings.has_usajobs_credentials:
        log.info("USAJOBS lens disabled: credentials not set")
        return _postings_lens(
            STATUS_DISABLED,
            window,
            "Missing USAJOBS_API_KEY / USAJOBS_USER_AGENT. Add them as secrets to enable this lens.",
        )

    try:
        raw = usajobs_search(
            settings.usajobs_api_key,
            settings.usajobs_user_agent,
            window_days=window,
            results_per_page=settings.max_results,
            client=client,
            timeout=settings.http_timeout,
            attempts=settings.http_attempts,
        )
    except httpx.HTTPStatusError as e:
        code = e.response.status_code
        log.warning(f"USAJOBS search failed with HTTP {code}")
        return _postings_lens(
            STATUS_UNAVAILABLE,
            window,
            f"USAJOBS Search API error {code}. Check key/user-agent headers.",
        )
    except httpx.HTTPError as e:
        log.warning(f"USAJOBS search unreachable: {e!r}")
        return _postings_lens(
            STATUS_UNAVAILABLE,
            window,
            f"USAJOBS Search API unreachable ({type(e).__name__}).",
        )
    except ValueError:
        log.warning("USAJOBS search returned a non-JSON body")
        return _postings_lens(STATUS_UNAVAILABLE, window, "USAJOBS Search API returned a payload that is not JSON.")

    if not isinstance(raw, dict):
        return _postings_lens(STATUS_UNAVAILABLE, window, "USAJOBS Search API returned an unexpected payload shape.")

    try:
        postings = normalize_usajobs(raw, settings.max_results)
    except PayloadShapeError as e:
        log.warning(f"USAJOBS search payload could not be parsed: {e}")
        return _postings_lens(
            STATUS_UNAVAILABLE,
            window,
            f"USAJOBS Search API payload could not be parsed ({e}).",
        )
    if not postings:
        log.info("USAJOBS search returned no postings")
        return _postings_lens(
            STATUS_EMPTY,
            window,
            f"USAJOBS Search API returned no postings for the last {window} days. Check the keyword query and window.",
        )

    lens = summarize_postings(postings, window)
    log.info(
        f"USAJOBS lens: {lens['aiFlaggedResults']}/{lens['sampledResults']} AI-flagged "
        f"({lens['aiShareInSamplePct']}%)"
    )
    return lens


# ---- O*NET Hot Technologies --------------------------------------------------

def _taxonomy_lens(status: str, as_of: str, note: str, top: Optional[List[TechPostings]] = None) -> TaxonomyLens:
    return {
        "status": status,
        "enabled": status == STATUS_ACTIVE,
        "asOf": as_of,
        "topHotTechnologies": top or [],
        "note": note,
    }


def data_lines(csv_text: str) -> List[str]:
    """Non-blank lines; handles both \\n and \\r\\n."""
    return [ln for ln in (csv_text or "").splitlines() if ln.strip()]


def _split_line(line: str) -> tuple:
    # Each line is read on its own so a stray quote can't swallow the next row.
    # Lines the csv module rejects (oversized fields) fall back to a plain split.
    try:
        row = next(csv.reader([line]), [])
    except csv.Error:
        row = line.split(",")
    # Column 0 is the posting count ("1,234" with quotes in some exports);
    # anything after it is the technology name, re-joined if it held commas.
    raw_count = row[0].replace('"', "").replace(",", "").strip() if row else ""
    name = ",".join(row[1:]).replace('"', "").strip()
    return raw_count, name


def parse_hot_technologies(rows: Iterable[str], limit: int = TOP_TECHNOLOGIES) -> List[TechPostings]:
    """
    Rank data rows (header already removed) by posting count.

    Non-numeric counts become 0 and still rank; rows with an empty name are
    dropped. Equal counts keep file order.
    """
    records = [_split_line(line) for line in rows]
    df = pd.DataFrame(records, columns=["raw_count", "name"])
    if df.empty:
        return []

    df["postings"] = (
        pd.to_numeric(df["raw_count"], errors="coerce")
        .replace([math.inf, -math.inf], math.nan)
        .fillna(0)
    )
    df = df[df["name"] != ""]
    df = df.sort_values("postings", ascending=False, kind="stable").head(limit)

    return [{"name": name, "postings": int(postings)} for name, postings in zip(df["name"], df["postings"])]


def build_onet_hot_technologies(
    settings: Settings,
    *,
    client: Optional[httpx.Client] = None,
    candidates=HOT_TECH_CANDIDATES,
    as_of: Optional[str] = None,
) -> TaxonomyLens:
    as_of = as_of or utc_today()

    try:
        csv_text, used_url = fetch_hot_technologies_csv(
            candidates,
            client=client,
            timeout=settings.http_timeout,
            attempts=settings.http_attempts,
        )
    except HotTechFetchError as e:
        log.warning(str(e))
        return _taxonomy_lens(
            STATUS_UNAVAILABLE,
            as_of,
            f"Could not fetch O*NET Hot Technologies CSV from any of {len(e.tried)} candidate export URL(s).",
        )

    lines = data_lines(csv_text)
    if len(lines) < 2:
        return _taxonomy_lens(STATUS_EMPTY, as_of, "O*NET CSV returned, but did not contain expected rows.")

    top = parse_hot_technologies(lines[1:])
    if not top:
        return _taxonomy_lens(STATUS_EMPTY, as_of, f"O*NET CSV from {used_url} had no named technologies.")

    log.info(f"O*NET lens: {len(top)} technologies from {used_url}")
    return _taxonomy_lens(
        STATUS_ACTIVE,
        as_of,
        f"From O*NET OnLine Hot Technologies export ({used_url}) as of {as_of}.",
        top,
    )
