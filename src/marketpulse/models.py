"""
Lightweight typed dictionaries for the lens results written into the
dashboard snapshot (data.json) under `marketLenses`.

Everything is a plain dict with type hints, so results serialize to JSON
without any conversion step.
"""

from typing import List, TypedDict

# Keys under `marketLenses` owned by this pipeline
USAJOBS_LENS_KEY = "usajobsPulse"
ONET_LENS_KEY = "onetHotTechnologies"

# Lens status values
STATUS_DISABLED = "disabled"          # not configured (missing credentials)
STATUS_UNAVAILABLE = "unavailable"    # tried and failed
STATUS_EMPTY = "empty"                # connected, nothing usable came back
STATUS_ACTIVE = "active"

LENS_STATUSES = (STATUS_DISABLED, STATUS_UNAVAILABLE, STATUS_EMPTY, STATUS_ACTIVE)


class NameCount(TypedDict):
    name: str
    count: int


class TermCount(TypedDict):
    term: str
    count: int


class TechPostings(TypedDict):
    name: str
    postings: int


class PostingsLens(TypedDict):
    """
    Output of the USAJOBS lens.

    Notes:
    - `enabled` is True only when `status` is "active".
    - `aiFlaggedResults` never exceeds `sampledResults`.
    - `aiShareInSamplePct` is 0 when nothing was sampled.
    """

    status: str
    enabled: bool
    windowDays: int
    sampledResults: int
    aiFlaggedResults: int
    aiShareInSamplePct: float
    topOrganizations: List[NameCount]
    topAITermsInTitles: List[TermCount]
    note: str


class TaxonomyLens(TypedDict):
    """Output of the O*NET Hot Technologies lens."""

    status: str
    enabled: bool
    asOf: str  # YYYY-MM-DD
    topHotTechnologies: List[TechPostings]
    note: str
