"""Shared fixtures: fake HTTP transport, settings and a sample snapshot."""

from __future__ import annotations

import json
from typing import Callable, Dict, List

import httpx
import pytest

from marketpulse.config import Settings


def usajobs_payload(titles: List[str], orgs: List[str] = None) -> Dict:
    """A USAJOBS search response with one item per title."""
    orgs = orgs or ["Department of Testing"] * len(titles)
    return {
        "SearchResult": {
            "SearchResultCount": len(titles),
            "SearchResultItems": [
                {"MatchedObjectDescriptor": {"PositionTitle": t, "OrganizationName": o}}
                for t, o in zip(titles, orgs)
            ],
        }
    }


HOT_TECH_CSV = (
    'Job Postings,Hot Technology\n'
    '"12,500",Python\n'
    '9800,Microsoft Excel\n'
    '15000,"Amazon Web Services AWS, cloud"\n'
)


@pytest.fixture
def sample_document() -> Dict:
    return {
        "hero": {"title": "AI Skills at Work", "subtitle": "Executive view"},
        "coreSkills": [
            {"name": "Prompting", "level": 3},
            {"name": "Data literacy", "level": 4},
        ],
        "sources": [{"label": "USAJOBS", "url": "https://www.usajobs.gov"}],
        "lastUpdated": "2024-01-01",
        "marketLenses": {
            "usajobsPulse": {"enabled": True, "sampledResults": 999, "note": "old"},
            "adzunaUSSnapshot": {"enabled": False, "note": "kept as-is"},
        },
    }


@pytest.fixture
def snapshot_file(tmp_path, sample_document):
    path = tmp_path / "data.json"
    path.write_text(json.dumps(sample_document, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def settings(snapshot_file) -> Settings:
    return Settings(
        usajobs_api_key="test-key",
        usajobs_user_agent="tester@example.edu",
        data_path=snapshot_file,
    )


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.Client]:
    """Build an httpx.Client whose requests go to `handler` instead of the network."""
    clients = []

    def _make(handler):
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def both_sources_handler():
    """Handler answering USAJOBS with 3 postings and O*NET with HOT_TECH_CSV."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "data.usajobs.gov":
            return httpx.Response(200, json=usajobs_payload(
                ["AI Engineer", "Chairperson", "Machine Learning Scientist"],
                ["NASA", "Department of Education", "NASA"],
            ))
        if request.url.path.endswith("hot_tech.csv"):
            return httpx.Response(200, text=HOT_TECH_CSV)
        return httpx.Response(404)

    return handler
