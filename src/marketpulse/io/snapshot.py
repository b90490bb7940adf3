"""
Read, merge and write the dashboard snapshot (data.json).

The refresh only owns `marketLenses.<lens>` and `lastUpdated`; every other
top-level field is passed through untouched. Writes go to a temp file in the
same directory and are swapped in with os.replace, so a crash mid-write
leaves the previous file intact.
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from marketpulse.models import (
    LENS_STATUSES,
    STATUS_ACTIVE,
    STATUS_DISABLED,
    STATUS_EMPTY,
    STATUS_UNAVAILABLE,
)

log = logging.getLogger(__name__)

STATE_ABSENT = "absent"

KIND_POSTINGS = "postings"
KIND_TECHNOLOGIES = "technologies"


class SnapshotError(RuntimeError):
    """The snapshot could not be read or written. Fatal for a refresh run."""


def utc_today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def load_snapshot(path: Path) -> Dict[str, Any]:
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotError(f"cannot read snapshot {path}: {e}") from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SnapshotError(f"snapshot {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SnapshotError(f"snapshot {path} must be a JSON object, got {type(data).__name__}")
    return data


def merge_lenses(document: Mapping[str, Any], lenses: Mapping[str, dict], today: str) -> Dict[str, Any]:
    """
    Return a new document with `lenses` replacing their keys in marketLenses
    and lastUpdated set to `today`. Other lens keys already present are kept.
    `document` is not modified.
    """
    existing = document.get("marketLenses")
    if not isinstance(existing, dict):
        existing = {}
    merged = dict(document)
    merged["marketLenses"] = {**existing, **lenses}
    merged["lastUpdated"] = today
    return merged


def save_snapshot(path: Path, document: Mapping[str, Any]) -> None:
    path = Path(path)
    directory = path.parent if str(path.parent) else Path(".")
    tmp_name = None
    replaced = False
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=directory,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_name = f.name
            json.dump(document, f, indent=2, ensure_ascii=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            # NamedTemporaryFile is created 0600; keep the published file's mode
            os.chmod(tmp_name, stat.S_IMODE(path.stat().st_mode))
        os.replace(tmp_name, path)  # atomic on POSIX
        replaced = True
    except (OSError, TypeError, ValueError) as e:
        raise SnapshotError(f"cannot write snapshot {path}: {e}") from e
    finally:
        if not replaced and tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    log.info(f"Wrote snapshot {path}")


# ---- Read side ---------------------------------------------------------------

@dataclass(frozen=True)
class LensView:
    """
    One lens from marketLenses with every field defaulted, so renderers never
    need to probe for missing keys. Works for both lens shapes.
    """

    key: str
    kind: str  # "postings" or "technologies"
    status: str
    enabled: bool
    note: str = ""
    window_days: Optional[int] = None
    sampled_results: int = 0
    ai_flagged_results: int = 0
    ai_share_pct: float = 0.0
    as_of: str = ""
    breakdown: List[dict] = field(default_factory=list)
    terms: List[dict] = field(default_factory=list)


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _infer_status(raw: Mapping[str, Any]) -> str:
    # Documents written before `status` existed only carry `enabled`
    status = raw.get("status")
    if status in LENS_STATUSES:
        return status
    if not raw.get("enabled"):
        return STATUS_DISABLED
    if "sampledResults" in raw and _as_int(raw.get("sampledResults")) == 0:
        return STATUS_EMPTY
    if "topHotTechnologies" in raw and not raw.get("topHotTechnologies"):
        return STATUS_EMPTY
    return STATUS_ACTIVE


def _list_of_dicts(value: Any) -> List[dict]:
    if not isinstance(value, list):
        return []
    return [dict(v) for v in value if isinstance(v, dict)]


def lens_view(key: str, raw: Mapping[str, Any]) -> LensView:
    status = _infer_status(raw)
    if "topHotTechnologies" in raw:
        kind = KIND_TECHNOLOGIES
        breakdown = _list_of_dicts(raw.get("topHotTechnologies"))
    else:
        kind = KIND_POSTINGS
        breakdown = _list_of_dicts(raw.get("topOrganizations"))
    window = raw.get("windowDays")
    return LensView(
        key=key,
        kind=kind,
        status=status,
        enabled=status == STATUS_ACTIVE,
        note=str(raw.get("note") or ""),
        window_days=_as_int(window) if window is not None else None,
        sampled_results=_as_int(raw.get("sampledResults")),
        ai_flagged_results=_as_int(raw.get("aiFlaggedResults")),
        ai_share_pct=_as_float(raw.get("aiShareInSamplePct")),
        as_of=str(raw.get("asOf") or ""),
        breakdown=breakdown,
        terms=_list_of_dicts(raw.get("topAITermsInTitles")),
    )


def read_market_lenses(document: Mapping[str, Any]) -> Dict[str, LensView]:
    """Typed views of every lens in the document; non-dict entries are ignored."""
    lenses = document.get("marketLenses")
    if not isinstance(lenses, dict):
        return {}
    return {k: lens_view(k, v) for k, v in lenses.items() if isinstance(v, dict)}


def lens_state(view: Optional[LensView]) -> str:
    """absent | disabled | unavailable | empty | active"""
    if view is None:
        return STATE_ABSENT
    return view.status


def describe_lens(key: str, view: Optional[LensView]) -> str:
    """One-line operator/renderer message for a lens in any state."""
    state = lens_state(view)
    if state == STATE_ABSENT:
        return f"{key}: not available (marketLenses.{key} missing from snapshot)"
    if state == STATUS_DISABLED:
        return f"{key}: not connected. {view.note or 'Add credentials to enable this lens.'}"
    if state == STATUS_UNAVAILABLE:
        return f"{key}: source unavailable. {view.note}".rstrip()
    if state == STATUS_EMPTY:
        return f"{key}: connected, nothing returned. {view.note}".rstrip()
    if view.kind == KIND_TECHNOLOGIES:
        names = ", ".join(str(t.get("name", "")) for t in view.breakdown[:3])
        return f"{key}: {len(view.breakdown)} technologies as of {view.as_of} (top: {names})"
    return (
        f"{key}: {view.ai_share_pct:.2f}% AI-flagged "
        f"({view.ai_flagged_results}/{view.sampled_results} postings, last {view.window_days or '-'} days)"
    )
