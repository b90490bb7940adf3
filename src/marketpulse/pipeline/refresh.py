"""
One refresh run: load snapshot -> build both lenses -> merge -> write.

Only SnapshotError (read/write of data.json) escapes; lens problems are
already folded into the lens dicts by the builders.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx

from marketpulse.config import Settings
from marketpulse.io.snapshot import load_snapshot, merge_lenses, save_snapshot, utc_today
from marketpulse.models import ONET_LENS_KEY, USAJOBS_LENS_KEY
from marketpulse.pipeline.lenses import build_onet_hot_technologies, build_usajobs_pulse

log = logging.getLogger(__name__)


def build_lenses(
    settings: Settings,
    *,
    client: Optional[httpx.Client] = None,
    today: Optional[str] = None,
) -> Dict[str, dict]:
    """Both lenses keyed by their marketLenses name. The two are independent."""
    today = today or utc_today()
    return {
        USAJOBS_LENS_KEY: build_usajobs_pulse(settings, client=client),
        ONET_LENS_KEY: build_onet_hot_technologies(settings, client=client, as_of=today),
    }


def run_refresh(
    settings: Settings,
    *,
    client: Optional[httpx.Client] = None,
    dry_run: bool = False,
    today: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Refresh marketLenses + lastUpdated in settings.data_path and return the
    merged document. With dry_run the document is built but not written.

    Raises SnapshotError when the snapshot can't be read or written.
    """
    start_time = time.time()
    today = today or utc_today()

    document = load_snapshot(settings.data_path)
    lenses = build_lenses(settings, client=client, today=today)
    merged = merge_lenses(document, lenses, today)

    for key, lens in lenses.items():
        log.info(f"{key}: status={lens['status']}")

    if dry_run:
        log.info("Dry run; snapshot not written")
    else:
        save_snapshot(settings.data_path, merged)

    log.info(f"Refresh finished (took {time.time() - start_time:.2f}s)")
    return merged
