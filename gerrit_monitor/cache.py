"""On-disk cache of the last fetched search results."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from .search import SearchResults

logger = logging.getLogger(__name__)


def get_cache_dir() -> Path:
    """Get the cache directory for gerrit-monitor data."""
    # Use XDG_CACHE_HOME if set, otherwise ~/.cache
    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache:
        return Path(xdg_cache) / "gerrit-monitor"
    return Path.home() / ".cache" / "gerrit-monitor"


def results_file() -> Path:
    return get_cache_dir() / "results.json"


def log_file() -> Path:
    return get_cache_dir() / "gerrit-monitor.log"


def save_results(results: SearchResults, path: Path | None = None) -> Path:
    """Save results atomically.

    Writes to a temp file first, then renames it over the old cache.
    """
    path = path or results_file()
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_file = path.with_name(path.name + ".tmp")
    with open(temp_file, "w") as f:
        json.dump(results.to_json(), f, indent=2)
    os.replace(temp_file, path)
    logger.info(f"Saved {len(results.results)} search results to {path}")
    return path


def load_results(path: Path | None = None) -> SearchResults | None:
    """Load cached results, or None if there are none."""
    path = path or results_file()
    if not path.exists():
        return None

    try:
        with open(path) as f:
            data = json.load(f)
        return SearchResults.from_json(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as e:
        logger.warning(f"Ignoring unreadable results cache {path}: {e}")
        return None
