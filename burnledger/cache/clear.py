"""Deletion of cache files with a per-file outcome."""

import logging
from pathlib import Path

from burnledger.models.enums import ClearStatus
from burnledger.models.reports import CacheClearResult

logger = logging.getLogger(__name__)


def clear_cache_files(paths: list[Path]) -> list[CacheClearResult]:
    results = []
    for path in paths:
        if not path.exists():
            results.append(CacheClearResult(file=str(path), status=ClearStatus.NOT_FOUND))
            continue
        try:
            path.unlink()
        except OSError as exc:
            logger.error("Failed to delete cache file %s: %s", path, exc)
            results.append(CacheClearResult(file=str(path), status=ClearStatus.ERROR, error=str(exc)))
            continue
        logger.info("Deleted cache file %s", path)
        results.append(CacheClearResult(file=str(path), status=ClearStatus.DELETED))
    return results
