"""
Local result cache.

Keeps the "last analysis" and "last basic results" blobs between runs.
Each key is a single slot: writing a key replaces whatever it held, so the
cache never carries history (history comes from the results query service).
Entries may carry a time-to-live; an expired entry reads as absent.
"""

import json
import time
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel, Field
from loguru import logger


ANALYSIS_KEY = "interviewAnalysis"
RESULTS_KEY = "interviewResults"


class CacheEntry(BaseModel):
    key: str
    value: Any
    stored_at: float = Field(default_factory=time.time)
    expires_at: Optional[float] = None

    def expired(self, now: Optional[float] = None) -> bool:
        return self.expires_at is not None and (now or time.time()) >= self.expires_at


class ResultCache:
    """
    File-backed single-slot key/value store.

    Values must be JSON-serialisable (pydantic models are stored through
    ``model_dump(mode="json", by_alias=True)``).
    """

    def __init__(self, cache_dir: Path):
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Result cache ready in {self.cache_dir}")

    def _path(self, key: str) -> Path:
        return self.cache_dir / f"{key}.json"

    def put(self, key: str, value: Any, ttl: Optional[float] = None):
        """Store ``value`` under ``key``, replacing any previous value."""
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json", by_alias=True)

        entry = CacheEntry(
            key=key,
            value=value,
            expires_at=time.time() + ttl if ttl is not None else None,
        )

        # Write to a temp file first, then swap it in
        temp_file = self.cache_dir / f"{key}.tmp"
        final_file = self._path(key)
        with open(temp_file, 'w', encoding='utf-8') as f:
            f.write(entry.model_dump_json(indent=2))
        temp_file.replace(final_file)
        logger.debug(f"Cached '{key}'" + (f" (ttl {ttl}s)" if ttl is not None else ""))

    def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when absent, expired or unreadable."""
        entry = self._load(key)
        return entry.value if entry else None

    def pop(self, key: str) -> Optional[Any]:
        """Return the stored value and remove it (one-time view)."""
        value = self.get(key)
        self.delete(key)
        return value

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if path.exists():
            path.unlink()
            logger.debug(f"Removed cache entry '{key}'")
            return True
        return False

    def keys(self) -> List[str]:
        return sorted(k for k in (p.stem for p in self.cache_dir.glob("*.json")) if self.get(k) is not None)

    def _load(self, key: str) -> Optional[CacheEntry]:
        path = self._path(key)
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                entry = CacheEntry(**json.load(f))
        except (OSError, ValueError) as e:
            logger.warning(f"Unreadable cache entry '{key}': {e}")
            return None

        if entry.expired():
            logger.info(f"Cache entry '{key}' expired")
            path.unlink(missing_ok=True)
            return None
        return entry
