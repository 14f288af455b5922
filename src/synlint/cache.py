"""Result cache: which files passed, and with what content.

ResultCache is the in-memory oracle consulted by the linter: a file whose
current fingerprint equals its recorded one is skipped. CacheStore persists
the replacement cache a run produces. All cache files live in
$SYNLINT_CACHE_DIR/results/ (or ~/.cache/synlint/results/).

Cache behavior:
- Fingerprint: MD5 of the file bytes; any content change forces a recheck
- Save: full replacement, entries of files absent from the run are dropped
- Load: a missing, unreadable, other-version or other-checker file is an empty cache
"""

import hashlib
import json
import logging
import os
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from synlint.models import CacheFile
from synlint.utils import get_synlint_cache_dir


logger = logging.getLogger(__name__)

# Cache format version - increment when format changes
CACHE_VERSION = 1

FINGERPRINT_CHUNK_BYTES = 1024 * 1024


def fingerprint(path: str) -> str | None:
    """Content fingerprint of a file, None if it cannot be read."""
    digest = hashlib.md5(usedforsecurity=False)
    try:
        with open(path, 'rb') as f:
            for chunk in iter(lambda: f.read(FINGERPRINT_CHUNK_BYTES), b''):
                digest.update(chunk)
    except OSError as e:
        logger.warning(f'Cannot fingerprint {path}: {e}')
        return None
    return digest.hexdigest()


class ResultCache:
    """In-memory mapping of relative key -> fingerprint."""

    def __init__(self, entries=None):
        if isinstance(entries, Mapping):
            self._entries: dict[str, str] = {str(k): str(v) for k, v in entries.items()}
        else:
            self._entries = {}

    def get(self, key: str) -> str | None:
        return self._entries.get(key)

    def is_valid(self, key: str, current_fingerprint: str | None) -> bool:
        """True when an entry exists for key and matches the current fingerprint."""
        if current_fingerprint is None:
            return False
        return self._entries.get(key) == current_fingerprint

    def to_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __contains__(self, key) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def get_results_cache_dir() -> Path:
    """Get the result cache directory path.

    Returns:
        Path to $SYNLINT_CACHE_DIR/results/ (or ~/.cache/synlint/results/)
    """
    return get_synlint_cache_dir('results')


def get_cache_key(project_path: str) -> str:
    """Generate cache key for a project directory.

    Uses SHA256 hash of absolute path (first 16 chars) plus directory name
    to create a unique but identifiable cache filename.

    Args:
        project_path: Project directory (usually the working directory)

    Returns:
        Cache key (filename-safe string)
    """
    abs_path = os.path.abspath(project_path)
    path_hash = hashlib.sha256(abs_path.encode('utf-8')).hexdigest()[:16]
    basename = os.path.basename(abs_path.rstrip(os.sep)) or 'root'
    safe_basename = ''.join(c if c.isalnum() or c in '._-' else '_' for c in basename)
    return f'{safe_basename}_{path_hash}'


def get_cache_path(project_path: str | None = None) -> Path:
    """Default cache file for a project directory (cwd if not given)."""
    return get_results_cache_dir() / f'{get_cache_key(project_path or os.getcwd())}.json'


class CacheStore:
    """JSON persistence for the result cache of one project and checker."""

    def __init__(self, path: str | Path | None = None, checker: str = 'python'):
        self.path = Path(path) if path else get_cache_path()
        self.checker = checker

    def load(self) -> dict[str, str]:
        """Load persisted entries, {} when there is nothing usable."""
        if not self.path.exists():
            logger.debug(f'No cache found at {self.path}')
            return {}

        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)

            if not isinstance(data, dict) or data.get('version') != CACHE_VERSION:
                logger.debug(f'Cache version mismatch at {self.path}')
                return {}

            cache_file = CacheFile.model_validate(data)

            if cache_file.checker != self.checker:
                logger.debug(f'Cache at {self.path} belongs to checker {cache_file.checker}, not {self.checker}')
                return {}

            logger.debug(f'Loaded {len(cache_file.entries)} cache entries from {self.path}')
            return cache_file.entries

        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f'Failed to load cache from {self.path}: {e}')
            return {}

    def save(self, entries: Mapping[str, str]) -> bool:
        """Replace the persisted cache with entries.

        Returns:
            True if saved successfully, False otherwise
        """
        cache_file = CacheFile(
            version=CACHE_VERSION,
            checker=self.checker,
            updated_at=datetime.now().isoformat(),
            entries=dict(entries),
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(cache_file.model_dump(mode='json'), f, indent=2, sort_keys=True)
        except OSError as e:
            logger.warning(f'Failed to save cache to {self.path}: {type(e).__name__}: {e}')
            return False

        logger.info(f'Saved {len(cache_file.entries)} cache entries to {self.path}')
        return True

    def info(self) -> CacheFile | None:
        """Raw envelope of the persisted cache, regardless of checker."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, encoding='utf-8') as f:
                return CacheFile.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f'Failed to read cache from {self.path}: {e}')
            return None

    def delete(self) -> bool:
        """Delete the persisted cache.

        Returns:
            True if deleted, False if it didn't exist or on error
        """
        try:
            if self.path.exists():
                self.path.unlink()
                logger.info(f'Deleted cache {self.path}')
                return True
            return False
        except OSError as e:
            logger.warning(f'Failed to delete cache {self.path}: {e}')
            return False


def clear_all_caches() -> int:
    """Clear all cached results.

    Returns:
        Number of cache files deleted
    """
    cache_dir = get_results_cache_dir()
    count = 0

    for cache_file in cache_dir.glob('*.json'):
        try:
            cache_file.unlink()
            count += 1
        except OSError as e:
            logger.warning(f'Failed to delete {cache_file}: {e}')

    logger.info(f'Cleared {count} result cache files')
    return count
