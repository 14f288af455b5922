"""Utility functions for synlint"""

import logging
import os
from pathlib import Path


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_int_env(key: str) -> int:
    """Get integer value from environment variable, return 0 if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return 0
    try:
        return int(val)
    except ValueError:
        return 0


def get_float_env(key: str) -> float | None:
    """Get float value from environment variable, return None if not set or invalid."""
    val = os.getenv(key)
    if val is None:
        return None
    try:
        return float(val)
    except ValueError:
        return None


def get_str_env(key: str, default: str) -> str:
    """
    Get string from environment variable, return default if not set.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        String value or default
    """
    return os.getenv(key, default)


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for CLI runs.

    Level comes from SYNLINT_LOG_LEVEL (default WARNING); --verbose forces DEBUG.
    """
    if verbose:
        level = logging.DEBUG
    else:
        level_name = get_str_env('SYNLINT_LOG_LEVEL', 'WARNING').upper()
        level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def get_synlint_cache_base() -> Path:
    """Get the base cache directory for synlint.

    Priority:
    1. SYNLINT_CACHE_DIR environment variable (if set)
    2. XDG_CACHE_HOME environment variable (if set)
    3. ~/.cache (default)

    Returns:
        Path to the base cache directory (e.g., ~/.cache/synlint)
    """
    synlint_cache = os.environ.get('SYNLINT_CACHE_DIR')
    if synlint_cache:
        base = Path(synlint_cache)
    else:
        xdg_cache = os.environ.get('XDG_CACHE_HOME')
        if xdg_cache:
            base = Path(xdg_cache)
        else:
            base = Path.home() / '.cache'

    return base / 'synlint'


def get_synlint_cache_dir(subdir: str) -> Path:
    """Get a specific cache subdirectory for synlint.

    Args:
        subdir: Subdirectory name (e.g., 'results')

    Returns:
        Path to the cache subdirectory, created if necessary
    """
    cache_dir = get_synlint_cache_base() / subdir
    cache_dir.mkdir(parents=True, exist_ok=True)
    return cache_dir
