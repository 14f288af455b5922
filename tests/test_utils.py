"""Tests for environment configuration helpers."""

import logging
import tempfile
from pathlib import Path

from synlint.utils import (
    get_float_env,
    get_int_env,
    get_str_env,
    get_synlint_cache_base,
    get_synlint_cache_dir,
    setup_logging,
)


class TestSynlintCacheDirConfig:
    """Test that SYNLINT_CACHE_DIR env var is respected."""

    def test_get_cache_base_default(self, monkeypatch):
        """Test default cache directory when no env vars are set."""
        monkeypatch.delenv('SYNLINT_CACHE_DIR', raising=False)
        monkeypatch.delenv('XDG_CACHE_HOME', raising=False)

        assert get_synlint_cache_base() == Path.home() / '.cache' / 'synlint'

    def test_get_cache_base_with_synlint_cache_dir(self, monkeypatch):
        """Test that SYNLINT_CACHE_DIR takes priority."""
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.setenv('SYNLINT_CACHE_DIR', tmpdir)
            monkeypatch.setenv('XDG_CACHE_HOME', '/should/be/ignored')

            assert get_synlint_cache_base() == Path(tmpdir) / 'synlint'

    def test_get_cache_base_with_xdg_cache_home(self, monkeypatch):
        """Test that XDG_CACHE_HOME is used when SYNLINT_CACHE_DIR is not set."""
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.delenv('SYNLINT_CACHE_DIR', raising=False)
            monkeypatch.setenv('XDG_CACHE_HOME', tmpdir)

            assert get_synlint_cache_base() == Path(tmpdir) / 'synlint'

    def test_get_cache_dir_creates_subdirectory(self, monkeypatch):
        """Test that get_synlint_cache_dir creates the subdirectory."""
        with tempfile.TemporaryDirectory() as tmpdir:
            monkeypatch.setenv('SYNLINT_CACHE_DIR', tmpdir)

            result = get_synlint_cache_dir('test_subdir')
            assert result == Path(tmpdir) / 'synlint' / 'test_subdir'
            assert result.exists()


class TestEnvHelpers:
    """Test typed environment lookups."""

    def test_int_env(self, monkeypatch):
        monkeypatch.setenv('SYNLINT_TEST_INT', '7')
        assert get_int_env('SYNLINT_TEST_INT') == 7
        monkeypatch.setenv('SYNLINT_TEST_INT', 'seven')
        assert get_int_env('SYNLINT_TEST_INT') == 0
        monkeypatch.delenv('SYNLINT_TEST_INT')
        assert get_int_env('SYNLINT_TEST_INT') == 0

    def test_float_env(self, monkeypatch):
        monkeypatch.setenv('SYNLINT_TEST_FLOAT', '2.5')
        assert get_float_env('SYNLINT_TEST_FLOAT') == 2.5
        monkeypatch.setenv('SYNLINT_TEST_FLOAT', 'soon')
        assert get_float_env('SYNLINT_TEST_FLOAT') is None

    def test_str_env(self, monkeypatch):
        monkeypatch.delenv('SYNLINT_TEST_STR', raising=False)
        assert get_str_env('SYNLINT_TEST_STR', 'fallback') == 'fallback'


class TestLogging:
    """Test logging setup."""

    def test_verbose_sets_debug(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, 'basicConfig', lambda **kwargs: calls.append(kwargs))

        setup_logging(verbose=True)

        assert calls[0]['level'] == logging.DEBUG

    def test_level_from_env(self, monkeypatch):
        calls = []
        monkeypatch.setattr(logging, 'basicConfig', lambda **kwargs: calls.append(kwargs))
        monkeypatch.setenv('SYNLINT_LOG_LEVEL', 'info')

        setup_logging()

        assert calls[0]['level'] == logging.INFO
