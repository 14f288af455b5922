"""Pytest configuration and shared fixtures for synlint tests.

This module provides auto-use fixtures that ensure test isolation,
particularly for cache directories and environment configuration.
"""

import shutil
import tempfile

import pytest


VALID_SOURCE = 'def greet(name):\n    return f"hello {name}"\n'

INVALID_SOURCE = 'a = 1\nb = 2\nc = = 3\n'


@pytest.fixture(autouse=True)
def isolate_cache_directory(monkeypatch):
    """Auto-use fixture that isolates cache directory for each test.

    This fixture:
    1. Creates a temporary directory for the test's cache
    2. Sets SYNLINT_CACHE_DIR environment variable to point to it
    3. Clears other SYNLINT_* settings that would change behavior
    4. Cleans up the directory after the test completes
    """
    temp_cache_dir = tempfile.mkdtemp(prefix='synlint_test_cache_')

    monkeypatch.setenv('SYNLINT_CACHE_DIR', temp_cache_dir)
    for key in ('SYNLINT_PROCESS_LIMIT', 'SYNLINT_TASK_TIMEOUT', 'SYNLINT_LOG_LEVEL', 'SYNLINT_PHP_BINARY'):
        monkeypatch.delenv(key, raising=False)

    yield temp_cache_dir

    shutil.rmtree(temp_cache_dir, ignore_errors=True)


@pytest.fixture
def temp_cache_dir(isolate_cache_directory):
    """Path of the isolated cache directory for this test."""
    return isolate_cache_directory


@pytest.fixture
def project(tmp_path):
    """A small project with two valid files and one invalid file.

    Layout:
        src/app.py        valid
        src/pkg/util.py   valid
        src/broken.py     syntax error on line 3
        src/notes.txt     not a python file
    """
    src = tmp_path / 'src'
    (src / 'pkg').mkdir(parents=True)
    (src / 'app.py').write_text(VALID_SOURCE)
    (src / 'pkg' / 'util.py').write_text('VALUE = 42\n')
    (src / 'broken.py').write_text(INVALID_SOURCE)
    (src / 'notes.txt').write_text('def not python(\n')
    return tmp_path
