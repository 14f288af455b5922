"""Tests for the result cache and its JSON store."""

import hashlib
import json
import os

from synlint.cache import (
    CACHE_VERSION,
    CacheStore,
    ResultCache,
    clear_all_caches,
    fingerprint,
    get_cache_key,
    get_cache_path,
    get_results_cache_dir,
)


class TestFingerprint:
    """Test content fingerprints."""

    def test_fingerprint_is_md5_of_content(self, tmp_path):
        path = tmp_path / 'a.py'
        path.write_bytes(b'x = 1\n')
        assert fingerprint(str(path)) == hashlib.md5(b'x = 1\n').hexdigest()

    def test_fingerprint_changes_with_content(self, tmp_path):
        path = tmp_path / 'a.py'
        path.write_text('x = 1\n')
        before = fingerprint(str(path))
        path.write_text('x = 2\n')
        assert fingerprint(str(path)) != before

    def test_fingerprint_ignores_mtime(self, tmp_path):
        path = tmp_path / 'a.py'
        path.write_text('x = 1\n')
        before = fingerprint(str(path))
        os.utime(path, (0, 0))
        assert fingerprint(str(path)) == before

    def test_fingerprint_missing_file(self, tmp_path):
        assert fingerprint(str(tmp_path / 'gone.py')) is None


class TestResultCache:
    """Test the in-memory validity oracle."""

    def test_valid_entry(self):
        cache = ResultCache({'src/a.py': 'abc'})
        assert cache.is_valid('src/a.py', 'abc')
        assert cache.get('src/a.py') == 'abc'
        assert 'src/a.py' in cache
        assert len(cache) == 1

    def test_changed_fingerprint_is_invalid(self):
        cache = ResultCache({'src/a.py': 'abc'})
        assert not cache.is_valid('src/a.py', 'def')

    def test_unknown_key_is_invalid(self):
        cache = ResultCache({'src/a.py': 'abc'})
        assert not cache.is_valid('src/b.py', 'abc')
        assert cache.get('src/b.py') is None

    def test_unreadable_file_is_invalid(self):
        cache = ResultCache({'src/a.py': 'abc'})
        assert not cache.is_valid('src/a.py', None)

    def test_non_mapping_is_empty(self):
        assert len(ResultCache(['src/a.py'])) == 0
        assert len(ResultCache('not a cache')) == 0
        assert len(ResultCache(None)) == 0

    def test_to_dict_is_a_copy(self):
        cache = ResultCache({'a': '1'})
        entries = cache.to_dict()
        entries['b'] = '2'
        assert 'b' not in cache


class TestCacheLocation:
    """Test cache key and directory selection."""

    def test_cache_key_consistent(self):
        assert get_cache_key('/path/to/project') == get_cache_key('/path/to/project')

    def test_cache_key_different_for_different_paths(self):
        assert get_cache_key('/path/to/one') != get_cache_key('/path/to/two')

    def test_cache_key_includes_basename(self):
        assert get_cache_key('/some/path/myproject').startswith('myproject_')

    def test_cache_key_sanitizes_special_chars(self):
        key = get_cache_key('/path/my project & co!')
        assert ' ' not in key
        assert '&' not in key
        assert '!' not in key

    def test_cache_dir_within_synlint_cache_dir(self, temp_cache_dir):
        cache_dir = get_results_cache_dir()
        assert cache_dir.exists()
        assert str(cache_dir).startswith(temp_cache_dir)
        assert 'results' in str(cache_dir)

    def test_default_path_follows_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert CacheStore().path == get_cache_path(os.getcwd())


class TestCacheStore:
    """Test persisting and loading caches."""

    def test_save_and_load(self, tmp_path):
        store = CacheStore(tmp_path / 'cache.json')
        assert store.save({'src/a.py': 'abc', 'src/b.py': 'def'})
        assert store.load() == {'src/a.py': 'abc', 'src/b.py': 'def'}

    def test_save_replaces_previous_entries(self, tmp_path):
        store = CacheStore(tmp_path / 'cache.json')
        store.save({'src/a.py': 'abc', 'src/b.py': 'def'})
        store.save({'src/a.py': 'abc'})
        assert store.load() == {'src/a.py': 'abc'}

    def test_file_format(self, tmp_path):
        store = CacheStore(tmp_path / 'cache.json', checker='php')
        store.save({'index.php': 'abc'})

        with open(store.path) as f:
            data = json.load(f)
        assert data['version'] == CACHE_VERSION
        assert data['checker'] == 'php'
        assert data['entries'] == {'index.php': 'abc'}
        assert 'updated_at' in data

    def test_load_missing(self, tmp_path):
        assert CacheStore(tmp_path / 'missing.json').load() == {}

    def test_load_corrupt(self, tmp_path):
        path = tmp_path / 'cache.json'
        path.write_text('{not json')
        assert CacheStore(path).load() == {}

    def test_load_wrong_shape(self, tmp_path):
        path = tmp_path / 'cache.json'
        path.write_text(json.dumps({'version': CACHE_VERSION, 'checker': 'python', 'updated_at': 'x', 'entries': [1]}))
        assert CacheStore(path).load() == {}

    def test_load_other_version(self, tmp_path):
        path = tmp_path / 'cache.json'
        path.write_text(json.dumps({'version': CACHE_VERSION + 1, 'checker': 'python', 'entries': {'a': 'b'}}))
        assert CacheStore(path).load() == {}

    def test_load_other_checker(self, tmp_path):
        path = tmp_path / 'cache.json'
        CacheStore(path, checker='php').save({'index.php': 'abc'})
        assert CacheStore(path, checker='python').load() == {}
        assert CacheStore(path, checker='php').load() == {'index.php': 'abc'}

    def test_save_failure_returns_false(self, tmp_path):
        blocker = tmp_path / 'blocker'
        blocker.write_text('')
        store = CacheStore(blocker / 'cache.json')
        assert store.save({'a': 'b'}) is False

    def test_info_and_delete(self, tmp_path):
        store = CacheStore(tmp_path / 'cache.json')
        assert store.info() is None
        assert store.delete() is False

        store.save({'a': 'b'})
        info = store.info()
        assert info is not None
        assert info.entries == {'a': 'b'}

        assert store.delete() is True
        assert not store.path.exists()

    def test_clear_all_caches(self, tmp_path):
        CacheStore(get_cache_path(str(tmp_path / 'one'))).save({'a': 'b'})
        CacheStore(get_cache_path(str(tmp_path / 'two'))).save({'c': 'd'})

        assert clear_all_caches() == 2
        assert list(get_results_cache_dir().glob('*.json')) == []
