"""Bounded-concurrency syntax linter with incremental result caching.

The Linter drives a fill/drain loop on a single thread:

- fill: start checker processes for pending files until process_limit are
  running; files whose cached fingerprint still matches are skipped and
  carried into the replacement cache without spawning anything
- drain: poll every running task without blocking and resolve the finished
  ones in completion order, reporting each through the process callback

The replacement cache built during a run holds exactly the cache hits and
the files that passed; with caching enabled it replaces the previous cache.
"""

import logging
import os
from collections import deque
from collections.abc import Callable, Iterable
from time import sleep, time

from synlint import prometheus as prom
from synlint.cache import CacheStore, ResultCache, fingerprint
from synlint.checker import DEFAULT_CHECKER, CheckTask, get_checker
from synlint.finder import FileFinder
from synlint.models import Diagnostic, ErrorKind, FileRef, InvalidInputError
from synlint.utils import get_float_env, get_int_env


logger = logging.getLogger(__name__)

DEFAULT_PROCESS_LIMIT = 5

# Backoff between drain passes that completed nothing (seconds)
MIN_POLL_INTERVAL = 0.001
MAX_POLL_INTERVAL = 0.05

ProcessCallback = Callable[[str, FileRef], None]


class Linter:
    """Checks files for syntax errors with a bounded pool of checker processes."""

    def __init__(
        self,
        paths: str | os.PathLike | Iterable[str],
        excludes: Iterable[str] | None = None,
        extensions: Iterable[str] | None = None,
        checker: str = DEFAULT_CHECKER,
        cache_store: CacheStore | None = None,
        task_timeout: float | None = None,
    ):
        """Initialize the linter.

        Args:
            paths: File or directory path(s) to lint; enumerated lazily
            excludes: Exclude patterns, relative to each directory path
            extensions: File extensions to lint (default: the checker's)
            checker: Checker profile name ('python' or 'php')
            cache_store: Where the replacement cache is persisted (None: not persisted)
            task_timeout: Per-file deadline in seconds (None: wait indefinitely)

        Raises:
            InvalidInputError: on an unknown checker or a non-positive task_timeout
        """
        if isinstance(paths, (str, os.PathLike)):
            paths = [paths]
        self.paths = [os.fspath(p) for p in paths]
        self.excludes = list(excludes or [])

        try:
            self.profile = get_checker(checker)
        except KeyError as e:
            raise InvalidInputError(str(e.args[0])) from None

        self.extensions = list(extensions) if extensions else list(self.profile.extensions)
        self.cache_store = cache_store
        if task_timeout is None:
            task_timeout = get_float_env('SYNLINT_TASK_TIMEOUT')
            if task_timeout is not None and task_timeout <= 0:
                task_timeout = None
        elif isinstance(task_timeout, bool) or task_timeout <= 0:
            raise InvalidInputError(f'Task timeout must be a positive number, got {task_timeout!r}')
        self.task_timeout = task_timeout
        self.process_limit = get_int_env('SYNLINT_PROCESS_LIMIT')
        if self.process_limit < 1:
            self.process_limit = DEFAULT_PROCESS_LIMIT

        self.cache = ResultCache()
        self.process_callback: ProcessCallback | None = None
        self._files: dict[str, FileRef] = {}

        # Counters of the last lint() call
        self.checked_count = 0
        self.skipped_count = 0

    def lint(self, files: Iterable[FileRef] | None = None, use_cache: bool = True) -> dict[str, Diagnostic]:
        """Check files, returning diagnostics of failing files keyed by real path.

        Args:
            files: Files to check in start order (default: get_files())
            use_cache: Skip files whose fingerprint is cached, and persist the
                replacement cache at the end

        Returns:
            Mapping of real path -> Diagnostic, in completion order
        """
        files = list(files) if files else self.get_files()
        callback = self.process_callback or (lambda status, file: None)

        start_time = time()
        pending: deque[FileRef] = deque(files)
        running: dict[str, tuple[FileRef, CheckTask]] = {}
        errors: dict[str, Diagnostic] = {}
        new_cache: dict[str, str] = {}
        seen: set[str] = set()
        self.checked_count = 0
        self.skipped_count = 0
        poll_interval = MIN_POLL_INTERVAL

        prom.process_limit.set(self.process_limit)
        logger.debug(
            f'[LINT] {len(files)} files, process_limit={self.process_limit}, '
            f'use_cache={use_cache}, checker={self.profile.name}'
        )

        try:
            while pending or running:
                self._fill(pending, running, seen, new_cache, use_cache)
                prom.running_tasks.set(len(running))

                completed = 0
                for path, (file, task) in list(running.items()):
                    if task.is_expired():
                        task.kill()
                    elif task.is_running():
                        continue

                    del running[path]
                    completed += 1
                    self.checked_count += 1
                    self._resolve(file, task, callback, errors, new_cache)

                if running and not completed:
                    sleep(poll_interval)
                    poll_interval = min(poll_interval * 2, MAX_POLL_INTERVAL)
                else:
                    poll_interval = MIN_POLL_INTERVAL
        finally:
            for file, task in running.values():
                if task.is_running():
                    logger.warning(f'Aborting checker for {file.path}')
                    task.kill()
                task.close()
            prom.running_tasks.set(0)

        if use_cache:
            self.cache = ResultCache(new_cache)
            if self.cache_store is not None:
                self.cache_store.save(new_cache)

        elapsed = time() - start_time
        prom.record_lint_run(use_cache, elapsed)
        logger.info(
            f'[LINT] Completed: {self.checked_count} checked, {self.skipped_count} cached, '
            f'{len(errors)} failed in {elapsed:.2f}s'
        )
        return errors

    def _fill(
        self,
        pending: deque[FileRef],
        running: dict[str, tuple[FileRef, CheckTask]],
        seen: set[str],
        new_cache: dict[str, str],
        use_cache: bool,
    ) -> None:
        """Start tasks for pending files until the running set is full.

        A file listed more than once is handled on its first occurrence only.
        """
        while pending and len(running) < self.process_limit:
            file = pending.popleft()
            if file.path in seen:
                logger.debug(f'[LINT] Skipping duplicate {file.path}')
                continue
            seen.add(file.path)

            if use_cache and file.relative_path in self.cache:
                current = fingerprint(file.path)
                if self.cache.is_valid(file.relative_path, current):
                    new_cache[file.relative_path] = current
                    self.skipped_count += 1
                    prom.record_cache_lookup(hit=True)
                    logger.debug(f'[LINT] Cache hit, skipping {file.relative_path}')
                    continue
            if use_cache:
                prom.record_cache_lookup(hit=False)

            task = CheckTask(file.path, self.profile, self.task_timeout)
            task.start()
            running[file.path] = (file, task)

    def _resolve(
        self,
        file: FileRef,
        task: CheckTask,
        callback: ProcessCallback,
        errors: dict[str, Diagnostic],
        new_cache: dict[str, str],
    ) -> None:
        """Fold one finished task into the run result or the replacement cache."""
        diagnostic = None
        if task.has_spawn_failure():
            diagnostic = Diagnostic(
                file=file.path,
                message=f'Could not start checker: {task.spawn_error}',
                output=task.output,
                kind=ErrorKind.SPAWN_FAILURE,
            )
        elif task.timed_out:
            diagnostic = Diagnostic(
                file=file.path,
                message=f'Checker did not finish within {task.timeout}s',
                output=task.output,
                kind=ErrorKind.TIMEOUT,
            )
        elif task.has_syntax_error():
            diagnostic = Diagnostic(file=file.path, kind=ErrorKind.SYNTAX, **task.get_syntax_error())
        task.close()

        if diagnostic is not None:
            prom.record_check(diagnostic.kind.value, task.duration)
            logger.debug(f'[LINT] {diagnostic.kind.value}: {file.path}:{diagnostic.line}')
            self._notify(callback, 'error', file)
            errors[file.path] = diagnostic
            return

        prom.record_check('ok', task.duration)
        current = fingerprint(file.path)
        if current is None:
            logger.warning(f'{file.path} passed but could not be fingerprinted, not caching it')
        else:
            new_cache[file.relative_path] = current
        self._notify(callback, 'ok', file)

    def _notify(self, callback: ProcessCallback, status: str, file: FileRef) -> None:
        try:
            callback(status, file)
        except Exception as e:
            logger.warning(f'Process callback failed for {file.path}: {e}')

    def set_cache(self, cache=None) -> 'Linter':
        """Replace the in-memory cache; anything but a mapping means an empty cache."""
        self.cache = ResultCache(cache)
        return self

    def get_files(self) -> list[FileRef]:
        """Files to lint, enumerated from the configured paths on first use."""
        if not self._files:
            finder = FileFinder(self.paths, self.excludes, self.extensions)
            for file in finder.find():
                self._files[file.path] = file
        return list(self._files.values())

    def set_files(self, files: Iterable) -> 'Linter':
        """Add explicit files (paths or FileRefs) to the file set.

        Raises:
            InvalidInputError: if an entry is neither an existing file nor a FileRef
        """
        for file in files:
            if isinstance(file, (str, os.PathLike)) and os.path.isfile(file):
                file = FileRef.from_path(os.fspath(file))

            if not isinstance(file, FileRef):
                raise InvalidInputError(f'File {file} not exists.')

            self._files[file.path] = file
        return self

    def set_process_callback(self, process_callback: ProcessCallback | None) -> 'Linter':
        """Set the callback invoked as fn(status, file) for every checked file."""
        self.process_callback = process_callback
        return self

    def set_process_limit(self, process_limit: int) -> 'Linter':
        """Set the maximum number of concurrent checker processes."""
        if isinstance(process_limit, bool) or not isinstance(process_limit, int) or process_limit < 1:
            raise InvalidInputError(f'Process limit must be a positive integer, got {process_limit!r}')
        self.process_limit = process_limit
        return self
