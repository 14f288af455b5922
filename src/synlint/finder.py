"""File-set discovery for the linter.

Directories are walked recursively and filtered by extension and exclude
patterns; plain files are taken as given. The cache key of each file is the
user-given root joined with the file's path below that root, so the same
invocation produces the same keys whatever the working directory is.
"""

import logging
import os
from fnmatch import fnmatch

from synlint.models import FileRef


logger = logging.getLogger(__name__)


def is_excluded(relative_path: str, excludes: list[str]) -> bool:
    """Check a path (relative to its walk root, '/' separated) against exclude patterns.

    A pattern excludes the path itself, everything below it when it names a
    directory prefix, or anything it matches as a glob.
    """
    for pattern in excludes:
        pattern = pattern.strip('/')
        if not pattern:
            continue
        if relative_path == pattern or relative_path.startswith(pattern + '/'):
            return True
        if fnmatch(relative_path, pattern):
            return True
    return False


class FileFinder:
    """Enumerates checkable files under a set of paths."""

    def __init__(self, paths: list[str], excludes: list[str] | None = None, extensions: list[str] | None = None):
        self.paths = list(paths)
        self.excludes = list(excludes or [])
        self.extensions = tuple(ext.lstrip('.') for ext in (extensions or ['py']))

    def matches_extension(self, filename: str) -> bool:
        return any(filename.endswith('.' + ext) for ext in self.extensions)

    def find(self) -> list[FileRef]:
        files: list[FileRef] = []
        for path in self.paths:
            if os.path.isdir(path):
                files.extend(self._find_in_dir(path))
            elif os.path.isfile(path):
                files.append(FileRef.from_path(path))
            else:
                logger.warning(f'Path does not exist, skipping: {path}')
        logger.debug(f'Found {len(files)} files under {len(self.paths)} path(s)')
        return files

    def _find_in_dir(self, directory: str) -> list[FileRef]:
        root = os.path.realpath(directory)
        found: list[tuple[str, FileRef]] = []

        def on_error(e: OSError):
            logger.debug(f'Skipping unreadable directory {e.filename}: {e.strerror}')

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
            rel_dir = os.path.relpath(dirpath, root)
            rel_dir = '' if rel_dir == '.' else rel_dir.replace(os.sep, '/')

            # Prune excluded directories so they are never descended into
            dirnames[:] = sorted(
                d for d in dirnames if not is_excluded(f'{rel_dir}/{d}' if rel_dir else d, self.excludes)
            )

            for filename in filenames:
                if not self.matches_extension(filename):
                    continue
                rel_path = f'{rel_dir}/{filename}' if rel_dir else filename
                if is_excluded(rel_path, self.excludes):
                    continue
                full_path = os.path.join(dirpath, filename)
                if not os.path.isfile(full_path):
                    continue
                key = os.path.normpath(os.path.join(directory, rel_path))
                found.append((rel_path, FileRef(path=os.path.realpath(full_path), relative_path=key)))

        found.sort(key=lambda item: item[0])
        return [ref for _, ref in found]
