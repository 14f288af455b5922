"""Checker profiles and the non-blocking CheckTask lifecycle.

A CheckTask wraps one external checker process run against one file:

- start(): spawn the process, never blocks
- is_running(): non-blocking poll
- has_syntax_error() / get_syntax_error(): verdict once the process exited

The child's stdout and stderr go to an anonymous temporary file rather than
a pipe, so a checker printing a large diagnostic can never stall on a full
pipe buffer while the scheduler is busy polling other tasks.
"""

import logging
import re
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from time import monotonic

from synlint.utils import get_str_env


logger = logging.getLogger(__name__)

DEFAULT_CHECKER = 'python'

# Compiles the file named by argv[1] without executing or caching bytecode.
PYTHON_COMPILE_SNIPPET = (
    "import sys; "
    "compile(open(sys.argv[1], 'rb').read(), sys.argv[1], 'exec', dont_inherit=True)"
)


@dataclass(frozen=True)
class CheckerProfile:
    """How to invoke one kind of checker and read its verdict.

    Attributes:
        name: Profile name used on the CLI and in the persisted cache
        command: Command prefix, the file path is appended as last argument
        extensions: Default file extensions checked with this profile
        line_pattern: Regex with a ``line`` group, last match wins; with a ``file``
            group, a match naming the checked file is preferred
        message_pattern: Regex with a ``message`` group, last match wins
        success_marker: If set, output containing it means success regardless of exit code
        binary_env: Environment variable overriding ``command[0]``
    """

    name: str
    command: tuple[str, ...]
    extensions: tuple[str, ...]
    line_pattern: re.Pattern
    message_pattern: re.Pattern
    success_marker: str | None = None
    binary_env: str | None = None

    def build_command(self, file_path: str) -> list[str]:
        command = list(self.command)
        if self.binary_env:
            command[0] = get_str_env(self.binary_env, command[0])
        command.append(file_path)
        return command

    def is_failure(self, returncode: int | None, output: str) -> bool:
        if self.success_marker is not None:
            return self.success_marker not in output
        return returncode != 0

    def parse(self, output: str, file_path: str | None = None) -> tuple[int, str] | None:
        """Extract (line, message) from checker output, None if nothing matched."""
        messages = list(self.message_pattern.finditer(output))
        if not messages:
            return None
        lines = list(self.line_pattern.finditer(output))
        if file_path is not None and 'file' in self.line_pattern.groupindex:
            # The first frame naming the file; echoed source text may look like a frame too
            own = [m for m in lines if m.group('file') == file_path]
            if own:
                lines = own[:1]
        line = int(lines[-1].group('line')) if lines else 0
        return line, messages[-1].group('message').strip()


_PHP_ERROR = re.compile(
    r'(?:PHP\s+)?(?:Parse|Fatal) error:\s*(?:\w+ error,\s*)?(?P<message>.+?)\s+in\s+.+?\s*line\s+(?P<line>\d+)',
    re.IGNORECASE,
)

CHECKERS: dict[str, CheckerProfile] = {
    'python': CheckerProfile(
        name='python',
        command=(sys.executable, '-W', 'ignore', '-c', PYTHON_COMPILE_SNIPPET),
        extensions=('py',),
        line_pattern=re.compile(r'^\s*File "(?P<file>.+)", line (?P<line>\d+)\s*$', re.MULTILINE),
        message_pattern=re.compile(r'^(?:\w+\.)*(?:SyntaxError|IndentationError|TabError): (?P<message>.+)$', re.MULTILINE),
    ),
    'php': CheckerProfile(
        name='php',
        command=('php', '-d', 'error_reporting=E_ALL', '-d', 'display_errors=On', '-l'),
        extensions=('php',),
        line_pattern=_PHP_ERROR,
        message_pattern=_PHP_ERROR,
        success_marker='No syntax errors detected',
        binary_env='SYNLINT_PHP_BINARY',
    ),
}


def get_checker(name: str) -> CheckerProfile:
    """Look up a checker profile by name.

    Raises:
        KeyError: if no profile has that name
    """
    try:
        return CHECKERS[name]
    except KeyError:
        raise KeyError(f'Unknown checker: {name} (available: {", ".join(sorted(CHECKERS))})') from None


class CheckTask:
    """One checker process run against one file."""

    def __init__(self, file_path: str, profile: CheckerProfile | None = None, timeout: float | None = None):
        self.file_path = file_path
        self.profile = profile or CHECKERS[DEFAULT_CHECKER]
        self.timeout = timeout
        self.process: subprocess.Popen | None = None
        self.spawn_error: str | None = None
        self.timed_out = False
        self.started_at: float | None = None
        self.finished_at: float | None = None
        self._buffer = None
        self._output: str | None = None

    def start(self) -> 'CheckTask':
        """Launch the checker. Launch errors are recorded, not raised."""
        command = self.profile.build_command(self.file_path)
        self.started_at = monotonic()
        try:
            self._buffer = tempfile.TemporaryFile()
            self.process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=self._buffer,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            self.spawn_error = f'{type(e).__name__}: {e}'
            self.finished_at = self.started_at
            self.close()
            logger.warning(f'Failed to start {self.profile.name} checker for {self.file_path}: {self.spawn_error}')
            return self

        logger.debug(f'Started {self.profile.name} checker (pid {self.process.pid}) for {self.file_path}')
        return self

    def is_running(self) -> bool:
        if self.process is None:
            return False
        if self.process.poll() is None:
            return True
        if self.finished_at is None:
            self.finished_at = monotonic()
        return False

    def is_expired(self) -> bool:
        """True when a deadline is set and the still-running process has passed it."""
        if self.timeout is None or self.started_at is None:
            return False
        return self.is_running() and monotonic() - self.started_at > self.timeout

    def kill(self) -> None:
        """Terminate an overdue process and reap it."""
        if self.process is None:
            return
        self.timed_out = True
        self.process.kill()
        self.process.wait()
        self.finished_at = monotonic()
        logger.warning(f'Killed {self.profile.name} checker for {self.file_path} after {self.timeout}s')

    @property
    def duration(self) -> float:
        if self.started_at is None:
            return 0.0
        end = self.finished_at if self.finished_at is not None else monotonic()
        return end - self.started_at

    @property
    def returncode(self) -> int | None:
        return self.process.returncode if self.process is not None else None

    @property
    def output(self) -> str:
        """Combined stdout/stderr of the checker, read once after exit."""
        if self._output is None:
            if self._buffer is not None:
                self._buffer.seek(0)
                self._output = self._buffer.read().decode('utf-8', errors='replace')
                self.close()
            else:
                self._output = self.spawn_error or ''
        return self._output

    def has_spawn_failure(self) -> bool:
        return self.spawn_error is not None

    def has_syntax_error(self) -> bool:
        """Valid only once is_running() is False."""
        if self.has_spawn_failure() or self.timed_out:
            return False
        return self.profile.is_failure(self.returncode, self.output)

    def get_syntax_error(self) -> dict:
        """Parse line and message from the checker output.

        Returns:
            Dict with 'line', 'message' and 'output'. When the output cannot be
            parsed, 'line' is 0 and 'message' is the raw output.
        """
        output = self.output
        parsed = self.profile.parse(output, self.file_path)
        if parsed is None:
            return {'line': 0, 'message': output.strip(), 'output': output}
        line, message = parsed
        return {'line': line, 'message': message, 'output': output}

    def close(self) -> None:
        if self._buffer is not None:
            self._buffer.close()
            self._buffer = None
