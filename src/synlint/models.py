"""Pydantic models for files, diagnostics, reports and the on-disk cache"""

import os
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InvalidInputError(ValueError):
    """Raised at setup time for a file reference or setting that cannot be used."""


class ErrorKind(str, Enum):
    """Why a file ended up in the lint result."""

    SYNTAX = 'syntax'
    SPAWN_FAILURE = 'spawn_failure'
    TIMEOUT = 'timeout'


class FileRef(BaseModel):
    """A checkable file.

    Attributes:
        path: Real absolute path, used to address the checker task and the result
        relative_path: Key used in the result cache, stable across working directories
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Real absolute path of the file")
    relative_path: str = Field(..., description="Cache key of the file")

    @classmethod
    def from_path(cls, path: str) -> 'FileRef':
        """Build a reference for a file named directly by the user."""
        return cls(path=os.path.realpath(path), relative_path=path)

    def __str__(self) -> str:
        return self.relative_path


class Diagnostic(BaseModel):
    """A failing file with the checker's verdict

    Attributes:
        file: Real path of the failing file
        line: Line reported by the checker, 0 when it could not be parsed
        message: Parsed error message, or the raw output when parsing failed
        output: Raw checker output
        kind: Failure category
    """

    file: str = Field(..., description="Real path of the failing file")
    line: int = Field(0, description="Line number (1-indexed), 0 if unknown")
    message: str = Field('', description="Error message")
    output: str = Field('', description="Raw checker output")
    kind: ErrorKind = Field(ErrorKind.SYNTAX, description="Failure category")


class CacheFile(BaseModel):
    """On-disk envelope of a persisted result cache."""

    version: int
    checker: str
    updated_at: str
    entries: dict[str, str] = Field(default_factory=dict)


class LintReport(BaseModel):
    """Summary of one lint run, as printed by the CLI

    Attributes:
        paths: Paths that were linted
        time: Run duration in seconds
        checked: Number of files a checker process ran for
        skipped: Number of files skipped thanks to the cache
        errors: Diagnostics of failing files, in completion order
    """

    paths: list[str] = Field(..., description="Linted paths")
    time: float = Field(..., description="Run duration in seconds")
    checked: int = Field(0, description="Files checked by a checker process")
    skipped: int = Field(0, description="Files skipped as cache hits")
    errors: list[Diagnostic] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return self.checked + self.skipped

    def to_cli(self, colorize: bool = False) -> str:
        """Format report for CLI output"""
        GREY = '\033[90m'
        BOLD = '\033[1m'
        RED = '\033[31m'
        BOLD_RED = '\033[1;31m'
        GREEN = '\033[32m'
        YELLOW = '\033[33m'
        CYAN = '\033[36m'
        RESET = '\033[0m'

        lines = []

        path_display = ", ".join(self.paths)
        if colorize:
            lines.append(f"{GREY}Path:{RESET} {CYAN}{path_display}{RESET}")
            lines.append(f"{GREY}Time:{RESET} {YELLOW}{self.time:.3f}s{RESET}")
            lines.append(
                f"{GREY}Files:{RESET} {self.total} total, "
                f"{GREEN}{self.checked}{RESET} checked, {GREY}{self.skipped} cached{RESET}"
            )
        else:
            lines.append(f"Path: {path_display}")
            lines.append(f"Time: {self.time:.3f}s")
            lines.append(f"Files: {self.total} total, {self.checked} checked, {self.skipped} cached")

        lines.append("")

        if not self.errors:
            if colorize:
                lines.append(f"{GREEN}No syntax errors found{RESET}")
            else:
                lines.append("No syntax errors found")
            return "\n".join(lines)

        if colorize:
            lines.append(f"{BOLD_RED}Found {len(self.errors)} file(s) with errors{RESET}")
        else:
            lines.append(f"Found {len(self.errors)} file(s) with errors")

        for i, diag in enumerate(self.errors, start=1):
            location = f"{diag.file}:{diag.line}" if diag.line else diag.file
            tag = "" if diag.kind == ErrorKind.SYNTAX else f" [{diag.kind.value}]"
            if colorize:
                lines.append(f"{GREY}[{i}]{RESET} {BOLD}{location}{RESET}{RED}{tag}{RESET}")
            else:
                lines.append(f"[{i}] {location}{tag}")
            for message_line in diag.message.splitlines() or [""]:
                lines.append(f"    {message_line}")

        return "\n".join(lines)
