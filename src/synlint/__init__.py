"""synlint - parallel syntax checking with incremental result caching"""

from synlint.__version__ import __version__
from synlint.linter import Linter
from synlint.models import Diagnostic, ErrorKind, FileRef, InvalidInputError


__all__ = ['Diagnostic', 'ErrorKind', 'FileRef', 'InvalidInputError', 'Linter', '__version__']
