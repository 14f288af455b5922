"""CLI lint command for synlint"""

import os
import sys
from time import time

import click

from synlint import prometheus as prom
from synlint.cache import CacheStore
from synlint.checker import CHECKERS, DEFAULT_CHECKER
from synlint.linter import Linter
from synlint.models import FileRef, InvalidInputError, LintReport
from synlint.utils import setup_logging

# Progress markers wrap after this many files
PROGRESS_WIDTH = 60


class ProgressPrinter:
    """Process callback printing one marker per checked file to stderr."""

    def __init__(self, colorize: bool):
        self.colorize = colorize
        self.count = 0

    def __call__(self, status: str, file: FileRef):
        if status == 'ok':
            marker = click.style('.', fg='green') if self.colorize else '.'
        else:
            marker = click.style('E', fg='red', bold=True) if self.colorize else 'E'
        self.count += 1
        click.echo(marker, nl=self.count % PROGRESS_WIDTH == 0, err=True)

    def finish(self):
        if self.count % PROGRESS_WIDTH:
            click.echo('', err=True)


def _split_extensions(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [ext.strip().lstrip('.') for ext in value.split(',') if ext.strip()]


@click.command('lint')
@click.argument('paths', nargs=-1, type=click.Path())
@click.option('--exclude', '-e', 'excludes', multiple=True, help='Path (relative to each directory) to exclude')
@click.option('--extensions', help='Comma separated file extensions to check (default: depends on checker)')
@click.option('--jobs', '-j', type=click.IntRange(min=1), default=None, help='Maximum concurrent checker processes (default: 5)')
@click.option(
    '--checker',
    type=click.Choice(sorted(CHECKERS)),
    default=DEFAULT_CHECKER,
    show_default=True,
    help='Checker used for each file',
)
@click.option('--no-cache', is_flag=True, help='Check every file and leave the cache untouched')
@click.option('--cache', 'cache_file', type=click.Path(dir_okay=False), default=None, help='Cache file location')
@click.option('--timeout', type=click.FloatRange(min=0, min_open=True), default=None, help='Per-file deadline in seconds')
@click.option('--json', 'output_json', is_flag=True, help='Output report as JSON')
@click.option('--no-color', is_flag=True, help='Disable colored output')
@click.option('--no-progress', is_flag=True, help='Do not print per-file progress')
@click.option('--metrics-file', type=click.Path(dir_okay=False), default=None, help='Write Prometheus metrics here')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def lint_command(
    paths: tuple[str, ...],
    excludes: tuple[str, ...],
    extensions: str | None,
    jobs: int | None,
    checker: str,
    no_cache: bool,
    cache_file: str | None,
    timeout: float | None,
    output_json: bool,
    no_color: bool,
    no_progress: bool,
    metrics_file: str | None,
    verbose: bool,
):
    """Check files for syntax errors in parallel.

    Files whose content did not change since they last passed are skipped.

    \b
    Examples:
        synlint                               # Lint the current directory
        synlint src tests -e fixtures         # Lint two directories, skip fixtures/
        synlint app.php --checker php         # Lint PHP with php -l
        synlint src -j 10 --no-cache --json   # 10 processes, ignore cache, JSON report
    """
    setup_logging(verbose)
    colorize = not no_color and 'NO_COLOR' not in os.environ
    paths = paths or ('.',)

    try:
        linter = Linter(
            list(paths),
            excludes=list(excludes),
            extensions=_split_extensions(extensions),
            checker=checker,
            cache_store=None if no_cache else CacheStore(cache_file, checker=checker),
            task_timeout=timeout,
        )
        if jobs is not None:
            linter.set_process_limit(jobs)
    except InvalidInputError as e:
        raise click.UsageError(str(e))

    if not no_cache:
        linter.set_cache(linter.cache_store.load())

    progress = None
    if not no_progress:
        progress = ProgressPrinter(colorize)
        linter.set_process_callback(progress)

    start_time = time()
    errors = linter.lint(use_cache=not no_cache)
    elapsed = time() - start_time

    if progress is not None:
        progress.finish()

    report = LintReport(
        paths=list(paths),
        time=elapsed,
        checked=linter.checked_count,
        skipped=linter.skipped_count,
        errors=list(errors.values()),
    )

    if output_json:
        click.echo(report.model_dump_json(indent=2))
    else:
        click.echo(report.to_cli(colorize=colorize))

    if metrics_file:
        prom.write_metrics(metrics_file)

    sys.exit(1 if errors else 0)
