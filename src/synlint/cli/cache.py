"""CLI command for inspecting and clearing the result cache."""

import json
import sys

import click

from synlint.cache import CacheStore, clear_all_caches
from synlint.checker import CHECKERS, DEFAULT_CHECKER


@click.command('cache')
@click.option('--info', '-i', 'show_info', is_flag=True, help='Show cache info (default)')
@click.option('--clear', '-c', is_flag=True, help='Delete the cache of the current directory')
@click.option('--clear-all', is_flag=True, help='Delete the caches of all projects')
@click.option('--cache', 'cache_file', type=click.Path(dir_okay=False), default=None, help='Cache file location')
@click.option('--checker', type=click.Choice(sorted(CHECKERS)), default=DEFAULT_CHECKER, show_default=True)
@click.option('--json', 'json_output', is_flag=True, help='Output in JSON format')
def cache_command(
    show_info: bool,
    clear: bool,
    clear_all: bool,
    cache_file: str | None,
    checker: str,
    json_output: bool,
):
    """Inspect or clear the result cache.

    \b
    Examples:
        synlint cache                # Show cache of the current directory
        synlint cache --clear        # Forget which files passed here
        synlint cache --clear-all    # Forget every project's results
    """
    if clear_all:
        count = clear_all_caches()
        if json_output:
            click.echo(json.dumps({'action': 'clear_all', 'deleted': count}, indent=2))
        else:
            click.echo(f'Deleted {count} cache file(s)')
        return

    store = CacheStore(cache_file, checker=checker)

    if clear:
        success = store.delete()
        if json_output:
            click.echo(json.dumps({'action': 'clear', 'path': str(store.path), 'success': success}, indent=2))
        else:
            status = 'deleted' if success else 'not found'
            click.echo(f'{store.path}: cache {status}')
        return

    cache_info = store.info()
    if json_output:
        result = {'action': 'info', 'path': str(store.path), 'cache': None}
        if cache_info:
            result['cache'] = {
                'version': cache_info.version,
                'checker': cache_info.checker,
                'updated_at': cache_info.updated_at,
                'entries': len(cache_info.entries),
            }
        click.echo(json.dumps(result, indent=2))
        return

    if cache_info is None:
        click.echo(f'{store.path}: no cache exists')
        sys.exit(0)

    click.echo(f'{store.path}:')
    click.echo(f'  Version: {cache_info.version}')
    click.echo(f'  Checker: {cache_info.checker}')
    click.echo(f'  Updated: {cache_info.updated_at}')
    click.echo(f'  Entries: {len(cache_info.entries)}')
