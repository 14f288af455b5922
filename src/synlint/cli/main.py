"""Main CLI entry point with command groups"""

import click

from synlint.__version__ import __version__
from synlint.cli.cache import cache_command
from synlint.cli.lint import lint_command


class DefaultCommandGroup(click.Group):
    """Custom Click Group that allows a default command"""

    def parse_args(self, ctx, args):
        # During shell completion, don't redirect to default command
        if ctx.resilient_parsing:
            return super().parse_args(ctx, args)

        # If --help or --version is requested, show group help/version
        if args and args[0] in ('--help', '-h', '--version'):
            return super().parse_args(ctx, args)

        # Check if first arg is a known command
        if args and args[0] in self.commands:
            return super().parse_args(ctx, args)

        # Otherwise, treat as lint command (default)
        return super().parse_args(ctx, ['lint'] + args)


@click.group(cls=DefaultCommandGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name='synlint')
@click.pass_context
def cli(ctx):
    """
    synlint - parallel syntax checker with incremental caching.

    \b
    Commands:
      synlint [path ...]        Check files for syntax errors (default command)
      synlint cache             Inspect or clear the result cache

    \b
    Examples:
      synlint src/
      synlint src/ -e migrations -j 8
      synlint index.php --checker php
      synlint cache --clear
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


# Register subcommands (lint is the default command)
cli.add_command(lint_command, name='lint')
cli.add_command(cache_command, name='cache')


def main():
    """Entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
