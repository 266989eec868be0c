"""
Main CLI entry point for dialectry.

This module provides the Click-based command-line interface for dialectry:
global options, the ``resolve`` and ``list`` commands, and error handling.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click

from . import __version__
from .core.config import Config
from .core.exceptions import ConfigurationError, DialectryError, handle_exception
from .core.registry import DialectRegistry
from .core.types import NOT_FOUND
from .dialects.discovery import collect_dialects
from .utils.logging import configure_logging


class CliContext:
    """Context object for CLI commands."""

    def __init__(self):
        self.config_files: List[Path] = []
        self.verbosity: int = 0
        self.registry: Optional[DialectRegistry] = None
        self.logger: Optional[logging.Logger] = None

    def create_registry(self) -> DialectRegistry:
        """Build the dialect registry if not already built."""
        if self.registry is None:
            try:
                config = Config(self.config_files if self.config_files else None)
            except DialectryError:
                raise
            except Exception as e:
                raise ConfigurationError(f"Failed to initialize dialectry: {e}")
            if self.logger:
                for source in config.get_config_sources():
                    self.logger.debug(
                        "Reading %s config %s", source.source_type, source.path
                    )
            self.registry = DialectRegistry(collect_dialects(config))
            if self.logger:
                self.logger.debug("Loaded %d dialect(s)", len(self.registry))
        return self.registry


def validate_config_file(ctx, param, value):
    """Validate config file paths."""
    if not value:
        return []

    config_files = []
    for path_str in value:
        path = Path(path_str)
        if not path.exists():
            raise click.BadParameter(f"Configuration file does not exist: {path}")
        if not path.is_file():
            raise click.BadParameter(f"Configuration path is not a file: {path}")
        config_files.append(path)

    return config_files


@click.group(invoke_without_command=True)
@click.option(
    '--config', '-c',
    multiple=True,
    callback=validate_config_file,
    help='Configuration file to read (can be used multiple times)'
)
@click.option(
    '--verbose', '-v',
    count=True,
    help='Increase verbosity (can be used multiple times)'
)
@click.option(
    '--quiet', '-q',
    count=True,
    help='Decrease verbosity (can be used multiple times)'
)
@click.option(
    '--log-file',
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help='Also write every log message, down to trace level, to this file'
)
@click.version_option(version=__version__, prog_name='dialectry')
@click.pass_context
def cli(
    ctx: click.Context,
    config: Tuple[Path, ...],
    verbose: int,
    quiet: int,
    log_file: Optional[Path],
) -> None:
    """
    Dialectry database dialect resolution.

    Maps JDBC-style connection URLs to the dialect and default driver
    class that handle them.
    """
    cli_ctx = CliContext()
    cli_ctx.config_files = list(config)
    cli_ctx.verbosity = verbose - quiet
    cli_ctx.logger = configure_logging(cli_ctx.verbosity, log_file)

    ctx.obj = cli_ctx

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command(name='resolve')
@click.argument('url')
@click.option('--dialect', '-d', 'show_dialect', is_flag=True,
              help='Also print the name of the matching dialect')
@click.pass_obj
def resolve_command(cli_ctx: CliContext, url: str, show_dialect: bool) -> None:
    """Print the default driver class for URL."""
    registry = cli_ctx.create_registry()
    descriptor = registry.resolve_dialect(url)

    if descriptor is NOT_FOUND:
        click.echo(f"dialectry: no dialect recognizes {url}", err=True)
        sys.exit(1)

    if show_dialect:
        click.echo(f"{descriptor.name}\t{descriptor.default_driver_class_name}")
    else:
        click.echo(descriptor.default_driver_class_name)


@cli.command(name='list')
@click.pass_obj
def list_command(cli_ctx: CliContext) -> None:
    """List registered dialects in resolution order."""
    registry = cli_ctx.create_registry()
    for descriptor in registry:
        click.echo(
            f"{descriptor.short_name}\t{descriptor.name}\t"
            f"{descriptor.url_pattern}\t{descriptor.default_driver_class_name}"
        )


def handle_keyboard_interrupt() -> int:
    click.echo("\ndialectry: Operation cancelled by user", err=True)
    return 130


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    try:
        cli(args=args, standalone_mode=False)
        return 0
    except DialectryError as e:
        return handle_exception(e)
    except click.exceptions.Exit as e:
        return e.exit_code
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.Abort:
        return handle_keyboard_interrupt()
    except KeyboardInterrupt:
        return handle_keyboard_interrupt()
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 1
    except Exception as e:
        return handle_exception(e)


if __name__ == '__main__':
    sys.exit(main())
