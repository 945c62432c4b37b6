import logging
from typing import Optional, Tuple

import click

from ..config.errors import ConfigurationError
from ..config.logging import LogConfig, parse_logging_config
from ..version import __version__
from ._ctx import CLIContext
from .config import parse_cli_config
from .runtime import DEFAULT_CONFIG_FILE, logging_setup

__all__ = ['cli_root']


def _read_config_text(config) -> Tuple[Optional[str], Optional[str]]:
    # returns the config text and where it came from, if there is any
    if config is not None:
        try:
            return config.read(), config.name
        except IOError as e:
            raise click.ClickException(f"Failed to read configuration: {e}")
    try:
        with open(DEFAULT_CONFIG_FILE, 'r') as f:
            return f.read(), DEFAULT_CONFIG_FILE
    except FileNotFoundError:
        return None, None
    except IOError as e:
        raise click.ClickException(
            f"Failed to read {DEFAULT_CONFIG_FILE}: {e}"
        )


@click.group()
@click.version_option(prog_name='pkcs8crypt', version=__version__)
@click.option(
    '--config',
    help=(
        'YAML file to load configuration from '
        f'[default: {DEFAULT_CONFIG_FILE}]'
    ),
    required=False,
    type=click.File('r'),
)
@click.option(
    '--verbose',
    help='Run in verbose mode',
    required=False,
    default=False,
    type=bool,
    is_flag=True,
)
@click.pass_context
def _root(ctx: click.Context, config, verbose):
    config_text, config_source = _read_config_text(config)
    ctx_obj: CLIContext = ctx.ensure_object(CLIContext)

    if config_text is None:
        log_config = parse_logging_config({})
    else:
        try:
            root_config = parse_cli_config(config_text)
        except ConfigurationError as e:
            raise click.ClickException(f"Invalid configuration: {e.msg}")
        ctx_obj.config = root_config.config
        log_config = root_config.log_config

    if verbose:
        # keep the configured output, only the level changes
        log_config[None] = LogConfig(
            level=logging.DEBUG, output=log_config[None].output
        )
    logging_setup(log_config, verbose)

    if config_source is not None:
        logging.debug(f"Read configuration from {config_source}.")
    else:
        logging.debug("No configuration file found.")


cli_root: click.Group = _root
