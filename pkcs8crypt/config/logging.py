"""
The ``logging`` section of the configuration file::

    logging:
        root-level: INFO
        root-output: stderr
        by-module:
            pkcs8crypt.envelope:
                level: DEBUG
                output: envelope.log

Outputs are ``stderr``, ``stdout`` or a file name. The root logger defaults
to :const:`DEFAULT_ROOT_LOGGER_LEVEL` on ``stderr``.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Union

from .api import get_and_apply
from .errors import ConfigurationError

__all__ = [
    'DEFAULT_ROOT_LOGGER_LEVEL',
    'LogConfig',
    'StdLogOutput',
    'parse_logging_config',
]

DEFAULT_ROOT_LOGGER_LEVEL = logging.INFO


class StdLogOutput(enum.Enum):
    STDERR = enum.auto()
    STDOUT = enum.auto()


LogLevel = Union[int, str]
LogOutput = Union[StdLogOutput, str]


@dataclass(frozen=True)
class LogConfig:
    """Level and destination for one logger."""

    level: LogLevel
    """A level name or number, as accepted by ``Logger.setLevel``."""

    output: LogOutput
    """A standard stream, or the name of a file to append to."""

    @staticmethod
    def parse_output_spec(spec) -> LogOutput:
        if not isinstance(spec, str):
            raise ConfigurationError("Log output must be a string.")
        try:
            return StdLogOutput[spec.upper()]
        except KeyError:
            return spec


def _parse_level(settings: dict, key: str,
                 default: Optional[LogLevel] = None) -> LogLevel:
    if key not in settings:
        if default is None:
            raise ConfigurationError(f"No log level given for '{key}'.")
        return default
    level = settings[key]
    if not isinstance(level, (int, str)):
        raise ConfigurationError(
            f"Log level must be a name or a number, not {type(level)}."
        )
    return level


def _parse_logger(settings: dict, level_key: str, output_key: str,
                  default_level: Optional[LogLevel] = None) -> LogConfig:
    return LogConfig(
        level=_parse_level(settings, level_key, default=default_level),
        output=get_and_apply(
            settings, output_key, LogConfig.parse_output_spec,
            default=StdLogOutput.STDERR,
        ),
    )


def parse_logging_config(log_config_spec) -> Dict[Optional[str], LogConfig]:
    """
    Parse the ``logging`` section of the configuration.

    :return:
        A dictionary mapping logger names to :class:`LogConfig` objects.
        The root logger is listed under ``None``.
    """
    if not isinstance(log_config_spec, dict):
        raise ConfigurationError("The logging section must be a dictionary.")

    result: Dict[Optional[str], LogConfig] = {
        None: _parse_logger(
            log_config_spec, 'root-level', 'root-output',
            default_level=DEFAULT_ROOT_LOGGER_LEVEL,
        )
    }

    by_module = log_config_spec.get('by-module', {})
    if not isinstance(by_module, dict):
        raise ConfigurationError("logging.by-module must be a dictionary.")
    for module, settings in by_module.items():
        if not isinstance(module, str):
            raise ConfigurationError(
                "Logger names in logging.by-module must be strings."
            )
        if not isinstance(settings, dict):
            raise ConfigurationError(
                f"Logging settings for '{module}' must be a dictionary."
            )
        result[module] = _parse_logger(settings, 'level', 'output')
    return result
