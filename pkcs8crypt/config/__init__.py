from .errors import ConfigurationError
from .key_setup import KeySetupConfig
from .logging import (
    DEFAULT_ROOT_LOGGER_LEVEL,
    LogConfig,
    StdLogOutput,
    parse_logging_config,
)

__all__ = [
    'ConfigurationError',
    'KeySetupConfig',
    'DEFAULT_ROOT_LOGGER_LEVEL',
    'LogConfig',
    'StdLogOutput',
    'parse_logging_config',
]
