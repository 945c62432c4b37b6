import logging
import sys
from contextlib import contextmanager

import click

from ..config.errors import ConfigurationError
from ..config.logging import LogConfig, StdLogOutput
from ..errors import (
    DecryptionFailedError,
    MalformedEncodingError,
    Pkcs8CryptError,
    SectionNotFoundError,
    UnsupportedAlgorithmError,
)
from .utils import logger

__all__ = [
    'DEFAULT_CONFIG_FILE',
    'logging_setup',
    'pkcs8crypt_exception_manager',
]

DEFAULT_CONFIG_FILE = 'pkcs8crypt.yml'

LOG_FORMAT_STRING = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class NoStackTraceFormatter(logging.Formatter):
    def formatException(self, ei) -> str:
        return ""  # pragma: nocover


def _make_handler(output, verbose: bool) -> logging.Handler:
    handler: logging.Handler
    if output == StdLogOutput.STDOUT:
        handler = logging.StreamHandler(sys.stdout)
    elif output == StdLogOutput.STDERR:
        handler = logging.StreamHandler()
    else:
        handler = logging.FileHandler(output)
        handler.setFormatter(logging.Formatter(LOG_FORMAT_STRING))
        return handler
    # console output only gets stack traces in verbose mode
    formatter_cls = logging.Formatter if verbose else NoStackTraceFormatter
    handler.setFormatter(formatter_cls(LOG_FORMAT_STRING))
    return handler


def logging_setup(log_configs, verbose: bool):
    log_config: LogConfig
    for module, log_config in log_configs.items():
        cur_logger = logging.getLogger(module)
        cur_logger.setLevel(log_config.level)
        cur_logger.addHandler(_make_handler(log_config.output, verbose))


# Checked in order, so subclasses come before their parents.
# Decryption failures are reported without further detail.
_ERROR_PREFIXES = (
    (DecryptionFailedError, None),
    (SectionNotFoundError, "Failed to read PEM file"),
    (MalformedEncodingError, "Failed to parse key material"),
    (UnsupportedAlgorithmError, "Unsupported key material"),
    (Pkcs8CryptError, None),
    (ConfigurationError, None),
)


def _error_message(e: Exception) -> str:
    for error_cls, prefix in _ERROR_PREFIXES:
        if isinstance(e, error_cls):
            return f"{prefix}: {e.msg}" if prefix else e.msg
    if isinstance(e, IOError):
        return f"I/O error: {e}"
    return "Generic processing error."


@contextmanager
def pkcs8crypt_exception_manager():
    try:
        yield
    except click.ClickException:
        raise
    except Exception as e:
        msg = _error_message(e)
        logger.error(msg, exc_info=e)
        raise click.ClickException(msg)
