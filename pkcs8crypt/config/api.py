"""
Loading of configuration dataclasses from YAML dictionaries.

YAML keys are written with dashes (``key-file``), the corresponding
dataclass fields with underscores (``key_file``).
"""

import dataclasses
from typing import Callable, Iterable, Set

from .errors import ConfigurationError

__all__ = [
    'ConfigurableMixin',
    'check_config_keys',
    'enforce_required_keys',
    'get_and_apply',
]


def _dashed(keys: Iterable[str]) -> Set[str]:
    return {key.replace('_', '-') for key in keys}


def _plural(keys, word='key') -> str:
    return word if len(keys) == 1 else word + 's'


class ConfigurableMixin:
    """Mixin for dataclasses that can be populated from a config dictionary."""

    @classmethod
    def process_entries(cls, config_dict):
        """
        Validate or rewrite the values in ``config_dict`` before they are
        passed to the initialiser. Keys have already been converted to
        underscore form at this point.

        Overrides should call ``super().process_entries()``.

        :raises ConfigurationError:
            if a value is unacceptable.
        """

    @classmethod
    def from_config(cls, config_dict):
        """
        Instantiate the class from a dictionary of configuration values.

        :param config_dict:
            A dictionary with dashed keys, e.g. as read from YAML.
        :return:
            An instance of the class on which it is called.
        :raises ConfigurationError:
            if there are unknown or missing keys, or a value is rejected by
            :meth:`process_entries`.
        """
        fields = dataclasses.fields(cls)
        check_config_keys(cls.__name__, {f.name for f in fields}, config_dict)
        kwargs = {key.replace('-', '_'): v for key, v in config_dict.items()}
        cls.process_entries(kwargs)
        required = {
            f.name for f in fields
            if f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        }
        enforce_required_keys(cls.__name__, required, kwargs)
        try:
            return cls(**kwargs)
        except TypeError as e:  # pragma: nocover
            raise ConfigurationError(str(e))


def check_config_keys(config_name, expected_keys, config_dict):
    """
    Make sure that ``config_dict`` is a dictionary whose keys are among
    ``expected_keys``. Missing keys are not reported here.
    """
    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"{config_name} must be configured with a dictionary."
        )
    unexpected = _dashed(config_dict.keys()) - _dashed(expected_keys)
    if unexpected:
        raise ConfigurationError(
            f"Unexpected {_plural(unexpected)} in configuration for "
            f"{config_name}: {', '.join(sorted(unexpected))}."
        )


def enforce_required_keys(config_name, required_keys, config_dict):
    missing = _dashed(required_keys) - _dashed(config_dict.keys())
    if missing:
        raise ConfigurationError(
            f"Missing required {_plural(missing)} in configuration for "
            f"{config_name}: {', '.join(sorted(missing))}."
        )


def get_and_apply(dictionary: dict, key, function: Callable, *, default=None):
    """
    Apply ``function`` to ``dictionary[key]``, or return ``default`` if the
    key is absent.
    """
    if key not in dictionary:
        return default
    return function(dictionary[key])
