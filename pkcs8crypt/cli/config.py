from dataclasses import dataclass
from typing import Dict, Optional

import yaml

from ..config.errors import ConfigurationError
from ..config.key_setup import KeySetupConfig
from ..config.logging import LogConfig, parse_logging_config

__all__ = ['CLIConfig', 'CLIRootConfig', 'parse_cli_config']


@dataclass
class CLIConfig:
    """
    CLI configuration settings.
    """

    key_setups: Dict[str, dict]
    """
    Named key setups. The values in this dictionary are themselves
    dictionaries, see :class:`.KeySetupConfig` for the supported keys.

    Callers should not process this information directly, but rely on
    :meth:`get_key_setup` instead.
    """

    default_key_setup: str
    """
    The name of the default key setup.
    The default value for this setting is ``default``.
    """

    raw_config: dict
    """
    The raw config data parsed into a Python dictionary.
    """

    def get_key_setup(self, name: Optional[str] = None) -> KeySetupConfig:
        """
        Retrieve a key setup by name.

        :param name:
            The name of the key setup. If not supplied, the value
            of :attr:`default_key_setup` will be used.
        :return:
            A :class:`.KeySetupConfig` object.
        """
        name = name or self.default_key_setup
        try:
            setup_config = self.key_setups[name]
        except KeyError:
            raise ConfigurationError(f"There is no key setup named '{name}'.")
        return KeySetupConfig.from_config(setup_config)


@dataclass(frozen=True)
class CLIRootConfig:
    """
    Config settings that are only relevant to the CLI root and are not exposed
    to subcommands.
    """

    config: CLIConfig
    """
    General CLI config.
    """

    log_config: Dict[Optional[str], LogConfig]
    """
    Per-module logging configuration. The keys in this dictionary are
    module names, the :class:`.LogConfig` values define the logging settings.

    The ``None`` key houses the configuration for the root logger, if any.
    """


DEFAULT_KEY_SETUP = 'default'


def parse_cli_config(yaml_str) -> CLIRootConfig:
    config_dict = yaml.safe_load(yaml_str) or {}
    if not isinstance(config_dict, dict):
        raise ConfigurationError("Configuration should be a dictionary.")
    log_config = parse_logging_config(config_dict.get('logging', {}))
    return CLIRootConfig(
        config=CLIConfig(
            **process_config_dict(config_dict), raw_config=config_dict
        ),
        log_config=log_config,
    )


def process_config_dict(config_dict: dict) -> dict:
    key_setups = config_dict.get('key-setups', {})
    if not isinstance(key_setups, dict):
        raise ConfigurationError("key-setups should be a dictionary")
    default_key_setup = config_dict.get('default-key-setup', DEFAULT_KEY_SETUP)
    if not isinstance(default_key_setup, str):
        raise ConfigurationError("default-key-setup should be a string")
    return dict(
        key_setups=dict(key_setups),
        default_key_setup=default_key_setup,
    )
