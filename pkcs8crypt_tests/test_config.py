import logging

import pytest

from pkcs8crypt.cli.config import DEFAULT_KEY_SETUP, parse_cli_config
from pkcs8crypt.config import (
    DEFAULT_ROOT_LOGGER_LEVEL,
    ConfigurationError,
    KeySetupConfig,
    LogConfig,
    StdLogOutput,
    parse_logging_config,
)


def test_empty_config():
    root_config = parse_cli_config('')
    assert root_config.config.key_setups == {}
    assert root_config.config.default_key_setup == DEFAULT_KEY_SETUP
    assert root_config.log_config == {
        None: LogConfig(DEFAULT_ROOT_LOGGER_LEVEL, StdLogOutput.STDERR)
    }


def test_read_logging_config():
    config_string = """
    logging:
        root-level: DEBUG
        root-output: stdout
        by-module:
            pkcs8crypt.envelope:
                level: 10
                output: test.log
            pkcs8crypt.kdf:
                level: WARNING
    """
    log_config = parse_cli_config(config_string).log_config
    assert log_config[None] == LogConfig('DEBUG', StdLogOutput.STDOUT)
    assert log_config['pkcs8crypt.envelope'] == LogConfig(
        logging.DEBUG, 'test.log'
    )
    assert log_config['pkcs8crypt.kdf'] == LogConfig(
        'WARNING', StdLogOutput.STDERR
    )


@pytest.mark.parametrize('log_config_spec', [
    [],
    {'root-level': [1]},
    {'root-output': 1},
    {'by-module': []},
    {'by-module': {'pkcs8crypt': 'DEBUG'}},
    {'by-module': {'pkcs8crypt': {'output': 'stderr'}}},
    {'by-module': {1: {'level': 'DEBUG'}}},
])
def test_read_bad_logging_config(log_config_spec):
    with pytest.raises(ConfigurationError):
        parse_logging_config(log_config_spec)


def test_read_key_setups():
    config_string = """
    default-key-setup: recipient
    key-setups:
        recipient:
            public-key-file: recipient.pub.pem
        me:
            key-file: me.key.pem
            key-passphrase: secret
            prompt-passphrase: false
    """
    cli_config = parse_cli_config(config_string).config
    assert cli_config.default_key_setup == 'recipient'

    setup = cli_config.get_key_setup()
    assert setup == KeySetupConfig(public_key_file='recipient.pub.pem')
    assert setup.prompt_passphrase

    setup = cli_config.get_key_setup('me')
    assert setup.key_file == 'me.key.pem'
    assert setup.public_key_file is None
    assert setup.key_passphrase == 'secret'
    assert not setup.prompt_passphrase

    with pytest.raises(ConfigurationError, match='theresnosuchsetup'):
        cli_config.get_key_setup('theresnosuchsetup')


@pytest.mark.parametrize('setup_dict', [
    {},
    {'key-passphrase': 'secret'},
    {'key-file': 1},
    {'key-file': 'key.pem', 'prompt-passphrase': 'yes'},
    {'key-file': 'key.pem', 'certificate-file': 'cert.pem'},
])
def test_read_bad_key_setup(setup_dict):
    with pytest.raises(ConfigurationError):
        KeySetupConfig.from_config(setup_dict)


def test_unexpected_key_message():
    with pytest.raises(ConfigurationError, match='Unexpected keys'):
        KeySetupConfig.from_config(
            {'key-file': 'key.pem', 'foo': 1, 'bar': 2}
        )


@pytest.mark.parametrize('config_string', [
    '- just a list',
    'key-setups: [a, b]',
    'default-key-setup: 1',
])
def test_read_bad_cli_config(config_string):
    with pytest.raises(ConfigurationError):
        parse_cli_config(config_string)
