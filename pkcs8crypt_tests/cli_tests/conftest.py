import pytest
import yaml
from click.testing import CliRunner

from pkcs8crypt_tests.samples import (
    RSA_ENCRYPTED_BAG,
    RSA_ENCRYPTED_PEM,
    RSA_KEY,
    RSA_PUBLIC_PEM,
    TEST_PASSPHRASE,
    pkcs8_pem,
)

INPUT_PATH = 'input.txt'
OUTPUT_PATH = 'output.bin'
RESULT_PATH = 'result.txt'
INPUT_DATA = b'The quick brown fox jumps over the lazy dog.\n'
DUMMY_PASSPHRASE = TEST_PASSPHRASE


def _const(v):
    def f(*_args, **_kwargs):
        return v

    return f


# cli_runner is autouse to ensure it gets priority in the dependency graph
@pytest.fixture(scope="function", autouse=True)
def cli_runner():
    runner = CliRunner()
    with runner.isolated_filesystem():
        with open(INPUT_PATH, 'wb') as outf:
            outf.write(INPUT_DATA)
        yield runner


def _write_file(fname: str, data):
    mode = 'wb' if isinstance(data, bytes) else 'w'
    with open(fname, mode) as outf:
        outf.write(data)
    return fname


def _write_config(config: dict, fname: str = 'pkcs8crypt.yml'):
    with open(fname, 'w') as outf:
        yaml.dump(config, outf)


def _read_result(fname: str = RESULT_PATH) -> bytes:
    with open(fname, 'rb') as inf:
        return inf.read()


@pytest.fixture
def encrypted_key():
    return _write_file('key.pem', RSA_ENCRYPTED_PEM)


@pytest.fixture
def encrypted_key_der():
    return _write_file('key.der', RSA_ENCRYPTED_BAG)


@pytest.fixture
def plain_key():
    return _write_file('plain-key.pem', pkcs8_pem(RSA_KEY))


@pytest.fixture
def public_key():
    return _write_file('key.pub.pem', RSA_PUBLIC_PEM)
