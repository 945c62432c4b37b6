import click
from asn1crypto import pem

from ...errors import MalformedEncodingError
from ...keybag import EncryptedKeyBag, PrivateKeyInfo, decode, describe_oid
from ...keys.pemder import (
    PRIVATE_KEY_SECTION,
    decode_pem_body,
    extract_section,
)
from .._root import cli_root
from ..runtime import pkcs8crypt_exception_manager
from ..utils import readable_file

__all__ = ['inspect_key']


def _echo_encrypted_bag(bag: EncryptedKeyBag):
    click.echo(f"Encryption scheme: {describe_oid(bag.scheme_oid)}")
    click.echo(f"Key derivation: {describe_oid(bag.kdf_oid)}")
    click.echo(f"Pseudorandom function: {describe_oid(bag.prf_oid)}")
    click.echo(f"Cipher: {describe_oid(bag.cipher_oid)}")
    click.echo(f"Iterations: {bag.iterations}")
    click.echo(f"Salt: {len(bag.salt)} bytes")
    click.echo(f"IV: {len(bag.iv)} bytes")
    click.echo(f"Encrypted data: {len(bag.encrypted_data)} bytes")


def _echo_raw(data: bytes):
    contents = decode(data)
    for oid in contents.oids:
        click.echo(f"OID: {describe_oid(oid)}")
    for value in contents.strings:
        click.echo(f"String: {len(value)} bytes")
    for number in contents.numbers:
        click.echo(f"Integer: {number}")


@cli_root.command(
    help='show the encryption parameters of a PKCS#8 private key',
    name='inspect',
)
@click.argument('keyfile', type=readable_file)
@click.option(
    '--raw',
    help='list every object identifier, string and integer in the key file',
    type=bool,
    is_flag=True,
    default=False,
)
def inspect_key(keyfile, raw):
    with pkcs8crypt_exception_manager():
        with open(keyfile, 'rb') as inf:
            key_bytes = inf.read()
        header = None
        if pem.detect(key_bytes):
            header, lines = extract_section(
                key_bytes.decode('ascii'), PRIVATE_KEY_SECTION
            )
            data = decode_pem_body(lines)
            click.echo(f"Section: {header}")
        else:
            data = key_bytes

        if raw:
            _echo_raw(data)
            return

        if header == PRIVATE_KEY_SECTION:
            encrypted = False
        else:
            try:
                bag = EncryptedKeyBag.from_der(data)
                encrypted = True
            except MalformedEncodingError:
                if header is not None:
                    raise
                encrypted = False

        if encrypted:
            _echo_encrypted_bag(bag)
            try:
                bag.check_supported()
                click.echo("Supported: yes")
            except ValueError as e:
                click.echo(f"Supported: no ({e})")
        else:
            key_info = PrivateKeyInfo.from_der(data)
            click.echo("Encrypted: no")
            click.echo(f"Algorithm: {describe_oid(key_info.algorithm_oid)}")
