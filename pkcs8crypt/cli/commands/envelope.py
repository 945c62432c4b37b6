import asyncio

import click

from ...envelope import aes_password_decrypt, aes_password_encrypt
from .._root import cli_root
from ..runtime import pkcs8crypt_exception_manager
from ..utils import prompt_password, readable_file, writable_file

__all__ = ['encrypt_file', 'decrypt_file']

password_option = click.option(
    '--password',
    help='password to use (prompted for if not given)',
    required=False,
    type=str,
)


@cli_root.command(
    help='encrypt a file with a password (AES-256-CBC, PBKDF2-HMAC-SHA256)',
    name='encrypt',
)
@click.argument('infile', type=readable_file)
@click.argument('outfile', type=writable_file)
@password_option
def encrypt_file(infile, outfile, password):
    password = prompt_password(password, 'Password: ')
    with pkcs8crypt_exception_manager():
        with open(infile, 'rb') as inf:
            data = inf.read()
        result = asyncio.run(aes_password_encrypt(password, data))
        with open(outfile, 'wb') as outf:
            outf.write(result)


@cli_root.command(
    help='decrypt a file produced by the encrypt command', name='decrypt'
)
@click.argument('infile', type=readable_file)
@click.argument('outfile', type=writable_file)
@password_option
def decrypt_file(infile, outfile, password):
    password = prompt_password(password, 'Password: ')
    with pkcs8crypt_exception_manager():
        with open(infile, 'rb') as inf:
            data = inf.read()
        result = asyncio.run(aes_password_decrypt(password, data))
        with open(outfile, 'wb') as outf:
            outf.write(result)
