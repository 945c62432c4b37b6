import asyncio
from typing import Optional

import click

from ...envelope import rsa_decrypt, rsa_encrypt
from ...keys import load_private_key_from_pemder, load_public_key_from_pemder
from .._ctx import CLIContext
from .._root import cli_root
from ..runtime import pkcs8crypt_exception_manager
from ..utils import prompt_key_passphrase, readable_file, writable_file

__all__ = ['rsa_group', 'rsa_encrypt_file', 'rsa_decrypt_file']


@cli_root.group(help='RSA-OAEP (SHA-256) encryption', name='rsa')
def rsa_group():
    pass


key_setup_option = click.option(
    '--key-setup',
    required=False,
    type=str,
    help='name of a key setup from the configuration file',
)


def _get_key_setup(ctx: click.Context, key_setup: Optional[str]):
    ctx_obj: CLIContext = ctx.obj
    if ctx_obj is None or ctx_obj.config is None:
        raise click.ClickException(
            "A configuration file is required to use --key-setup."
        )
    with pkcs8crypt_exception_manager():
        return ctx_obj.config.get_key_setup(key_setup)


@rsa_group.command(
    help='encrypt a (short) file with a public key', name='encrypt'
)
@click.argument('infile', type=readable_file)
@click.argument('outfile', type=writable_file)
@click.option(
    '--public-key',
    type=readable_file,
    required=False,
    help='file containing the recipient\'s public key (PEM/DER)',
)
@key_setup_option
@click.pass_context
def rsa_encrypt_file(ctx, infile, outfile, public_key, key_setup):
    if public_key is None:
        if key_setup is None:
            raise click.ClickException(
                "Specify either --public-key or --key-setup."
            )
        public_key = _get_key_setup(ctx, key_setup).public_key_file
        if public_key is None:
            raise click.ClickException(
                f"Key setup '{key_setup}' does not define a public key file."
            )

    async def _encrypt(data):
        key = await load_public_key_from_pemder(public_key)
        return await rsa_encrypt(key, data)

    with pkcs8crypt_exception_manager():
        with open(infile, 'rb') as inf:
            data = inf.read()
        result = asyncio.run(_encrypt(data))
        with open(outfile, 'wb') as outf:
            outf.write(result)


@rsa_group.command(help='decrypt a file with a private key', name='decrypt')
@click.argument('infile', type=readable_file)
@click.argument('outfile', type=writable_file)
@click.option(
    '--key',
    type=readable_file,
    required=False,
    help='file containing the private key (PEM/DER)',
)
@key_setup_option
@click.option(
    '--passfile',
    required=False,
    type=click.File('r'),
    help='file containing the passphrase for the private key',
    show_default='stdin',
)
@click.option(
    '--no-pass',
    help='assume the private key file is unencrypted',
    type=bool,
    is_flag=True,
    default=False,
    show_default=True,
)
@click.pass_context
def rsa_decrypt_file(ctx, infile, outfile, key, key_setup, passfile, no_pass):
    passphrase = None
    prompt = not no_pass
    if key is None:
        if key_setup is None:
            raise click.ClickException("Specify either --key or --key-setup.")
        setup = _get_key_setup(ctx, key_setup)
        key = setup.key_file
        if key is None:
            raise click.ClickException(
                f"Key setup '{key_setup}' does not define a private key file."
            )
        passphrase = setup.key_passphrase
        prompt = prompt and setup.prompt_passphrase

    if passfile is not None:
        passphrase = passfile.readline().rstrip('\r\n')
        passfile.close()
    elif passphrase is None and prompt:
        passphrase = prompt_key_passphrase()

    async def _decrypt(data):
        private_key = await load_private_key_from_pemder(
            key, passphrase=passphrase
        )
        return await rsa_decrypt(private_key, data)

    with pkcs8crypt_exception_manager():
        with open(infile, 'rb') as inf:
            data = inf.read()
        result = asyncio.run(_decrypt(data))
        with open(outfile, 'wb') as outf:
            outf.write(result)
