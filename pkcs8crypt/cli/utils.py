import getpass
import logging
from typing import Optional

import click

logger = logging.getLogger("cli")

readable_file = click.Path(exists=True, readable=True, dir_okay=False)
writable_file = click.Path(writable=True, dir_okay=False)


def prompt_key_passphrase(prompt: str = 'Key passphrase: ') -> Optional[str]:
    """
    Ask for a private key passphrase. An empty answer is returned as ``None``,
    i.e. it is treated as "no passphrase", after warning the user.
    """
    passphrase = getpass.getpass(prompt=prompt)
    if passphrase:
        return passphrase
    click.echo(
        click.style(
            "WARNING: passphrase is empty. If you intended to use an "
            "unencrypted private key, use --no-pass instead.",
            bold=True,
        )
    )
    return None


def prompt_password(password: Optional[str], prompt: str) -> str:
    if password:
        return password
    password = getpass.getpass(prompt=prompt)
    if not password:
        raise click.ClickException("Password must not be empty.")
    return password
