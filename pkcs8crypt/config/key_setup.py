from dataclasses import dataclass
from typing import Optional

from . import api
from .errors import ConfigurationError

__all__ = ['KeySetupConfig']


@dataclass(frozen=True)
class KeySetupConfig(api.ConfigurableMixin):
    """
    Configuration for RSA key material on disk, in PEM or DER format.
    At least one of :attr:`key_file` and :attr:`public_key_file` must be set.
    """

    key_file: Optional[str] = None
    """Private key file, possibly encrypted."""

    public_key_file: Optional[str] = None
    """Public key file."""

    key_passphrase: Optional[str] = None
    """Passphrase for the private key (if relevant)."""

    prompt_passphrase: bool = True
    """
    Prompt for the key passphrase. Default is ``True``.

    .. note::
        If :attr:`key_passphrase` is not ``None``, this setting has no effect.
    """

    @classmethod
    def process_entries(cls, config_dict):
        super().process_entries(config_dict)

        for key in ('key_file', 'public_key_file', 'key_passphrase'):
            value = config_dict.get(key, None)
            if value is not None and not isinstance(value, str):
                raise ConfigurationError(
                    f"'{key.replace('_', '-')}' must be a string."
                )
        if not config_dict.get('key_file') and \
                not config_dict.get('public_key_file'):
            raise ConfigurationError(
                "A key setup requires 'key-file', 'public-key-file' or both."
            )
        prompt = config_dict.get('prompt_passphrase', True)
        if not isinstance(prompt, bool):
            raise ConfigurationError("'prompt-passphrase' must be a boolean.")
