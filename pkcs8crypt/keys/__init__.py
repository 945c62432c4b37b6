"""
Utility package to load RSA keys from PEM and DER data.
"""

from .pemder import (
    extract_private_key,
    extract_public_key,
    extract_section,
    load_private_key_from_pemder,
    load_private_key_from_pemder_data,
    load_public_key_from_pemder,
    load_public_key_from_pemder_data,
)

__all__ = [
    'extract_private_key',
    'extract_public_key',
    'extract_section',
    'load_private_key_from_pemder',
    'load_private_key_from_pemder_data',
    'load_public_key_from_pemder',
    'load_public_key_from_pemder_data',
]
