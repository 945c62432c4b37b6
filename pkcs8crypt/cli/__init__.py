from ._root import cli_root
from .commands import *

__all__ = ['cli_root']
