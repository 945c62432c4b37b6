from typing import List

from .cli import cli_root

__all__: List[str] = []


def launch():
    cli_root(prog_name='pkcs8crypt')


if __name__ == '__main__':
    launch()
