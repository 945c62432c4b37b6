from dataclasses import dataclass
from typing import Optional

from .config import CLIConfig


@dataclass
class CLIContext:
    """
    Context object that holds the settings gathered by the CLI root.
    This object is passed around as a ``click`` context object.
    """

    config: Optional[CLIConfig] = None
    """
    Values for CLI configuration settings.
    """
