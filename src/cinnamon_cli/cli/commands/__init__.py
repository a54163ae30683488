"""CLI command modules for cinnamon-create."""

from .config_cmd import config
from .features import features
from .init import register_init_command
from .verify import verify

__all__ = ["config", "features", "register_init_command", "verify"]
