"""User configuration for cinnamon-create.

Values are resolved in this order: command line flags, environment
variables, ``config.toml`` in the cinnamon home directory, built-in defaults.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import toml  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

HOME_ENV_VAR = "CINNAMON_HOME"
TEMPLATE_ENV_VAR = "CINNAMON_TEMPLATE"
PACKAGE_MANAGER_ENV_VAR = "CINNAMON_PACKAGE_MANAGER"
NON_INTERACTIVE_ENV_VAR = "CINNAMON_NON_INTERACTIVE"

PACKAGE_MANAGERS = ("npm", "yarn", "pnpm")
DEFAULT_PACKAGE_MANAGER = "npm"
_TRUTHY_VALUES = {"1", "true", "yes", "on", "y"}


class ConfigError(Exception):
    """The configuration file cannot be used."""
    pass


def is_truthy_env(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in _TRUTHY_VALUES


def get_cinnamon_home() -> Path:
    """Return the user-global configuration directory.

    Resolution order:
    1. CINNAMON_HOME environment variable (all platforms)
    2. %LOCALAPPDATA%\\cinnamon\\ on Windows (via platformdirs)
    3. ~/.cinnamon/ elsewhere
    """
    if env_home := os.environ.get(HOME_ENV_VAR):
        return Path(env_home).expanduser()

    if os.name == "nt":
        from platformdirs import user_data_dir

        return Path(user_data_dir("cinnamon"))

    return Path.home() / ".cinnamon"


@dataclass
class CreateConfig:
    """Settings of the ``[create]`` section."""

    template: str | None = None
    package_manager: str = DEFAULT_PACKAGE_MANAGER
    install: bool = True
    non_interactive: bool = False

    @property
    def config_file(self) -> Path:
        return get_cinnamon_home() / "config.toml"


def _load_file(config_file: Path) -> dict[str, Any]:
    if not config_file.exists():
        return {}
    try:
        config: dict[str, Any] = toml.load(config_file)
    except (toml.TomlDecodeError, OSError) as exc:
        raise ConfigError(f"Cannot read {config_file}: {exc}") from exc
    section = config.get("create")
    return section if isinstance(section, dict) else {}


def load_config(config_file: Path | None = None) -> CreateConfig:
    """Build the effective configuration from file and environment."""
    config = CreateConfig()
    config_file = config_file or config.config_file
    section = _load_file(config_file)

    template = section.get("template")
    if isinstance(template, str) and template.strip():
        config.template = template.strip()

    manager = section.get("package_manager")
    if isinstance(manager, str):
        config.package_manager = manager.strip().lower()

    install = section.get("install")
    if isinstance(install, bool):
        config.install = install

    if env_template := os.environ.get(TEMPLATE_ENV_VAR):
        config.template = env_template
    if env_manager := os.environ.get(PACKAGE_MANAGER_ENV_VAR):
        config.package_manager = env_manager.strip().lower()
    config.non_interactive = is_truthy_env(os.environ.get(NON_INTERACTIVE_ENV_VAR))

    # validated by callers once command line flags are applied
    if config.package_manager not in PACKAGE_MANAGERS:
        logger.warning(
            "Unsupported package manager '%s' in configuration. Choose from: %s",
            config.package_manager,
            ", ".join(PACKAGE_MANAGERS),
        )

    logger.debug("Loaded configuration from %s: %s", config_file, config)
    return config


def save_config(config: CreateConfig, config_file: Path | None = None) -> Path:
    """Persist the ``[create]`` section, keeping other sections intact."""
    config_file = config_file or config.config_file
    config_file.parent.mkdir(parents=True, exist_ok=True)

    document: dict[str, Any] = {}
    if config_file.exists():
        document = toml.load(config_file)

    section: dict[str, Any] = {
        "package_manager": config.package_manager,
        "install": config.install,
    }
    if config.template:
        section["template"] = config.template
    document["create"] = section

    with open(config_file, "w", encoding="utf-8") as f:
        toml.dump(document, f)
    return config_file


__all__ = [
    "ConfigError",
    "CreateConfig",
    "DEFAULT_PACKAGE_MANAGER",
    "NON_INTERACTIVE_ENV_VAR",
    "PACKAGE_MANAGERS",
    "PACKAGE_MANAGER_ENV_VAR",
    "TEMPLATE_ENV_VAR",
    "get_cinnamon_home",
    "is_truthy_env",
    "load_config",
    "save_config",
]
