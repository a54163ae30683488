"""Core utilities and configuration exports."""

from .config import (
    ConfigError,
    CreateConfig,
    PACKAGE_MANAGERS,
    get_cinnamon_home,
    is_truthy_env,
    load_config,
    save_config,
)
from .naming import to_kebab_case, to_snake_case, validate_project_name
from .package_manager import (
    PackageManagerError,
    check_tool,
    detect_package_manager,
    install_dependencies,
)

__all__ = [
    "ConfigError",
    "CreateConfig",
    "PACKAGE_MANAGERS",
    "PackageManagerError",
    "check_tool",
    "detect_package_manager",
    "get_cinnamon_home",
    "install_dependencies",
    "is_truthy_env",
    "load_config",
    "save_config",
    "to_kebab_case",
    "to_snake_case",
    "validate_project_name",
]
