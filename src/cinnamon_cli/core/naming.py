"""Project name normalisation."""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def _normalise(value: str, separator: str) -> str:
    return _NON_ALNUM.sub(separator, value.strip().lower()).strip(separator)


def to_kebab_case(value: str) -> str:
    """``"My Cool App"`` -> ``"my-cool-app"``."""
    return _normalise(value, "-")


def to_snake_case(value: str) -> str:
    """``"My Cool App"`` -> ``"my_cool_app"``."""
    return _normalise(value, "_")


def validate_project_name(value: str) -> str | None:
    """Return an error message for an unusable project name, else None."""
    if not value or not value.strip():
        return "Please enter a value"
    if value.strip() in (".", ".."):
        return "Project name cannot be '.' or '..'"
    if not to_kebab_case(value):
        return "Project name must contain at least one letter or digit"
    return None


__all__ = ["to_kebab_case", "to_snake_case", "validate_project_name"]
