"""Exceptions raised while preparing or rewriting templates."""

from __future__ import annotations

from pathlib import Path


class TemplateError(Exception):
    """Base exception for template errors."""
    pass


class TemplateSourceError(TemplateError):
    """The template archive or directory cannot be used."""
    pass


class TemplateMarkupError(TemplateError):
    """Conditional markup in a template file is malformed.

    These are template authoring mistakes (unknown feature, unbalanced or
    mismatched markers), never caused by the user's feature choices.
    """

    def __init__(self, message: str, source: str | Path = "<text>", line_number: int | None = None):
        self.message = message
        self.source = str(source)
        self.line_number = line_number
        location = self.source if line_number is None else f"{self.source}:{line_number}"
        super().__init__(f"{location}: {message}")


__all__ = ["TemplateError", "TemplateSourceError", "TemplateMarkupError"]
