"""Rewrite template files according to the enabled features.

Markers live in comments, whatever the comment syntax of the file::

    // @cinnamon-if database
    import { MikroORM } from "@mikro-orm/core";
    // @cinnamon-endif database

    # @cinnamon-if !database
    STORAGE = "memory"
    # @cinnamon-endif database

    import { Avatar } from "./avatar"; // @cinnamon-line avatar

    <!-- @cinnamon-file asset -->   (first line only)

A block whose condition holds loses its marker lines and keeps its body. A
block whose condition fails is removed entirely. ``@cinnamon-line`` applies
the same rule to the line it sits on, ``@cinnamon-file`` to the whole file.
End markers repeat the feature identifier without ``!`` so nested blocks stay
readable. ``__CINNAMON_<NAME>__`` placeholders are replaced by project
variables.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Mapping

from cinnamon_cli.core.naming import to_kebab_case, to_snake_case
from cinnamon_cli.features.tree import FeatureForest

from .exceptions import TemplateError, TemplateMarkupError

logger = logging.getLogger(__name__)

MARKER_RE = re.compile(r"@cinnamon-(?P<kind>if|endif|line|file)\b[ \t]*(?P<negated>!?)(?P<feature>[A-Za-z0-9_.-]*)")
VARIABLE_RE = re.compile(r"__CINNAMON_(?P<name>[A-Z0-9_]+?)__")
_TRAILING_COMMENT_OPENERS = ("<!--", "/*", "//", "--", "#")

SKIPPED_DIRECTORIES = frozenset({".git", "node_modules", "__pycache__"})


@dataclass
class _OpenBlock:
    feature: str
    keep: bool
    line_number: int


@dataclass
class RewriteReport:
    """Which files a tree rewrite touched."""

    rewritten: list[Path] = field(default_factory=list)
    removed: list[Path] = field(default_factory=list)
    untouched: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)

    @property
    def changed(self) -> int:
        return len(self.rewritten) + len(self.removed)


def project_variables(project_name: str) -> dict[str, str]:
    return {
        "PROJECT_NAME": project_name,
        "PROJECT_SLUG": to_kebab_case(project_name),
        "PACKAGE_NAME": to_snake_case(project_name),
    }


def substitute_variables(text: str, variables: Mapping[str, str]) -> str:
    """Replace known ``__CINNAMON_<NAME>__`` placeholders, leave the rest."""
    if not variables:
        return text

    def replace(match: re.Match[str]) -> str:
        return variables.get(match.group("name"), match.group(0))

    return VARIABLE_RE.sub(replace, text)


def _strip_trailing_marker(line: str, start: int) -> str:
    ending = line[len(line.rstrip("\r\n")):]
    kept = line[:start].rstrip()
    for opener in _TRAILING_COMMENT_OPENERS:
        if kept.endswith(opener):
            kept = kept[: -len(opener)].rstrip()
            break
    return kept + ending


def rewrite_text(
    text: str,
    is_enabled: Callable[[str], bool],
    *,
    is_known: Callable[[str], bool] | None = None,
    variables: Mapping[str, str] | None = None,
    source: str | Path = "<text>",
) -> str | None:
    """Apply conditional markup to ``text``.

    Returns the rewritten text, or ``None`` when a ``@cinnamon-file`` marker
    says the whole file must go. Raises ``TemplateMarkupError`` for malformed
    markup; markers inside removed blocks are validated too.
    """
    output: list[str] = []
    stack: list[_OpenBlock] = []

    for index, line in enumerate(text.splitlines(keepends=True)):
        line_number = index + 1
        match = MARKER_RE.search(line)
        if match is None:
            if all(block.keep for block in stack):
                output.append(line)
            continue

        kind = match.group("kind")
        negated = match.group("negated") == "!"
        feature = match.group("feature")
        if not feature:
            raise TemplateMarkupError(f"@cinnamon-{kind} without a feature identifier", source, line_number)
        if is_known is not None and not is_known(feature):
            raise TemplateMarkupError(f"unknown feature {feature!r}", source, line_number)
        condition = is_enabled(feature) != negated

        if kind == "file":
            if index != 0:
                raise TemplateMarkupError("@cinnamon-file must be on the first line", source, line_number)
            if not condition:
                return None
        elif kind == "if":
            stack.append(_OpenBlock(feature, condition, line_number))
        elif kind == "endif":
            if negated:
                raise TemplateMarkupError(f"end marker for {feature!r} must not be negated", source, line_number)
            if not stack:
                raise TemplateMarkupError(f"@cinnamon-endif {feature} without a matching @cinnamon-if", source, line_number)
            if stack[-1].feature != feature:
                raise TemplateMarkupError(
                    f"@cinnamon-endif {feature} closes the block opened for {stack[-1].feature!r} "
                    f"on line {stack[-1].line_number}",
                    source,
                    line_number,
                )
            stack.pop()
        elif condition and all(block.keep for block in stack):
            output.append(_strip_trailing_marker(line, match.start()))

    if stack:
        block = stack[-1]
        raise TemplateMarkupError(f"@cinnamon-if {block.feature} is never closed", source, block.line_number)

    return substitute_variables("".join(output), variables or {})


def _forest_predicates(forest: FeatureForest) -> tuple[Callable[[str], bool], Callable[[str], bool]]:
    # a stored flag under a disabled parent does not count as enabled
    reachable = {feature.id for feature in forest.get_all_enabled()}
    return reachable.__contains__, forest.__contains__


def _read_text(path: Path) -> str | None:
    data = path.read_bytes()
    if b"\0" in data:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _iter_files(root: Path) -> Iterable[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_DIRECTORIES)
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


def rewrite_file(path: Path, forest: FeatureForest, variables: Mapping[str, str] | None = None) -> str:
    """Rewrite a single file in place.

    Returns ``"rewritten"``, ``"removed"``, ``"untouched"`` or ``"skipped"``
    (binary or non UTF-8 content).
    """
    text = _read_text(path)
    if text is None:
        return "skipped"
    is_enabled, is_known = _forest_predicates(forest)
    result = rewrite_text(text, is_enabled, is_known=is_known, variables=variables, source=path)
    if result is None:
        path.unlink()
        return "removed"
    if result == text:
        return "untouched"
    path.write_text(result, encoding="utf-8")
    return "rewritten"


def rewrite_tree(root: Path, forest: FeatureForest, variables: Mapping[str, str] | None = None) -> RewriteReport:
    """Rewrite every text file under ``root``.

    All files are processed before anything is written, so a markup error
    leaves the tree as it was. Write failures raise ``TemplateError``.
    """
    is_enabled, is_known = _forest_predicates(forest)
    report = RewriteReport()
    pending: list[tuple[Path, str | None]] = []

    for path in _iter_files(root):
        text = _read_text(path)
        if text is None:
            report.skipped.append(path)
            continue
        result = rewrite_text(text, is_enabled, is_known=is_known, variables=variables, source=path.relative_to(root))
        if result == text:
            report.untouched.append(path)
        else:
            pending.append((path, result))

    try:
        for path, result in pending:
            if result is None:
                path.unlink()
                report.removed.append(path)
                logger.debug("Removed %s", path)
            else:
                path.write_text(result, encoding="utf-8")
                report.rewritten.append(path)
                logger.debug("Rewrote %s", path)

        _prune_empty_parents(root, report.removed)
    except OSError as exc:
        raise TemplateError(f"Could not rewrite {root}: {exc}") from exc
    return report


def _prune_empty_parents(root: Path, removed: Iterable[Path]) -> None:
    """Remove directories that only held files dropped by ``@cinnamon-file``."""
    for path in removed:
        parent = path.parent
        while parent != root and parent.is_dir() and not any(parent.iterdir()):
            parent.rmdir()
            parent = parent.parent


def features_referenced(text: str) -> set[str]:
    return {match.group("feature") for match in MARKER_RE.finditer(text) if match.group("feature")}


def lint_tree(root: Path, forest: FeatureForest) -> tuple[list[TemplateMarkupError], dict[str, set[str]]]:
    """Check every file's markup without writing anything.

    Returns the first markup error of each broken file and, for each
    relative path, the features its markers mention.
    """
    _, is_known = _forest_predicates(forest)
    errors: list[TemplateMarkupError] = []
    usage: dict[str, set[str]] = {}
    for path in _iter_files(root):
        text = _read_text(path)
        if text is None:
            continue
        relative = path.relative_to(root).as_posix()
        try:
            # one of the two passes reads past a @cinnamon-file marker
            for assumed in (True, False):
                rewrite_text(text, lambda _feature, assumed=assumed: assumed, is_known=is_known, source=relative)
        except TemplateMarkupError as exc:
            errors.append(exc)
        referenced = features_referenced(text)
        if referenced:
            usage[relative] = referenced
    return errors, usage


__all__ = [
    "MARKER_RE",
    "RewriteReport",
    "features_referenced",
    "lint_tree",
    "project_variables",
    "rewrite_file",
    "rewrite_text",
    "rewrite_tree",
    "substitute_variables",
]
