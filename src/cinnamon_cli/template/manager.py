"""Template discovery and extraction helpers."""

from __future__ import annotations

import logging
import shutil
import tempfile
import zipfile
from importlib.resources import files
from importlib.resources.abc import Traversable
from pathlib import Path

from .exceptions import TemplateSourceError

logger = logging.getLogger(__name__)

BUNDLED_TEMPLATE = "bundled"


def _resource_exists(resource: Traversable) -> bool:
    return resource.is_file() or resource.is_dir()


def bundled_template_root() -> Traversable:
    """Return the template that ships with the package."""
    return files("cinnamon_cli").joinpath("templates", "default")


def resolve_template_source(cli_value: str | None, configured: str | None = None) -> Path | Traversable:
    """Pick the template to use: the CLI flag, then configuration, then the bundled one."""
    raw = cli_value or configured
    if not raw or raw == BUNDLED_TEMPLATE:
        resource = bundled_template_root()
        if not _resource_exists(resource):
            raise TemplateSourceError("The bundled template is missing from this installation")
        return resource

    source = Path(raw).expanduser().resolve()
    if not source.exists():
        raise TemplateSourceError(f"Template not found: {source}")
    if source.is_file() and not zipfile.is_zipfile(source):
        raise TemplateSourceError(f"Template file is not a zip archive: {source}")
    return source


def copy_package_tree(resource: Traversable, dest: Path) -> None:
    """Recursively copy an importlib.resources directory tree."""
    dest.mkdir(parents=True, exist_ok=True)
    for child in resource.iterdir():
        if child.name == "__pycache__":
            continue
        target = dest / child.name
        if child.is_dir():
            copy_package_tree(child, target)
        else:
            with child.open("rb") as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)


def _merge_into(source_dir: Path, project_path: Path) -> None:
    for item in source_dir.iterdir():
        dest_path = project_path / item.name
        if item.is_dir():
            shutil.copytree(item, dest_path, dirs_exist_ok=True)
        else:
            shutil.copy2(item, dest_path)


def _single_root(directory: Path) -> Path:
    """Descend into the only top-level directory of GitHub-style archives."""
    items = list(directory.iterdir())
    if len(items) == 1 and items[0].is_dir():
        logger.debug("Flattening nested directory %s", items[0].name)
        return items[0]
    return directory


def extract_template(
    source: Path | Traversable,
    project_path: Path,
    *,
    allow_existing: bool = False,
) -> Path:
    """Populate ``project_path`` from a zip archive, directory or bundled template.

    The target is created and must not exist unless ``allow_existing`` is
    set, in which case template files are merged over existing content. A
    target created by this call is removed again when extraction fails.
    Only archives with a single top-level directory are flattened.
    """
    existed = project_path.exists()
    if existed and not allow_existing:
        raise TemplateSourceError(f"Directory already exists: {project_path}")

    project_path.mkdir(parents=True, exist_ok=True)
    try:
        if isinstance(source, Path) and source.is_file():
            with zipfile.ZipFile(source, "r") as zip_ref, tempfile.TemporaryDirectory() as temp_dir:
                temp_path = Path(temp_dir)
                zip_ref.extractall(temp_path)
                logger.debug("Archive %s contains %d entries", source.name, len(zip_ref.namelist()))
                _merge_into(_single_root(temp_path), project_path)
        elif isinstance(source, Path):
            _merge_into(source, project_path)
        else:
            copy_package_tree(source, project_path)
    except (OSError, zipfile.BadZipFile) as exc:
        if not existed and project_path.exists():
            shutil.rmtree(project_path)
        raise TemplateSourceError(f"Could not extract template: {exc}") from exc

    return project_path


def publish_project(staging: Path, project_path: Path) -> list[Path]:
    """Copy a prepared project from ``staging`` into ``project_path``.

    Only staged files are written; anything else already in ``project_path``
    is left as it was. Returns the top-level paths written.
    """
    project_path.mkdir(parents=True, exist_ok=True)
    written = [project_path / item.name for item in staging.iterdir()]
    try:
        _merge_into(staging, project_path)
    except OSError as exc:
        raise TemplateSourceError(f"Could not write project files to {project_path}: {exc}") from exc
    logger.debug("Published %d entries into %s", len(written), project_path)
    return written


__all__ = [
    "BUNDLED_TEMPLATE",
    "bundled_template_root",
    "copy_package_tree",
    "extract_template",
    "publish_project",
    "resolve_template_source",
]
