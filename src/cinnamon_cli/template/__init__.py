"""Template extraction, rewriting and verification for cinnamon-create."""

from .exceptions import TemplateError, TemplateMarkupError, TemplateSourceError
from .hasher import build_manifest, diff_manifests, hash_file, read_manifest, write_manifest
from .manager import (
    BUNDLED_TEMPLATE,
    bundled_template_root,
    copy_package_tree,
    extract_template,
    publish_project,
    resolve_template_source,
)
from .rewriter import (
    RewriteReport,
    lint_tree,
    project_variables,
    rewrite_file,
    rewrite_text,
    rewrite_tree,
)

__all__ = [
    "BUNDLED_TEMPLATE",
    "RewriteReport",
    "TemplateError",
    "TemplateMarkupError",
    "TemplateSourceError",
    "build_manifest",
    "bundled_template_root",
    "copy_package_tree",
    "diff_manifests",
    "extract_template",
    "publish_project",
    "hash_file",
    "lint_tree",
    "project_variables",
    "read_manifest",
    "resolve_template_source",
    "rewrite_file",
    "rewrite_text",
    "rewrite_tree",
    "write_manifest",
]
