"""Deterministic SHA256 hashing of template trees.

Template authors record a manifest of file hashes so that a change in a
template (or in what the rewriter produces from it) shows up as a diff.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from .rewriter import SKIPPED_DIRECTORIES

MANIFEST_VERSION = 1


def hash_file(file_path: Path) -> str:
    """Compute SHA256 hash of file content (bytes).

    Raises:
        FileNotFoundError: If file does not exist
        PermissionError: If file cannot be read
    """
    hasher = hashlib.sha256()
    try:
        with open(file_path, "rb") as f:
            while chunk := f.read(8192):
                hasher.update(chunk)
    except FileNotFoundError as e:
        raise FileNotFoundError(f"File not found: {file_path}") from e
    except PermissionError as e:
        raise PermissionError(f"Permission denied reading file: {file_path}") from e

    return hasher.hexdigest()


def build_manifest(root: Path) -> Dict[str, str]:
    """Map every file's POSIX relative path to its hash, sorted by path."""
    entries: Dict[str, str] = {}
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        relative = path.relative_to(root)
        if any(part in SKIPPED_DIRECTORIES for part in relative.parts):
            continue
        entries[relative.as_posix()] = hash_file(path)
    return dict(sorted(entries.items()))


def manifest_digest(manifest: Dict[str, str]) -> str:
    """Single hash over a manifest, independent of insertion order."""
    hasher = hashlib.sha256()
    for relative, digest in sorted(manifest.items()):
        hasher.update(f"{relative}\0{digest}\n".encode("utf-8"))
    return hasher.hexdigest()


@dataclass
class ManifestDiff:
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    changed: List[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.added or self.removed or self.changed)


def diff_manifests(old: Dict[str, str], new: Dict[str, str]) -> ManifestDiff:
    return ManifestDiff(
        added=sorted(set(new) - set(old)),
        removed=sorted(set(old) - set(new)),
        changed=sorted(path for path in set(old) & set(new) if old[path] != new[path]),
    )


def write_manifest(manifest: Dict[str, str], path: Path) -> None:
    payload = {
        "version": MANIFEST_VERSION,
        "digest": manifest_digest(manifest),
        "files": manifest,
    }
    path.write_text(json.dumps(payload, indent=2, sort_keys=True) + "\n", encoding="utf-8")


def read_manifest(path: Path) -> Dict[str, str]:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict) or not isinstance(payload.get("files"), dict):
        raise ValueError(f"{path} is not a template manifest")
    return {str(k): str(v) for k, v in payload["files"].items()}


__all__ = [
    "ManifestDiff",
    "build_manifest",
    "diff_manifests",
    "hash_file",
    "manifest_digest",
    "read_manifest",
    "write_manifest",
]
