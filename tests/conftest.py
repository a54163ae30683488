from __future__ import annotations

from pathlib import Path

import pytest

from cinnamon_cli.features import FeatureForest, create_cinnamon_feature_forest


@pytest.fixture()
def cinnamon_forest() -> FeatureForest:
    return create_cinnamon_feature_forest()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep every test away from the real ~/.cinnamon and CINNAMON_* variables."""
    home = tmp_path_factory.mktemp("cinnamon-home")
    monkeypatch.setenv("CINNAMON_HOME", str(home))
    for name in ("CINNAMON_TEMPLATE", "CINNAMON_PACKAGE_MANAGER", "CINNAMON_NON_INTERACTIVE"):
        monkeypatch.delenv(name, raising=False)
    return home


@pytest.fixture()
def template_dir(tmp_path: Path) -> Path:
    """A small template using every kind of marker."""
    root = tmp_path / "template"
    (root / "src").mkdir(parents=True)
    (root / "package.json").write_text(
        "{\n"
        '  "name": "__CINNAMON_PROJECT_SLUG__",\n'
        '  "dependencies": {\n'
        '    "@mikro-orm/core": "^6.1.0", // @cinnamon-line database\n'
        '    "cinnamon": "^1.0.0"\n'
        "  }\n"
        "}\n",
        encoding="utf-8",
    )
    (root / "src" / "main.ts").write_text(
        'import Cinnamon from "cinnamon";\n'
        "// @cinnamon-if database\n"
        'import { connectDatabase } from "./database.js";\n'
        "// @cinnamon-endif database\n"
        "// @cinnamon-if !database\n"
        'console.warn("no database");\n'
        "// @cinnamon-endif database\n"
        "await new Cinnamon().start();\n",
        encoding="utf-8",
    )
    (root / "src" / "database.ts").write_text(
        "// @cinnamon-file database\n"
        "export async function connectDatabase() {}\n",
        encoding="utf-8",
    )
    (root / "logo.bin").write_bytes(b"\x89PNG\0\0binary")
    return root
