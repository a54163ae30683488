"""Tests for conditional template markup."""

from __future__ import annotations

from pathlib import Path

import pytest

from cinnamon_cli.features import CinnamonProjectFeature as F, FeatureForest
from cinnamon_cli.template import (
    TemplateError,
    TemplateMarkupError,
    bundled_template_root,
    copy_package_tree,
    lint_tree,
    project_variables,
    rewrite_file,
    rewrite_text,
    rewrite_tree,
)
from cinnamon_cli.template.rewriter import features_referenced, substitute_variables


def _enabled(*features: str):
    return lambda feature: feature in features


def _rewrite(text: str, *features: str, **kwargs) -> str | None:
    return rewrite_text(text, _enabled(*features), **kwargs)


BLOCK = (
    "start\n"
    "// @cinnamon-if database\n"
    "db()\n"
    "// @cinnamon-endif database\n"
    "end\n"
)


class TestBlocks:
    def test_enabled_block_keeps_body_without_markers(self):
        assert _rewrite(BLOCK, "database") == "start\ndb()\nend\n"

    def test_disabled_block_is_removed(self):
        assert _rewrite(BLOCK) == "start\nend\n"

    def test_negated_block(self):
        text = "# @cinnamon-if !database\nmemory = True\n# @cinnamon-endif database\n"
        assert _rewrite(text) == "memory = True\n"
        assert _rewrite(text, "database") == ""

    def test_nested_blocks(self):
        text = (
            "<!-- @cinnamon-if authentication -->\n"
            "login\n"
            "<!-- @cinnamon-if push-tokens -->\n"
            "push\n"
            "<!-- @cinnamon-endif push-tokens -->\n"
            "<!-- @cinnamon-endif authentication -->\n"
        )
        assert _rewrite(text, "authentication") == "login\n"
        assert _rewrite(text, "authentication", "push-tokens") == "login\npush\n"
        # inner flag alone cannot bring back a removed outer block
        assert _rewrite(text, "push-tokens") == ""

    def test_text_without_markers_is_unchanged(self):
        text = "plain\ntext"
        assert _rewrite(text) == text


class TestLineMarkers:
    def test_kept_line_loses_marker_comment(self):
        text = '  "bcrypt": "^5.1.1", // @cinnamon-line authentication\n'
        assert _rewrite(text, "authentication") == '  "bcrypt": "^5.1.1",\n'

    def test_removed_line(self):
        text = "a\nb // @cinnamon-line avatar\nc\n"
        assert _rewrite(text) == "a\nc\n"

    @pytest.mark.parametrize(
        "line",
        [
            "value # @cinnamon-line asset\n",
            "value <!-- @cinnamon-line asset -->\n",
            "value /* @cinnamon-line asset */\n",
            "value -- @cinnamon-line asset\n",
        ],
    )
    def test_comment_styles(self, line: str):
        assert _rewrite(line, "asset") == "value\n"

    def test_negated_line(self):
        text = "fallback() // @cinnamon-line !database\n"
        assert _rewrite(text) == "fallback()\n"
        assert _rewrite(text, "database") == ""

    def test_line_ending_is_preserved(self):
        assert _rewrite("a // @cinnamon-line asset\r\nb\r\n", "asset") == "a\r\nb\r\n"

    def test_line_inside_removed_block(self):
        text = "// @cinnamon-if database\nx // @cinnamon-line asset\n// @cinnamon-endif database\n"
        assert _rewrite(text, "asset") == ""


class TestFileMarkers:
    def test_disabled_file_is_dropped(self):
        assert _rewrite("// @cinnamon-file database\nbody\n") is None

    def test_enabled_file_loses_marker_line(self):
        assert _rewrite("// @cinnamon-file database\nbody\n", "database") == "body\n"

    def test_negated_file(self):
        assert _rewrite("# @cinnamon-file !database\nbody\n", "database") is None

    def test_file_marker_must_be_first(self):
        with pytest.raises(TemplateMarkupError) as excinfo:
            _rewrite("body\n// @cinnamon-file database\n", "database", source="src/db.ts")
        assert excinfo.value.line_number == 2
        assert str(excinfo.value).startswith("src/db.ts:2:")


class TestMalformedMarkup:
    @pytest.mark.parametrize(
        ("text", "fragment"),
        [
            ("// @cinnamon-if database\nx\n", "never closed"),
            ("x\n// @cinnamon-endif database\n", "without a matching"),
            ("// @cinnamon-if database\n// @cinnamon-endif asset\n", "closes the block"),
            ("// @cinnamon-if !database\n// @cinnamon-endif !database\n", "must not be negated"),
            ("// @cinnamon-if\n// @cinnamon-endif\n", "without a feature identifier"),
        ],
    )
    def test_errors(self, text: str, fragment: str):
        with pytest.raises(TemplateMarkupError, match=fragment):
            _rewrite(text, "database")

    def test_unknown_feature(self):
        with pytest.raises(TemplateMarkupError, match="unknown feature 'graphql'"):
            _rewrite("x // @cinnamon-line graphql\n", is_known=lambda feature: feature == "database")

    def test_markers_inside_removed_blocks_are_checked(self):
        text = (
            "// @cinnamon-if database\n"
            "// @cinnamon-if graphql\n"
            "// @cinnamon-endif graphql\n"
            "// @cinnamon-endif database\n"
        )
        with pytest.raises(TemplateMarkupError) as excinfo:
            _rewrite(text, is_known=lambda feature: feature == "database")
        assert excinfo.value.line_number == 2


class TestVariables:
    def test_project_variables(self):
        assert project_variables("My Cool App") == {
            "PROJECT_NAME": "My Cool App",
            "PROJECT_SLUG": "my-cool-app",
            "PACKAGE_NAME": "my_cool_app",
        }

    def test_substitution_leaves_unknown_placeholders(self):
        text = "__CINNAMON_PROJECT_SLUG__ __CINNAMON_OTHER__"
        assert substitute_variables(text, {"PROJECT_SLUG": "demo"}) == "demo __CINNAMON_OTHER__"

    def test_rewrite_text_substitutes_after_markup(self):
        text = "name=__CINNAMON_PROJECT_NAME__ // @cinnamon-line database\n"
        assert _rewrite(text, "database", variables={"PROJECT_NAME": "Demo"}) == "name=Demo\n"


def test_features_referenced():
    assert features_referenced(BLOCK + "x // @cinnamon-line !asset\n") == {"database", "asset"}


class TestRewriteTree:
    def test_without_features(self, template_dir: Path, cinnamon_forest: FeatureForest):
        report = rewrite_tree(template_dir, cinnamon_forest, project_variables("Demo App"))

        assert not (template_dir / "src" / "database.ts").exists()
        package_json = (template_dir / "package.json").read_text(encoding="utf-8")
        assert '"name": "demo-app"' in package_json
        assert "mikro-orm" not in package_json
        main = (template_dir / "src" / "main.ts").read_text(encoding="utf-8")
        assert "connectDatabase" not in main
        assert 'console.warn("no database");' in main
        assert "@cinnamon" not in main

        assert report.removed == [template_dir / "src" / "database.ts"]
        assert report.skipped == [template_dir / "logo.bin"]
        assert sorted(report.rewritten) == [template_dir / "package.json", template_dir / "src" / "main.ts"]
        assert report.changed == 3

    def test_with_database(self, template_dir: Path, cinnamon_forest: FeatureForest):
        cinnamon_forest.enable(F.DATABASE)

        rewrite_tree(template_dir, cinnamon_forest)

        assert (template_dir / "src" / "database.ts").read_text(encoding="utf-8") == (
            "export async function connectDatabase() {}\n"
        )
        package_json = (template_dir / "package.json").read_text(encoding="utf-8")
        assert '"@mikro-orm/core": "^6.1.0",\n' in package_json
        assert "__CINNAMON_PROJECT_SLUG__" in package_json
        assert "no database" not in (template_dir / "src" / "main.ts").read_text(encoding="utf-8")

    def test_unreachable_feature_counts_as_disabled(self, tmp_path: Path, cinnamon_forest: FeatureForest):
        (tmp_path / "auth.ts").write_text("// @cinnamon-file authentication\nlogin()\n", encoding="utf-8")
        cinnamon_forest.enable(F.AUTHENTICATION)

        report = rewrite_tree(tmp_path, cinnamon_forest)

        assert report.removed == [tmp_path / "auth.ts"]

    def test_markup_error_leaves_tree_untouched(self, template_dir: Path, cinnamon_forest: FeatureForest):
        (template_dir / "zz-broken.ts").write_text("// @cinnamon-if database\n", encoding="utf-8")
        before = (template_dir / "package.json").read_text(encoding="utf-8")

        with pytest.raises(TemplateMarkupError, match="zz-broken.ts:1"):
            rewrite_tree(template_dir, cinnamon_forest, project_variables("demo"))

        assert (template_dir / "src" / "database.ts").exists()
        assert (template_dir / "package.json").read_text(encoding="utf-8") == before

    def test_write_failure_is_a_template_error(
        self, template_dir: Path, cinnamon_forest: FeatureForest, monkeypatch: pytest.MonkeyPatch
    ):
        def read_only(self, *args, **kwargs):
            raise PermissionError(f"Permission denied: '{self}'")

        monkeypatch.setattr(Path, "write_text", read_only)

        with pytest.raises(TemplateError, match="Could not rewrite") as excinfo:
            rewrite_tree(template_dir, cinnamon_forest, project_variables("demo"))

        assert not isinstance(excinfo.value, TemplateMarkupError)
        assert isinstance(excinfo.value.__cause__, PermissionError)

    def test_skips_node_modules(self, template_dir: Path, cinnamon_forest: FeatureForest):
        vendored = template_dir / "node_modules" / "dep" / "index.js"
        vendored.parent.mkdir(parents=True)
        vendored.write_text("x // @cinnamon-line database\n", encoding="utf-8")

        rewrite_tree(template_dir, cinnamon_forest)

        assert vendored.read_text(encoding="utf-8") == "x // @cinnamon-line database\n"


def test_rewrite_file_statuses(tmp_path: Path, cinnamon_forest: FeatureForest):
    plain = tmp_path / "plain.txt"
    plain.write_text("nothing here\n", encoding="utf-8")
    marked = tmp_path / "marked.txt"
    marked.write_text("a // @cinnamon-line validator\nb\n", encoding="utf-8")
    dropped = tmp_path / "dropped.txt"
    dropped.write_text("# @cinnamon-file asset\n", encoding="utf-8")
    binary = tmp_path / "image.png"
    binary.write_bytes(b"\x89PNG\0")

    assert rewrite_file(plain, cinnamon_forest) == "untouched"
    assert rewrite_file(marked, cinnamon_forest) == "rewritten"
    assert marked.read_text(encoding="utf-8") == "b\n"
    assert rewrite_file(dropped, cinnamon_forest) == "removed"
    assert not dropped.exists()
    assert rewrite_file(binary, cinnamon_forest) == "skipped"


class TestLintTree:
    def test_clean_template(self, template_dir: Path, cinnamon_forest: FeatureForest):
        errors, usage = lint_tree(template_dir, cinnamon_forest)

        assert errors == []
        assert usage == {
            "package.json": {"database"},
            "src/database.ts": {"database"},
            "src/main.ts": {"database"},
        }

    def test_reports_each_broken_file(self, template_dir: Path, cinnamon_forest: FeatureForest):
        (template_dir / "a.ts").write_text("x // @cinnamon-line graphql\n", encoding="utf-8")
        (template_dir / "b.ts").write_text("// @cinnamon-endif database\n", encoding="utf-8")

        errors, _ = lint_tree(template_dir, cinnamon_forest)

        assert [error.source for error in errors] == ["a.ts", "b.ts"]

    def test_checks_files_behind_negated_file_marker(self, tmp_path: Path, cinnamon_forest: FeatureForest):
        (tmp_path / "memory.ts").write_text(
            "// @cinnamon-file !database\n// @cinnamon-if asset\n",
            encoding="utf-8",
        )

        errors, usage = lint_tree(tmp_path, cinnamon_forest)

        assert len(errors) == 1
        assert errors[0].line_number == 2
        assert usage == {"memory.ts": {"database", "asset"}}

    def test_does_not_write(self, template_dir: Path, cinnamon_forest: FeatureForest):
        lint_tree(template_dir, cinnamon_forest)
        assert (template_dir / "src" / "database.ts").exists()


class TestBundledTemplate:
    @pytest.fixture()
    def bundled_copy(self, tmp_path: Path) -> Path:
        target = tmp_path / "bundled"
        copy_package_tree(bundled_template_root(), target)
        return target

    def test_markup_is_valid(self, bundled_copy: Path, cinnamon_forest: FeatureForest):
        errors, usage = lint_tree(bundled_copy, cinnamon_forest)
        assert errors == []
        assert "database" in usage["src/main.ts"]

    def test_minimal_project(self, bundled_copy: Path, cinnamon_forest: FeatureForest):
        rewrite_tree(bundled_copy, cinnamon_forest, project_variables("demo"))

        assert not (bundled_copy / "src" / "database.ts").exists()
        assert not (bundled_copy / "src" / "modules").exists()
        assert (bundled_copy / "src" / "main.ts").is_file()
        for path in bundled_copy.rglob("*"):
            if path.is_file():
                text = path.read_text(encoding="utf-8")
                assert "@cinnamon-" not in text
                assert "__CINNAMON_" not in text

    def test_full_project(self, bundled_copy: Path, cinnamon_forest: FeatureForest):
        cinnamon_forest.enable_all(list(cinnamon_forest))

        rewrite_tree(bundled_copy, cinnamon_forest, project_variables("demo"))

        auth = (bundled_copy / "src" / "modules" / "auth.ts").read_text(encoding="utf-8")
        assert "pushToken" in auth
        assert "avatar?: Asset" in auth
        assert "Running without a database" not in (bundled_copy / "src" / "main.ts").read_text(encoding="utf-8")
