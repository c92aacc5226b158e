"""Tests for ai_code_reviewer.services.path_filter."""

import pytest

from ai_code_reviewer.services.diff_parser import parse_diff
from ai_code_reviewer.services.path_filter import expand_braces, filter_files, is_excluded, matches_pattern

from samples import APP_TS_DIFF, DELETED_DIFF, README_DIFF, TWO_HUNK_DIFF


class TestMatchesPattern:
    @pytest.mark.parametrize(
        ("path", "pattern", "expected"),
        [
            ("README.md", "*.md", True),
            ("app.ts", "*.md", False),
            ("docs/guide.md", "*.md", False),
            ("docs/guide.md", "**/*.md", True),
            ("README.md", "**/*.md", True),
            ("docs/api/index.md", "docs/**", True),
            ("src/app.ts", "src/*.ts", True),
            ("src/deep/app.ts", "src/*.ts", False),
            ("package-lock.json", "package-lock.json", True),
            ("app.ts", "", False),
            ("", "", True),
            ("", "*.md", False),
            ("", "**", True),
            ("src/a.ts", "**/*.{ts,js}", True),
            ("lib/b.js", "**/*.{ts,js}", True),
            ("docs/c.md", "**/*.{ts,js}", False),
            ("pkg/yarn.lock", "pkg/{yarn.lock,package-lock.json}", True),
            ("a.{x}", "a.{x}", True),
            (".eslintrc", "*", False),
            (".github/workflows/ci.yml", "**/*.yml", False),
            (".github/workflows/ci.yml", "**", False),
            (".github/workflows/ci.yml", ".github/**", True),
            (".env", ".*", True),
        ],
    )
    def test_glob_semantics(self, path, pattern, expected):
        assert matches_pattern(path, pattern) is expected

    def test_any_pattern_excludes(self):
        assert is_excluded("dist/bundle.js", ["*.md", "dist/**"])
        assert not is_excluded("src/index.js", ["*.md", "dist/**"])


class TestFilterFiles:
    def test_excluded_file_loses_all_hunks(self):
        files = parse_diff(README_DIFF + APP_TS_DIFF)

        kept = filter_files(files, ["*.md"])

        assert [file.path for file in kept] == ["app.ts"]

    def test_multi_hunk_file_is_removed_whole(self):
        files = parse_diff(TWO_HUNK_DIFF + APP_TS_DIFF)

        kept = filter_files(files, ["src/**"])

        assert [file.path for file in kept] == ["app.ts"]

    def test_no_patterns_keeps_everything(self):
        files = parse_diff(README_DIFF + APP_TS_DIFF)

        assert filter_files(files, []) == files

    def test_empty_exclude_input_only_catches_deleted_files(self):
        # An unset ``exclude`` input parses to [""], which matches the empty path of a deletion.
        files = parse_diff(APP_TS_DIFF + DELETED_DIFF)

        kept = filter_files(files, [""])

        assert [file.path for file in kept] == ["app.ts"]

    def test_deleted_file_survives_ordinary_patterns(self):
        files = parse_diff(DELETED_DIFF)

        assert filter_files(files, ["*.ts"]) == files


class TestExpandBraces:
    def test_nested_sets(self):
        assert expand_braces("src/{a,b/{c,d}}.ts") == ["src/a.ts", "src/b/c.ts", "src/b/d.ts"]

    def test_pattern_without_sets_is_unchanged(self):
        assert expand_braces("**/*.md") == ["**/*.md"]
