"""Tests for action inputs and category configuration."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from draft_release.config import (
    DEFAULT_CONFIG_PATH,
    Category,
    Inputs,
    get_boolean_input,
    get_input,
    get_input_list,
    load_categories,
    load_inputs,
    parse_categories,
)

# ── Inputs ───────────────────────────────────────────────────────


class TestGetInput:
    """Tests for reading single action inputs."""

    def test_reads_input_env_var(self) -> None:
        assert get_input("major-label", env={"INPUT_MAJOR-LABEL": "breaking"}) == "breaking"

    def test_spaces_become_underscores(self) -> None:
        assert get_input("my input", env={"INPUT_MY_INPUT": "x"}) == "x"

    def test_value_is_trimmed(self) -> None:
        assert get_input("header", env={"INPUT_HEADER": "  hello \n"}) == "hello"

    def test_default_when_missing_or_empty(self) -> None:
        assert get_input("config-path", "fallback", env={}) == "fallback"
        assert get_input("config-path", "fallback", env={"INPUT_CONFIG-PATH": "  "}) == "fallback"

    def test_reads_process_environment(self) -> None:
        with patch.dict(os.environ, {"INPUT_MINOR-LABEL": "feature"}, clear=True):
            assert get_input("minor-label") == "feature"


class TestGetBooleanInput:
    """Tests for YAML 1.2 boolean inputs."""

    @pytest.mark.parametrize("value", ["true", "True", "TRUE"])
    def test_true(self, value: str) -> None:
        assert get_boolean_input("publish", False, env={"INPUT_PUBLISH": value}) is True

    @pytest.mark.parametrize("value", ["false", "False", "FALSE"])
    def test_false(self, value: str) -> None:
        assert get_boolean_input("publish", True, env={"INPUT_PUBLISH": value}) is False

    def test_default_when_missing(self) -> None:
        assert get_boolean_input("group-dependencies", True, env={}) is True

    @pytest.mark.parametrize("value", ["yes", "1", "tRue", "on"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError, match="YAML 1.2 Core Schema"):
            get_boolean_input("publish", False, env={"INPUT_PUBLISH": value})


class TestGetInputList:
    """Tests for list inputs."""

    def test_newline_separated(self) -> None:
        env = {"INPUT_VARIABLES": "foo=bar\nbaz=qux\n"}
        assert get_input_list("variables", env=env) == ("foo=bar", "baz=qux")

    def test_comma_separated(self) -> None:
        env = {"INPUT_VARIABLES": "foo=bar, baz=qux"}
        assert get_input_list("variables", env=env) == ("foo=bar", "baz=qux")

    def test_empty(self) -> None:
        assert get_input_list("variables", env={}) == ()


class TestLoadInputs:
    """Tests for load_inputs."""

    def test_defaults(self) -> None:
        inputs = load_inputs(env={})

        assert inputs == Inputs()
        assert inputs.config_path == DEFAULT_CONFIG_PATH
        assert inputs.group_dependencies is True
        assert inputs.remove_conventional_prefixes is False
        assert inputs.collapse_after == 0

    def test_all_inputs(self) -> None:
        env = {
            "INPUT_GITHUB-TOKEN": "token-value",
            "INPUT_MAJOR-LABEL": "change",
            "INPUT_MINOR-LABEL": "enhancement",
            "INPUT_NOTES-HEADER": "# {{version}}",
            "INPUT_NOTES-FOOTER": "footer",
            "INPUT_VARIABLES": "foo=bar\nbaz=qux",
            "INPUT_COLLAPSE-AFTER": "5",
            "INPUT_PUBLISH": "true",
            "INPUT_CONFIG-PATH": ".github/changelog.yml",
            "INPUT_DRY-RUN": "TRUE",
            "INPUT_GROUP-DEPENDENCIES": "false",
            "INPUT_REMOVE-CONVENTIONAL-PREFIXES": "True",
        }

        inputs = load_inputs(env=env)

        assert inputs == Inputs(
            github_token="token-value",  # noqa: S106
            major_label="change",
            minor_label="enhancement",
            header="# {{version}}",
            footer="footer",
            variables=("foo=bar", "baz=qux"),
            collapse_after=5,
            publish=True,
            config_path=".github/changelog.yml",
            dry_run=True,
            group_dependencies=False,
            remove_conventional_prefixes=True,
        )

    def test_token_falls_back_to_github_token(self) -> None:
        inputs = load_inputs(env={"GITHUB_TOKEN": "env-token"})
        assert inputs.github_token == "env-token"  # noqa: S105

    def test_invalid_collapse_after(self) -> None:
        with pytest.raises(ValueError, match="collapse-after must be an integer"):
            load_inputs(env={"INPUT_COLLAPSE-AFTER": "many"})

    def test_invalid_boolean(self) -> None:
        with pytest.raises(ValueError, match="dry-run"):
            load_inputs(env={"INPUT_DRY-RUN": "maybe"})

    def test_inputs_are_frozen(self) -> None:
        inputs = Inputs()
        with pytest.raises(AttributeError):
            inputs.publish = True  # type: ignore[misc]


# ── Categories ───────────────────────────────────────────────────

RELEASE_YML = """
changelog:
  exclude:
    labels:
      - skip-changelog
  categories:
    - title: 💣 Breaking Changes
      labels:
        - change
    - title: 🚀 Features
      labels:
        - enhancement
        - feature
    - title: Other Changes
      labels:
        - "*"
"""


class TestParseCategories:
    """Tests for parse_categories."""

    def test_parses_titles_and_labels(self) -> None:
        assert parse_categories(RELEASE_YML) == [
            Category(title="💣 Breaking Changes", labels=("change",)),
            Category(title="🚀 Features", labels=("enhancement", "feature")),
            Category(title="Other Changes", labels=("*",)),
        ]

    def test_key_is_first_label(self) -> None:
        categories = parse_categories(RELEASE_YML)
        assert [category.key for category in categories] == ["change", "enhancement", "*"]

    def test_single_label_string(self) -> None:
        text = "changelog:\n  categories:\n    - title: Fixes\n      labels: bug\n"
        assert parse_categories(text) == [Category(title="Fixes", labels=("bug",))]

    def test_missing_categories(self) -> None:
        with pytest.raises(ValueError, match=r"changelog\.categories"):
            parse_categories("changelog:\n  exclude: {}\n")

    def test_empty_document(self) -> None:
        with pytest.raises(ValueError, match=r"changelog\.categories"):
            parse_categories("")

    def test_category_without_labels(self) -> None:
        with pytest.raises(ValueError, match="needs at least one label"):
            parse_categories("changelog:\n  categories:\n    - title: Fixes\n")

    def test_invalid_yaml(self) -> None:
        with pytest.raises(yaml.YAMLError):
            parse_categories("changelog: [unclosed")


class TestLoadCategories:
    """Tests for load_categories."""

    def test_loads_file(self, tmp_path: Path) -> None:
        config = tmp_path / "release.yml"
        config.write_text(RELEASE_YML, encoding="utf-8")

        categories = load_categories(config)

        assert len(categories) == 3
        assert categories[1].title == "🚀 Features"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_categories(tmp_path / "missing.yml")
