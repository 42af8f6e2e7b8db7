"""Tests for the GitHub Actions runtime helpers."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from draft_release.utils.actions import (
    ActionContext,
    annotate_error,
    detect_action_context,
    log_group,
    parse_repository,
    set_output,
)


class TestDetectActionContext:
    """Tests for detect_action_context."""

    def test_branch_push(self) -> None:
        env = {
            "GITHUB_REPOSITORY": "lucacome/draft-release",
            "GITHUB_REF": "refs/heads/main",
            "GITHUB_SHA": "abc123def456",
            "GITHUB_EVENT_NAME": "push",
        }

        with patch.dict(os.environ, env, clear=True):
            context = detect_action_context()

        assert context == ActionContext(
            owner="lucacome",
            repo="draft-release",
            ref="refs/heads/main",
            sha="abc123def456",
            event_name="push",
        )
        assert context.branch == "main"
        assert context.is_github_actions

    def test_nested_branch_name(self) -> None:
        context = detect_action_context(
            {"GITHUB_REPOSITORY": "o/r", "GITHUB_REF": "refs/heads/release/1.x"}
        )
        assert context.branch == "release/1.x"

    @pytest.mark.parametrize("ref", ["refs/tags/v1.0.0", "refs/pull/12/merge", ""])
    def test_non_branch_ref(self, ref: str) -> None:
        context = detect_action_context({"GITHUB_REPOSITORY": "o/r", "GITHUB_REF": ref})
        assert context.branch is None

    def test_outside_github_actions(self) -> None:
        context = detect_action_context({})
        assert not context.is_github_actions
        assert context.owner == ""


class TestParseRepository:
    """Tests for parse_repository."""

    def test_owner_and_repo(self) -> None:
        assert parse_repository("owner/repo") == ("owner", "repo")

    @pytest.mark.parametrize("value", ["", "owner", "owner/", "a/b/c"])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError, match="owner/repo"):
            parse_repository(value)


class TestSetOutput:
    """Tests for set_output."""

    def test_heredoc_format(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        output = tmp_path / "output"
        monkeypatch.setenv("GITHUB_OUTPUT", str(output))

        set_output("release-notes", "line one\nline two")

        lines = output.read_text(encoding="utf-8").split("\n")
        name, delimiter = lines[0].split("<<")
        assert name == "release-notes"
        assert lines[1:] == ["line one", "line two", delimiter, ""]

    def test_appends(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        output = tmp_path / "output"
        monkeypatch.setenv("GITHUB_OUTPUT", str(output))

        set_output("version", "v1.1.0")
        set_output("previous-version", "v1.0.0")

        content = output.read_text(encoding="utf-8")
        assert content.startswith("version<<")
        assert "\nprevious-version<<" in content

    def test_without_output_file(
        self, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
    ) -> None:
        monkeypatch.delenv("GITHUB_OUTPUT", raising=False)

        with caplog.at_level("DEBUG", logger="draft_release.utils.actions"):
            set_output("version", "v1.1.0")

        assert "version=v1.1.0" in caplog.text


class TestWorkflowCommands:
    """Tests for workflow commands written to stdout."""

    def test_log_group(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("GITHUB_ACTIONS", "true")

        with log_group("Grouping dependency updates"):
            print("inside")  # noqa: T201

        assert capsys.readouterr().out == (
            "::group::Grouping dependency updates\ninside\n::endgroup::\n"
        )

    def test_log_group_closes_on_error(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("GITHUB_ACTIONS", "true")

        with pytest.raises(RuntimeError), log_group("Failing"):
            raise RuntimeError("boom")

        assert capsys.readouterr().out.endswith("::endgroup::\n")

    def test_silent_outside_actions(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.delenv("GITHUB_ACTIONS", raising=False)

        with log_group("Quiet"):
            pass
        annotate_error("nothing")

        assert capsys.readouterr().out == ""

    def test_error_annotation_escapes_newlines(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("GITHUB_ACTIONS", "true")

        annotate_error("first line\nsecond 100%")

        assert capsys.readouterr().out == "::error::first line%0Asecond 100%25\n"
