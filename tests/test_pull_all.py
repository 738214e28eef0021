"""
Tests for the bulk repository updater.
"""

from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from opskit.exceptions import CommandError
from opskit.pull_all import format_summary, pull_all, pull_repository
from opskit.testing import MockGitClient, create_mock_repository
from opskit.types.git import PullAllRequest, PullOutcome, PullResult, PullSummary

REPO = Path("/src/api")

outcome_strategy = st.lists(st.sampled_from(list(PullOutcome)), max_size=30)


@given(outcomes=outcome_strategy)
@settings(max_examples=100)
def test_property_summary_counts_add_up(outcomes: list[PullOutcome]) -> None:
    """Every processed repository lands in exactly one summary bucket."""
    summary = PullSummary()
    for outcome in outcomes:
        summary.add(PullResult(REPO, outcome))

    assert summary.total == len(outcomes)
    assert (
        summary.pulled + summary.skipped_local_changes + summary.skipped_no_remote + summary.errors
        == summary.total
    )
    assert summary.errors == outcomes.count(PullOutcome.FAILED)


class TestPullRepository:
    def test_clean_repository_is_pulled(self, mock_git: MockGitClient) -> None:
        mock_git.configure_repository(REPO, create_mock_repository(pull_output="Fast-forward"))
        lines: list[str] = []

        result = pull_repository(mock_git, REPO, PullAllRequest(directory=REPO.parent), lines.append)

        assert result.outcome is PullOutcome.PULLED
        assert lines == ["Fast-forward"]

    @pytest.mark.parametrize("uncommitted,untracked", [(True, False), (False, True), (True, True)])
    def test_local_changes_skip_without_force(
        self, mock_git: MockGitClient, uncommitted: bool, untracked: bool
    ) -> None:
        mock_git.configure_repository(
            REPO, create_mock_repository(uncommitted=uncommitted, untracked=untracked)
        )

        result = pull_repository(mock_git, REPO, PullAllRequest(directory=REPO.parent))

        assert result.outcome is PullOutcome.SKIPPED_LOCAL_CHANGES
        assert not mock_git.was_called("pull")

    def test_force_pulls_despite_local_changes(self, mock_git: MockGitClient) -> None:
        mock_git.configure_repository(REPO, create_mock_repository(uncommitted=True, untracked=True))

        result = pull_repository(mock_git, REPO, PullAllRequest(directory=REPO.parent, force=True))

        assert result.outcome is PullOutcome.PULLED
        assert not mock_git.was_called("has_uncommitted_changes")

    @pytest.mark.parametrize("force", [False, True])
    def test_no_remote_is_always_skipped(self, mock_git: MockGitClient, force: bool) -> None:
        mock_git.configure_repository(REPO, create_mock_repository(has_remote=False))

        result = pull_repository(mock_git, REPO, PullAllRequest(directory=REPO.parent, force=force))

        assert result.outcome is PullOutcome.SKIPPED_NO_REMOTE
        assert not mock_git.was_called("pull")

    def test_failed_pull(self, mock_git: MockGitClient) -> None:
        mock_git.configure_repository(
            REPO, create_mock_repository(pull_ok=False, pull_output="fatal: refusing to merge")
        )
        lines: list[str] = []

        result = pull_repository(mock_git, REPO, PullAllRequest(directory=REPO.parent), lines.append)

        assert result.outcome is PullOutcome.FAILED
        assert result.output == "fatal: refusing to merge"
        assert lines == ["fatal: refusing to merge"]

    def test_git_error_becomes_failure(self, mock_git: MockGitClient) -> None:
        mock_git.configure_repository(
            REPO, create_mock_repository(error=CommandError(["git", "remote"], 128, "", "corrupt"))
        )

        result = pull_repository(mock_git, REPO, PullAllRequest(directory=REPO.parent))

        assert result.outcome is PullOutcome.FAILED
        assert result.output == "corrupt"

    def test_quiet_hides_git_output(self, mock_git: MockGitClient) -> None:
        mock_git.configure_repository(REPO, create_mock_repository(pull_output="Fast-forward"))
        lines: list[str] = []

        pull_repository(mock_git, REPO, PullAllRequest(directory=REPO.parent, quiet=True), lines.append)

        assert lines == []

    def test_verbose_markers(self, mock_git: MockGitClient) -> None:
        mock_git.configure_repository(REPO, create_mock_repository(pull_output="Fast-forward"))
        lines: list[str] = []

        pull_repository(mock_git, REPO, PullAllRequest(directory=REPO.parent, verbose=True), lines.append)

        assert lines == ["  🔄 Pulling api...", "Fast-forward", "  ✅ Successfully pulled api"]

    def test_verbose_quiet_failure_shows_error(self, mock_git: MockGitClient) -> None:
        mock_git.configure_repository(REPO, create_mock_repository(pull_ok=False, pull_output="conflict"))
        lines: list[str] = []

        pull_repository(
            mock_git, REPO, PullAllRequest(directory=REPO.parent, verbose=True, quiet=True), lines.append
        )

        assert lines == ["  🔄 Pulling api...", "  ❌ Failed to pull api", "    Error: conflict"]

    def test_verbose_skip_message(self, mock_git: MockGitClient) -> None:
        mock_git.configure_repository(REPO, create_mock_repository(uncommitted=True))
        lines: list[str] = []

        pull_repository(mock_git, REPO, PullAllRequest(directory=REPO.parent, verbose=True), lines.append)

        assert lines == ["  ⚠️  Skipping api (has uncommitted changes)"]


class TestPullAll:
    def test_processes_every_repository(self, mock_git: MockGitClient, repo_tree: Path) -> None:
        mock_git.configure_repository(repo_tree / "alpha", create_mock_repository(uncommitted=True))
        mock_git.configure_repository(
            repo_tree / "group" / "beta", create_mock_repository(pull_ok=False, pull_output="boom")
        )
        lines: list[str] = []

        summary = pull_all(mock_git, PullAllRequest(directory=repo_tree, quiet=True), lines.append)

        assert summary.total == 3
        assert summary.skipped_local_changes == 1
        assert summary.errors == 1
        assert summary.pulled == 1
        assert lines == ["[1] alpha", "[2] beta", "[3] gamma"]

    def test_verbose_progress_shows_paths(self, mock_git: MockGitClient, repo_tree: Path) -> None:
        lines: list[str] = []

        pull_all(mock_git, PullAllRequest(directory=repo_tree, quiet=True, verbose=True), lines.append)

        assert f"[1] Processing: {repo_tree / 'alpha'}" in lines

    def test_empty_tree(self, mock_git: MockGitClient, tmp_path: Path) -> None:
        summary = pull_all(mock_git, PullAllRequest(directory=tmp_path))
        assert summary.total == 0
        assert mock_git.get_calls() == []


class TestFormatSummary:
    def test_counts(self) -> None:
        summary = PullSummary(total=4, pulled=2, skipped_local_changes=1, skipped_no_remote=1)

        lines = format_summary(summary)

        assert lines[:2] == ["Summary:", "========="]
        assert "Total repositories found: 4" in lines
        assert "Successfully pulled: 2" in lines
        assert "Skipped (uncommitted changes): 1" in lines
        assert "Skipped (no remote): 1" in lines
        assert lines[-1] == "Errors: 0"

    def test_hints_when_errors(self) -> None:
        lines = format_summary(PullSummary(total=1, errors=1))

        assert "Errors: 1" in lines
        assert any("--force" in line for line in lines)
        assert any("--verbose" in line for line in lines)
