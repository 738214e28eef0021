"""
Pull every repository under a directory tree.

Repositories with local changes are left alone unless forced, so a pull
never overwrites uncommitted work.
"""

from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from opskit.exceptions import OpsKitError
from opskit.git import find_repositories
from opskit.logging import get_logger
from opskit.types.git import PullAllRequest, PullOutcome, PullResult, PullSummary

if TYPE_CHECKING:
    from opskit.git import GitClient

logger = get_logger("git")

Echo = Callable[[str], None]


def _silent(message: str) -> None:
    pass


def has_local_changes(git: "GitClient", repo: Path) -> bool:
    """Return True if the repository has uncommitted changes or untracked files."""
    return git.has_uncommitted_changes(repo) or git.has_untracked_files(repo)


def pull_repository(
    git: "GitClient",
    repo: Path,
    request: PullAllRequest,
    echo: Echo = _silent,
) -> PullResult:
    """
    Pull one repository and classify the outcome.

    Never raises for git or filesystem failures; they become FAILED.

    Args:
        git: Git collaborator
        repo: Repository root
        request: Parsed pull-all options
        echo: Sink for user-facing output lines
    """
    name = repo.name
    try:
        if not git.has_remote(repo):
            logger.warning("No remote configured for %s, skipping", repo)
            if request.verbose:
                echo(f"  ⚠️  No remote configured for {name}")
            return PullResult(repo, PullOutcome.SKIPPED_NO_REMOTE)

        if not request.force and has_local_changes(git, repo):
            if request.verbose:
                echo(f"  ⚠️  Skipping {name} (has uncommitted changes)")
            return PullResult(repo, PullOutcome.SKIPPED_LOCAL_CHANGES)

        if request.verbose:
            echo(f"  🔄 Pulling {name}...")

        result = git.pull(repo)
    except OpsKitError as e:
        logger.warning("Cannot process %s: %s", repo, e.message)
        if request.verbose:
            echo(f"  ❌ Failed to pull {name}")
        return PullResult(repo, PullOutcome.FAILED, e.message)

    output = "\n".join(part for part in (result.stdout.strip(), result.stderr.strip()) if part)
    if output and not request.quiet:
        echo(output)

    if result.ok:
        if request.verbose:
            echo(f"  ✅ Successfully pulled {name}")
        return PullResult(repo, PullOutcome.PULLED, output)

    if request.verbose:
        echo(f"  ❌ Failed to pull {name}")
        if request.quiet:
            echo(f"    Error: {output}")
    return PullResult(repo, PullOutcome.FAILED, output)


def pull_all(
    git: "GitClient",
    request: PullAllRequest,
    echo: Echo = _silent,
) -> PullSummary:
    """
    Pull every repository found under the request's directory.

    One repository's failure never stops the run.

    Returns:
        PullSummary with per-outcome counts
    """
    summary = PullSummary()
    for repo in find_repositories(request.directory):
        index = summary.total + 1
        if request.verbose:
            echo(f"[{index}] Processing: {repo}")
        else:
            echo(f"[{index}] {repo.name}")
        summary.add(pull_repository(git, repo, request, echo))
    return summary


def format_summary(summary: PullSummary) -> list[str]:
    """Render the final counts as output lines."""
    lines = [
        "Summary:",
        "=========",
        f"Total repositories found: {summary.total}",
        f"Successfully pulled: {summary.pulled}",
        f"Skipped (uncommitted changes): {summary.skipped_local_changes}",
        f"Skipped (no remote): {summary.skipped_no_remote}",
        f"Errors: {summary.errors}",
    ]
    if summary.errors:
        lines.extend([
            "",
            "Note: Use -f/--force to pull repositories with uncommitted changes",
            "Use -v/--verbose to see detailed information for each repository",
        ])
    return lines
