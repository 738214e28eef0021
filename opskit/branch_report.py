"""
Report of unmerged remote branches across many repositories.

For each repository found under a directory, every remote branch is
compared with the repository's default branch; branches with commits not
yet on the default branch are reported with their divergence and last
author.
"""

import csv
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from opskit.exceptions import CommandError, OpsKitError
from opskit.git import DEFAULT_REMOTE, find_repositories
from opskit.logging import get_logger
from opskit.types.git import BranchReport, BranchReportRequest, BranchReportRow

if TYPE_CHECKING:
    from opskit.git import GitClient

logger = get_logger("git")

DEFAULT_OUTPUT = "git_branch_report.csv"

# Conventional mainline names, tried in order
DEFAULT_BRANCH_CANDIDATES = ("main", "master", "develop")

CSV_HEADER = [
    "Repository",
    "Path",
    "Branch",
    "Commits Ahead",
    "Commits Behind",
    "Last Author",
    "Author Email",
    "Last Commit Date",
]

PREVIEW_ROWS = 5


def resolve_default_branch(
    git: "GitClient",
    repo: Path,
    remote: str = DEFAULT_REMOTE,
    candidates: Sequence[str] = DEFAULT_BRANCH_CANDIDATES,
) -> str | None:
    """
    Determine the reference branch of a repository.

    Tried in order:
    1. the branch the remote's HEAD points to;
    2. the first of `candidates` that exists on the remote;
    3. the lexicographically first remote branch.

    Returns:
        Branch name, or None if the repository has no remote branches
    """
    branch = git.symbolic_default_branch(repo, remote)
    if branch:
        return branch

    for candidate in candidates:
        if git.remote_branch_exists(repo, candidate, remote):
            return candidate

    branches = sorted(git.list_remote_branches(repo, remote))
    return branches[0] if branches else None


def _refresh_remote(git: "GitClient", repo: Path) -> None:
    if not git.has_remote(repo):
        logger.warning("No remote configured for %s (using local data only)", repo)
        return
    try:
        git.fetch_all(repo)
    except CommandError:
        logger.warning("Failed to fetch from remote in %s (continuing with local data)", repo)


def analyze_repository(
    git: "GitClient",
    repo: Path,
    remote: str = DEFAULT_REMOTE,
) -> list[BranchReportRow]:
    """
    Collect the unmerged remote branches of one repository.

    Raises:
        OpsKitError: If a repository-level git call fails
    """
    repo = Path(repo)
    _refresh_remote(git, repo)

    default_branch = resolve_default_branch(git, repo, remote)
    if not default_branch:
        logger.warning("Could not determine default branch for %s", repo)
        return []

    rows: list[BranchReportRow] = []
    for branch in git.list_remote_branches(repo, remote):
        if branch == default_branch:
            continue

        try:
            ahead, behind = git.ahead_behind(repo, default_branch, branch, remote)
        except CommandError as e:
            logger.warning("Cannot compare %s with %s in %s: %s", branch, default_branch, repo, e.message)
            continue

        # Fully merged into the default branch
        if ahead == 0:
            continue

        try:
            commit = git.last_commit(repo, f"{remote}/{branch}")
        except CommandError as e:
            logger.warning("Cannot read last commit of %s in %s: %s", branch, repo, e.message)
            continue

        rows.append(
            BranchReportRow(
                repository=repo.name,
                path=str(repo),
                branch=branch,
                ahead=ahead,
                behind=behind,
                author_name=commit.author_name,
                author_email=commit.author_email,
                commit_date=commit.date,
            )
        )
    return rows


def write_report_csv(rows: Iterable[BranchReportRow], path: Path) -> int:
    """
    Write the header and rows as CSV.

    Returns:
        Size of the written file in bytes
    """
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for row in rows:
            writer.writerow(row.as_row())
    return path.stat().st_size


def generate_branch_report(
    git: "GitClient",
    request: BranchReportRequest,
    on_repository: Callable[[Path], None] | None = None,
) -> BranchReport:
    """
    Scan a directory tree and write the unmerged-branch report.

    Repositories that fail are skipped with a warning and contribute no
    rows. Rows from all repositories are sorted before writing.

    Args:
        git: Git collaborator
        request: Parsed report options (paths should be absolute)
        on_repository: Called with each repository before it is analyzed

    Returns:
        BranchReport with the sorted rows and output size
    """
    rows: list[BranchReportRow] = []
    count = 0
    for repo in find_repositories(request.directory):
        count += 1
        if on_repository is not None:
            on_repository(repo)
        try:
            rows.extend(analyze_repository(git, repo))
        except OpsKitError as e:
            logger.warning("Skipping %s: %s", repo, e.message)

    rows.sort()
    size = write_report_csv(rows, request.output)
    return BranchReport(output=request.output, repositories=count, rows=rows, size_bytes=size)


def format_preview(report: BranchReport, limit: int = PREVIEW_ROWS) -> list[str]:
    """
    Render the header and first rows of a report in aligned columns.

    Returns:
        Lines of text, without trailing newlines
    """
    table = [CSV_HEADER] + [row.as_row() for row in report.rows[:limit]]
    widths = [max(len(line[i]) for line in table) for i in range(len(CSV_HEADER))]
    lines = ["  ".join(value.ljust(width) for value, width in zip(line, widths)).rstrip() for line in table]
    remaining = len(report.rows) - limit
    if remaining > 0:
        lines.append(f"... and {remaining} more branches")
    return lines
