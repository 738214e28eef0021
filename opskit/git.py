"""
Git collaborator for opskit.

Provides repository discovery and the git operations used by the branch
report and pull-all tools. Every operation takes the repository root
explicitly; the process working directory is never changed.
"""

import os
from collections.abc import Iterator
from pathlib import Path

from opskit.exceptions import CommandError
from opskit.runner import CommandResult, CommandRunner
from opskit.types.git import CommitInfo

DEFAULT_REMOTE = "origin"

# Field separator for `git log --format`; cannot appear in names or emails
_LOG_SEPARATOR = "\x1f"


def find_repositories(root: str | Path) -> Iterator[Path]:
    """
    Recursively find repository roots under a directory.

    A repository root is any directory containing a `.git` subdirectory.
    The walk continues below a root, so nested repositories are found, but
    never descends into `.git` itself. Directories are visited in sorted
    order.

    Args:
        root: Directory to search

    Yields:
        Repository root paths
    """
    for dirpath, dirnames, _ in os.walk(root):
        dirnames.sort()
        if ".git" in dirnames:
            yield Path(dirpath)
            dirnames.remove(".git")


class GitClient:
    """
    Git operations against explicit repository roots.

    Example:
        ```python
        from opskit.git import GitClient, find_repositories

        git = GitClient.from_env()
        for repo in find_repositories("~/src"):
            if git.has_remote(repo):
                git.fetch_all(repo)
        ```
    """

    DEFAULT_EXECUTABLE = "git"

    def __init__(self, runner: CommandRunner | None = None) -> None:
        """
        Initialize the client.

        Args:
            runner: Command transport for git (default: resolve "git" on PATH)

        Raises:
            ToolNotFoundError: If no runner is given and git is not installed
        """
        self.runner = runner or CommandRunner(self.DEFAULT_EXECUTABLE)

    @classmethod
    def from_env(cls) -> "GitClient":
        """
        Create a client from environment variables.

        Environment variables:
            OPSKIT_GIT_PATH: git executable name or path (optional, default: git)
        """
        executable = os.environ.get("OPSKIT_GIT_PATH") or cls.DEFAULT_EXECUTABLE
        return cls(CommandRunner(executable))

    def has_remote(self, repo: Path) -> bool:
        """Return True if at least one remote is configured."""
        result = self.runner.run(["remote"], cwd=repo, check=True)
        return bool(result.stdout.strip())

    def fetch_all(self, repo: Path) -> None:
        """
        Fetch from all remotes.

        Raises:
            CommandError: If the fetch fails
        """
        self.runner.run(["fetch", "--all", "--quiet"], cwd=repo, check=True)

    def symbolic_default_branch(self, repo: Path, remote: str = DEFAULT_REMOTE) -> str | None:
        """
        Resolve the branch the remote's HEAD points to.

        Returns:
            Branch name (e.g., "main"), or None if the remote HEAD is not set
        """
        prefix = f"refs/remotes/{remote}/"
        result = self.runner.run(
            ["symbolic-ref", "--quiet", f"{prefix}HEAD"], cwd=repo
        )
        ref = result.stdout.strip()
        if not result.ok or not ref.startswith(prefix):
            return None
        return ref[len(prefix):] or None

    def remote_branch_exists(self, repo: Path, branch: str, remote: str = DEFAULT_REMOTE) -> bool:
        """Return True if refs/remotes/<remote>/<branch> exists."""
        result = self.runner.run(
            ["show-ref", "--verify", "--quiet", f"refs/remotes/{remote}/{branch}"],
            cwd=repo,
        )
        return result.ok

    def list_remote_branches(self, repo: Path, remote: str = DEFAULT_REMOTE) -> list[str]:
        """
        List remote-tracking branches of a remote, excluding HEAD.

        Returns:
            Branch names without the remote prefix, in git's listing order
        """
        prefix = f"refs/remotes/{remote}/"
        result = self.runner.run(
            ["for-each-ref", "--format=%(refname)", prefix],
            cwd=repo,
            check=True,
        )
        branches = []
        for line in result.stdout.splitlines():
            line = line.strip()
            if not line.startswith(prefix):
                continue
            name = line[len(prefix):]
            if name and name != "HEAD":
                branches.append(name)
        return branches

    def ahead_behind(
        self,
        repo: Path,
        base: str,
        branch: str,
        remote: str = DEFAULT_REMOTE,
    ) -> tuple[int, int]:
        """
        Count commits on `branch` and `base` that the other lacks.

        Both names refer to remote-tracking branches of `remote`.

        Returns:
            (ahead, behind): commits only on branch, commits only on base

        Raises:
            CommandError: If rev-list fails or prints unexpected output
        """
        result = self.runner.run(
            [
                "rev-list", "--left-right", "--count",
                f"{remote}/{base}...{remote}/{branch}",
            ],
            cwd=repo,
            check=True,
        )
        parts = result.stdout.split()
        if len(parts) != 2 or not all(part.isdigit() for part in parts):
            raise CommandError(
                result.args, result.returncode, result.stdout,
                f"Unexpected rev-list output: {result.stdout.strip()!r}",
            )
        behind, ahead = int(parts[0]), int(parts[1])
        return ahead, behind

    def last_commit(self, repo: Path, ref: str) -> CommitInfo:
        """
        Get author details of the most recent commit on a ref.

        Args:
            repo: Repository root
            ref: Any revision (e.g., "origin/feature")

        Raises:
            CommandError: If the ref cannot be read
        """
        result = self.runner.run(
            [
                "log", "-1",
                f"--format=%an{_LOG_SEPARATOR}%ae{_LOG_SEPARATOR}%ad",
                "--date=iso",
                ref,
            ],
            cwd=repo,
            check=True,
        )
        fields = result.stdout.strip().split(_LOG_SEPARATOR)
        if len(fields) != 3:
            raise CommandError(
                result.args, result.returncode, result.stdout,
                f"No commit information for {ref}",
            )
        return CommitInfo(author_name=fields[0], author_email=fields[1], date=fields[2])

    def has_uncommitted_changes(self, repo: Path) -> bool:
        """
        Return True if tracked files differ from HEAD.

        A repository without any commit also counts as changed, since HEAD
        cannot be compared.
        """
        result = self.runner.run(["diff-index", "--quiet", "HEAD", "--"], cwd=repo)
        return not result.ok

    def has_untracked_files(self, repo: Path) -> bool:
        """Return True if there are untracked, non-ignored files."""
        result = self.runner.run(
            ["ls-files", "--others", "--exclude-standard"], cwd=repo
        )
        return bool(result.ok and result.stdout.strip())

    def pull(self, repo: Path) -> CommandResult:
        """
        Run `git pull` in a repository.

        Returns:
            The command result; inspect `.ok` for the outcome
        """
        return self.runner.run(["pull"], cwd=repo)
