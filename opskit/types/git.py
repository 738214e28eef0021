"""Git-related data models."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


@dataclass
class CommitInfo:
    """Author details of a commit."""

    author_name: str
    author_email: str
    date: str  # ISO-like, as printed by `git log --date=iso`


@dataclass(order=True)
class BranchReportRow:
    """One unmerged remote branch."""

    repository: str
    path: str
    branch: str
    ahead: int
    behind: int
    author_name: str
    author_email: str
    commit_date: str

    def as_row(self) -> list[str]:
        return [
            self.repository,
            self.path,
            self.branch,
            str(self.ahead),
            str(self.behind),
            self.author_name,
            self.author_email,
            self.commit_date,
        ]


@dataclass
class BranchReport:
    """Aggregated result of a branch report run."""

    output: Path
    repositories: int
    rows: list[BranchReportRow] = field(default_factory=list)
    size_bytes: int = 0


class PullOutcome(str, Enum):
    """Classification of one repository in a pull-all run."""

    PULLED = "pulled"
    SKIPPED_LOCAL_CHANGES = "skipped_local_changes"
    SKIPPED_NO_REMOTE = "skipped_no_remote"
    FAILED = "failed"


@dataclass
class PullResult:
    """Result of processing one repository."""

    repository: Path
    outcome: PullOutcome
    output: str = ""


@dataclass
class PullSummary:
    """Final counts of a pull-all run."""

    total: int = 0
    pulled: int = 0
    skipped_local_changes: int = 0
    skipped_no_remote: int = 0
    errors: int = 0
    results: list[PullResult] = field(default_factory=list)

    def add(self, result: PullResult) -> None:
        self.total += 1
        self.results.append(result)
        if result.outcome is PullOutcome.PULLED:
            self.pulled += 1
        elif result.outcome is PullOutcome.SKIPPED_LOCAL_CHANGES:
            self.skipped_local_changes += 1
        elif result.outcome is PullOutcome.SKIPPED_NO_REMOTE:
            self.skipped_no_remote += 1
        else:
            self.errors += 1


@dataclass(frozen=True)
class BranchReportRequest:
    """Parsed options for the branch report generator."""

    directory: Path
    output: Path


@dataclass(frozen=True)
class PullAllRequest:
    """Parsed options for the bulk repository updater."""

    directory: Path
    force: bool = False
    quiet: bool = False
    verbose: bool = False
