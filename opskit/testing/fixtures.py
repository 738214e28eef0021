"""
Pytest fixtures for opskit testing.

Provides mock collaborators, sample data and on-disk repository trees.
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from opskit.testing.mock import MockAzureClient, MockBranch, MockGitClient, MockRepository
from opskit.types.azure import VirtualMachine, VMExtension
from opskit.types.git import CommitInfo


# ============================================================================
# Mock Collaborator Fixtures
# ============================================================================


@pytest.fixture
def mock_azure() -> Generator[MockAzureClient, None, None]:
    """
    Provide a MockAzureClient for testing.

    Example:
        ```python
        def test_scan(mock_azure):
            mock_azure.configure_subscription("sub-1", vms=[create_mock_vm()])
            ...
            assert mock_azure.was_called("list_vms")
        ```
    """
    client = MockAzureClient()
    yield client
    client.reset()


@pytest.fixture
def mock_git() -> Generator[MockGitClient, None, None]:
    """Provide a MockGitClient for testing."""
    client = MockGitClient()
    yield client
    client.reset()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_vm() -> VirtualMachine:
    """Provide a sample VirtualMachine object."""
    return create_mock_vm()


@pytest.fixture
def sample_extension() -> VMExtension:
    """Provide a sample VMExtension object."""
    return create_mock_extension()


@pytest.fixture
def sample_commit() -> CommitInfo:
    """Provide a sample CommitInfo object."""
    return create_mock_commit()


@pytest.fixture
def repo_tree(tmp_path: Path) -> Path:
    """
    Provide a directory tree with repository markers (no real git data).

    Layout:
        tmp/alpha/.git
        tmp/group/beta/.git
        tmp/group/beta/vendor/gamma/.git
        tmp/plain/
    """
    for relative in ("alpha", "group/beta", "group/beta/vendor/gamma"):
        (tmp_path / relative / ".git").mkdir(parents=True)
    (tmp_path / "plain").mkdir()
    return tmp_path


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_vm(
    name: str = "vm-web-01",
    resource_group: str = "rg-web",
    location: str = "westeurope",
) -> VirtualMachine:
    """Create a VirtualMachine with sensible defaults."""
    return VirtualMachine(name=name, resource_group=resource_group, location=location)


def create_mock_extension(
    name: str = "OmsAgentForLinux",
    version: str = "1.14",
    provisioning_state: str = "Succeeded",
) -> VMExtension:
    """Create a VMExtension with sensible defaults."""
    return VMExtension(name=name, version=version, provisioning_state=provisioning_state)


def create_mock_commit(
    author_name: str = "Ada Lovelace",
    author_email: str = "ada@example.com",
    date: str = "2024-01-15 10:30:00 +0000",
) -> CommitInfo:
    """Create a CommitInfo with sensible defaults."""
    return CommitInfo(author_name=author_name, author_email=author_email, date=date)


def create_mock_repository(
    branches: dict[str, MockBranch] | None = None,
    symbolic_head: str | None = "main",
    has_remote: bool = True,
    uncommitted: bool = False,
    untracked: bool = False,
    pull_ok: bool = True,
    pull_output: str = "Already up to date.",
    fetch_error: Exception | None = None,
    error: Exception | None = None,
) -> MockRepository:
    """Create a MockRepository; by default a clean repo with only `main`."""
    return MockRepository(
        has_remote=has_remote,
        fetch_error=fetch_error,
        symbolic_head=symbolic_head,
        branches=dict(branches) if branches is not None else {"main": MockBranch()},
        uncommitted=uncommitted,
        untracked=untracked,
        pull_ok=pull_ok,
        pull_output=pull_output,
        error=error,
    )


__all__ = [
    # Fixtures (exported for documentation, actual fixtures are auto-discovered)
    "mock_azure",
    "mock_git",
    "sample_vm",
    "sample_extension",
    "sample_commit",
    "repo_tree",
    # Helper functions
    "create_mock_vm",
    "create_mock_extension",
    "create_mock_commit",
    "create_mock_repository",
]
