"""
Pytest plugin for opskit testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
discovered by pytest. To use them, add this to your conftest.py:

    from opskit.testing.conftest import *  # noqa: F401,F403

Or import the fixtures directly:

    from opskit.testing.fixtures import mock_git, repo_tree
"""

# Re-export all fixtures for pytest discovery
from opskit.testing.fixtures import (
    mock_azure,
    mock_git,
    repo_tree,
    sample_commit,
    sample_extension,
    sample_vm,
)

__all__ = [
    "mock_azure",
    "mock_git",
    "repo_tree",
    "sample_commit",
    "sample_extension",
    "sample_vm",
]
