"""opskit testing utilities.

Provides mock collaborators and fixtures for testing code built on the
AzureCliClient and GitClient interfaces.
"""

from opskit.testing.fixtures import (
    create_mock_commit,
    create_mock_extension,
    create_mock_repository,
    create_mock_vm,
)
from opskit.testing.mock import (
    MockAzureClient,
    MockBranch,
    MockCall,
    MockGitClient,
    MockRepository,
    MockResponse,
    MockSubscription,
)

__all__ = [
    # Mock collaborators
    "MockAzureClient",
    "MockGitClient",
    "MockSubscription",
    "MockRepository",
    "MockBranch",
    "MockCall",
    "MockResponse",
    # Helper functions
    "create_mock_vm",
    "create_mock_extension",
    "create_mock_commit",
    "create_mock_repository",
]
