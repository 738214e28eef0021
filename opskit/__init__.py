"""opskit - operational tools wrapping the az and git command-line clients."""

from opskit.azure import AzureCliClient
from opskit.exceptions import (
    CommandError,
    ConfigurationError,
    NotFoundError,
    OpsKitError,
    ToolNotFoundError,
    WorkingDirectoryError,
)
from opskit.git import GitClient, find_repositories
from opskit.logging import configure_logging, get_logger
from opskit.runner import CommandResult, CommandRunner

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Collaborators
    "AzureCliClient",
    "GitClient",
    "find_repositories",
    # Transport
    "CommandRunner",
    "CommandResult",
    # Exceptions
    "OpsKitError",
    "ConfigurationError",
    "ToolNotFoundError",
    "NotFoundError",
    "CommandError",
    "WorkingDirectoryError",
    # Logging
    "configure_logging",
    "get_logger",
]
