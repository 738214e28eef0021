"""opskit type definitions.

This module exports all data model types used by the tools.
"""

from opskit.types.azure import (
    ExtensionMatch,
    ExtensionScanRequest,
    SasWindow,
    ShareSnapshot,
    SnapshotRequest,
    VirtualMachine,
    VMExtension,
)
from opskit.types.git import (
    BranchReport,
    BranchReportRequest,
    BranchReportRow,
    CommitInfo,
    PullAllRequest,
    PullOutcome,
    PullResult,
    PullSummary,
)

__all__ = [
    # Azure types
    "VirtualMachine",
    "VMExtension",
    "ExtensionMatch",
    "SasWindow",
    "ShareSnapshot",
    "SnapshotRequest",
    "ExtensionScanRequest",
    # Git types
    "CommitInfo",
    "BranchReportRow",
    "BranchReport",
    "BranchReportRequest",
    "PullOutcome",
    "PullResult",
    "PullSummary",
    "PullAllRequest",
]
