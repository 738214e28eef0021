"""Azure-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

# Wire format accepted by `az storage account generate-sas --start/--expiry`
SAS_TIME_FORMAT = "%Y-%m-%dT%H:%MZ"


@dataclass
class VirtualMachine:
    """A virtual machine as returned by `az vm list`."""

    name: str
    resource_group: str
    location: str


@dataclass
class VMExtension:
    """An installed VM extension."""

    name: str
    version: str
    provisioning_state: str


@dataclass
class ExtensionMatch:
    """One VM that carries the extension being searched for."""

    subscription: str
    resource_group: str
    vm_name: str
    location: str
    extension: str
    version: str
    provisioning_state: str

    def as_row(self) -> list[str]:
        return [
            self.subscription,
            self.resource_group,
            self.vm_name,
            self.location,
            self.extension,
            self.version,
            self.provisioning_state,
        ]


@dataclass(frozen=True)
class SasWindow:
    """Validity window of a SAS token (UTC)."""

    start: datetime
    expiry: datetime

    @property
    def start_str(self) -> str:
        return self.start.strftime(SAS_TIME_FORMAT)

    @property
    def expiry_str(self) -> str:
        return self.expiry.strftime(SAS_TIME_FORMAT)


@dataclass
class ShareSnapshot:
    """Result of a share snapshot operation."""

    share_name: str
    snapshot: str


@dataclass(frozen=True)
class SnapshotRequest:
    """Parsed options for the share snapshotter."""

    resource_group: str
    account: str
    share_name: str
    duration_minutes: int = 15
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ExtensionScanRequest:
    """Parsed options for the extension lister."""

    subscriptions_file: Path
    extension: str
    output: Path | None = None
    format: str = "table"  # "table" or "csv"
