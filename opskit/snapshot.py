"""
Azure Files share snapshots authorized by a short-lived SAS token.

The token is read-only, HTTPS-only and scoped to the file service. Its
start time is backdated to tolerate clock skew between this machine and
Azure.
"""

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

from opskit.exceptions import CommandError, ConfigurationError
from opskit.logging import get_logger
from opskit.types.azure import SasWindow, ShareSnapshot, SnapshotRequest

if TYPE_CHECKING:
    from opskit.azure import AzureCliClient

logger = get_logger("azure")

DEFAULT_DURATION_MINUTES = 15
CLOCK_SKEW_MINUTES = 5


def compute_sas_window(
    duration_minutes: int = DEFAULT_DURATION_MINUTES,
    now: datetime | None = None,
) -> SasWindow:
    """
    Compute the validity window of a SAS token.

    Args:
        duration_minutes: Minutes the token stays valid after `now`
        now: Reference time (default: current UTC time)

    Returns:
        SasWindow spanning [now - 5 minutes, now + duration]

    Raises:
        ConfigurationError: If the duration is not a positive integer
    """
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int) or duration_minutes <= 0:
        raise ConfigurationError("Duration must be a positive integer (minutes).")

    if now is None:
        now = datetime.now(timezone.utc)

    return SasWindow(
        start=now - timedelta(minutes=CLOCK_SKEW_MINUTES),
        expiry=now + timedelta(minutes=duration_minutes),
    )


def normalize_sas_token(token: str) -> str:
    """Ensure a SAS token starts with the query-string marker."""
    token = token.strip()
    if token and not token.startswith("?"):
        token = f"?{token}"
    return token


def parse_metadata(items: Iterable[str] | None) -> dict[str, str]:
    """
    Parse `key=value` metadata items.

    Later items override earlier ones with the same key.

    Raises:
        ConfigurationError: If an item has no "=" or an empty key
    """
    metadata: dict[str, str] = {}
    for item in items or ():
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ConfigurationError(f"Metadata must be given as key=value, got '{item}'.")
        metadata[key] = value
    return metadata


def snapshot_share(
    client: "AzureCliClient",
    request: SnapshotRequest,
    now: datetime | None = None,
) -> ShareSnapshot:
    """
    Snapshot an Azure Files share.

    Verifies the share exists, generates a SAS token for the request's
    duration, then creates the snapshot with any metadata attached. Each
    call creates a new snapshot.

    Args:
        client: Azure CLI collaborator
        request: Parsed snapshot options
        now: Reference time for the SAS window (default: current UTC time)

    Returns:
        ShareSnapshot with the snapshot identifier

    Raises:
        ConfigurationError: If the request is invalid
        NotFoundError: If the share does not exist
        CommandError: If token generation or the snapshot call fails
    """
    for value, label in (
        (request.resource_group, "Resource group"),
        (request.account, "Storage account name"),
        (request.share_name, "File share name"),
    ):
        if not value:
            raise ConfigurationError(f"{label} is required.")

    window = compute_sas_window(request.duration_minutes, now=now)

    client.show_share(request.resource_group, request.account, request.share_name)

    logger.info("Generating read-only SAS token for storage account '%s'...", request.account)
    sas_token = normalize_sas_token(client.generate_account_sas(request.account, window))
    if not sas_token:
        raise CommandError(["az", "storage", "account", "generate-sas"], 0, "", "Failed to generate SAS token.")

    logger.info("Creating snapshot for Azure Files share '%s'...", request.share_name)
    snapshot_id = client.snapshot_share(
        request.account,
        request.share_name,
        sas_token,
        metadata=dict(request.metadata),
    )
    if not snapshot_id:
        raise CommandError(["az", "storage", "share", "snapshot"], 0, "", "Snapshot call returned no snapshot identifier.")

    return ShareSnapshot(share_name=request.share_name, snapshot=snapshot_id)
