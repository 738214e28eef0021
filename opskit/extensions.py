"""
VM extension inventory and removal across Azure subscriptions.
"""

import csv
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from opskit.exceptions import CommandError, ConfigurationError, NotFoundError
from opskit.logging import get_logger
from opskit.types.azure import ExtensionMatch, ExtensionScanRequest

if TYPE_CHECKING:
    from opskit.azure import AzureCliClient

logger = get_logger("azure")

DEFAULT_EXTENSION = "OmsAgentForLinux"

OUTPUT_FORMATS = ("table", "csv")

CSV_HEADER = [
    "Subscription",
    "ResourceGroup",
    "VMName",
    "Location",
    "Extension",
    "ExtensionVersion",
    "ProvisioningState",
]

TABLE_HEADER = [
    "Subscription",
    "ResourceGroup",
    "VMName",
    "Location",
    "Extension",
    "Version",
    "ProvisioningState",
]

# Column widths of the table format, in header order
TABLE_WIDTHS = (36, 30, 30, 15, 40, 15, 20)


def read_subscriptions(path: str | Path) -> list[str]:
    """
    Read subscription IDs from a text file, one per line.

    Blank lines and lines starting with "#" (after leading whitespace) are
    ignored. Surrounding whitespace is stripped.

    Raises:
        NotFoundError: If the file does not exist
        ConfigurationError: If the file cannot be read
    """
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"Subscriptions file '{path}' does not exist")

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read subscriptions file '{path}': {e}") from e

    subscriptions = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        subscriptions.append(line)
    return subscriptions


def find_vms_with_extension(
    client: "AzureCliClient",
    subscriptions: Iterable[str],
    extension: str,
) -> Iterator[ExtensionMatch]:
    """
    Yield every VM that has the named extension installed.

    Failures are contained to the unit that failed: a subscription that
    cannot be selected or listed is skipped, as is a VM whose extension
    query fails. VMs without the extension yield nothing.
    """
    for subscription in subscriptions:
        logger.info("Processing subscription: %s", subscription)

        try:
            client.set_subscription(subscription)
        except CommandError as e:
            logger.warning("Could not set subscription %s, skipping... (%s)", subscription, e.message)
            continue

        try:
            vms = client.list_vms(subscription)
        except CommandError as e:
            logger.warning("Could not list VMs in subscription %s, skipping... (%s)", subscription, e.message)
            continue

        if not vms:
            logger.info("No VMs found in subscription %s", subscription)
            continue

        for vm in vms:
            try:
                installed = client.get_vm_extension(
                    vm.resource_group, vm.name, extension, subscription=subscription
                )
            except CommandError as e:
                logger.warning(
                    "Could not query extension on VM %s/%s, skipping... (%s)",
                    vm.resource_group, vm.name, e.message,
                )
                continue

            if installed is None:
                continue

            yield ExtensionMatch(
                subscription=subscription,
                resource_group=vm.resource_group,
                vm_name=vm.name,
                location=vm.location,
                extension=installed.name,
                version=installed.version,
                provisioning_state=installed.provisioning_state,
            )


def format_table_line(values: Iterable[str]) -> str:
    """Left-align values into the fixed table columns."""
    return " ".join(f"{value:<{width}}" for value, width in zip(values, TABLE_WIDTHS))


class ExtensionReportWriter:
    """Writes extension matches to a stream as a table or CSV."""

    def __init__(self, stream: TextIO, format: str = "table") -> None:
        if format not in OUTPUT_FORMATS:
            raise ConfigurationError("Format must be 'csv' or 'table'")
        self.stream = stream
        self.format = format
        self._csv = csv.writer(stream, lineterminator="\n") if format == "csv" else None

    def write_header(self) -> None:
        if self._csv is not None:
            self._csv.writerow(CSV_HEADER)
            return
        self.stream.write(format_table_line(TABLE_HEADER) + "\n")
        self.stream.write(format_table_line("-" * width for width in TABLE_WIDTHS) + "\n")

    def write_row(self, match: ExtensionMatch) -> None:
        if self._csv is not None:
            self._csv.writerow(match.as_row())
        else:
            self.stream.write(format_table_line(match.as_row()) + "\n")
        self.stream.flush()


def scan_subscriptions(
    client: "AzureCliClient",
    request: ExtensionScanRequest,
    stream: TextIO,
) -> int:
    """
    Write a report of VMs carrying an extension to a stream.

    Args:
        client: Azure CLI collaborator
        request: Parsed lister options
        stream: Destination for the header and rows

    Returns:
        Number of rows written (excluding the header)

    Raises:
        NotFoundError / ConfigurationError: If the subscriptions file or format is invalid
    """
    writer = ExtensionReportWriter(stream, request.format)
    subscriptions = read_subscriptions(request.subscriptions_file)

    logger.info("Scanning VMs with extension: %s", request.extension)
    logger.info("Output format: %s", request.format)
    if request.output is not None:
        logger.info("Output file: %s", request.output)

    writer.write_header()
    count = 0
    for match in find_vms_with_extension(client, subscriptions, request.extension):
        writer.write_row(match)
        count += 1

    logger.info("Scan completed. %d matching VM(s).", count)
    return count


def remove_extension(
    client: "AzureCliClient",
    vm_id: str,
    extension: str = DEFAULT_EXTENSION,
) -> bool:
    """
    Remove an extension from a VM with a single delete request.

    Returns:
        True if the delete succeeded, False otherwise
    """
    if not vm_id:
        raise ConfigurationError("A VM resource ID is required.")

    try:
        client.delete_vm_extension(vm_id, extension or DEFAULT_EXTENSION)
    except CommandError as e:
        logger.error("Extension delete failed: %s", e.message)
        return False
    return True
