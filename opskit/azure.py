"""
Azure CLI collaborator for opskit.

Wraps each distinct `az` operation the tools use in one method. Relies on
an already authenticated `az` session; no login handling is done here.
"""

import os
from typing import Any

from opskit.exceptions import CommandError, NotFoundError
from opskit.logging import get_logger
from opskit.runner import CommandRunner
from opskit.types.azure import SasWindow, VirtualMachine, VMExtension

logger = get_logger("azure")

# Error code az prints when the queried extension does not exist
_NOT_FOUND_MARKERS = ("(ResourceNotFound)", "Code: ResourceNotFound")


def _is_not_found(error: CommandError) -> bool:
    text = f"{error.stderr}\n{error.stdout}"
    return any(marker in text for marker in _NOT_FOUND_MARKERS)


def _parse_vm(data: dict[str, Any]) -> VirtualMachine:
    return VirtualMachine(
        name=data.get("name") or "",
        resource_group=data.get("resourceGroup") or "",
        location=data.get("location") or "",
    )


def _parse_extension(data: dict[str, Any]) -> VMExtension:
    return VMExtension(
        name=data.get("name") or "",
        version=data.get("typeHandlerVersion") or "",
        provisioning_state=data.get("provisioningState") or "",
    )


class AzureCliClient:
    """
    Client for the Azure operations the tools need.

    Example:
        ```python
        from opskit.azure import AzureCliClient

        az = AzureCliClient.from_env()
        for vm in az.list_vms(subscription="0000-..."):
            print(vm.name)
        ```
    """

    DEFAULT_EXECUTABLE = "az"

    def __init__(self, runner: CommandRunner | None = None) -> None:
        """
        Initialize the client.

        Args:
            runner: Command transport for `az` (default: resolve "az" on PATH)

        Raises:
            ToolNotFoundError: If no runner is given and az is not installed
        """
        self.runner = runner or CommandRunner(self.DEFAULT_EXECUTABLE)

    @classmethod
    def from_env(cls) -> "AzureCliClient":
        """
        Create a client from environment variables.

        Environment variables:
            OPSKIT_AZ_PATH: az executable name or path (optional, default: az)

        Raises:
            ToolNotFoundError: If the executable is not found
        """
        executable = os.environ.get("OPSKIT_AZ_PATH") or cls.DEFAULT_EXECUTABLE
        return cls(CommandRunner(executable))

    # ------------------------------------------------------------------
    # Subscriptions and VMs
    # ------------------------------------------------------------------

    def set_subscription(self, subscription: str) -> None:
        """
        Select a subscription as the active az context.

        Raises:
            CommandError: If the subscription cannot be selected
        """
        self.runner.run(["account", "set", "--subscription", subscription], check=True)

    def list_vms(self, subscription: str | None = None) -> list[VirtualMachine]:
        """
        List the virtual machines of a subscription.

        Args:
            subscription: Subscription ID (default: the active context)

        Raises:
            CommandError: If listing fails
        """
        args = [
            "vm", "list",
            "--query", "[].{name:name, resourceGroup:resourceGroup, location:location}",
            "--output", "json",
        ]
        if subscription:
            args.extend(["--subscription", subscription])

        data = self.runner.run_json(args) or []
        return [_parse_vm(item) for item in data if item.get("name")]

    def get_vm_extension(
        self,
        resource_group: str,
        vm_name: str,
        extension: str,
        subscription: str | None = None,
    ) -> VMExtension | None:
        """
        Get an installed extension of a VM.

        Returns:
            The extension, or None if the VM does not have it

        Raises:
            CommandError: If the query fails for any other reason
        """
        args = [
            "vm", "extension", "show",
            "--resource-group", resource_group,
            "--vm-name", vm_name,
            "--name", extension,
            "--query",
            "{name:name, typeHandlerVersion:typeHandlerVersion, provisioningState:provisioningState}",
            "--output", "json",
        ]
        if subscription:
            args.extend(["--subscription", subscription])

        try:
            data = self.runner.run_json(args)
        except CommandError as e:
            if _is_not_found(e):
                return None
            raise

        if not data:
            return None
        return _parse_extension(data)

    def delete_vm_extension(self, vm_id: str, extension: str) -> None:
        """
        Delete an extension from a VM identified by its resource ID.

        Raises:
            CommandError: If the delete fails
        """
        self.runner.run(
            ["vm", "extension", "delete", "--ids", vm_id, "--name", extension],
            check=True,
        )

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def show_share(self, resource_group: str, account: str, share_name: str) -> str:
        """
        Look up a file share through the management plane.

        Returns:
            The share name as reported by Azure

        Raises:
            NotFoundError: If the share does not exist or cannot be read
        """
        result = self.runner.run(
            [
                "storage", "share-rm", "show",
                "--resource-group", resource_group,
                "--storage-account", account,
                "--name", share_name,
                "--query", "name",
                "--output", "tsv",
            ]
        )
        if not result.ok:
            logger.debug("share-rm show failed: %s", result.stderr.strip())
            raise NotFoundError(
                f"File share '{share_name}' was not found in storage account "
                f"'{account}' (resource group '{resource_group}')."
            )
        return result.stdout.strip()

    def generate_account_sas(self, account: str, window: SasWindow) -> str:
        """
        Generate a read-only, HTTPS-only account SAS for the file service.

        Returns:
            The raw token as printed by az (may be empty)

        Raises:
            CommandError: If token generation fails
        """
        result = self.runner.run(
            [
                "storage", "account", "generate-sas",
                "--account-name", account,
                "--services", "f",
                "--resource-types", "sco",
                "--permissions", "rl",
                "--https-only",
                "--start", window.start_str,
                "--expiry", window.expiry_str,
                "--output", "tsv",
            ],
            check=True,
        )
        return result.stdout.strip()

    def snapshot_share(
        self,
        account: str,
        share_name: str,
        sas_token: str,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """
        Create a snapshot of a file share.

        Returns:
            The snapshot identifier (a timestamp)

        Raises:
            CommandError: If the snapshot call fails
        """
        args = [
            "storage", "share", "snapshot",
            "--name", share_name,
            "--account-name", account,
            "--sas-token", sas_token,
        ]
        if metadata:
            args.append("--metadata")
            args.extend(f"{key}={value}" for key, value in metadata.items())
        args.extend(["--query", "snapshot", "--output", "tsv"])

        result = self.runner.run(args, check=True)
        return result.stdout.strip()
