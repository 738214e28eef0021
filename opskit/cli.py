"""Console entry points for the opskit tools.

Each tool is a single-command Typer application. The ``*_main`` functions
are the installed console scripts: they run the application with
``standalone_mode=False`` so that usage errors exit with status 1.
"""

import sys
from enum import Enum
from pathlib import Path
from typing import Annotated, NoReturn

import click
import typer

from opskit.azure import AzureCliClient
from opskit.branch_report import DEFAULT_OUTPUT, format_preview, generate_branch_report
from opskit.exceptions import OpsKitError
from opskit.extensions import DEFAULT_EXTENSION, remove_extension, scan_subscriptions
from opskit.git import GitClient
from opskit.logging import CLI_FORMAT, configure_logging, level_from_env
from opskit.pull_all import format_summary, pull_all
from opskit.snapshot import DEFAULT_DURATION_MINUTES, parse_metadata, snapshot_share
from opskit.types import (
    BranchReportRequest,
    ExtensionScanRequest,
    PullAllRequest,
    SnapshotRequest,
)

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class OutputFormat(str, Enum):
    table = "table"
    csv = "csv"


def _fail(error: OpsKitError) -> NoReturn:
    typer.echo(f"Error: {error.message}", err=True)
    raise typer.Exit(code=1)


def _setup_logging() -> None:
    try:
        configure_logging(level=level_from_env(), format_string=CLI_FORMAT)
    except OpsKitError as e:
        _fail(e)


def _require_directory(directory: Path) -> Path:
    if not directory.is_dir():
        typer.echo(f"Error: Directory '{directory}' does not exist", err=True)
        raise typer.Exit(code=1)
    return directory.resolve()


def _run(app: typer.Typer, argv: list[str] | None, prog_name: str) -> int:
    try:
        result = app(args=argv, prog_name=prog_name, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return 1
    except click.Abort:
        typer.echo("Aborted!", err=True)
        return 1
    return result if isinstance(result, int) else 0


# ============================================================================
# snapshot-share
# ============================================================================

snapshot_app = typer.Typer(
    add_completion=False,
    context_settings=CONTEXT_SETTINGS,
    help="Create an Azure Files share snapshot using a short-lived read-only SAS token.",
)


@snapshot_app.command()
def snapshot(
    resource_group: Annotated[
        str, typer.Option("-g", "--resource-group", help="Resource group of the storage account")
    ],
    account: Annotated[str, typer.Option("-a", "--account", help="Storage account name")],
    share_name: Annotated[str, typer.Option("-n", "--share-name", help="File share name")],
    duration_minutes: Annotated[
        int,
        typer.Option("-d", "--duration-minutes", min=1, help="SAS token lifetime in minutes"),
    ] = DEFAULT_DURATION_MINUTES,
    metadata: Annotated[
        list[str] | None,
        typer.Option("--metadata", metavar="KEY=VALUE", help="Snapshot metadata pair; repeat the flag for each pair"),
    ] = None,
) -> None:
    """Snapshot a file share. Requires a logged-in az session."""
    _setup_logging()
    try:
        request = SnapshotRequest(
            resource_group=resource_group,
            account=account,
            share_name=share_name,
            duration_minutes=duration_minutes,
            metadata=parse_metadata(metadata),
        )
        result = snapshot_share(AzureCliClient.from_env(), request)
    except OpsKitError as e:
        _fail(e)

    typer.echo("Snapshot created successfully.")
    typer.echo(f"Share: {result.share_name}")
    typer.echo(f"Snapshot ID: {result.snapshot}")


def snapshot_main(argv: list[str] | None = None) -> int:
    return _run(snapshot_app, argv, "snapshot-share")


# ============================================================================
# list-vms-with-extension
# ============================================================================

list_vms_app = typer.Typer(
    add_completion=False,
    context_settings=CONTEXT_SETTINGS,
    help="List VMs carrying a named extension across Azure subscriptions.",
)


@list_vms_app.command()
def list_vms(
    subscriptions: Annotated[
        Path,
        typer.Option(
            "-s", "--subscriptions",
            exists=True, dir_okay=False, readable=True,
            help="Text file containing subscription IDs (one per line)",
        ),
    ],
    extension: Annotated[
        str, typer.Option("-e", "--extension", help="Name of the VM extension to search for")
    ],
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", dir_okay=False, help="Output file (default: standard output)"),
    ] = None,
    output_format: Annotated[
        OutputFormat, typer.Option("-f", "--format", help="Output format")
    ] = OutputFormat.table,
) -> None:
    """
    Example: list-vms-with-extension -s subscriptions.txt
    -e Microsoft.Azure.Monitoring.DependencyAgent -f csv -o results.csv
    """
    _setup_logging()
    request = ExtensionScanRequest(
        subscriptions_file=subscriptions,
        extension=extension,
        output=output,
        format=output_format.value,
    )
    try:
        client = AzureCliClient.from_env()
        if output is None:
            scan_subscriptions(client, request, sys.stdout)
        else:
            with open(output, "w", newline="", encoding="utf-8") as stream:
                scan_subscriptions(client, request, stream)
    except OpsKitError as e:
        _fail(e)
    except OSError as e:
        typer.echo(f"Error: Cannot write output file '{output}': {e}", err=True)
        raise typer.Exit(code=1)


def list_vms_main(argv: list[str] | None = None) -> int:
    return _run(list_vms_app, argv, "list-vms-with-extension")


# ============================================================================
# remove-extension
# ============================================================================

remove_app = typer.Typer(
    add_completion=False,
    context_settings=CONTEXT_SETTINGS,
    help="Remove an extension from an Azure VM.",
)


@remove_app.command()
def remove(
    vm_id: Annotated[
        str, typer.Argument(metavar="VM_RESOURCE_ID", help="Full resource ID of the VM")
    ],
    extension_name: Annotated[
        str, typer.Argument(metavar="[EXTENSION_NAME]", help="Extension to remove")
    ] = DEFAULT_EXTENSION,
) -> None:
    """Issue a single delete request for a VM extension."""
    _setup_logging()
    try:
        removed = remove_extension(AzureCliClient.from_env(), vm_id, extension_name)
    except OpsKitError as e:
        _fail(e)

    if removed:
        typer.echo(f"Successfully removed {extension_name} from {vm_id}")
        return
    typer.echo(f"Failed to remove {extension_name} from {vm_id}", err=True)
    raise typer.Exit(code=1)


def remove_extension_main(argv: list[str] | None = None) -> int:
    return _run(remove_app, argv, "remove-extension")


# ============================================================================
# git-branch-report
# ============================================================================

branch_report_app = typer.Typer(
    add_completion=False,
    context_settings=CONTEXT_SETTINGS,
    help="Generate a CSV report of unmerged remote branches across Git repositories.",
)


@branch_report_app.command()
def branch_report(
    directory: Annotated[
        Path, typer.Argument(help="Starting directory to search")
    ] = Path("."),
    output: Annotated[
        Path, typer.Option("-o", "--output", help="Output CSV file")
    ] = Path(DEFAULT_OUTPUT),
) -> None:
    """Example: git-branch-report -o report.csv /path/to/search"""
    _setup_logging()
    search_dir = _require_directory(directory)

    typer.echo("Git Branch Report Generator")
    typer.echo("==========================")
    typer.echo(f"Search Directory: {directory}")
    typer.echo(f"Output File: {output}")
    typer.echo("")

    if not output.is_absolute():
        output = Path.cwd() / output
    typer.echo(f"Absolute output path: {output}")

    typer.echo(f"Searching for Git repositories in: {search_dir}")
    typer.echo("This may take a while for large directory trees...")

    try:
        report = generate_branch_report(
            GitClient.from_env(),
            BranchReportRequest(directory=search_dir, output=output),
            on_repository=lambda repo: typer.echo(f"Analyzing repository: {repo}"),
        )
    except OpsKitError as e:
        _fail(e)
    except OSError as e:
        typer.echo(f"Error: Output file was not created at {output}: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Found and analyzed {report.repositories} Git repositories")
    typer.echo("")
    typer.echo("Report generated successfully!")
    typer.echo(f"Output file: {report.output}")
    typer.echo(f"File size: {report.size_bytes} bytes")
    typer.echo(f"Total unmerged branches found: {len(report.rows)}")
    typer.echo("")

    if report.rows:
        typer.echo("Preview of results:")
        for line in format_preview(report):
            typer.echo(line)
    else:
        typer.echo("No unmerged remote branches found in the specified directory tree.")


def branch_report_main(argv: list[str] | None = None) -> int:
    return _run(branch_report_app, argv, "git-branch-report")


# ============================================================================
# git-pull-all
# ============================================================================

pull_all_app = typer.Typer(
    add_completion=False,
    context_settings=CONTEXT_SETTINGS,
    help="Execute 'git pull' on all Git repositories found recursively.",
)


@pull_all_app.command()
def pull(
    directory: Annotated[
        Path, typer.Argument(help="Starting directory to search")
    ] = Path("."),
    force: Annotated[
        bool, typer.Option("-f", "--force", help="Force pull even if there are local changes")
    ] = False,
    quiet: Annotated[
        bool, typer.Option("-q", "--quiet", help="Suppress output from git pull commands")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Show detailed output for each repository")
    ] = False,
) -> None:
    """Examples: git-pull-all -v /path/to/search ; git-pull-all --force --quiet"""
    _setup_logging()
    search_dir = _require_directory(directory)

    typer.echo("Git Pull All Repositories")
    typer.echo("========================")
    typer.echo(f"Search Directory: {directory}")
    typer.echo(f"Force pull: {str(force).lower()}")
    typer.echo(f"Quiet mode: {str(quiet).lower()}")
    typer.echo(f"Verbose mode: {str(verbose).lower()}")
    typer.echo("")
    typer.echo(f"Searching for Git repositories in: {search_dir}")
    typer.echo("This may take a while for large directory trees...")
    typer.echo("")

    request = PullAllRequest(directory=search_dir, force=force, quiet=quiet, verbose=verbose)
    try:
        summary = pull_all(GitClient.from_env(), request, echo=typer.echo)
    except OpsKitError as e:
        _fail(e)

    typer.echo("")
    for line in format_summary(summary):
        typer.echo(line)


def pull_all_main(argv: list[str] | None = None) -> int:
    return _run(pull_all_app, argv, "git-pull-all")
