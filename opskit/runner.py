"""
Command transport for opskit.

Runs external command-line tools synchronously, one at a time, with an
explicit working directory. Handles executable resolution, logging and
error conversion.
"""

import json
import os
import shutil
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from opskit.exceptions import CommandError, ToolNotFoundError, WorkingDirectoryError
from opskit.logging import log_command, log_command_result


@dataclass
class CommandResult:
    """Outcome of one external command."""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> "CommandResult":
        """Return self, or raise CommandError if the command failed."""
        if not self.ok:
            raise CommandError(self.args, self.returncode, self.stdout, self.stderr)
        return self


class CommandRunner:
    """
    Transport for one external executable.

    Handles:
    - Resolving the executable on PATH once, at construction
    - Running commands with an explicit working directory
    - Debug logging of every invocation with secrets masked
    - Converting failures into typed exceptions
    """

    def __init__(
        self,
        executable: str,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """
        Initialize the runner.

        Args:
            executable: Command name or path (e.g., "az", "/usr/bin/git")
            env: Extra environment variables for every command (optional)

        Raises:
            ToolNotFoundError: If the executable cannot be found
        """
        resolved = shutil.which(executable)
        if resolved is None:
            raise ToolNotFoundError(executable)

        self.executable = executable
        self.path = resolved
        self.env = dict(env) if env else None

    def run(
        self,
        args: Sequence[str],
        cwd: str | Path | None = None,
        check: bool = False,
    ) -> CommandResult:
        """
        Run the executable with the given arguments and wait for it.

        Args:
            args: Arguments after the executable name
            cwd: Working directory for the command (optional)
            check: Raise CommandError on a non-zero exit status

        Returns:
            CommandResult with captured stdout/stderr

        Raises:
            WorkingDirectoryError: If cwd does not exist or is not a directory
            ToolNotFoundError: If the executable disappeared since construction
            CommandError: If check is set and the command failed
        """
        if cwd is not None and not Path(cwd).is_dir():
            raise WorkingDirectoryError(str(cwd))

        argv = [self.path, *args]
        display = [self.executable, *args]
        log_command(display, cwd)

        env = None
        if self.env:
            env = {**os.environ, **self.env}

        started = time.monotonic()
        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                text=True,
                env=env,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(self.executable) from e
        except (NotADirectoryError, PermissionError) as e:
            raise WorkingDirectoryError(str(cwd)) from e

        log_command_result(display, completed.returncode, (time.monotonic() - started) * 1000)

        result = CommandResult(
            args=display,
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
        if check:
            result.check()
        return result

    def run_json(self, args: Sequence[str], cwd: str | Path | None = None) -> Any:
        """
        Run a command that prints JSON and parse its output.

        Empty output parses to None.

        Raises:
            CommandError: If the command fails or prints invalid JSON
        """
        result = self.run(args, cwd=cwd, check=True)
        text = result.stdout.strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError as e:
            raise CommandError(result.args, result.returncode, result.stdout, f"Invalid JSON output: {e}") from e
