"""opskit exception classes."""

from collections.abc import Sequence


class OpsKitError(Exception):
    """Base exception for all opskit errors."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class ConfigurationError(OpsKitError):
    """Raised when arguments or environment configuration are invalid."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message)


class ToolNotFoundError(OpsKitError):
    """Raised when a required external executable is not on PATH."""

    def __init__(self, tool: str) -> None:
        super().__init__(
            "TOOL_NOT_FOUND", f"'{tool}' is required but was not found in PATH"
        )
        self.tool = tool


class NotFoundError(OpsKitError):
    """Raised when a target resource or directory does not exist."""

    def __init__(self, message: str) -> None:
        super().__init__("NOT_FOUND", message)


class WorkingDirectoryError(OpsKitError):
    """Raised when a command's working directory cannot be entered."""

    def __init__(self, path: str) -> None:
        super().__init__("DIRECTORY_UNAVAILABLE", f"Cannot enter directory '{path}'")
        self.path = path


class CommandError(OpsKitError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(
        self,
        args: Sequence[str],
        returncode: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        detail = stderr.strip() or stdout.strip() or f"exit code {returncode}"
        super().__init__("COMMAND_FAILED", detail)
