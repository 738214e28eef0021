"""
opskit logging utilities.

Provides configurable logging for external command invocations and the
operational tools. Diagnostics always go to stderr so that result output
on stdout can be redirected cleanly.

Ensures no credentials (SAS signatures, account keys) are logged.
"""

import logging
import os
import re
from collections.abc import Sequence
from pathlib import Path

from opskit.exceptions import ConfigurationError

# Create package-specific loggers
_pkg_logger = logging.getLogger("opskit")
_command_logger = logging.getLogger("opskit.command")

# Format used by the console entry points
CLI_FORMAT = "%(levelname)s: %(message)s"

LOG_LEVEL_ENV = "OPSKIT_LOG_LEVEL"

# Argument flags whose following value must never be logged
_SENSITIVE_FLAGS = frozenset({"--sas-token", "--account-key", "--password", "--connection-string"})

# Patterns for sensitive data that should be masked
_SENSITIVE_PATTERNS = [
    # SAS signature query parameter
    (re.compile(r"(\bsig=)[^&\s\"']+", re.IGNORECASE), r"\1[REDACTED]"),
    # AccountKey=... in connection strings
    (re.compile(r"(AccountKey=)[^;\s\"']+", re.IGNORECASE), r"\1[REDACTED]"),
    # --flag value pairs on a flattened command line
    (
        re.compile(r"(--(?:sas-token|account-key|password|connection-string)[ =])\S+"),
        r"\1[REDACTED]",
    ),
]

# Attribute used to find the handler installed by configure_logging
_HANDLER_MARKER = "_opskit_handler"


def configure_logging(
    level: int = logging.INFO,
    command_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str | None = None,
) -> None:
    """
    Configure opskit logging.

    Calling this again replaces the handler installed by the previous call
    rather than adding a second one.

    Args:
        level: Default log level for all opskit loggers (default: INFO)
        command_level: Log level for external command logging (default: same as level)
        handler: Custom handler to use (default: StreamHandler to stderr)
        format_string: Custom format string (default: includes timestamp, level, logger name)

    Example:
        ```python
        import logging
        from opskit.logging import configure_logging

        # Show every az/git invocation
        configure_logging(level=logging.INFO, command_level=logging.DEBUG)
        ```
    """
    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if handler is None:
        handler = logging.StreamHandler()

    handler.setFormatter(logging.Formatter(format_string))
    setattr(handler, _HANDLER_MARKER, True)

    for existing in list(_pkg_logger.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            _pkg_logger.removeHandler(existing)

    _pkg_logger.setLevel(level)
    _pkg_logger.addHandler(handler)

    _command_logger.setLevel(command_level if command_level is not None else level)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get an opskit logger.

    Args:
        name: Logger name suffix (e.g., "git", "azure"). If None, returns the package logger.

    Returns:
        Logger instance
    """
    if name is None:
        return _pkg_logger
    return logging.getLogger(f"opskit.{name}")


def level_from_env(default: int = logging.INFO) -> int:
    """
    Read the log level from the OPSKIT_LOG_LEVEL environment variable.

    Accepts level names (``DEBUG``, ``warning``) or numeric values.

    Raises:
        ConfigurationError: If the value is not a known level
    """
    raw = os.environ.get(LOG_LEVEL_ENV, "").strip()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Invalid {LOG_LEVEL_ENV}: {raw}")
    return level


def mask_sensitive_data(text: str) -> str:
    """
    Mask sensitive data in a string.

    Replaces SAS signatures, account keys and secret-bearing argument values
    with redacted placeholders.

    Args:
        text: Text that may contain sensitive data

    Returns:
        Text with sensitive data masked
    """
    result = text
    for pattern, replacement in _SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def safe_log_args(args: Sequence[str]) -> list[str]:
    """
    Create a copy of an argv list with secret values masked.

    The value following any of ``--sas-token``, ``--account-key``,
    ``--password`` or ``--connection-string`` is replaced entirely; every
    other item goes through mask_sensitive_data.
    """
    result: list[str] = []
    redact_next = False
    for arg in args:
        if redact_next:
            result.append("[REDACTED]")
            redact_next = False
            continue
        if arg in _SENSITIVE_FLAGS:
            redact_next = True
            result.append(arg)
            continue
        result.append(mask_sensitive_data(arg))
    return result


def log_command(args: Sequence[str], cwd: str | Path | None = None) -> None:
    """
    Log an external command invocation at DEBUG level with secrets masked.

    Args:
        args: Full argv of the command
        cwd: Working directory the command runs in (optional)
    """
    if not _command_logger.isEnabledFor(logging.DEBUG):
        return

    log_parts = [" ".join(safe_log_args(args))]
    if cwd is not None:
        log_parts.append(f"cwd={cwd}")

    _command_logger.debug(" | ".join(log_parts))


def log_command_result(args: Sequence[str], returncode: int, elapsed_ms: float | None = None) -> None:
    """Log the exit status of an external command at DEBUG level."""
    if not _command_logger.isEnabledFor(logging.DEBUG):
        return

    # Executable and subcommand only; later arguments may be long
    log_parts = [f"Exit {returncode} from {' '.join(safe_log_args(args[:2]))}"]
    if elapsed_ms is not None:
        log_parts.append(f"elapsed={elapsed_ms:.2f}ms")

    _command_logger.debug(" | ".join(log_parts))


__all__ = [
    "CLI_FORMAT",
    "configure_logging",
    "get_logger",
    "level_from_env",
    "mask_sensitive_data",
    "safe_log_args",
    "log_command",
    "log_command_result",
]
