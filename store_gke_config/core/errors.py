"""
Error types and standardized error classification for the GKE config tool.

Configuration problems (missing fields, unreadable credential files, unknown
secrets, unparsable kubeconfig) raise ConfigError and are left to the host
engine to report. External command failures raise CommandError and are
turned into an ErrorInfo payload so playbook case blocks can route on them
without string matching:

    case:
      - when: "{{ event.payload.error.kind == 'auth' }}"
        then:
          jump:
            action: refresh_credentials

      - when: "{{ event.payload.error.retryable }}"
        then:
          retry:
            max_attempts: 3
"""

from enum import Enum
from typing import Any, Optional, Sequence
from pydantic import BaseModel, Field


class StoreGkeConfigError(Exception):
    """Base class for errors raised by the GKE config tool."""


class ConfigError(StoreGkeConfigError, ValueError):
    """Invalid or unusable step configuration."""


class CommandError(StoreGkeConfigError):
    """An external CLI command exited with a non-zero status."""

    def __init__(self, command: Sequence[str], returncode: int, message: Optional[str] = None):
        self.command = list(command)
        self.returncode = returncode
        super().__init__(
            message or f"Command '{' '.join(self.command)}' failed with exit code {returncode}"
        )


class ErrorKind(str, Enum):
    """Standardized error categories for case block matching."""

    CONFIG = "config"               # Missing or invalid step configuration
    AUTH = "auth"                   # Service account activation failed
    COMMAND = "command"             # gcloud/kubectl exited non-zero
    CONNECTION = "connection"       # Cluster API not reachable
    TIMEOUT = "timeout"             # Command or request timeout
    UNKNOWN = "unknown"             # Unclassified error


class ErrorInfo(BaseModel):
    """
    Standardized error object for event payloads.

    - error.kind == 'auth'
    - error.retryable == true
    - error.exit_code == 1
    """

    kind: ErrorKind = Field(
        default=ErrorKind.UNKNOWN,
        description="Error category for case matching"
    )
    retryable: bool = Field(
        default=False,
        description="Whether this error is worth retrying"
    )
    code: str = Field(
        default="UNKNOWN",
        description="Tool-specific error code (GCLOUD_1, KUBECTL_1, CONFIG, ...)"
    )
    message: str = Field(
        default="Unknown error",
        description="Human-readable error message"
    )
    source: str = Field(
        default="store_gke_config",
        description="Tool kind that produced this error"
    )
    exit_code: Optional[int] = Field(
        None, description="Exit code of the failed command"
    )
    command: Optional[str] = Field(
        None, description="Failed command line"
    )
    exception_type: Optional[str] = Field(
        None, description="Python exception class name"
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for event payload and template access."""
        d = {
            "kind": self.kind.value,
            "retryable": self.retryable,
            "code": self.code,
            "message": self.message,
            "source": self.source,
        }
        if self.exit_code is not None:
            d["exit_code"] = self.exit_code
        if self.command is not None:
            d["command"] = self.command
        if self.exception_type is not None:
            d["exception_type"] = self.exception_type
        return d


def classify_command_error(error: CommandError) -> ErrorInfo:
    """Classify a failed gcloud/kubectl invocation."""
    argv = error.command
    binary = argv[0].rsplit("/", 1)[-1] if argv else "unknown"
    code = f"{binary.upper()}_{error.returncode}"
    command_line = " ".join(argv)

    if "auth" in argv[1:2]:
        return ErrorInfo(
            kind=ErrorKind.AUTH,
            retryable=False,
            code=code,
            message=str(error),
            exit_code=error.returncode,
            command=command_line,
        )

    # `kubectl get po` probes the API server reachability
    if binary == "kubectl" and "get" in argv[1:2]:
        return ErrorInfo(
            kind=ErrorKind.CONNECTION,
            retryable=True,
            code=code,
            message=str(error),
            exit_code=error.returncode,
            command=command_line,
        )

    return ErrorInfo(
        kind=ErrorKind.COMMAND,
        retryable=False,
        code=code,
        message=str(error),
        exit_code=error.returncode,
        command=command_line,
    )


def classify_error(error: Exception) -> ErrorInfo:
    """
    Generic error classifier.

    Args:
        error: The exception to classify

    Returns:
        Standardized ErrorInfo
    """
    if isinstance(error, CommandError):
        return classify_command_error(error)

    error_type = type(error).__name__

    if isinstance(error, ConfigError):
        return ErrorInfo(
            kind=ErrorKind.CONFIG,
            retryable=False,
            code="CONFIG",
            message=str(error),
            exception_type=error_type,
        )

    if isinstance(error, TimeoutError) or "timeout" in str(error).lower():
        return ErrorInfo(
            kind=ErrorKind.TIMEOUT,
            retryable=True,
            code="TIMEOUT",
            message=str(error),
            exception_type=error_type,
        )

    return ErrorInfo(
        kind=ErrorKind.UNKNOWN,
        retryable=False,
        code=f"PY_{error_type}",
        message=str(error),
        exception_type=error_type,
    )


__all__ = [
    "StoreGkeConfigError",
    "ConfigError",
    "CommandError",
    "ErrorKind",
    "ErrorInfo",
    "classify_command_error",
    "classify_error",
]
