"""gotestreport error code registry.

Provides structured error codes with helpful messages and next steps.
Each error has:
- Code: GTR-EXXX format
- Message: Human-readable description
- Next step: Actionable command or instruction

Every failure the pipeline can hit is raised as a ``ReportError`` subclass
carrying one of these codes; the CLI turns it into a printed error and a
non-zero exit status.
"""
from __future__ import annotations

import sys
import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from gotestreport.logging import get_logger

logger = get_logger(__name__)


class ErrorCode(Enum):
    """gotestreport error codes."""

    # Configuration errors (E001-E099)
    E001 = "E001"  # Config file invalid
    E002 = "E002"  # Unknown match strategy
    E003 = "E003"  # Config file not found

    # Input errors (E200-E299)
    E202 = "E202"  # Event line is not valid JSON
    E203 = "E203"  # Event record fails schema validation
    E204 = "E204"  # No events supplied

    # File/IO errors (E300-E399)
    E302 = "E302"  # Cannot read input
    E303 = "E303"  # Cannot write report


@dataclass
class StructuredError:
    """Printable error with code, message, and next step."""

    code: ErrorCode
    message: str
    next_step: str
    details: Optional[str] = None

    def __str__(self) -> str:
        lines = [
            f"GTR-{self.code.value}: {self.message}",
        ]
        if self.details:
            lines.append(f"  Details: {self.details}")
        lines.append(f"  Next step: {self.next_step}")
        return "\n".join(lines)

    def print(self, file=None) -> None:
        """Print the error to stderr (or specified file)."""
        print(str(self), file=file or sys.stderr)


# (message_template, next_step)
ERROR_TEMPLATES: dict[ErrorCode, tuple[str, str]] = {
    ErrorCode.E001: (
        "Config file is invalid: {details}",
        "Check the YAML syntax of the config file",
    ),
    ErrorCode.E002: (
        "Unknown match strategy: {details}",
        "Use --match substring or --match prefix",
    ),
    ErrorCode.E003: (
        "Config file not found: {details}",
        "Check the --config path",
    ),
    ErrorCode.E202: (
        "Test event is not valid JSON: {details}",
        "Make sure the input was produced by 'go test -json'",
    ),
    ErrorCode.E203: (
        "Test event has an unexpected shape: {details}",
        "Each line needs at least string 'Time' and 'Action' fields",
    ),
    ErrorCode.E204: (
        "No test events found in input",
        "Pipe 'go test -json ./...' output in or pass --file",
    ),
    ErrorCode.E302: (
        "Cannot read input: {details}",
        "Check file permissions and path",
    ),
    ErrorCode.E303: (
        "Cannot write report: {details}",
        "Check the --output directory permissions",
    ),
}


def make_error(code: ErrorCode, details: Optional[str] = None) -> StructuredError:
    """Create a StructuredError from a code with optional details.

    Args:
        code: The error code
        details: Optional details to include in the message

    Returns:
        StructuredError instance ready to print
    """
    message_template, next_step = ERROR_TEMPLATES.get(
        code, ("Unknown error", "Run with --verbose for the full traceback")
    )

    if details and "{details}" in message_template:
        message = message_template.format(details=details)
    elif details:
        message = f"{message_template}: {details}"
    else:
        message = message_template.replace(": {details}", "")

    return StructuredError(
        code=code,
        message=message,
        next_step=next_step,
        details=details if "{details}" not in message_template else None,
    )


class ReportError(Exception):
    """Base class for every failure raised by the report pipeline."""

    code: ErrorCode = ErrorCode.E302

    def __init__(self, details: str = "", code: Optional[ErrorCode] = None) -> None:
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(str(make_error(self.code, details or None).message))

    def to_structured(self) -> StructuredError:
        return make_error(self.code, self.details or None)


class ConfigError(ReportError):
    """Configuration could not be loaded or is invalid."""

    code = ErrorCode.E001


class SourceReadError(ReportError):
    """The input stream or file could not be read."""

    code = ErrorCode.E302


class MalformedEventError(ReportError):
    """A line of input is not a usable test event."""

    code = ErrorCode.E202

    def __init__(
        self,
        line_number: int,
        reason: str,
        code: Optional[ErrorCode] = None,
    ) -> None:
        self.line_number = line_number
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}", code=code)


class EmptyInputError(ReportError):
    """The input contained no events."""

    code = ErrorCode.E204


class RenderError(ReportError):
    """The report could not be rendered or written."""

    code = ErrorCode.E303


def handle_exception(exc: Exception, verbose: bool = False) -> None:
    """Report an exception as a structured error.

    Logs a one-line message, prints the structured error to stderr, and in
    verbose mode prints the full traceback as well.

    Args:
        exc: The exception that occurred
        verbose: Whether to print the traceback
    """
    if isinstance(exc, ReportError):
        err = exc.to_structured()
    elif isinstance(exc, OSError):
        err = make_error(ErrorCode.E302, str(exc))
    else:
        err = StructuredError(
            code=ErrorCode.E302,
            message=f"Unexpected error: {exc}",
            next_step="Run with --verbose for the full traceback",
        )

    logger.error(err.message)
    err.print()

    if verbose:
        print("\n--- Full Traceback ---", file=sys.stderr)
        traceback.print_exception(type(exc), exc, exc.__traceback__)
