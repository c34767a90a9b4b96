"""Read go test -json event streams from a file or standard input."""
from __future__ import annotations

import json
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, TextIO

import jsonschema

from gotestreport.errors import ErrorCode, MalformedEventError, SourceReadError
from gotestreport.events.model import TestEvent
from gotestreport.logging import get_logger

logger = get_logger(__name__)

EVENT_SCHEMA_NAME = "test-event.schema.json"


def _get_schema_dir() -> Path:
    """Get the directory containing the packaged schemas."""
    return Path(__file__).parent.parent / "schemas"


@lru_cache(maxsize=1)
def _event_validator() -> jsonschema.Draft202012Validator:
    schema_path = _get_schema_dir() / EVENT_SCHEMA_NAME
    schema = json.loads(schema_path.read_text(encoding="utf-8"))
    return jsonschema.Draft202012Validator(schema)


def _format_path(path: list[Any]) -> str:
    """Format a jsonschema path as a dotted string."""
    if not path:
        return "$"
    parts = ["$"]
    for p in path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(f".{p}")
    return "".join(parts)


def validate_event_dict(data: Any) -> list[str]:
    """Validate a decoded record. Returns a list of errors (empty if valid)."""
    return [
        f"{_format_path(list(err.absolute_path))}: {err.message}"
        for err in _event_validator().iter_errors(data)
    ]


def parse_event_line(line: str, line_number: int) -> TestEvent:
    """Decode one line of runner output into a TestEvent.

    Args:
        line: Raw JSON text.
        line_number: 1-based position, used in error messages.

    Raises:
        MalformedEventError: If the line is not JSON, not an object, or
            lacks a usable ``Time``/``Action``.
    """
    try:
        data = json.loads(line)
    except json.JSONDecodeError as e:
        raise MalformedEventError(line_number, str(e)) from e

    errors = validate_event_dict(data)
    if errors:
        raise MalformedEventError(line_number, "; ".join(errors), code=ErrorCode.E203)

    try:
        return TestEvent.from_dict(data)
    except ValueError as e:
        raise MalformedEventError(
            line_number, f"$.Time: {e}", code=ErrorCode.E203
        ) from e


def iter_events(lines: Iterable[str]) -> Iterator[TestEvent]:
    """Parse events lazily, skipping blank lines."""
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        yield parse_event_line(line, line_number)


def read_events(
    path: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> list[TestEvent]:
    """Read every event from ``path`` or, when no path is given, from ``stream``.

    Args:
        path: Input file of JSON lines.
        stream: Text stream to read when ``path`` is None (default: stdin).

    Returns:
        Events in input order.

    Raises:
        SourceReadError: If the input cannot be opened or decoded.
        MalformedEventError: On the first line that is not a valid event.
    """
    if path is not None:
        try:
            with Path(path).open("r", encoding="utf-8") as fh:
                events = list(iter_events(fh))
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(f"{path}: {e}") from e
        source = str(path)
    else:
        fh = stream if stream is not None else sys.stdin
        try:
            events = list(iter_events(fh))
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(f"<stdin>: {e}") from e
        source = "<stdin>"

    logger.debug("Read %d events from %s", len(events), source)
    return events
