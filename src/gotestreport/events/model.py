"""Test event record emitted by ``go test -json``."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from gotestreport.report.timing import parse_timestamp


class Action(str, Enum):
    """Runner actions. Only the first five take part in aggregation."""

    RUN = "run"
    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"
    OUTPUT = "output"

    # Emitted by the runner, ignored here
    START = "start"
    PAUSE = "pause"
    CONT = "cont"
    BENCH = "bench"
    BUILD_OUTPUT = "build-output"
    BUILD_FAIL = "build-fail"


TERMINAL_ACTIONS = frozenset({Action.PASS.value, Action.FAIL.value})
PACKAGE_STATUS_ACTIONS = frozenset({Action.PASS.value, Action.FAIL.value, Action.SKIP.value})


@dataclass(frozen=True)
class TestEvent:
    """One line of test-runner output.

    ``test`` is empty for package-level events, otherwise a ``/``-delimited
    path such as ``TestFoo/SubCase/Nested``.
    """

    __test__ = False  # not a pytest test class

    timestamp: datetime
    action: str
    package: str = ""
    test: str = ""
    output: str = ""
    elapsed: float = 0.0

    @property
    def is_package_event(self) -> bool:
        return self.test == ""

    @property
    def is_terminal(self) -> bool:
        """True for pass/fail, the actions that close a test."""
        return self.action in TERMINAL_ACTIONS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TestEvent:
        """Create a TestEvent from a decoded runner record.

        Raises:
            ValueError: If ``Time`` is not a parseable timestamp.
        """
        elapsed = data.get("Elapsed")
        return cls(
            timestamp=parse_timestamp(data["Time"]),
            action=data["Action"],
            package=data.get("Package") or "",
            test=data.get("Test") or "",
            output=data.get("Output") or "",
            elapsed=float(elapsed) if elapsed is not None else 0.0,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the runner's field names."""
        result: dict[str, Any] = {
            "Time": self.timestamp.isoformat(),
            "Action": self.action,
        }
        if self.package:
            result["Package"] = self.package
        if self.test:
            result["Test"] = self.test
        if self.output:
            result["Output"] = self.output
        if self.elapsed:
            result["Elapsed"] = self.elapsed
        return result
