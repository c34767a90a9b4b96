"""Report model for go test runs.

This module provides the data structures produced by aggregating a stream of
test events and consumed, read-only, by the HTML renderer.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from gotestreport.report.timing import UNIT_MILLISECONDS, ElapsedTime, normalize

COVERAGE_ABSENT = "-"


class Status:
    """Status strings as emitted by the runner."""

    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


@dataclass(frozen=True)
class PackageSummary:
    """Aggregated state of one package.

    Attributes:
        name: Package import path.
        elapsed_seconds: Raw elapsed value from the last package status event.
        elapsed: Normalized elapsed time for display.
        status: pass, fail or skip; None until a status event is seen.
        coverage: Coverage string such as ``87.3%``, or ``-`` when absent.
        test_count: Number of suites and cases recorded for the package.
    """

    name: str
    elapsed_seconds: float = 0.0
    elapsed: ElapsedTime = ElapsedTime(0, UNIT_MILLISECONDS)
    status: Optional[str] = None
    coverage: str = COVERAGE_ABSENT
    test_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "elapsed": self.elapsed.value,
            "unit": self.elapsed.unit,
            "status": self.status,
            "coverage": self.coverage,
            "test_count": self.test_count,
        }


@dataclass(frozen=True)
class TestNode:
    """One test or subtest.

    Attributes:
        package: Package the test belongs to.
        root: First segment of the test path.
        parent: Second-to-last segment, or the root itself for suites.
        name: Full ``/``-delimited test path.
        elapsed: Normalized elapsed time.
        status: pass or fail.
        subtest_count: Number of cases nested under this node.
    """

    __test__ = False  # not a pytest test class

    package: str
    root: str
    parent: str
    name: str
    elapsed: ElapsedTime
    status: str
    subtest_count: int = 0

    @property
    def depth(self) -> int:
        """Number of path segments."""
        return self.name.count("/") + 1

    @property
    def is_suite(self) -> bool:
        """Check if this is a top-level test."""
        return self.depth == 1

    @property
    def short_name(self) -> str:
        return self.name.rsplit("/", 1)[-1]

    @property
    def passed(self) -> bool:
        return self.status == Status.PASS

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "package": self.package,
            "root": self.root,
            "parent": self.parent,
            "name": self.name,
            "elapsed": self.elapsed.value,
            "unit": self.elapsed.unit,
            "status": self.status,
            "subtest_count": self.subtest_count,
        }


@dataclass(frozen=True)
class TestOverview:
    """A suite paired with the cases it claims."""

    __test__ = False  # not a pytest test class

    suite: TestNode
    cases: tuple[TestNode, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "suite": self.suite.to_dict(),
            "cases": [c.to_dict() for c in self.cases],
        }


@dataclass(frozen=True)
class ReportModel:
    """Fully resolved, renderer-ready summary of a test run.

    Attributes:
        total_time: Display string for the whole run duration.
        run_date: Display string for the first event's timestamp.
        failed_tests: Count of fail events for named tests.
        passed_tests: Count of pass events for named tests.
        overviews: Suites with their cases, in first-occurrence order.
        packages: Package summaries keyed by name, in first-occurrence order.
        outputs: Captured output lines keyed by full test name.
    """

    total_time: str
    run_date: str
    failed_tests: int
    passed_tests: int
    overviews: tuple[TestOverview, ...] = ()
    packages: dict[str, PackageSummary] = field(default_factory=dict)
    outputs: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def total_tests(self) -> int:
        return self.failed_tests + self.passed_tests

    @property
    def all_passed(self) -> bool:
        return self.failed_tests == 0

    def overviews_for(self, package: str) -> list[TestOverview]:
        """Return the overviews whose suite belongs to ``package``."""
        return [o for o in self.overviews if o.suite.package == package]

    def output_for(self, test_name: str) -> tuple[str, ...]:
        return self.outputs.get(test_name, ())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_time": self.total_time,
            "run_date": self.run_date,
            "summary": {
                "total": self.total_tests,
                "passed": self.passed_tests,
                "failed": self.failed_tests,
            },
            "packages": {name: p.to_dict() for name, p in self.packages.items()},
            "overviews": [o.to_dict() for o in self.overviews],
            "outputs": {name: list(lines) for name, lines in self.outputs.items()},
        }


__all__ = [
    "COVERAGE_ABSENT",
    "ElapsedTime",
    "PackageSummary",
    "ReportModel",
    "Status",
    "TestNode",
    "TestOverview",
    "normalize",
]
