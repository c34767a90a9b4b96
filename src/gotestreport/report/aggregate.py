"""Aggregate a stream of test events into a ReportModel.

Package-level events (empty ``Test``) build the package summaries:

- pass/fail/skip set status and elapsed time, keeping any coverage already
  recorded;
- output lines that mention ``coverage`` and ``%`` set coverage, and
  re-normalize the stored elapsed time.

Named-test events feed the output log (runner bookkeeping lines containing
``===`` or ``---`` are dropped) and, on pass/fail, become suites
(single-segment names) or cases (multi-segment names).

Trailing output events can still amend a package after its status event, so
nothing is final until ``build()`` has been called on the complete stream.
"""
from __future__ import annotations

import dataclasses
from collections import Counter
from typing import Iterable, Optional

from gotestreport.errors import EmptyInputError
from gotestreport.events.model import PACKAGE_STATUS_ACTIONS, Action, TestEvent
from gotestreport.logging import get_logger
from gotestreport.report import (
    COVERAGE_ABSENT,
    PackageSummary,
    ReportModel,
    Status,
    TestNode,
    TestOverview,
)
from gotestreport.report.hierarchy import (
    Matcher,
    build_overviews,
    root_and_parent,
    split_test_name,
    substring_match,
)
from gotestreport.report.timing import (
    format_run_date,
    format_total_time,
    normalize,
)

logger = get_logger(__name__)

STRUCTURAL_MARKERS = ("===", "---")


def extract_coverage(output: str) -> str:
    """Pull the coverage percentage out of a runner output line.

    >>> extract_coverage("coverage: 87.3% of statements")
    '87.3%'
    >>> extract_coverage("PASS")
    '-'
    """
    if "coverage" not in output or "%" not in output:
        return COVERAGE_ABSENT
    start = output.find(":") + 1
    end = output.find("%") + 1
    value = output[start:end].strip()
    return value or COVERAGE_ABSENT


def is_structural_output(output: str) -> bool:
    """Check if an output line is runner bookkeeping (=== RUN, --- PASS, ...)."""
    return any(marker in output for marker in STRUCTURAL_MARKERS)


class ReportAggregator:
    """Single-pass accumulator over test events.

    Feed events in their original order with ``add``, then call ``build``.
    """

    def __init__(self, matcher: Matcher = substring_match) -> None:
        self.matcher = matcher
        self._packages: dict[str, PackageSummary] = {}
        self._outputs: dict[str, list[str]] = {}
        self._suites: list[TestNode] = []
        self._cases: list[TestNode] = []
        self._passed = 0
        self._failed = 0
        self._first: Optional[TestEvent] = None
        self._last: Optional[TestEvent] = None
        self._event_count = 0

    def add(self, event: TestEvent) -> None:
        """Consume one event."""
        if self._first is None:
            self._first = event
        self._last = event
        self._event_count += 1

        if event.is_package_event:
            self._add_package_event(event)
        else:
            self._add_test_event(event)

    def extend(self, events: Iterable[TestEvent]) -> None:
        for event in events:
            self.add(event)

    def _add_package_event(self, event: TestEvent) -> None:
        if event.action in PACKAGE_STATUS_ACTIONS:
            previous = self._packages.get(event.package)
            self._packages[event.package] = PackageSummary(
                name=event.package,
                elapsed_seconds=event.elapsed,
                elapsed=normalize(event.elapsed),
                status=event.action,
                coverage=previous.coverage if previous else COVERAGE_ABSENT,
            )
        elif event.action == Action.OUTPUT.value:
            summary = self._packages.get(event.package) or PackageSummary(name=event.package)
            changes: dict = {}

            elapsed = normalize(summary.elapsed_seconds)
            if elapsed.value != 0:
                changes["elapsed"] = elapsed

            coverage = extract_coverage(event.output)
            if coverage != COVERAGE_ABSENT:
                changes["coverage"] = coverage

            self._packages[event.package] = dataclasses.replace(summary, **changes)

    def _add_test_event(self, event: TestEvent) -> None:
        if event.output and not is_structural_output(event.output):
            self._outputs.setdefault(event.test, []).append(event.output)

        if not event.is_terminal:
            return

        segments = split_test_name(event.test)
        root, parent = root_and_parent(segments)
        node = TestNode(
            package=event.package,
            root=root,
            parent=parent,
            name=event.test,
            elapsed=normalize(event.elapsed),
            status=event.action,
        )
        if len(segments) > 1:
            self._cases.append(node)
        else:
            self._suites.append(node)

        if event.action == Status.FAIL:
            self._failed += 1
        else:
            self._passed += 1

    def build(self) -> ReportModel:
        """Resolve the accumulated state into a ReportModel.

        Raises:
            EmptyInputError: If no events were added.
        """
        if self._first is None or self._last is None:
            raise EmptyInputError()

        overviews = [
            self._count_subtests(overview)
            for overview in build_overviews(self._suites, self._cases, self.matcher)
        ]

        per_package = Counter(n.package for n in (*self._suites, *self._cases))
        packages = {
            name: dataclasses.replace(summary, test_count=per_package.get(name, 0))
            for name, summary in self._packages.items()
        }

        elapsed = (self._last.timestamp - self._first.timestamp).total_seconds()

        logger.debug(
            "Aggregated %d events: %d packages, %d suites, %d cases (%d passed, %d failed)",
            self._event_count,
            len(packages),
            len(self._suites),
            len(self._cases),
            self._passed,
            self._failed,
        )

        return ReportModel(
            total_time=format_total_time(elapsed),
            run_date=format_run_date(self._first.timestamp),
            failed_tests=self._failed,
            passed_tests=self._passed,
            overviews=tuple(overviews),
            packages=packages,
            outputs={name: tuple(lines) for name, lines in self._outputs.items()},
        )

    def _count_subtests(self, overview: TestOverview) -> TestOverview:
        cases = tuple(
            dataclasses.replace(
                case,
                subtest_count=sum(
                    1
                    for other in overview.cases
                    if other.name != case.name and self.matcher(case.name, other.name)
                ),
            )
            for case in overview.cases
        )
        suite = dataclasses.replace(overview.suite, subtest_count=len(cases))
        return TestOverview(suite=suite, cases=cases)


def aggregate(events: Iterable[TestEvent], matcher: Matcher = substring_match) -> ReportModel:
    """Build a ReportModel from an ordered sequence of events.

    Args:
        events: Events in the order the runner emitted them.
        matcher: Rule deciding which cases a suite claims.

    Returns:
        The resolved report model.

    Raises:
        EmptyInputError: If ``events`` is empty.
    """
    aggregator = ReportAggregator(matcher=matcher)
    aggregator.extend(events)
    return aggregator.build()
