"""Infer suite/case relationships from test name paths.

Nodes never hold references to each other; membership is recomputed by
comparing names. Two matchers are provided:

- ``substring_match`` claims every case whose name contains the suite name.
  Suites whose names overlap (``TestA`` and ``TestAB``) both claim the
  cases of the longer one.
- ``path_prefix_match`` only claims cases below the suite in the name path.
"""
from __future__ import annotations

from typing import Callable, Iterable, Sequence

from gotestreport.errors import ConfigError, ErrorCode
from gotestreport.report import TestNode, TestOverview

PATH_SEPARATOR = "/"

Matcher = Callable[[str, str], bool]


def split_test_name(name: str) -> list[str]:
    """Split a test path into its segments."""
    return name.split(PATH_SEPARATOR)


def root_and_parent(segments: Sequence[str]) -> tuple[str, str]:
    """Return the root segment and the immediate parent segment.

    A single-segment name is its own root and parent.
    """
    if len(segments) == 1:
        return segments[0], segments[0]
    return segments[0], segments[-2]


def substring_match(suite_name: str, case_name: str) -> bool:
    return suite_name in case_name


def path_prefix_match(suite_name: str, case_name: str) -> bool:
    return case_name.startswith(suite_name + PATH_SEPARATOR)


MATCH_STRATEGIES: dict[str, Matcher] = {
    "substring": substring_match,
    "prefix": path_prefix_match,
}

DEFAULT_MATCH_STRATEGY = "substring"


def get_matcher(name: str) -> Matcher:
    """Look up a matcher by strategy name.

    Raises:
        ConfigError: If the strategy is unknown.
    """
    try:
        return MATCH_STRATEGIES[name]
    except KeyError:
        raise ConfigError(
            f"{name!r} (choose from {', '.join(sorted(MATCH_STRATEGIES))})",
            code=ErrorCode.E002,
        ) from None


def claimed_cases(
    suite: TestNode,
    cases: Iterable[TestNode],
    matcher: Matcher = substring_match,
) -> list[TestNode]:
    """Select the cases a suite claims: matcher hit and same package."""
    return [
        case
        for case in cases
        if matcher(suite.name, case.name) and case.package == suite.package
    ]


def build_overviews(
    suites: Sequence[TestNode],
    cases: Sequence[TestNode],
    matcher: Matcher = substring_match,
) -> list[TestOverview]:
    """Pair each suite with its cases, preserving input order on both sides."""
    return [
        TestOverview(suite=suite, cases=tuple(claimed_cases(suite, cases, matcher)))
        for suite in suites
    ]
