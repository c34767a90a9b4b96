"""gotestreport test configuration and fixtures."""
from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src to path for imports
SRC_DIR = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_DIR))

from gotestreport.events.model import TestEvent  # noqa: E402

BASE_TIME = datetime(2023, 5, 1, 10, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory path."""
    return Path(__file__).parent.parent / "fixtures"


@pytest.fixture
def sample_log_path(fixtures_dir: Path) -> Path:
    """Return the path to sample_run.jsonl."""
    return fixtures_dir / "gotest" / "sample_run.jsonl"


@pytest.fixture
def malformed_log_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "gotest" / "malformed.jsonl"


@pytest.fixture
def empty_log_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "gotest" / "empty.jsonl"


@pytest.fixture
def make_event():
    """Build TestEvents with timestamps one second apart by default."""

    def _make(
        action: str,
        package: str = "p",
        test: str = "",
        output: str = "",
        elapsed: float = 0.0,
        offset: float = 0.0,
    ) -> TestEvent:
        return TestEvent(
            timestamp=BASE_TIME + timedelta(seconds=offset),
            action=action,
            package=package,
            test=test,
            output=output,
            elapsed=elapsed,
        )

    return _make
