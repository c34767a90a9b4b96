"""Browser tests for the generated report.

Install the extra and a browser first:
    pip install -e ".[ui]" && playwright install chromium

Then run:
    pytest tests/ui/ --browser chromium -v
"""
from __future__ import annotations

from pathlib import Path

import pytest

UI_DIR = Path(__file__).parent


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    """Mark everything collected from this directory as a UI test."""
    for item in items:
        if UI_DIR in item.path.parents:
            item.add_marker(pytest.mark.ui)
