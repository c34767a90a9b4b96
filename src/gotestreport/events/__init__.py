"""Test event records and the sources that read them."""
from __future__ import annotations

from gotestreport.events.model import Action, TestEvent
from gotestreport.events.source import parse_event_line, read_events

__all__ = ["Action", "TestEvent", "parse_event_line", "read_events"]
