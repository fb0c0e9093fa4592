"""
Common fixtures for the sqlitetrace tests.
"""
import logging

import pytest

from sqlitetrace.drivers import SQLiteDriver, TraceConfig
from sqlitetrace.trace_mask import TraceEventCode


ALL_EVENTS = TraceEventCode.STMT | TraceEventCode.PROFILE | TraceEventCode.ROW | TraceEventCode.CLOSE


class EventRecorder:
    """Trace callback that keeps every event it receives."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)
        return 0

    def of(self, code):
        return [event for event in self.events if event.event_code == code]

    def clear(self):
        self.events.clear()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
def driver(recorder):
    """In-memory driver reporting every event category to the recorder."""
    with SQLiteDriver.connect({"database": ":memory:", "trace": TraceConfig(recorder, ALL_EVENTS)}) as driver:
        driver.execute("CREATE TABLE notes (id INTEGER PRIMARY KEY AUTOINCREMENT, note TEXT NOT NULL)")
        recorder.clear()
        yield driver


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "trace.db"


@pytest.fixture(autouse=True)
def reset_logger():
    """The CLI configures the package logger, drop its handlers so they don't outlive the captured streams."""
    yield
    logger = logging.getLogger("sqlitetrace")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
