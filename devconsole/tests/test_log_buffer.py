from __future__ import annotations

import logging

import pytest

from devconsole.log_buffer import ConsoleLogHandler, LogBuffer, LogKind, kind_for_level


def test_capacity_evicts_oldest_first() -> None:
    buffer = LogBuffer(3)
    for index in range(5):
        buffer.append(f"line {index}")
    assert [entry.message for entry in buffer] == ["line 2", "line 3", "line 4"]
    assert len(buffer) == 3
    assert buffer.appended == 5


def test_since_returns_entries_after_mark() -> None:
    buffer = LogBuffer(4)
    buffer.append("old")
    mark = buffer.appended
    buffer.append("new", LogKind.WARNING)
    assert [entry.message for entry in buffer.since(mark)] == ["new"]
    assert buffer.since(buffer.appended) == []

    for index in range(6):
        buffer.append(str(index))
    assert [entry.message for entry in buffer.since(mark)] == ["2", "3", "4", "5"]


def test_clear_keeps_capacity() -> None:
    buffer = LogBuffer(2)
    buffer.append("a", LogKind.ERROR, "trace")
    buffer.clear()
    assert buffer.entries == []
    assert buffer.capacity == 2
    buffer.append("b")
    buffer.append("c")
    buffer.append("d")
    assert [entry.message for entry in buffer] == ["c", "d"]


def test_invalid_capacity() -> None:
    with pytest.raises(ValueError):
        LogBuffer(0)


def test_kind_for_level() -> None:
    assert kind_for_level(logging.CRITICAL) is LogKind.ERROR
    assert kind_for_level(logging.ERROR) is LogKind.ERROR
    assert kind_for_level(logging.WARNING) is LogKind.WARNING
    assert kind_for_level(logging.INFO) is LogKind.MESSAGE


def test_handler_mirrors_records_with_traces() -> None:
    buffer = LogBuffer(8)
    enabled = {"value": True}
    host = logging.getLogger("devconsole.tests.log_buffer")
    host.setLevel(logging.DEBUG)
    handler = ConsoleLogHandler(buffer, enabled=lambda: enabled["value"])
    host.addHandler(handler)
    try:
        host.info("loaded %d assets", 3)
        host.warning("low memory")
        try:
            1 / 0
        except ZeroDivisionError:
            host.exception("update failed")
        enabled["value"] = False
        host.error("dropped")
    finally:
        host.removeHandler(handler)

    entries = buffer.entries
    assert [(entry.message, entry.kind) for entry in entries] == [
        ("loaded 3 assets", LogKind.MESSAGE),
        ("low memory", LogKind.WARNING),
        ("update failed", LogKind.ERROR),
    ]
    assert entries[0].stack_trace is None
    assert "ZeroDivisionError" in entries[2].stack_trace
