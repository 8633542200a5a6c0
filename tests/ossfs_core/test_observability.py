from __future__ import annotations

import logging

import pytest

from ossfs_core.errors import InconsistentStateError
from ossfs_core.observability import log_event, object_log_fields


def test_log_event_appends_key_value_fields(caplog) -> None:
    caplog.set_level(logging.INFO)
    log_event(logging.getLogger("ossfs.test"), "oss.write", bucket="b", key="a.txt", size=3)

    assert caplog.records[-1].getMessage() == "oss.write bucket=b key=a.txt size=3"


def test_log_event_skips_empty_fields_and_honours_level(caplog) -> None:
    caplog.set_level(logging.DEBUG)
    log_event(logging.getLogger("ossfs.test"), "oss.list", level=logging.DEBUG, prefix="", note=None)

    record = caplog.records[-1]
    assert record.levelno == logging.DEBUG
    assert record.getMessage() == "oss.list"


def test_object_log_fields_merges_extra() -> None:
    assert object_log_fields("b", "k", acl="private") == {"bucket": "b", "key": "k", "acl": "private"}


def test_adapter_operations_emit_structured_logs(caplog, adapter) -> None:
    caplog.set_level(logging.INFO)

    adapter.write("docs/a.txt", b"abc")
    adapter.rename("docs/a.txt", "docs/b.txt")

    messages = [r.getMessage() for r in caplog.records]
    assert any("oss.write" in m and "key=docs/a.txt" in m and "size=3" in m for m in messages)
    assert any("oss.copy" in m and "new_key=docs/b.txt" in m for m in messages)
    assert any("oss.delete" in m and "key=docs/a.txt" in m for m in messages)


def test_rename_failure_logs_warning(caplog, adapter, memory_client) -> None:
    caplog.set_level(logging.INFO)
    adapter.write("a.txt", b"x")
    memory_client.fail("delete_object")

    with pytest.raises(InconsistentStateError):
        adapter.rename("a.txt", "b.txt")

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert any("status=source_not_deleted" in r.getMessage() for r in warnings)
