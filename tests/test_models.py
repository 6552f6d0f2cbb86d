# Tests for data models
import dataclasses

import pytest

from mcpsync.models import (
    AddRequest,
    AddResult,
    ConnectivityStatus,
    ImportResult,
    ServerDefinition,
    ServerRecord,
)


def test_server_record_defaults():
    """Test ServerRecord default values."""
    record = ServerRecord(name="fs")

    assert record.transport == "stdio"
    assert record.scope == "local"
    assert record.args == []
    assert record.env == {}
    assert record.status == ConnectivityStatus()
    assert record.is_active is False


def test_server_records_do_not_share_defaults():
    """Test that mutable defaults are per instance."""
    first = ServerRecord(name="a")
    second = ServerRecord(name="b")

    first.args.append("x")
    first.status.running = True

    assert second.args == []
    assert second.status.running is False


def test_is_active_follows_status():
    record = ServerRecord(name="fs", status=ConnectivityStatus(running=True, last_checked=5))
    assert record.is_active is True


def test_server_record_to_dict():
    """Test ServerRecord JSON shape."""
    record = ServerRecord(
        name="remote",
        transport="sse",
        url="https://example.com/sse",
        scope="user",
        status=ConnectivityStatus(running=False, error="timeout", last_checked=42),
    )

    assert record.to_dict() == {
        "name": "remote",
        "transport": "sse",
        "command": None,
        "args": [],
        "env": {},
        "url": "https://example.com/sse",
        "scope": "user",
        "isActive": False,
        "status": {"running": False, "error": "timeout", "lastChecked": 42},
    }


def test_server_definition_immutability():
    """Test that ServerDefinition is frozen."""
    definition = ServerDefinition(command="node")

    with pytest.raises(dataclasses.FrozenInstanceError):
        definition.command = "python"


def test_add_request_immutability():
    request = AddRequest(name="fs", command="node")

    with pytest.raises(dataclasses.FrozenInstanceError):
        request.scope = "user"


def test_add_result_to_dict():
    assert AddResult(success=False, message="nope").to_dict() == {
        "success": False,
        "message": "nope",
        "serverName": None,
    }


def test_import_result_counts():
    """Test ImportResult ledger counts."""
    result = ImportResult()
    result.record("a", True)
    result.record("b", False, "missing command field")
    result.record("c", True)

    assert result.imported_count == 2
    assert result.failed_count == 1
    assert result.to_dict()["servers"][1] == {
        "name": "b",
        "success": False,
        "error": "missing command field",
    }
