"""
Unit Tests - Compensating Actions
"""
import pytest

from backoffice.errors import GatewayError
from backoffice.services.compensation import CompensationLog


class TestCompensationLog:
    """Tests for CompensationLog"""

    async def test_success_runs_no_undo(self):
        undone = []

        async with CompensationLog("create") as log:
            log.record("first", lambda: _append(undone, "first"))

        assert undone == []
        assert len(log) == 0

    async def test_failure_undoes_newest_first(self):
        undone = []

        with pytest.raises(GatewayError, match="boom"):
            async with CompensationLog("create") as log:
                log.record("parent", lambda: _append(undone, "parent"))
                log.record("links", lambda: _append(undone, "links"))
                raise GatewayError("boom")

        assert undone == ["links", "parent"]

    async def test_failed_undo_does_not_stop_rollback(self):
        undone = []

        async def broken():
            raise GatewayError("undo failed")

        with pytest.raises(ValueError):
            async with CompensationLog("update") as log:
                log.record("parent", lambda: _append(undone, "parent"))
                log.record("file", broken)
                raise ValueError("original")

        assert undone == ["parent"]
        assert log.failed_undos == ["file"]


async def _append(target, value):
    target.append(value)
