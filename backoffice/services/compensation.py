"""
Compensating actions for multi-step writes.

Each successful step of a write that spans several gateway calls records an
undo action. When a later step fails, the recorded actions run newest first
and the original error is re-raised.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, List, Tuple

import structlog

logger = structlog.get_logger(__name__)

UndoAction = Callable[[], Awaitable[Any]]


class CompensationLog:
    """
    Ordered list of undo actions.

    Usage:
        async with CompensationLog("create project") as log:
            row = await insert_parent()
            log.record("delete project", lambda: delete_parent(row["id"]))
            await insert_links()
    """

    def __init__(self, operation: str) -> None:
        self.operation = operation
        self._steps: List[Tuple[str, UndoAction]] = []
        self.failed_undos: List[str] = []

    def __len__(self) -> int:
        return len(self._steps)

    def record(self, description: str, undo: UndoAction) -> None:
        self._steps.append((description, undo))

    def clear(self) -> None:
        self._steps.clear()

    async def rollback(self) -> None:
        """Run recorded undo actions newest first; keep going past failures."""
        while self._steps:
            description, undo = self._steps.pop()
            try:
                await undo()
                logger.info("Compensated step", operation=self.operation, step=description)
            except Exception as e:
                self.failed_undos.append(description)
                logger.error(
                    "Compensation step failed",
                    operation=self.operation,
                    step=description,
                    error=str(e),
                )

    async def __aenter__(self) -> "CompensationLog":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc is not None and self._steps:
            logger.warning(
                "Rolling back partial write",
                operation=self.operation,
                steps=len(self._steps),
                error=str(exc),
            )
            await self.rollback()
        self.clear()
        return False
