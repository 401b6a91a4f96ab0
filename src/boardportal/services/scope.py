"""
Operation Scope

Tracks the remote operations a session has in flight. In-flight calls are
never cancelled; once the scope is closed their results are discarded by the
stores instead of being applied to a mirror nobody owns any more.
"""
import asyncio
import logging
from typing import Awaitable, Set, TypeVar

logger = logging.getLogger("boardportal.services.scope")

T = TypeVar("T")


class OperationScope:
    """Lifetime marker for one portal session"""

    def __init__(self, name: str):
        self.name = name
        self._active = True
        self._pending: Set[asyncio.Future] = set()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await a remote call while tracking it as outstanding"""
        future = asyncio.ensure_future(awaitable)
        self._pending.add(future)
        try:
            return await future
        finally:
            self._pending.discard(future)

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def close(self):
        """Mark the scope torn down; later results are ignored"""
        if not self._active:
            return
        self._active = False
        if self._pending:
            logger.info(
                f"Scope {self.name} closed with {len(self._pending)} operation(s) in flight; "
                "their results will be discarded"
            )
