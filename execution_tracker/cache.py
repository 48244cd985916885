"""In-memory cache of execution state reconciled from backend polls."""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from execution_tracker.api.client import ExecutionAPIClient
from execution_tracker.api.errors import NotFoundError
from execution_tracker.models.execution import ExecutionBrief, ExecutionDetail

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class CacheEntry:
    """Cached state of one execution.

    The brief is replaced whenever a poll reports different content. Details
    are fetched on first need and kept until the entry is evicted.
    """

    brief: ExecutionBrief
    details: ExecutionDetail | None = None


@dataclass(kw_only=True)
class ExecutionCache:
    """Local view of remote executions keyed by execution id.

    Entries are never dropped because a poll stopped listing them. Use
    ``evict`` or ``clear`` to bound memory.
    """

    client: ExecutionAPIClient
    _entries: dict[str, CacheEntry] = field(
        default_factory=dict, init=False, repr=False
    )
    _pending: dict[str, asyncio.Task[ExecutionDetail]] = field(
        default_factory=dict, init=False, repr=False
    )

    def reconcile(self, briefs: Iterable[ExecutionBrief]) -> bool:
        """Merge freshly polled briefs into the cache.

        Args:
            briefs: Briefs from the latest poll, in any order

        Returns:
            True if any entry was added or its brief changed

        """
        # Last occurrence of a duplicated id wins
        fresh = {brief.execution_id: brief for brief in briefs}
        changed = False

        for execution_id, brief in fresh.items():
            entry = self._entries.get(execution_id)

            if entry is None:
                log.debug("New execution %s status=%s", execution_id, brief.status)
                self._entries[execution_id] = CacheEntry(brief=brief)
                changed = True
                continue

            finished = brief.is_terminal and not entry.brief.is_terminal
            if finished:
                log.info(
                    "Execution %s finished with status=%s", execution_id, brief.status
                )

            if finished or entry.brief != brief:
                entry.brief = brief
                changed = True

        return changed

    def get(self, execution_id: str) -> CacheEntry | None:
        """Return the entry for an execution, if cached."""
        return self._entries.get(execution_id)

    def get_detail(self, execution_id: str) -> ExecutionDetail | None:
        """Return cached details without touching the network."""
        entry = self._entries.get(execution_id)
        return entry.details if entry is not None else None

    async def hydrate(self, execution_id: str) -> ExecutionDetail:
        """Return details for an execution, fetching them on first need.

        Concurrent calls for the same execution share one request.

        Raises:
            NotFoundError: If the backend no longer knows the execution; the
                entry is evicted before the error propagates
            NetworkError: If the backend could not be reached
            MalformedResponseError: If the backend answered with garbage

        """
        if (details := self.get_detail(execution_id)) is not None:
            return details

        if (task := self._pending.get(execution_id)) is None:
            task = asyncio.create_task(self._fetch(execution_id))
            task.add_done_callback(_consume_exception)
            self._pending[execution_id] = task

        return await asyncio.shield(task)

    def evict(self, execution_id: str) -> None:
        """Forget an execution. A later poll or hydration re-creates it."""
        if self._entries.pop(execution_id, None) is not None:
            log.debug("Evicted execution %s", execution_id)

    def clear(self) -> None:
        """Forget all executions."""
        self._entries.clear()

    def entries(self) -> Sequence[CacheEntry]:
        """Snapshot of all cached entries in insertion order."""
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, execution_id: object) -> bool:
        return execution_id in self._entries

    async def _fetch(self, execution_id: str) -> ExecutionDetail:
        log.debug("Hydrating execution %s", execution_id)
        try:
            details = await self.client.get_execution_detail(execution_id)
        except NotFoundError:
            log.info("Execution %s no longer exists on the backend", execution_id)
            self.evict(execution_id)
            raise
        finally:
            self._pending.pop(execution_id, None)

        entry = self._entries.get(execution_id)
        if entry is None:
            # Evicted while the request was in flight
            self._entries[execution_id] = CacheEntry(
                brief=details.to_brief(), details=details
            )
        else:
            entry.details = details
        return details


def _consume_exception(task: asyncio.Task[ExecutionDetail]) -> None:
    # Every awaiter may have been cancelled before a failed fetch finished
    if not task.cancelled():
        task.exception()
