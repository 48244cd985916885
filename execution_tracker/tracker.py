"""Refresh cycle tying the API client, cache and change notifier together."""

import logging
from dataclasses import dataclass, field

from execution_tracker.api.client import ExecutionAPIClient
from execution_tracker.api.errors import (
    ExecutionAPIError,
    MalformedResponseError,
    NetworkError,
)
from execution_tracker.cache import ExecutionCache
from execution_tracker.notifier import ChangeNotifier

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class ExecutionTracker:
    """Poll the backend once per call and publish changes."""

    client: ExecutionAPIClient
    cache: ExecutionCache
    notifier: ChangeNotifier
    last_error: ExecutionAPIError | None = field(default=None, init=False)

    @classmethod
    def create(cls, client: ExecutionAPIClient) -> "ExecutionTracker":
        """Build a tracker with a fresh cache and notifier around client."""
        return cls(
            client=client,
            cache=ExecutionCache(client=client),
            notifier=ChangeNotifier(),
        )

    async def refresh(self) -> bool:
        """Fetch the execution list and reconcile it into the cache.

        Transient failures leave the cache untouched and are only logged;
        the failure is kept in ``last_error`` until the next successful poll.

        Returns:
            True if the cache changed and listeners were notified

        """
        try:
            executions = await self.client.list_executions()
        except NetworkError as e:
            log.warning("Backend unavailable, skipping refresh: %s", e)
            self.last_error = e
            return False
        except MalformedResponseError as e:
            log.warning("Ignoring malformed execution list: %s", e)
            self.last_error = e
            return False

        self.last_error = None
        if not self.cache.reconcile(executions):
            return False

        log.info("Execution data changed (%d executions cached)", len(self.cache))
        self.notifier.notify()
        return True
