"""HTTP client for the execution backend's read endpoints."""

import logging
from collections.abc import AsyncGenerator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import aiohttp
from pydantic import TypeAdapter, ValidationError

from execution_tracker.api.config import ExecutionAPIConfig
from execution_tracker.api.errors import (
    MalformedResponseError,
    NetworkError,
    NotFoundError,
)
from execution_tracker.models.execution import ExecutionBrief, ExecutionDetail

log = logging.getLogger(__name__)

EXECUTION_LIST_ADAPTER = TypeAdapter(list[ExecutionBrief])


@dataclass(frozen=True, kw_only=True)
class ExecutionAPIClient:
    """Client for listing executions and fetching execution details."""

    config: ExecutionAPIConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: ExecutionAPIConfig
    ) -> AsyncGenerator["ExecutionAPIClient", None]:
        """Create client with managed session lifecycle."""
        async with aiohttp.ClientSession(
            base_url=config.api_base_url,
            headers={"Accept": "application/json"},
            timeout=aiohttp.ClientTimeout(total=config.request_timeout),
        ) as session:
            yield cls(config=config, session=session)

    async def list_executions(self) -> Sequence[ExecutionBrief]:
        """List recent and active executions.

        Raises:
            NetworkError: If the backend is unreachable or the request fails
            MalformedResponseError: If the payload is not a list of executions

        """
        data = await self._get_json("executions")

        try:
            executions = EXECUTION_LIST_ADAPTER.validate_python(data)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected execution list payload: {e}"
            ) from e

        log.debug("Received %d executions", len(executions))
        return executions

    async def get_execution_detail(self, execution_id: str) -> ExecutionDetail:
        """Fetch the full detail of one execution.

        Raises:
            NotFoundError: If the backend no longer knows the execution
            NetworkError: If the backend is unreachable or the request fails
            MalformedResponseError: If the payload is not an execution detail

        """
        url = f"executions/{quote(execution_id, safe='')}"
        data = await self._get_json(url, execution_id=execution_id)

        try:
            return ExecutionDetail.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected detail payload for execution {execution_id}: {e}"
            ) from e

    def logs_url(self, execution_id: str) -> str:
        """Return the websocket URL streaming live logs for an execution."""
        return f"{self.config.ws_base_url}/ws/logs/{quote(execution_id, safe='')}"

    async def _get_json(self, url: str, *, execution_id: str | None = None) -> Any:
        log.debug("GET %s%s", self.config.api_base_url, url)

        try:
            async with self.session.get(url) as response:
                if response.status == 404 and execution_id is not None:
                    raise NotFoundError(execution_id)
                if response.status != 200:
                    text = await response.text()
                    raise NetworkError(
                        f"Failed to fetch {url}: {response.status} {text}"
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise MalformedResponseError(
                        f"Response from {url} is not valid JSON: {e}"
                    ) from e
        except (aiohttp.ClientError, TimeoutError) as e:
            raise NetworkError(f"Failed to reach backend for {url}: {e}") from e
