"""Execution backend API client module."""

from execution_tracker.api.client import ExecutionAPIClient
from execution_tracker.api.config import ExecutionAPIConfig
from execution_tracker.api.errors import (
    ExecutionAPIError,
    MalformedResponseError,
    NetworkError,
    NotFoundError,
)

__all__ = [
    "ExecutionAPIClient",
    "ExecutionAPIConfig",
    "ExecutionAPIError",
    "MalformedResponseError",
    "NetworkError",
    "NotFoundError",
]
