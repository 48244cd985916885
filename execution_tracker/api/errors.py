"""Errors raised by the execution API client."""


class ExecutionAPIError(Exception):
    """Base class for failures talking to the execution backend."""


class NetworkError(ExecutionAPIError):
    """Raised when the backend is unreachable or answers with a non-success status."""


class NotFoundError(ExecutionAPIError):
    """Raised when the backend no longer knows the requested execution."""

    def __init__(self, execution_id: str) -> None:
        super().__init__(f"Execution '{execution_id}' not found")
        self.execution_id = execution_id


class MalformedResponseError(ExecutionAPIError):
    """Raised when a response body does not have the expected shape."""
