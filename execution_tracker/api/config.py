"""Configuration for the execution API client."""

from pydantic import BaseModel, Field, field_validator

DEFAULT_POLL_INTERVAL = 5.0


class ExecutionAPIConfig(BaseModel):
    """Configuration for talking to the execution backend."""

    api_base_url: str = "http://127.0.0.1:8000"
    ws_base_url: str = "ws://127.0.0.1:8000"
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, gt=0)
    request_timeout: float = Field(default=10.0, gt=0)

    @field_validator("api_base_url")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        # aiohttp joins relative request paths onto base_url only when it ends with "/"
        return value if value.endswith("/") else f"{value}/"

    @field_validator("ws_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")
