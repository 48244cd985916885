"""Models for executions reported by the test-automation backend."""

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, Literal

from pydantic import Field, field_validator

from execution_tracker.models.base import Model

type ExecutionStatus = Literal["pending", "running", "completed", "failed"]

TERMINAL_STATUSES: frozenset[ExecutionStatus] = frozenset(["completed", "failed"])


class ExecutionBrief(Model):
    """Summary of one execution as returned by the list endpoint."""

    execution_id: str = Field(..., description="Opaque, stable execution id")
    status: ExecutionStatus
    start_time: datetime
    end_time: datetime | None = None
    completed_tests: int = 0
    total_tests: int = 0
    failed_tests: int = 0
    source: str = ""

    @field_validator("start_time", "end_time")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        # Mixed naive/aware values cannot be ordered against each other.
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def is_terminal(self) -> bool:
        """Whether the execution has finished, successfully or not."""
        return self.status in TERMINAL_STATUSES

    @property
    def has_issues(self) -> bool:
        """Whether the execution completed but reported failed tests."""
        return self.status == "completed" and self.failed_tests > 0

    @property
    def duration(self) -> timedelta | None:
        """Wall-clock duration of a finished execution."""
        if not self.is_terminal or self.end_time is None:
            return None
        return self.end_time - self.start_time


class TestResult(Model):
    """Outcome of one test scenario within an execution.

    Artifact paths come from the backend's ``property_*`` keys. The backend
    sends empty strings for artifacts that were not produced; those are
    normalized to ``None``.
    """

    __test__ = False

    test_id: str
    test_name: str
    testsuite_name: str = ""
    time: float = 0.0
    errors_count: int = 0
    failures_count: int = 0
    feature_file: str | None = Field(default=None, alias="property_feature_file")
    output_file: str | None = Field(default=None, alias="property_output_file")
    video: str | None = Field(default=None, alias="property_proofs_video")
    screenshots: str | None = Field(default=None, alias="property_proofs_screenshot")
    network_logs: str | None = Field(default=None, alias="property_network_logs")
    agents_logs: str | None = Field(default=None, alias="property_agents_logs")
    planner_thoughts: str | None = Field(
        default=None, alias="property_planner_thoughts"
    )
    plan: str | None = Field(default=None, alias="property_plan")
    final_response: str | None = None

    @field_validator(
        "feature_file",
        "output_file",
        "video",
        "screenshots",
        "network_logs",
        "agents_logs",
        "planner_thoughts",
        "plan",
        "final_response",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def passed(self) -> bool:
        """Whether the test finished without errors or failures."""
        return self.errors_count == 0 and self.failures_count == 0


class ExecutionDetail(ExecutionBrief):
    """Full execution payload including per-test results."""

    test_passed: bool = False
    test_summary: str = ""
    xml_results: Sequence[TestResult] = Field(default_factory=list)

    def to_brief(self) -> ExecutionBrief:
        """Return the brief portion of this detail."""
        return ExecutionBrief.model_validate(
            self.model_dump(include=set(ExecutionBrief.model_fields))
        )
