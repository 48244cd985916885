"""Test factories for generating model instances."""

from polyfactory.factories.pydantic_factory import ModelFactory

from execution_tracker.models.execution import ExecutionBrief


class ExecutionBriefFactory(ModelFactory[ExecutionBrief]):
    """Factory for ExecutionBrief."""

    status = "running"
    end_time = None
