"""Display nodes produced by the tree projector."""

from dataclasses import dataclass
from typing import Literal

from execution_tracker.models.artifact import Artifact
from execution_tracker.models.execution import (
    ExecutionBrief,
    ExecutionDetail,
    TestResult,
)

type SentinelReason = Literal["no-executions", "error"]


@dataclass(frozen=True, kw_only=True)
class Node:
    """Fields shared by every display node."""

    node_id: str
    label: str
    description: str = ""
    tooltip: str = ""


@dataclass(frozen=True, kw_only=True)
class RootNode(Node):
    """Level 0: one execution."""

    brief: ExecutionBrief

    @property
    def execution_id(self) -> str:
        """Id of the execution this node represents."""
        return self.brief.execution_id


@dataclass(frozen=True, kw_only=True)
class SummaryNode(Node):
    """Level 1: overall outcome of an execution, listed before its tests."""

    detail: ExecutionDetail


@dataclass(frozen=True, kw_only=True)
class TestResultNode(Node):
    """Level 1: one test result of an execution."""

    __test__ = False

    execution_id: str
    result: TestResult

    @property
    def has_video(self) -> bool:
        """Whether the test recorded a video."""
        return self.result.video is not None

    @property
    def has_report(self) -> bool:
        """Whether the test produced an XML report."""
        return self.result.output_file is not None

    @property
    def has_logs(self) -> bool:
        """Whether the test produced agent logs."""
        return self.result.agents_logs is not None


@dataclass(frozen=True, kw_only=True)
class ArtifactNode(Node):
    """Level 2: a file or folder produced by a test."""

    execution_id: str
    artifact: Artifact


@dataclass(frozen=True, kw_only=True)
class SentinelNode(Node):
    """Synthetic node standing in for missing data."""

    reason: SentinelReason
    parent_id: str | None = None


type TreeNode = RootNode | SummaryNode | TestResultNode | ArtifactNode | SentinelNode
