"""Project cached execution state into a three-level display tree.

Level 0 lists executions, level 1 lists the summary and test results of one
execution, level 2 lists the artifacts of one test result. Every level is
computed on demand from the current cache contents; nothing is pushed.
"""

import asyncio
import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import assert_never

from execution_tracker.api.errors import ExecutionAPIError
from execution_tracker.cache import ExecutionCache
from execution_tracker.classifier import ArtifactClassifier
from execution_tracker.models.artifact import Artifact
from execution_tracker.models.execution import (
    ExecutionBrief,
    ExecutionDetail,
    ExecutionStatus,
    TestResult,
)
from execution_tracker.models.tree import (
    ArtifactNode,
    RootNode,
    SentinelNode,
    SummaryNode,
    TestResultNode,
    TreeNode,
)

log = logging.getLogger(__name__)

# Canonical display order of artifact fields on a test result
ARTIFACT_FIELDS: Sequence[tuple[str, str]] = (
    ("feature_file", "Feature File"),
    ("output_file", "XML Results"),
    ("video", "Video Recording"),
    ("screenshots", "Screenshots"),
    ("network_logs", "Network Logs"),
    ("agents_logs", "Agent Logs"),
    ("planner_thoughts", "Planner Thoughts"),
)

STATUS_ICONS: Mapping[ExecutionStatus, str] = {
    "pending": "⏳",
    "running": "▶️",
    "completed": "✅",
    "failed": "❌",
}
ISSUES_ICON = "⚠️"
PASSED_ICON = "✅"
FAILED_ICON = "❌"

NO_EXECUTIONS_ID = "no-executions"
SHORT_ID_LENGTH = 8


@dataclass(frozen=True, kw_only=True)
class TreeProjector:
    """Build display nodes from an execution cache."""

    cache: ExecutionCache
    classifier: ArtifactClassifier

    def roots(self) -> Sequence[TreeNode]:
        """Return one node per cached execution, newest first.

        An empty cache yields a single "no executions" sentinel so consumers
        can tell "nothing polled yet" apart from an empty tree.
        """
        entries = self.cache.entries()
        if not entries:
            return [no_executions_node()]

        ordered = sorted(entries, key=lambda entry: entry.brief.execution_id)
        ordered.sort(key=lambda entry: entry.brief.start_time, reverse=True)
        return [execution_node(entry.brief) for entry in ordered]

    async def children(self, node: TreeNode) -> Sequence[TreeNode]:
        """Return the children of any node."""
        match node:
            case RootNode():
                return await self.execution_children(node.execution_id)
            case TestResultNode():
                return await self.artifact_children(node)
            case SummaryNode() | ArtifactNode() | SentinelNode():
                return []
            case _:
                assert_never(node)

    async def execution_children(self, execution_id: str) -> Sequence[TreeNode]:
        """Return the summary and test results of an execution.

        Loading failures are reported as a single error sentinel, never raised.
        """
        try:
            detail = await self.cache.hydrate(execution_id)
        except ExecutionAPIError as e:
            log.warning("Cannot load test results for %s: %s", execution_id, e)
            return [error_node(execution_id, e)]

        return [
            summary_node(detail),
            *(result_node(execution_id, result) for result in detail.xml_results),
        ]

    async def artifact_children(self, node: TestResultNode) -> Sequence[TreeNode]:
        """Return the artifacts of a test result that currently exist on disk."""
        candidates = [
            (Path(value), label)
            for attr, label in ARTIFACT_FIELDS
            if (value := getattr(node.result, attr))
        ]
        # Files may appear after the result was recorded, so check every time
        existing = await asyncio.to_thread(
            lambda: [(p, label) for p, label in candidates if os.path.exists(p)]
        )

        nodes: list[TreeNode] = []
        for path, label in existing:
            artifact = Artifact(
                kind=await self.classifier.classify(path),
                path=path,
                label=label,
                test_id=node.result.test_id,
            )
            nodes.append(artifact_node(node.execution_id, artifact))
        return nodes


def no_executions_node() -> SentinelNode:
    """Placeholder root shown while no execution is cached."""
    return SentinelNode(
        node_id=NO_EXECUTIONS_ID,
        label="No Executions Found",
        description="Server may be offline or no executions have been run",
        reason="no-executions",
    )


def error_node(execution_id: str, error: Exception) -> SentinelNode:
    """Placeholder child shown when the test results of an execution fail to load."""
    return SentinelNode(
        node_id=f"{execution_id}:error",
        label="Error Loading Test Results",
        description="An error occurred while loading test results",
        tooltip=str(error),
        reason="error",
        parent_id=execution_id,
    )


def execution_node(brief: ExecutionBrief) -> RootNode:
    """Level 0 node for one execution."""
    return RootNode(
        node_id=brief.execution_id,
        label=f"{status_icon(brief)} {short_id(brief.execution_id)}",
        description=execution_description(brief),
        tooltip=execution_tooltip(brief),
        brief=brief,
    )


def summary_node(detail: ExecutionDetail) -> SummaryNode:
    """Level 1 node summarizing the outcome of an execution."""
    status = detail.status.upper()
    return SummaryNode(
        node_id=f"{detail.execution_id}:summary",
        label="Execution Summary",
        description=f"{status} | Tests: {detail.completed_tests}/{detail.total_tests}",
        tooltip=f"Execution Summary\nStatus: {status}\n{detail.test_summary}",
        detail=detail,
    )


def result_node(execution_id: str, result: TestResult) -> TestResultNode:
    """Level 1 node for one test result."""
    icon = PASSED_ICON if result.passed else FAILED_ICON
    return TestResultNode(
        node_id=f"{execution_id}:{result.test_id}",
        label=f"{icon} {result.test_name}",
        description=f"{result.testsuite_name} ({result.time}s)",
        tooltip=(
            f"{result.test_name}\n{result.testsuite_name}\nDuration: {result.time}s"
        ),
        execution_id=execution_id,
        result=result,
    )


def artifact_node(execution_id: str, artifact: Artifact) -> ArtifactNode:
    """Level 2 node for one artifact of a test result."""
    return ArtifactNode(
        node_id=f"{execution_id}:{artifact.test_id}:artifact:{artifact.path}",
        label=artifact.label,
        description=artifact.name,
        tooltip=f"{artifact.label}: {artifact.path}",
        execution_id=execution_id,
        artifact=artifact,
    )


def status_icon(brief: ExecutionBrief) -> str:
    """Icon for an execution, flagging completed runs with failed tests."""
    if brief.has_issues:
        return ISSUES_ICON
    return STATUS_ICONS[brief.status]


def short_id(execution_id: str) -> str:
    """Truncate long execution ids for display."""
    if len(execution_id) <= SHORT_ID_LENGTH:
        return execution_id
    return f"{execution_id[:SHORT_ID_LENGTH]}..."


def format_duration(duration: timedelta) -> str:
    """Format a duration as minutes and seconds, e.g. "1m 30s"."""
    minutes, seconds = divmod(int(duration.total_seconds()), 60)
    return f"{minutes}m {seconds}s"


def execution_description(brief: ExecutionBrief) -> str:
    """One-line status, timing and test counts of an execution."""
    parts = [f"{brief.status.upper()}", f"Started: {brief.start_time:%H:%M:%S}"]
    if brief.end_time is not None:
        ended = f"Ended: {brief.end_time:%H:%M:%S}"
        if (duration := brief.duration) is not None:
            ended += f" ({format_duration(duration)})"
        parts.append(ended)
    parts.append(f"Tests: {brief.completed_tests}/{brief.total_tests}")
    parts.append(f"Failed: {brief.failed_tests}")
    return " | ".join(parts)


def execution_tooltip(brief: ExecutionBrief) -> str:
    """Multi-line details of an execution."""
    lines = [
        f"Execution ID: {brief.execution_id}",
        f"Status: {brief.status.upper()}",
        f"Start Time: {brief.start_time:%Y-%m-%d %H:%M:%S %Z}".rstrip(),
    ]
    if brief.end_time is not None:
        lines.append(f"End Time: {brief.end_time:%Y-%m-%d %H:%M:%S %Z}".rstrip())
    lines.append(
        f"Tests: {brief.completed_tests}/{brief.total_tests}"
        f" | Failed: {brief.failed_tests}"
    )
    if brief.source:
        lines.append(f"Source: {brief.source}")
    return "\n".join(lines)
