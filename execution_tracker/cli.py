"""CLI entry point rendering the execution tree in a terminal."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence

from execution_tracker.api.client import ExecutionAPIClient
from execution_tracker.api.config import ExecutionAPIConfig
from execution_tracker.classifier import ArtifactClassifier
from execution_tracker.models.tree import TreeNode
from execution_tracker.projector import TreeProjector
from execution_tracker.scheduler import PollingScheduler
from execution_tracker.tracker import ExecutionTracker

INDENT = "  "


def build_config(
    config_json: str | None,
    api_base_url: str | None = None,
    poll_interval: float | None = None,
) -> ExecutionAPIConfig:
    """Merge a JSON config document with command-line overrides."""
    data = json.loads(config_json) if config_json else {}
    if api_base_url is not None:
        data["api_base_url"] = api_base_url
    if poll_interval is not None:
        data["poll_interval"] = poll_interval
    return ExecutionAPIConfig(**data)


def format_node(node: TreeNode, level: int) -> str:
    """Format a node as one indented line."""
    line = f"{INDENT * level}{node.label}"
    if node.description:
        line += f"  {node.description}"
    return line


async def render_tree(projector: TreeProjector, depth: int) -> str:
    """Render the projected tree down to depth levels below the roots."""
    lines: list[str] = []

    async def walk(nodes: Sequence[TreeNode], level: int) -> None:
        for node in nodes:
            lines.append(format_node(node, level))
            if level < depth:
                await walk(await projector.children(node), level + 1)

    await walk(projector.roots(), 0)
    return "\n".join(lines)


async def run(config: ExecutionAPIConfig, depth: int = 0, watch: bool = False) -> int:
    """Render executions once, or keep re-rendering them on every change."""
    log = logging.getLogger("execution_tracker")
    log.info("Tracking executions at %s", config.api_base_url)

    async with ExecutionAPIClient.from_config(config) as client:
        tracker = ExecutionTracker.create(client)
        projector = TreeProjector(cache=tracker.cache, classifier=ArtifactClassifier())

        if not watch:
            await tracker.refresh()
            print(await render_tree(projector, depth))
            return 1 if tracker.last_error is not None else 0

        changed = asyncio.Event()
        tracker.notifier.subscribe(changed.set)

        async with PollingScheduler(
            refresh=tracker.refresh, interval=config.poll_interval
        ):
            changed.clear()
            print(await render_tree(projector, depth), flush=True)
            while True:
                await changed.wait()
                changed.clear()
                print(await render_tree(projector, depth), flush=True)


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Show test executions reported by the automation backend"
    )
    parser.add_argument(
        "--config",
        help="JSON configuration for the backend connection",
    )
    parser.add_argument(
        "--api-base-url",
        help="Base URL of the execution backend API",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        help="Seconds between polls in watch mode",
    )
    parser.add_argument(
        "--depth",
        type=int,
        choices=(0, 1, 2),
        default=0,
        help="Levels to expand below executions (1: test results, 2: artifacts)",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep polling and re-render whenever executions change",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    config = build_config(args.config, args.api_base_url, args.poll_interval)

    try:
        exit_code = asyncio.run(run(config, depth=args.depth, watch=args.watch))
    except KeyboardInterrupt:
        exit_code = 0
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
