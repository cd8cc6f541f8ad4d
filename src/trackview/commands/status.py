"""Tracking-status commands.

- status: show the tracking-status nodes of a branch and their children
- files: show the files comparison of the branch's delta
"""

import asyncio
import logging
from typing import List, Optional

import click

from ..app import AppContext
from ..errors import TrackviewError
from ..models import UpstreamType
from ..nodes import BranchTrackingStatusNode
from ..utils.formatters import format_comparison, format_tree
from ..utils.output import format_option, print_or_page

log = logging.getLogger(__name__)


async def _load_pages(nodes: List[BranchTrackingStatusNode], pages: int, page_size: Optional[int]):
    for node in nodes:
        for _ in range(pages):
            if not node.has_more:
                break
            await node.load_more(page_size)


async def _build_status(
    app: AppContext,
    branch: Optional[str],
    limit: Optional[int],
    pages: int,
    page_size: Optional[int],
    show_ahead_commits: Optional[bool],
):
    nodes = await app.create_tracking_nodes(branch, show_ahead_commits)
    if limit is not None:
        for node in nodes:
            node.limit = limit
    await _load_pages(nodes, pages, page_size)
    trees = [await app.build_tree(node) for node in nodes]
    return nodes[0].branch.name, trees


@click.command()
@click.pass_obj
@click.argument("branch", type=str, required=False, default=None)
@click.option(
    "--limit", "-n",
    type=click.IntRange(min=0),
    default=None,
    help="Number of commits in the first page (default: view.default_item_limit).",
)
@click.option(
    "--pages", "-p",
    type=click.IntRange(min=0),
    default=0,
    help="Number of additional pages to load.",
)
@click.option(
    "--page-size",
    type=click.IntRange(min=1),
    default=None,
    help="Commits per additional page (default: view.page_item_limit).",
)
@click.option(
    "--show-ahead-commits/--hide-ahead-commits",
    "show_ahead_commits",
    default=None,
    help="List commits to push, or only the files they change.",
)
@format_option()
def status(
    app: AppContext,
    branch: Optional[str],
    limit: Optional[int],
    pages: int,
    page_size: Optional[int],
    show_ahead_commits: Optional[bool],
    format: str,
):
    """Show how BRANCH (default: current branch) relates to its upstream."""
    log.info(f"getting tracking status for: {branch or '(current branch)'}")

    try:
        branch_name, trees = asyncio.run(
            _build_status(app, branch, limit, pages, page_size, show_ahead_commits)
        )
    except TrackviewError as e:
        raise click.ClickException(str(e))

    print_or_page(format_tree(branch_name, trees, format), format=format)


async def _build_comparison(app: AppContext, branch: Optional[str]):
    nodes = await app.create_tracking_nodes(branch)
    # A diverged branch has both nodes; the changes to push come first
    nodes.sort(key=lambda n: n.upstream_type != UpstreamType.AHEAD)
    for node in nodes:
        comparison = await node.get_files_comparison()
        if comparison is not None:
            return comparison
    return None


@click.command()
@click.pass_obj
@click.argument("branch", type=str, required=False, default=None)
@format_option()
def files(app: AppContext, branch: Optional[str], format: str):
    """Show the files changed between BRANCH and its upstream."""
    try:
        comparison = asyncio.run(_build_comparison(app, branch))
    except TrackviewError as e:
        raise click.ClickException(str(e))

    if comparison is None:
        click.echo("No changes to compare.")
        return

    print_or_page(format_comparison(comparison, format), format=format)
