import asyncio
import logging
from typing import List, Optional

from . import git_utils
from .config import TrackviewConfig
from .git_provider import GitProvider
from .models import UpstreamType
from .nodes import BranchTrackingStatusNode, TrackingStatusOptions, ViewNode
from .view import View

log = logging.getLogger(__name__)


class AppContext:
    def __init__(self):
        self.repo_path: str = "."
        self.config: TrackviewConfig = TrackviewConfig()
        self.git: GitProvider = GitProvider()
        self._view: Optional[View] = None

    @property
    def view(self) -> View:
        if self._view is None:
            self._view = View(self.git, self.config.view)
        return self._view

    async def create_tracking_nodes(
        self,
        branch_name: Optional[str] = None,
        show_ahead_commits: Optional[bool] = None,
    ) -> List[BranchTrackingStatusNode]:
        """Create the tracking-status nodes of a branch.

        One node per classification: a diverged branch gets a BEHIND and an
        AHEAD node, every other branch exactly one node.

        Raises:
            FetchFailed: If the branch or its tracking status cannot be read.
        """
        branch = await self.git.get_branch(self.repo_path, branch_name)
        status = await self.git.get_tracking_status(branch)
        upstream_types = git_utils.classify_upstream_types(status, branch.upstream_missing)
        log.info(
            f"{branch.name}: upstream={status.upstream} ahead={status.state.ahead} "
            f"behind={status.state.behind} -> {', '.join(upstream_types)}"
        )

        unpublished: List[str] = []
        if UpstreamType.AHEAD in upstream_types:
            unpublished = await self.git.get_unpublished_commits(status)

        options = TrackingStatusOptions(
            show_ahead_commits=show_ahead_commits,
            unpublished_commits=unpublished,
        )
        return [
            BranchTrackingStatusNode(
                self.view, None, branch, status, upstream_type, root=True, options=options
            )
            for upstream_type in upstream_types
        ]

    async def build_tree(self, node: ViewNode, depth: int = 3) -> dict:
        """Expand a node into a nested dict of labels."""
        children = []
        if depth > 0:
            children = await asyncio.gather(
                *(self.build_tree(child, depth - 1) for child in await node.get_children())
            )
        return {
            "type": node.type,
            "label": node.label,
            "description": node.description,
            "children": list(children),
        }
