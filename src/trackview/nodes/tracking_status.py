"""Tracking-status node: a branch compared with its upstream.

A BranchTrackingStatusNode is created for one of the five classifications
of a branch (see UpstreamType). For AHEAD and BEHIND it pages through the
commits of the delta and shows them under a files-summary entry; the
other classifications have no children.

Example usage:
    view = View(GitProvider(), config.view)
    branch = await view.git.get_branch(repo_path, "main")
    status = await view.git.get_tracking_status(branch)
    for upstream_type in classify_upstream_types(status, branch.upstream_missing):
        node = BranchTrackingStatusNode(view, None, branch, status, upstream_type)
        children = await node.get_children()
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, assert_never

from ..cache import PaginatedLogCache
from ..git_utils import delta_range, get_remote_name_from_branch_name, pluralize
from ..models import (
    BranchTrackingStatus,
    FilesComparison,
    GitBranch,
    GitLog,
    UpstreamType,
)
from .base import ViewNode, get_view_node_id
from .commit import CommitNode
from .common import LoadMoreNode
from .files import BranchTrackingStatusFilesNode
from .helpers import assemble_push_comparison, insert_date_markers, resolve_oldest_commit

if TYPE_CHECKING:
    from ..view import View

log = logging.getLogger(__name__)


@dataclass
class TrackingStatusOptions:
    """Per-node options.

    Attributes:
        show_ahead_commits: Show the commits of an ahead delta. When False
            the changed files are listed directly under the node. None
            uses the view configuration.
        unpublished_commits: SHAs not yet pushed, oldest first.
    """

    show_ahead_commits: Optional[bool] = None
    unpublished_commits: Optional[Sequence[str]] = None


class BranchTrackingStatusNode(ViewNode):
    type = "tracking-status"

    def __init__(
        self,
        view: "View",
        parent: Optional[ViewNode],
        branch: GitBranch,
        status: BranchTrackingStatus,
        upstream_type: UpstreamType,
        root: bool = False,
        options: Optional[TrackingStatusOptions] = None,
    ):
        super().__init__(view, parent)
        self.branch = branch
        self.status = status
        self.upstream_type = UpstreamType(upstream_type)
        self.root = root
        self.options = options or TrackingStatusOptions()

        self._unique_id = get_view_node_id(
            self.type,
            repo=status.repo_path,
            branch=branch.name,
            status=self.upstream_type.value,
            root=root,
        )

        self._range = delta_range(self.upstream_type, status)
        self._cache = PaginatedLogCache(
            self._fetch_page if self._range is not None else None,
            default_limit=lambda: self.view.config.default_item_limit,
            page_limit=lambda: self.view.config.page_item_limit,
            limit=self.view.get_node_last_known_limit(self),
            on_loaded=self._on_log_loaded,
        )

    @property
    def repo_path(self) -> str:
        return self.status.repo_path

    @property
    def limit(self) -> Optional[int]:
        return self._cache.limit

    @limit.setter
    def limit(self, value: Optional[int]) -> None:
        self._cache.limit = value

    @property
    def has_more(self) -> bool:
        return self._cache.has_more

    @property
    def show_ahead_commits(self) -> bool:
        if self.options.show_ahead_commits is not None:
            return self.options.show_ahead_commits
        return self.view.config.show_ahead_commits

    # ------------------------------------------------------------------
    # Log
    # ------------------------------------------------------------------

    async def _fetch_page(self, limit: Optional[int]) -> Optional[GitLog]:
        return await self.view.git.get_log(self.repo_path, limit=limit, ref=self._range)

    async def _get_anchored_log(self, sha: str) -> Optional[GitLog]:
        return await self.view.git.get_log(self.repo_path, limit=2, ref=sha)

    async def get_log(self) -> Optional[GitLog]:
        return await self._cache.get()

    async def load_more(self, limit: Optional[int] = None) -> None:
        await self._cache.load_more(limit)

    def _on_log_loaded(self, new_log: GitLog) -> None:
        self.view.update_node_last_known_limit(self, new_log.count)
        self.trigger_change()

    async def refresh(self, reset: bool = False) -> None:
        log.debug(f"refresh {self.id} reset={reset}")
        if reset:
            await self._cache.reset()

    # ------------------------------------------------------------------
    # Children
    # ------------------------------------------------------------------

    def _create_files_node(self) -> BranchTrackingStatusFilesNode:
        return BranchTrackingStatusFilesNode(
            self.view, self, self.branch, self.status, self.upstream_type
        )

    def _is_ahead_suppressed(self) -> bool:
        return (
            not self.show_ahead_commits
            and self.upstream_type == UpstreamType.AHEAD
            and bool(self.status.upstream)
            and self.status.state.ahead > 0
        )

    async def get_children(self) -> List[ViewNode]:
        upstream_type = self.upstream_type
        if (
            upstream_type == UpstreamType.SAME
            or upstream_type == UpstreamType.MISSING
            or upstream_type == UpstreamType.NONE
        ):
            return []
        elif upstream_type == UpstreamType.AHEAD or upstream_type == UpstreamType.BEHIND:
            commit_log = await self.get_log()
            if commit_log is None:
                return []

            # The files node is flattened into this one; the log stays cached
            # for load_more and comparisons but is not shown here
            if self._is_ahead_suppressed():
                return await self._create_files_node().get_children()
            return await self._materialize(commit_log)
        else:
            assert_never(upstream_type)

    async def _materialize(self, commit_log: GitLog) -> List[ViewNode]:
        ahead = self.upstream_type == UpstreamType.AHEAD

        commits = list(commit_log.commits)
        if ahead:
            commits = await resolve_oldest_commit(commits, self._get_anchored_log)

        commit_nodes = [
            CommitNode(self.view, self, c, unpublished=ahead, branch=self.branch)
            for c in commits
        ]

        children: List[ViewNode] = []
        if self.view.config.show_date_markers:
            children.extend(insert_date_markers(commit_nodes, self))
        else:
            children.extend(commit_nodes)

        if commit_log.has_more and children:
            children.append(LoadMoreNode(self.view, self, children[-1]))

        children.insert(0, self._create_files_node())
        return children

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    async def get_files_comparison(self) -> Optional[FilesComparison]:
        """Return the file comparison for the whole delta.

        For AHEAD the files-summary comparison is reframed as the changes
        to push, starting at the parent of the oldest unpublished commit.
        Every other classification returns the files-summary child's own
        comparison, or None when there is no such child.
        """
        if self.upstream_type == UpstreamType.AHEAD:
            comparison = await self._create_files_node().get_files_comparison()
            return await assemble_push_comparison(
                comparison,
                self.options.unpublished_commits,
                lambda expr: self.view.git.resolve_reference(self.repo_path, expr),
            )

        children = await self.get_children()
        node = next(
            (c for c in children if c.is_type(BranchTrackingStatusFilesNode.type)), None
        )
        if node is None:
            return None
        return await node.get_files_comparison()

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    @property
    def remote_name(self) -> Optional[str]:
        if not self.status.upstream:
            return None
        return get_remote_name_from_branch_name(self.status.upstream)

    @property
    def label(self) -> str:
        upstream_type = self.upstream_type
        if upstream_type == UpstreamType.AHEAD:
            return f"Changes to push to {self.remote_name}"
        elif upstream_type == UpstreamType.BEHIND:
            return f"Changes to pull from {self.remote_name}"
        elif upstream_type == UpstreamType.SAME:
            return f"Up to date with {self.remote_name}"
        elif upstream_type == UpstreamType.MISSING:
            return "Missing upstream branch"
        elif upstream_type == UpstreamType.NONE:
            return f"Publish {self.branch.name} to a remote"
        else:
            assert_never(upstream_type)

    @property
    def description(self) -> Optional[str]:
        if self.upstream_type == UpstreamType.AHEAD:
            return pluralize("commit", self.status.state.ahead)
        if self.upstream_type == UpstreamType.BEHIND:
            return pluralize("commit", self.status.state.behind)
        if self.upstream_type == UpstreamType.MISSING:
            return self.status.upstream
        return None
