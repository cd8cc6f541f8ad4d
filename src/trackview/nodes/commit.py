from typing import TYPE_CHECKING, Optional

from ..models import GitBranch, GitCommit
from .base import ViewNode, get_view_node_id

if TYPE_CHECKING:
    from ..view import View


class CommitNode(ViewNode):
    """A commit of a tracking delta.

    `unpublished` marks commits that exist locally but not on the upstream.
    """

    type = "commit"

    def __init__(
        self,
        view: "View",
        parent: ViewNode,
        commit: GitCommit,
        unpublished: bool = False,
        branch: Optional[GitBranch] = None,
    ):
        super().__init__(view, parent)
        self.commit = commit
        self.unpublished = unpublished
        self.branch = branch
        self._unique_id = get_view_node_id(
            self.type,
            repo=commit.repo_path,
            branch=branch.name if branch else None,
            sha=commit.sha,
        )

    @property
    def label(self) -> str:
        return self.commit.summary

    @property
    def description(self) -> str:
        marker = " (unpushed)" if self.unpublished else ""
        return f"{self.commit.short_sha} {self.commit.author_name}{marker}"
