"""Files-summary of a tracking delta.

BranchTrackingStatusFilesNode lists every file changed across the commits
of an ahead or behind delta, as one three-dot diff between the base and
the tip of the delta.
"""

import logging
from typing import TYPE_CHECKING, List, Optional

from ..git_utils import pluralize
from ..models import (
    BranchTrackingStatus,
    FilesComparison,
    GitBranch,
    GitFileChange,
    UpstreamType,
)
from .base import ViewNode, get_view_node_id

if TYPE_CHECKING:
    from ..view import View

log = logging.getLogger(__name__)


class FileNode(ViewNode):
    type = "file"

    def __init__(
        self,
        view: "View",
        parent: ViewNode,
        file: GitFileChange,
        ref1: str,
        ref2: str,
    ):
        super().__init__(view, parent)
        self.file = file
        self.ref1 = ref1
        self.ref2 = ref2
        self._unique_id = get_view_node_id(
            self.type, parent=parent.id, path=file.path
        )

    @property
    def label(self) -> str:
        return self.file.path

    @property
    def description(self) -> str:
        if self.file.original_path:
            return f"{self.file.status_label} from {self.file.original_path}"
        return self.file.status_label


class BranchTrackingStatusFilesNode(ViewNode):
    """Changed files of an ahead/behind delta.

    `ref1` is the tip of the delta (the local branch when ahead, the
    upstream when behind) and `ref2` its base.
    """

    type = "tracking-status-files"

    def __init__(
        self,
        view: "View",
        parent: ViewNode,
        branch: GitBranch,
        status: BranchTrackingStatus,
        direction: UpstreamType,
    ):
        super().__init__(view, parent)
        if direction not in (UpstreamType.AHEAD, UpstreamType.BEHIND):
            raise ValueError(f"Files summary requires an ahead or behind delta, got '{direction}'")
        if not status.upstream:
            raise ValueError(f"Branch '{branch.name}' has no upstream")

        self.branch = branch
        self.status = status
        self.direction = direction
        if direction == UpstreamType.AHEAD:
            self.ref1, self.ref2 = status.ref, status.upstream
        else:
            self.ref1, self.ref2 = status.upstream, status.ref

        self._files: Optional[List[GitFileChange]] = None
        self._unique_id = get_view_node_id(
            self.type,
            repo=status.repo_path,
            branch=branch.name,
            direction=direction.value,
        )

    @property
    def repo_path(self) -> str:
        return self.status.repo_path

    async def get_files(self) -> List[GitFileChange]:
        if self._files is None:
            self._files = await self.view.git.get_diff_status(
                self.repo_path, self.ref2, self.ref1
            )
            log.debug(f"{len(self._files)} files changed in {self.ref2}...{self.ref1}")
        return self._files

    async def get_children(self) -> List[ViewNode]:
        files = await self.get_files()
        return [FileNode(self.view, self, f, self.ref1, self.ref2) for f in files]

    async def get_files_comparison(self) -> Optional[FilesComparison]:
        files = await self.get_files()
        return FilesComparison(
            repo_path=self.repo_path,
            files=tuple(files),
            ref1=self.ref1,
            ref2=self.ref2,
        )

    async def refresh(self, reset: bool = False) -> None:
        if reset:
            self._files = None

    @property
    def label(self) -> str:
        if self._files is None:
            return "Files changed"
        return f"{pluralize('file', len(self._files))} changed"
