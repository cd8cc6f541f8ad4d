"""Data models for branch tracking status.

This module holds the immutable records exchanged between the git
collaborator (GitProvider), the log cache and the tree nodes:

1. TrackingState / BranchTrackingStatus: ahead/behind counts of a branch
   relative to its upstream.
2. UpstreamType: the five-way classification of that relationship.
3. GitCommit / GitLog: a page of commits plus its continuation.
4. GitFileChange / FilesComparison: the aggregate file list for a delta.

Example usage:
    status = BranchTrackingStatus(
        ref="main",
        repo_path="/work/repo",
        state=TrackingState(ahead=2, behind=0),
        upstream="origin/main",
    )
    upstream_type = git_utils.classify_upstream_types(status)[0]  # AHEAD
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum
from typing import Awaitable, Callable, List, Optional, Tuple


class UpstreamType(StrEnum):
    """Relationship between a local branch and its upstream.

    AHEAD: local has commits not on the upstream (to push).
    BEHIND: upstream has commits not on the local branch (to pull).
    SAME: both sides point at the same history.
    MISSING: an upstream is configured but no longer exists.
    NONE: the branch has no upstream.
    """

    AHEAD = "ahead"
    BEHIND = "behind"
    SAME = "same"
    MISSING = "missing"
    NONE = "none"


@dataclass(frozen=True)
class TrackingState:
    ahead: int = 0
    behind: int = 0


@dataclass(frozen=True)
class BranchTrackingStatus:
    """Tracking status of a branch.

    Attributes:
        ref: The local branch ref (name or SHA).
        repo_path: Path of the repository working tree.
        state: Ahead/behind commit counts.
        upstream: Upstream branch name (e.g. "origin/main"), None when the
            branch has no upstream.
    """

    ref: str
    repo_path: str
    state: TrackingState = field(default_factory=TrackingState)
    upstream: Optional[str] = None


@dataclass(frozen=True)
class GitBranch:
    """A local (or remote) branch as seen by the tracking node."""

    name: str
    repo_path: str
    sha: Optional[str] = None
    upstream: Optional[str] = None
    upstream_missing: bool = False
    remote: bool = False


PreviousShaResolver = Callable[["GitCommit"], Awaitable[Optional[str]]]


@dataclass
class GitCommit:
    """A commit loaded from a log.

    `parents` is None when the log that produced the commit did not record
    parent information. In that case `get_previous_sha` falls back to the
    bound resolver, if any. `date` is the committer date, which follows
    log order more closely than the author date on rebased branches.
    """

    sha: str
    repo_path: str
    summary: str
    message: str
    author_name: str
    author_email: str
    date: datetime
    parents: Optional[Tuple[str, ...]] = None
    _resolve_previous: Optional[PreviousShaResolver] = field(
        default=None, repr=False, compare=False
    )

    @property
    def short_sha(self) -> str:
        return self.sha[:11]

    async def get_previous_sha(self) -> Optional[str]:
        if self.parents is not None:
            return self.parents[0] if self.parents else None
        if self._resolve_previous is None:
            return None
        return await self._resolve_previous(self)


MoreCallback = Callable[[Optional[int]], Awaitable[Optional["GitLog"]]]


@dataclass
class GitLog:
    """One (possibly partial) page of a commit log.

    Attributes:
        repo_path: Repository the log was read from.
        range: The revision range expression used for the log.
        commits: Commits in log order (newest first).
        limit: The limit that produced this page (None for unbounded).
        has_more: Whether the range holds more commits than were loaded.
        more: Continuation. Called with a page size, returns a new GitLog
            holding these commits plus the next page. Returns this same
            object when nothing more could be loaded.
    """

    repo_path: str
    range: str
    commits: List[GitCommit] = field(default_factory=list)
    limit: Optional[int] = None
    has_more: bool = False
    more: Optional[MoreCallback] = field(default=None, repr=False, compare=False)

    @property
    def count(self) -> int:
        return len(self.commits)


@dataclass(frozen=True)
class GitFileChange:
    path: str
    status: str
    original_path: Optional[str] = None

    @property
    def status_label(self) -> str:
        return FILE_STATUS_LABELS.get(self.status[:1], "changed")


FILE_STATUS_LABELS = {
    "A": "added",
    "M": "modified",
    "D": "deleted",
    "R": "renamed",
    "C": "copied",
    "T": "type changed",
    "U": "unmerged",
}


@dataclass(frozen=True)
class FilesComparison:
    """Aggregate file changes between two refs.

    For the files-summary of a tracking node `ref1` is the tip side of the
    delta and `ref2` its base side.
    """

    repo_path: str
    files: Tuple[GitFileChange, ...]
    ref1: Optional[str]
    ref2: Optional[str]
    title: Optional[str] = None

    def with_refs(
        self, ref1: Optional[str], ref2: Optional[str], title: Optional[str] = None
    ) -> "FilesComparison":
        return replace(self, ref1=ref1, ref2=ref2, title=title)

    def to_dict(self) -> dict:
        return {
            "repo_path": self.repo_path,
            "ref1": self.ref1,
            "ref2": self.ref2,
            "title": self.title,
            "files": [
                {
                    "path": f.path,
                    "status": f.status_label,
                    "original_path": f.original_path,
                }
                for f in self.files
            ],
        }
