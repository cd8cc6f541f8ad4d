"""Post-processing steps used when materializing tracking-status children.

These are plain functions over already-fetched data plus explicit
capabilities (callables), so they can be tested without a repository.
"""

import logging
from datetime import date
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Set

from ..errors import FetchFailed, Unresolvable
from ..models import FilesComparison, GitCommit, GitLog
from .base import ViewNode
from .commit import CommitNode
from .common import DateMarkerNode

log = logging.getLogger(__name__)

GetAnchoredLog = Callable[[str], Awaitable[Optional[GitLog]]]
ResolveReference = Callable[[str], Awaitable[Optional[str]]]

PUSH_COMPARISON_TITLE = "Changes to push from {ref}"


def insert_date_markers(nodes: Iterable[CommitNode], parent: ViewNode) -> List[ViewNode]:
    """Insert a DateMarkerNode before the first commit of each calendar day.

    The order of the commit nodes is kept as is. A day that shows up again
    further down the log (rebased or cherry-picked commits) gets no second
    marker.
    """
    result: List[ViewNode] = []
    seen: Set[date] = set()
    for node in nodes:
        day = node.commit.date.date()
        if day not in seen:
            result.append(DateMarkerNode(node.view, parent, day))
            seen.add(day)
        result.append(node)
    return result


async def resolve_oldest_commit(
    commits: Sequence[GitCommit], get_anchored_log: GetAnchoredLog
) -> List[GitCommit]:
    """Make sure the oldest commit of an ahead page knows its predecessor.

    An `upstream..ref` range stops right before the upstream side, so the
    last (oldest) commit of the page may not carry a resolvable parent.
    When it doesn't, a 2-entry log anchored at that commit is read and its
    first commit replaces the oldest one. Any fetch failure leaves the
    sequence unchanged.

    Args:
        commits: Commits in log order (newest first).
        get_anchored_log: Loads a 2-entry log starting at a SHA.

    Returns:
        A new list; the input sequence is never modified.
    """
    result = list(commits)
    if not result:
        return result

    oldest = result[-1]
    try:
        previous_sha = await oldest.get_previous_sha()
        if previous_sha is not None:
            return result
        anchored = await get_anchored_log(oldest.sha)
    except FetchFailed as e:
        log.warning(f"Could not look up the commit before {oldest.short_sha}: {e}")
        return result

    if anchored is not None and anchored.commits:
        result[-1] = anchored.commits[0]
    return result


def oldest_unpublished_commit(unpublished_commits: Optional[Sequence[str]]) -> Optional[str]:
    """Return the oldest unpublished commit.

    `unpublished_commits` is in publish order, oldest first (the order of
    `git rev-list --reverse upstream..ref`).
    """
    if not unpublished_commits:
        return None
    return unpublished_commits[0]


async def assemble_push_comparison(
    comparison: Optional[FilesComparison],
    unpublished_commits: Optional[Sequence[str]],
    resolve_reference: ResolveReference,
) -> Optional[FilesComparison]:
    """Reframe the files-summary of an ahead delta as "changes to push".

    The result keeps the delegate's files, starts one commit before the
    oldest unpublished commit (`ref1`) and ends at the delegate's tip
    (`ref2`). Returns None when the delegate has no comparison, there are
    no unpublished commits, or the parent cannot be resolved.
    """
    if comparison is None:
        return None

    oldest = oldest_unpublished_commit(unpublished_commits)
    if oldest is None:
        return None

    try:
        resolved = await resolve_reference(f"{oldest}^")
    except Unresolvable:
        resolved = None
    if resolved is None:
        log.debug(f"No parent for oldest unpublished commit {oldest}")
        return None

    return comparison.with_refs(
        ref1=resolved,
        ref2=comparison.ref1,
        title=PUSH_COMPARISON_TITLE.format(ref=comparison.ref1),
    )
