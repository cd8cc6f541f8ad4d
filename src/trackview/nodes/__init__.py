"""Tree nodes of the tracking-status view.

Example usage:
    from trackview.nodes import BranchTrackingStatusNode, TrackingStatusOptions

    node = BranchTrackingStatusNode(
        view, None, branch, status, UpstreamType.AHEAD,
        options=TrackingStatusOptions(unpublished_commits=shas),
    )
    children = await node.get_children()
    await node.load_more()
"""

from .base import ViewNode, get_view_node_id
from .commit import CommitNode
from .common import DateMarkerNode, LoadMoreNode
from .files import BranchTrackingStatusFilesNode, FileNode
from .helpers import (
    assemble_push_comparison,
    insert_date_markers,
    oldest_unpublished_commit,
    resolve_oldest_commit,
)
from .tracking_status import BranchTrackingStatusNode, TrackingStatusOptions

__all__ = [
    # Base
    "ViewNode",
    "get_view_node_id",
    # Nodes
    "BranchTrackingStatusNode",
    "BranchTrackingStatusFilesNode",
    "CommitNode",
    "DateMarkerNode",
    "FileNode",
    "LoadMoreNode",
    "TrackingStatusOptions",
    # Materialization helpers
    "assemble_push_comparison",
    "insert_date_markers",
    "oldest_unpublished_commit",
    "resolve_oldest_commit",
]
