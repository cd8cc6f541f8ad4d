import logging
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .config import ViewConfig
from .git_provider import GitProvider

if TYPE_CHECKING:
    from .nodes.base import ViewNode

log = logging.getLogger(__name__)

NodeListener = Callable[["ViewNode"], None]


class View:
    """Host of a tree of view nodes.

    Owns the git collaborator and the view configuration, remembers the
    page size each pageable node last reached (so a re-created node resumes
    where it stopped), and dispatches node change notifications.
    """

    def __init__(self, git: GitProvider, config: Optional[ViewConfig] = None):
        self.git = git
        self.config = config or ViewConfig()
        self._node_limits: Dict[str, int] = {}
        self._listeners: List[NodeListener] = []

    def get_node_last_known_limit(self, node: "ViewNode") -> Optional[int]:
        return self._node_limits.get(node.id)

    def update_node_last_known_limit(self, node: "ViewNode", limit: Optional[int]) -> None:
        if limit is None:
            self._node_limits.pop(node.id, None)
        else:
            self._node_limits[node.id] = limit

    def on_did_change_node(self, listener: NodeListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._listeners.append(listener)

        def dispose():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return dispose

    def trigger_node_change(self, node: "ViewNode") -> None:
        log.debug(f"Node changed: {node.id}")
        for listener in list(self._listeners):
            listener(node)
