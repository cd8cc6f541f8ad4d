"""Base class for tree nodes."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from ..view import View


def get_view_node_id(type: str, **context) -> str:
    """Build a stable node id from its type and identifying context.

    Context values are joined in keyword order, skipping None values:
        get_view_node_id("commit", repo="/r", sha="abc")
        -> "trackview://viewnode/commit/repo=/r;sha=abc"
    """
    parts = [f"{key}={value}" for key, value in context.items() if value is not None]
    return f"trackview://viewnode/{type}/{';'.join(parts)}"


class ViewNode(ABC):
    """A node of the explorer tree.

    Subclasses set `type` and implement `label`. Leaf nodes keep the
    default `get_children`.
    """

    type: str = "node"

    def __init__(self, view: "View", parent: Optional["ViewNode"] = None):
        self.view = view
        self.parent = parent
        self._unique_id: Optional[str] = None

    @property
    def id(self) -> str:
        if self._unique_id is None:
            return get_view_node_id(self.type, obj=hex(id(self)))
        return self._unique_id

    def is_type(self, *types: str) -> bool:
        return self.type in types

    @property
    @abstractmethod
    def label(self) -> str:
        pass

    @property
    def description(self) -> Optional[str]:
        return None

    async def get_children(self) -> List["ViewNode"]:
        return []

    async def refresh(self, reset: bool = False) -> None:
        pass

    def trigger_change(self) -> None:
        self.view.trigger_node_change(self)
