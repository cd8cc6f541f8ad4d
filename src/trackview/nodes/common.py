from datetime import date
from typing import TYPE_CHECKING, Optional

from .base import ViewNode, get_view_node_id

if TYPE_CHECKING:
    from ..view import View


class DateMarkerNode(ViewNode):
    """Separator inserted before the first commit of a calendar day."""

    type = "date-marker"

    def __init__(self, view: "View", parent: ViewNode, day: date):
        super().__init__(view, parent)
        self.day = day
        self._unique_id = get_view_node_id(
            self.type, parent=parent.id, day=day.isoformat()
        )

    @property
    def label(self) -> str:
        return f"{self.day:%A, %B} {self.day.day}, {self.day.year}"


class LoadMoreNode(ViewNode):
    """Continuation entry of a paginated child list.

    `previous` is the entry shown right before it; loading more continues
    after that entry.
    """

    type = "load-more"

    def __init__(
        self,
        view: "View",
        parent: ViewNode,
        previous: Optional[ViewNode],
        page_size: Optional[int] = None,
    ):
        super().__init__(view, parent)
        self.previous = previous
        self.page_size = page_size
        self._unique_id = get_view_node_id(
            self.type, parent=parent.id, previous=previous.id if previous else None
        )

    @property
    def label(self) -> str:
        page_size = self.page_size or self.view.config.page_item_limit
        if page_size:
            return f"Load {page_size} more"
        return "Load more"

    async def load_more(self) -> None:
        await self.parent.load_more(self.page_size)
