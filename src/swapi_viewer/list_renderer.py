from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from .detail import DetailPresenter
from .markup import NO_ITEMS_ROW, escape_html, filter_items, list_row_html, list_text
from .view import Debouncer, ListRow, ViewContext

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_DEBOUNCE = 0.2


class ListRenderer:
    def __init__(
        self,
        view: ViewContext,
        presenter: DetailPresenter,
        name_key: str = "name",
        *,
        debounce_seconds: float = DEFAULT_SEARCH_DEBOUNCE,
    ):
        self._view = view
        self._presenter = presenter
        self.name_key = name_key
        self.debounce_seconds = debounce_seconds
        self._items: list[Mapping[str, Any]] = []
        self._search_handler: Debouncer | None = None

    @property
    def items(self) -> list[Mapping[str, Any]]:
        return self._items

    def _row_for(self, item: Mapping[str, Any]) -> ListRow:
        name_key = self.name_key

        async def open_details() -> bool:
            return await self._presenter.present(item, name_key)

        return ListRow(
            html=list_row_html(item, name_key),
            text=list_text(item, name_key),
            css_class="list-group-item list-group-item-action",
            item=item,
            on_click=open_details,
        )

    def render(self, items: Sequence[Mapping[str, Any]]) -> None:
        list_element = self._view.list_element
        list_element.clear()
        if not items:
            list_element.append(ListRow(html=escape_html(NO_ITEMS_ROW), text=NO_ITEMS_ROW))
            logger.debug("List rendered with 0 items")
            return
        for item in items:
            list_element.append(self._row_for(item))
        logger.debug("List rendered with %d items", len(items))

    def apply_search(self, query: str) -> None:
        self.render(filter_items(self._items, query, self.name_key))

    def bind_search(self, items: Sequence[Mapping[str, Any]]) -> None:
        """Track ``items`` and (re)attach the single debounced search listener."""
        self._items = list(items)
        search = self._view.search
        if search is None:
            logger.warning("No search input on this view; search disabled")
            return
        self.unbind_search()
        self._search_handler = Debouncer(self.apply_search, self.debounce_seconds)
        search.add_listener(self._search_handler)

    def unbind_search(self) -> None:
        """Detach the search listener and drop any pending debounced call."""
        if self._search_handler is None:
            return
        self._search_handler.cancel()
        if self._view.search is not None:
            self._view.search.remove_listener(self._search_handler)
        self._search_handler = None
