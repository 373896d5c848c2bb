from __future__ import annotations

import logging
from typing import Any, Mapping

from .markup import detail_line_html, illustration_for, is_reference_url
from .resolver import ReferenceResolver
from .view import ViewContext

logger = logging.getLogger(__name__)

DETAILS_FALLBACK = "Details"
EMPTY_LIST_TEXT = "None"


class DetailPresenter:
    """Builds the detail modal for one item, resolving reference fields to names.

    Fields are handled in insertion order; the URLs inside one list field are
    resolved concurrently. Each call to ``present`` takes a new generation, and
    a call that has been overtaken by a newer one is dropped before it touches
    the modal.
    """

    def __init__(self, view: ViewContext, resolver: ReferenceResolver):
        self._view = view
        self._resolver = resolver
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def _field_text(self, value: Any) -> str:
        if isinstance(value, (list, tuple)):
            if not value:
                return EMPTY_LIST_TEXT
            names = await self._resolver.resolve_many(value)
            return ", ".join(names)
        if is_reference_url(value):
            return await self._resolver.resolve_name(value)
        return str(value)

    async def present(self, item: Mapping[str, Any], name_key: str) -> bool:
        self._generation += 1
        token = self._generation
        title = str(item.get(name_key) or item.get("title") or DETAILS_FALLBACK)

        fields: list[tuple[str, str]] = []
        for label, value in item.items():
            text = await self._field_text(value)
            if token != self._generation:
                logger.debug("Dropping superseded detail render for %s", title)
                return False
            fields.append((str(label), text))

        lines = "".join(detail_line_html(label, text) for label, text in fields)
        modal = self._view.modal
        modal.title = title
        modal.body = (
            illustration_for(item, title)
            + f'<div class="container-fluid">{lines}</div>'
        )
        modal.fields = fields
        modal.show()
        logger.debug("Showing details for %s", title)
        return True
