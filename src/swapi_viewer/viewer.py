from __future__ import annotations

import logging

import httpx

from .cache import ExpiringCache, ExpiringCacheStore
from .config import Config
from .detail import DetailPresenter
from .errors import SwapiError
from .fetcher import EndpointListFetcher
from .list_renderer import ListRenderer
from .markup import LOAD_ERROR_ROW, escape_html
from .requests import EndpointQueryContext
from .resolver import ReferenceResolver
from .swapi_api import SwapiApi
from .view import ListRow, ViewContext

logger = logging.getLogger(__name__)


class DirectoryViewer:
    """One page view: loads a collection, renders it, and wires search and details."""

    def __init__(
        self,
        view: ViewContext,
        api: SwapiApi,
        cache: ExpiringCache,
        config: Config | None = None,
    ):
        self.config = config or Config()
        self.view = view
        self.api = api
        self.cache = cache
        self.resolver = ReferenceResolver(api, cache)
        self.presenter = DetailPresenter(view, self.resolver)
        self.renderer = ListRenderer(
            view,
            self.presenter,
            debounce_seconds=self.config.search_debounce_seconds,
        )
        self._store: ExpiringCacheStore[EndpointQueryContext] = ExpiringCacheStore(cache)
        self._last_response_source = "uninitialized"

    @property
    def last_response_source(self) -> str:
        return self._last_response_source

    async def load(
        self,
        endpoint: str,
        name_key: str = "name",
        *,
        use_cache: bool = True,
    ) -> list[dict] | None:
        logger.info("Loading %s", endpoint)
        fetcher = EndpointListFetcher(endpoint, self.api, self._store)
        try:
            items = await fetcher.fetch(use_cache=use_cache)
        except (SwapiError, httpx.HTTPError) as exc:
            logger.error("Could not load %s from the API: %s", endpoint, exc)
            self.renderer.unbind_search()
            self.view.list_element.clear()
            self.view.list_element.append(
                ListRow(
                    html=escape_html(LOAD_ERROR_ROW),
                    text=LOAD_ERROR_ROW,
                    css_class="list-group-item text-danger",
                )
            )
            self._last_response_source = "error"
            return None

        self._last_response_source = fetcher.last_response_source
        logger.info(
            "Loaded %d %s items from %s", len(items), endpoint, self._last_response_source
        )
        self.renderer.name_key = name_key
        self.renderer.render(items)
        self.renderer.bind_search(items)
        return items
