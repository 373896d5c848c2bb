from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from .cache import ExpiringCache
from .cli_options import BrowseOptions
from .config import Config
from .db import DuckDb, DuckDbKeyValueStore
from .requests import KNOWN_ENDPOINTS
from .swapi_api import SwapiApi
from .view import ViewContext
from .viewer import DirectoryViewer


@click.command()
@click.argument("endpoint", type=click.Choice(KNOWN_ENDPOINTS, case_sensitive=False))
@click.option(
    "--name-key",
    type=str,
    default=None,
    help="Field used as the row label (defaults to 'title' for films, 'name' otherwise).",
)
@click.option(
    "--search",
    type=str,
    default="",
    help="Case-insensitive substring filter applied to the row labels.",
)
@click.option(
    "--show",
    type=int,
    default=None,
    help="Open the details of the N-th listed row (1-based) and print its fields.",
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=str),
    default=None,
    help="Write the rendered page as a standalone HTML file.",
)
@click.option(
    "--cache/--no-cache",
    "use_cache",
    default=True,
    show_default=True,
    help="Serve the collection from the local cache when it is still fresh.",
)
@click.option(
    "--clear-cache",
    is_flag=True,
    default=False,
    help="Empty the local cache before loading.",
)
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False, path_type=str),
    default=None,
    help="Override the DuckDB cache path (otherwise uses SWAPI_VIEWER_CACHE_DB).",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
)
def click_main(
    endpoint: str,
    name_key: str | None,
    search: str,
    show: int | None,
    output_path: str | None,
    use_cache: bool,
    clear_cache: bool,
    db_path: str | None,
    log_level: str,
) -> None:
    """Browse a SWAPI collection: list, filter, and inspect one entry."""
    options = BrowseOptions(
        endpoint=endpoint.lower(),
        name_key=name_key,
        search=search,
        show=show,
        output_path=output_path,
        use_cache=use_cache,
        clear_cache=clear_cache,
        db_path=db_path,
        log_level=log_level,
    )
    if not asyncio.run(_run_browse(options)):
        sys.exit(1)


def main() -> None:
    click_main()


async def _run_browse(options: BrowseOptions) -> bool:
    logging.basicConfig(
        level=getattr(logging, options.log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = Config()
    db = DuckDb(db_path=options.db_path, config=config)
    try:
        cache = ExpiringCache(
            DuckDbKeyValueStore(db),
            expiry_seconds=config.cache_expiry_seconds,
            max_entries=config.cache_max_entries,
        )
        if options.clear_cache:
            cache.clear()

        view = ViewContext()
        api = SwapiApi(config.base_url, timeout=config.http_timeout)
        viewer = DirectoryViewer(view, api, cache, config)

        items = await viewer.load(
            options.endpoint,
            options.resolved_name_key(),
            use_cache=options.use_cache,
        )
        if items is None:
            click.echo(view.list_element.texts[0], err=True)
            return False

        if options.search:
            viewer.renderer.apply_search(options.search)
            if view.search is not None:
                view.search.value = options.search

        for text in view.list_element.texts:
            click.echo(text)

        if options.show is not None:
            rows = view.list_element.rows
            if not 1 <= options.show <= len(rows) or not rows[options.show - 1].clickable:
                raise click.BadParameter(
                    f"--show must be between 1 and {len(rows)}", param_hint="--show"
                )
            await rows[options.show - 1].click()
            click.echo("")
            click.echo(view.modal.title)
            for label, text in view.modal.fields:
                click.echo(f"  {label}: {text}")

        if options.output_path:
            heading = f"SWAPI {options.endpoint.capitalize()}"
            Path(options.output_path).write_text(view.to_html(heading), encoding="utf-8")
        return True
    finally:
        db.close()


if __name__ == "__main__":
    main()
