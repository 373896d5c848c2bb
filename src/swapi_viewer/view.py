from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

from .markup import escape_html


InputListener = Callable[[str], None]


@dataclass
class ListRow:
    html: str
    text: str
    css_class: str = "list-group-item"
    item: Mapping[str, Any] | None = None
    on_click: Callable[[], Awaitable[Any]] | None = None

    @property
    def clickable(self) -> bool:
        return self.on_click is not None

    async def click(self) -> Any:
        if self.on_click is None:
            return None
        return await self.on_click()


@dataclass
class ListElement:
    """Stands in for the ``#list`` container."""

    rows: list[ListRow] = field(default_factory=list)

    def clear(self) -> None:
        self.rows = []

    def append(self, row: ListRow) -> None:
        self.rows.append(row)

    @property
    def texts(self) -> list[str]:
        return [row.text for row in self.rows]

    def to_html(self) -> str:
        items = "".join(
            f'<li class="{row.css_class}">{row.html}</li>' for row in self.rows
        )
        return f'<ul id="list" class="list-group">{items}</ul>'


class SearchInput:
    """Stands in for the ``#search`` text input."""

    def __init__(self, value: str = ""):
        self.value = value
        self._listeners: list[InputListener] = []

    @property
    def listeners(self) -> tuple[InputListener, ...]:
        return tuple(self._listeners)

    def add_listener(self, listener: InputListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: InputListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def dispatch_input(self, value: str) -> None:
        self.value = value
        for listener in list(self._listeners):
            listener(value)


@dataclass
class Modal:
    """Stands in for the ``#itemModal`` overlay with its title and body."""

    title: str = ""
    body: str = ""
    fields: list[tuple[str, str]] = field(default_factory=list)
    shown: bool = False
    show_count: int = 0

    def show(self) -> None:
        self.shown = True
        self.show_count += 1

    def hide(self) -> None:
        self.shown = False


@dataclass
class ViewContext:
    """Everything one page view renders into."""

    list_element: ListElement = field(default_factory=ListElement)
    search: SearchInput | None = field(default_factory=SearchInput)
    modal: Modal = field(default_factory=Modal)

    def to_html(self, heading: str = "SWAPI Directory") -> str:
        modal_html = ""
        if self.modal.shown:
            modal_html = (
                '<div id="itemModal" class="modal-content">'
                f'<h2 id="modalTitle">{escape_html(self.modal.title)}</h2>'
                f'<div id="modalBody">{self.modal.body}</div>'
                "</div>"
            )
        search_value = escape_html(self.search.value) if self.search else ""
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en"><head><meta charset="utf-8">'
            f"<title>{escape_html(heading)}</title></head><body>"
            f"<h1>{escape_html(heading)}</h1>"
            f'<input id="search" type="text" value="{search_value}">'
            f"{self.list_element.to_html()}"
            f"{modal_html}"
            "</body></html>\n"
        )


class Debouncer:
    """Calls ``fn`` once ``wait`` seconds pass without another call."""

    def __init__(self, fn: Callable[..., Any], wait: float = 0.25):
        self._fn = fn
        self.wait = wait
        self._handle: asyncio.TimerHandle | None = None

    def __call__(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.wait, self._fire, args)

    def _fire(self, args: tuple[Any, ...]) -> None:
        self._handle = None
        self._fn(*args)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
