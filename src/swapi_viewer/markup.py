from __future__ import annotations

from typing import Any, Iterable, Mapping

LIST_ICON_URL = (
    "https://upload.wikimedia.org/wikipedia/commons/thumb/6/6c/"
    "Star_Wars_Logo.svg/30px-Star_Wars_Logo.svg.png"
)

FILM_POSTERS: dict[int, str] = {
    1: "https://upload.wikimedia.org/wikipedia/en/4/40/Star_Wars_Phantom_Menace_poster.jpg",
    2: "https://upload.wikimedia.org/wikipedia/en/3/32/Star_Wars_-_Episode_II_Attack_of_the_Clones_%28movie_poster%29.jpg",
    3: "https://upload.wikimedia.org/wikipedia/en/9/93/Star_Wars_Episode_III_Revenge_of_the_Sith_poster.jpg",
    4: "https://upload.wikimedia.org/wikipedia/en/8/87/StarWarsMoviePoster1977.jpg",
    5: "https://upload.wikimedia.org/wikipedia/en/3/3c/SW_-_Empire_Strikes_Back.jpg",
    6: "https://upload.wikimedia.org/wikipedia/en/b/b2/ReturnOfTheJediPoster1983.jpg",
}
POSTER_PLACEHOLDER = "https://via.placeholder.com/300x200/000000/f4e87c?text=Poster+Not+Found"
CHARACTER_PLACEHOLDER = "https://via.placeholder.com/300x200/000000/f4e87c?text=Character"

NO_ITEMS_ROW = "No items found."
LOAD_ERROR_ROW = "Error loading data. See log."
UNNAMED = "Unnamed"

_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


def escape_html(value: Any) -> str:
    text = str(value)
    for raw, entity in _ESCAPES:
        text = text.replace(raw, entity)
    return text


def is_reference_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("http")


def primary_label(item: Mapping[str, Any], name_key: str) -> str:
    label = item.get(name_key) or item.get("title")
    return str(label) if label else ""


def list_text(item: Mapping[str, Any], name_key: str) -> str:
    """One-line summary: the label plus a birth year or model annotation."""
    label = primary_label(item, name_key) or UNNAMED
    if item.get("birth_year"):
        return f"{label} - born: {item['birth_year']}"
    if item.get("model"):
        return f"{label} - model: {item['model']}"
    return label


def list_subtext(item: Mapping[str, Any]) -> str:
    gender = item.get("gender")
    if gender and gender != "n/a":
        return f"Gender: {gender}"
    return ""


def filter_items(
    items: Iterable[Mapping[str, Any]], query: str, name_key: str
) -> list[Mapping[str, Any]]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(items)
    return [item for item in items if needle in primary_label(item, name_key).lower()]


def illustration_for(item: Mapping[str, Any], title: str) -> str:
    if item.get("title") and item.get("episode_id"):
        try:
            poster = FILM_POSTERS.get(int(item["episode_id"]), POSTER_PLACEHOLDER)
        except (TypeError, ValueError):
            poster = POSTER_PLACEHOLDER
        return (
            f'<img src="{escape_html(poster)}" class="img-fluid mb-3" '
            f'alt="Poster for {escape_html(title)}">'
        )
    if item.get("name"):
        return (
            f'<img src="{escape_html(CHARACTER_PLACEHOLDER)}" class="img-fluid mb-3" '
            'alt="Character image">'
        )
    return ""


def list_row_html(item: Mapping[str, Any], name_key: str) -> str:
    return (
        f'<img src="{escape_html(LIST_ICON_URL)}" alt="Icon">'
        f'<div class="fw-bold">{escape_html(list_text(item, name_key))}</div>'
        f'<div class="small text-muted">{escape_html(list_subtext(item))}</div>'
    )


def detail_line_html(label: str, text: str) -> str:
    return f"<p><strong>{escape_html(label)}:</strong> {escape_html(text)}</p>"
