from __future__ import annotations

from dataclasses import dataclass

from .requests import default_name_key


@dataclass(frozen=True)
class BrowseOptions:
    endpoint: str
    name_key: str | None
    search: str
    show: int | None
    output_path: str | None
    use_cache: bool
    clear_cache: bool
    db_path: str | None
    log_level: str

    def resolved_name_key(self) -> str:
        return self.name_key or default_name_key(self.endpoint)
