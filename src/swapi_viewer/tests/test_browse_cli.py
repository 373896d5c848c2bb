from __future__ import annotations

from pathlib import Path

import httpx
import pytest
from click.testing import CliRunner

from swapi_viewer.browse import click_main as browse_cli
from swapi_viewer.markup import LOAD_ERROR_ROW

BASE_URL = "https://swapi.test/api/"


@pytest.fixture
def routed_swapi(fake_swapi, monkeypatch):
    """Route every AsyncClient the CLI opens through the fake upstream."""
    real_client = httpx.AsyncClient
    transport = fake_swapi.transport

    def client_factory(*args, **kwargs):
        kwargs["transport"] = transport
        return real_client(*args, **kwargs)

    monkeypatch.setenv("SWAPI_VIEWER_BASE_URL", BASE_URL)
    monkeypatch.setattr("swapi_viewer.swapi_api.httpx.AsyncClient", client_factory)
    return fake_swapi


def _seed_people(fake_swapi) -> None:
    fake_swapi.add_pages(
        "people",
        [
            [{"name": "Luke Skywalker", "birth_year": "19BBY", "homeworld": f"{BASE_URL}planets/1/"}],
            [{"name": "Leia Organa", "birth_year": "19BBY", "homeworld": f"{BASE_URL}planets/2/"}],
        ],
    )
    fake_swapi.add(f"{BASE_URL}planets/1/", {"name": "Tatooine"})
    fake_swapi.add(f"{BASE_URL}planets/2/", {"name": "Alderaan"})


def test_browse_lists_rows(routed_swapi, tmp_path: Path):
    _seed_people(routed_swapi)

    runner = CliRunner()
    result = runner.invoke(browse_cli, ["people", "--db-path", str(tmp_path / "c.db")])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "Luke Skywalker - born: 19BBY",
        "Leia Organa - born: 19BBY",
    ]


def test_browse_search_show_and_export(routed_swapi, tmp_path: Path):
    _seed_people(routed_swapi)
    output_path = tmp_path / "people.html"

    runner = CliRunner()
    result = runner.invoke(
        browse_cli,
        [
            "people",
            "--search",
            "leia",
            "--show",
            "1",
            "--output",
            str(output_path),
            "--db-path",
            str(tmp_path / "c.db"),
        ],
    )

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "Leia Organa - born: 19BBY"
    assert "Leia Organa" in lines
    assert "  homeworld: Alderaan" in lines
    page = output_path.read_text(encoding="utf-8")
    assert '<h2 id="modalTitle">Leia Organa</h2>' in page
    assert 'value="leia"' in page


def test_browse_reuses_cache_between_runs(routed_swapi, tmp_path: Path):
    _seed_people(routed_swapi)
    db_path = str(tmp_path / "c.db")
    runner = CliRunner()

    runner.invoke(browse_cli, ["people", "--db-path", db_path])
    first_count = len(routed_swapi.requests)
    result = runner.invoke(browse_cli, ["people", "--db-path", db_path])

    assert result.exit_code == 0
    assert len(routed_swapi.requests) == first_count

    runner.invoke(browse_cli, ["people", "--db-path", db_path, "--clear-cache"])
    assert len(routed_swapi.requests) == first_count * 2


def test_browse_show_out_of_range(routed_swapi, tmp_path: Path):
    _seed_people(routed_swapi)

    runner = CliRunner()
    result = runner.invoke(
        browse_cli, ["people", "--show", "5", "--db-path", str(tmp_path / "c.db")]
    )

    assert result.exit_code == 2
    assert "--show" in result.output


def test_browse_failed_load_exits_nonzero(routed_swapi, tmp_path: Path):
    routed_swapi.add(f"{BASE_URL}films/", {"detail": "down"}, status=500)

    runner = CliRunner()
    result = runner.invoke(browse_cli, ["films", "--db-path", str(tmp_path / "c.db")])

    assert result.exit_code == 1
    assert LOAD_ERROR_ROW in result.output


def test_browse_ignores_zero_max_entries(routed_swapi, tmp_path: Path, monkeypatch):
    _seed_people(routed_swapi)
    monkeypatch.setenv("SWAPI_VIEWER_CACHE_MAX_ENTRIES", "0")

    runner = CliRunner()
    result = runner.invoke(browse_cli, ["people", "--db-path", str(tmp_path / "c.db")])

    assert result.exit_code == 0, result.output
    assert result.exception is None
