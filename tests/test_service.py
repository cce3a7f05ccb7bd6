import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

from app import service
from src.pipeline.ingest import IngestionPipeline, PipelineConfig

from catalog_fakes import catalog_routes, make_pokemon, species_url


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, repository) -> TestClient:
    monkeypatch.setattr(service.app.state, "repository", repository, raising=False)
    return TestClient(service.app)


def seed(repository) -> None:
    repository.save(make_pokemon(25, "pikachu", 10, abilities=("static",), types=("electric",)))
    repository.save(make_pokemon(2, "ivysaur", 1))


def test_get_by_id_returns_full_graph(client, repository) -> None:
    seed(repository)

    response = client.get("/api/pokemon/25")

    assert response.status_code == 200
    payload = response.json()
    assert payload["id"] == 25
    assert payload["name"] == "pikachu"
    assert payload["base_experience"] == 64
    assert [a["name"] for a in payload["abilities"]] == ["static"]
    assert [t["name"] for t in payload["types"]] == ["electric"]
    assert [(s["name"], s["base_stat"]) for s in payload["stats"]] == [("hp", 45), ("attack", 49), ("speed", 45)]
    assert payload["sprite"]["front_default"].endswith("/25.png")
    assert payload["evolution"]["evolution_chain"] == "Evolution chain id: 10"


def test_get_by_unknown_id_is_not_found(client) -> None:
    response = client.get("/api/pokemon/9999")

    assert response.status_code == 404
    assert response.json()["detail"] == "Pokemon not found"


def test_search_by_name_returns_first_match(client, repository) -> None:
    seed(repository)

    response = client.get("/api/pokemon/searchByName", params={"name": "IVY"})

    assert response.status_code == 200
    assert response.json()["id"] == 2


def test_search_by_empty_name_returns_lowest_id(client, repository) -> None:
    seed(repository)

    response = client.get("/api/pokemon/searchByName", params={"name": ""})

    assert response.status_code == 200
    assert response.json()["name"] == "ivysaur"


def test_search_without_match_is_not_found(client, repository) -> None:
    seed(repository)

    response = client.get("/api/pokemon/searchByName", params={"name": "mewtwo"})

    assert response.status_code == 404


def test_types_and_abilities_list_stored_rows(client, repository) -> None:
    seed(repository)

    types = client.get("/api/pokemon/types").json()
    abilities = client.get("/api/pokemon/abilities").json()

    assert [t["name"] for t in types] == ["electric", "grass", "poison"]
    assert set(types[0]) == {"id", "name"}
    assert [a["name"] for a in abilities] == ["static", "overgrow", "chlorophyll"]


def test_fetch_streams_each_saved_pokemon(monkeypatch, client, repository, make_client) -> None:
    routes = catalog_routes([(1, "bulbasaur", 1), (2, "ivysaur", 1), (3, "venusaur", 1)])
    del routes[species_url(1)]
    catalog, _ = make_client(routes)
    pipeline = IngestionPipeline(catalog, repository, PipelineConfig(fetch_workers=2, storage_workers=1))
    monkeypatch.setattr(service.app.state, "pipeline", pipeline, raising=False)

    response = client.get("/api/pokemon/fetch")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-ndjson")
    lines = [json.loads(line) for line in response.text.splitlines() if line]
    assert sorted(p["id"] for p in lines) == [2, 3]
    assert all(p["evolution"]["evolution_chain"] == "Evolution chain id: 1" for p in lines)
    assert repository.count() == 2


def test_fetch_with_unreachable_catalog_ends_empty(monkeypatch, client, repository, make_client) -> None:
    catalog, _ = make_client({})
    pipeline = IngestionPipeline(catalog, repository, PipelineConfig())
    monkeypatch.setattr(service.app.state, "pipeline", pipeline, raising=False)

    response = client.get("/api/pokemon/fetch")

    assert response.status_code == 200
    assert response.text == ""


def test_default_repository_is_built_once_under_concurrent_access(monkeypatch, repository) -> None:
    monkeypatch.setattr(service.app.state, "repository", None, raising=False)
    builds = []
    builds_lock = threading.Lock()

    def slow_build():
        with builds_lock:
            builds.append(1)
        time.sleep(0.05)
        return repository

    monkeypatch.setattr(service, "_build_default_repository", slow_build)

    with ThreadPoolExecutor(max_workers=8) as pool:
        seen = list(pool.map(lambda _: service.get_repository(), range(8)))

    assert len(builds) == 1
    assert all(r is repository for r in seen)


def test_shutdown_closes_the_catalog_session(monkeypatch, repository, make_client) -> None:
    catalog, session = make_client({})
    pipeline = IngestionPipeline(catalog, repository, PipelineConfig())
    monkeypatch.setattr(service.app.state, "repository", repository, raising=False)
    monkeypatch.setattr(service.app.state, "pipeline", pipeline, raising=False)

    with TestClient(service.app) as client:
        assert client.get("/api/pokemon/9999").status_code == 404
        assert not session.closed

    assert session.closed
