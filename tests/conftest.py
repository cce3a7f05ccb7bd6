import pytest

from src.scraper.base import ScrapeConfig
from src.scraper.pokeapi import CatalogClient
from src.storage.database import build_session_factory, create_db_engine, init_db
from src.storage.repository import PokemonRepository

from catalog_fakes import BASE_URL, FakeSession


@pytest.fixture
def session_factory(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'pokedex.db'}")
    init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory) -> PokemonRepository:
    return PokemonRepository(session_factory)


@pytest.fixture
def make_client():
    def factory(routes, **session_kwargs):
        session = FakeSession(routes, **session_kwargs)
        return CatalogClient(ScrapeConfig(base_url=BASE_URL), session=session), session

    return factory
