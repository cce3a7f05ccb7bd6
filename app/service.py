"""FastAPI service exposing the stored pokedex and the ingestion trigger."""
from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from typing import Iterator, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from configs.constants import Constants
from src.errors import PokedexError
from src.pipeline.ingest import IngestionPipeline, PipelineConfig
from src.scraper.base import ScrapeConfig
from src.scraper.pokeapi import CatalogClient
from src.storage.database import build_session_factory, create_db_engine, init_db
from src.storage.repository import PokemonRepository

logger = logging.getLogger(__name__)

NOT_FOUND = "Pokemon not found"


class NamedRow(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class StatOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    base_stat: int


class SpriteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    front_default: Optional[str] = None


class EvolutionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    evolution_chain: str


class PokemonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="PokeAPI id")
    name: str
    base_experience: Optional[int] = None
    abilities: List[NamedRow] = Field(default_factory=list)
    stats: List[StatOut] = Field(default_factory=list)
    sprite: Optional[SpriteOut] = None
    types: List[NamedRow] = Field(default_factory=list)
    evolution: Optional[EvolutionOut] = None


_state_lock = threading.RLock()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    pipeline = getattr(app.state, "pipeline", None)
    if pipeline is not None:
        logger.info("Closing catalog client")
        pipeline.client.close()


app = FastAPI(title="Pokedex Ingestion Service", lifespan=lifespan)


def _build_default_repository() -> PokemonRepository:
    engine = create_db_engine(Constants.DATABASE_URL)
    init_db(engine)
    return PokemonRepository(build_session_factory(engine))


def get_repository() -> PokemonRepository:
    with _state_lock:
        repository = getattr(app.state, "repository", None)
        if repository is None:
            repository = _build_default_repository()
            app.state.repository = repository
        return repository


def get_pipeline() -> IngestionPipeline:
    with _state_lock:
        pipeline = getattr(app.state, "pipeline", None)
        if pipeline is None:
            config = PipelineConfig()
            client = CatalogClient(ScrapeConfig(pool_size=config.fetch_workers))
            pipeline = IngestionPipeline(client, get_repository(), config)
            app.state.pipeline = pipeline
        return pipeline


def _stream_saved_pokemon(pipeline: IngestionPipeline) -> Iterator[str]:
    try:
        for result in pipeline.stream():
            if result.ok:
                yield PokemonOut.model_validate(result.pokemon).model_dump_json() + "\n"
    except PokedexError as exc:
        logger.error(f"Ingestion aborted: {exc}")


@app.get("/api/pokemon/fetch")
def fetch_all_pokemon() -> StreamingResponse:
    return StreamingResponse(
        _stream_saved_pokemon(get_pipeline()), media_type="application/x-ndjson"
    )


@app.get("/api/pokemon/searchByName", response_model=PokemonOut)
async def search_pokemon_by_name(name: str) -> PokemonOut:
    matches = await run_in_threadpool(get_repository().find_by_name, name)
    if not matches:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return PokemonOut.model_validate(matches[0])


@app.get("/api/pokemon/types", response_model=List[NamedRow])
async def get_distinct_types() -> List[NamedRow]:
    types = await run_in_threadpool(get_repository().list_distinct_types)
    return [NamedRow.model_validate(row) for row in types]


@app.get("/api/pokemon/abilities", response_model=List[NamedRow])
async def get_distinct_abilities() -> List[NamedRow]:
    abilities = await run_in_threadpool(get_repository().list_distinct_abilities)
    return [NamedRow.model_validate(row) for row in abilities]


@app.get("/api/pokemon/{pokemon_id}", response_model=PokemonOut)
async def get_pokemon_by_id(pokemon_id: int) -> PokemonOut:
    pokemon = await run_in_threadpool(get_repository().find_by_id, pokemon_id)
    if pokemon is None:
        raise HTTPException(status_code=404, detail=NOT_FOUND)
    return PokemonOut.model_validate(pokemon)


__all__ = [
    "EvolutionOut",
    "NamedRow",
    "PokemonOut",
    "SpriteOut",
    "StatOut",
    "app",
    "get_pipeline",
    "get_repository",
]
