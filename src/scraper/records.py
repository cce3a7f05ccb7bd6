"""Transfer records decoded from PokeAPI responses.

Only the fields the pipeline reads are declared; everything else in the
payload is ignored.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class NamedResource(BaseModel):
    name: str
    url: Optional[str] = None


class APIResource(BaseModel):
    url: str


class ListPage(BaseModel):
    """One page of ``/pokemon?limit=N``."""

    count: int = 0
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[NamedResource] = Field(default_factory=list)


class AbilitySlot(BaseModel):
    ability: NamedResource
    is_hidden: bool = False
    slot: Optional[int] = None


class StatEntry(BaseModel):
    base_stat: int
    stat: NamedResource


class Sprites(BaseModel):
    front_default: Optional[str] = None


class TypeSlot(BaseModel):
    type: NamedResource
    slot: Optional[int] = None


class DetailRecord(BaseModel):
    """Body of ``/pokemon/<id>/``."""

    id: int
    name: str = Field(..., min_length=1)
    base_experience: Optional[int] = None
    abilities: List[AbilitySlot] = Field(default_factory=list)
    stats: List[StatEntry] = Field(default_factory=list)
    sprites: Sprites = Field(default_factory=Sprites)
    types: List[TypeSlot] = Field(default_factory=list)


class SpeciesRecord(BaseModel):
    """Body of ``/pokemon-species/<id>/``; ``evolution_chain`` is null for some species."""

    evolution_chain: Optional[APIResource] = None

    @property
    def evolution_chain_url(self) -> Optional[str]:
        return self.evolution_chain.url if self.evolution_chain else None


class EvolutionChainRecord(BaseModel):
    id: int


__all__ = [
    "APIResource",
    "AbilitySlot",
    "DetailRecord",
    "EvolutionChainRecord",
    "ListPage",
    "NamedResource",
    "SpeciesRecord",
    "Sprites",
    "StatEntry",
    "TypeSlot",
]
