"""
Maps PokeAPI transfer records onto the ORM entity graph.

Every call builds new instances; nothing here looks at the store.
"""

from __future__ import annotations

from typing import Optional

from configs.constants import Constants
from src.scraper.records import DetailRecord, EvolutionChainRecord
from src.storage.models import Ability, Evolution, Pokemon, Sprite, Stat, Type


def describe_evolution_chain(chain_id: int) -> str:
    return Constants.EVOLUTION_CHAIN_TEMPLATE.format(chain_id=chain_id)


def build_pokemon(detail: DetailRecord) -> Pokemon:
    """Map the detail record; the evolution is attached separately."""
    return Pokemon(
        id=detail.id,
        name=detail.name,
        base_experience=detail.base_experience,
        abilities=[Ability(name=slot.ability.name) for slot in detail.abilities],
        stats=[Stat(name=entry.stat.name, base_stat=entry.base_stat) for entry in detail.stats],
        sprite=Sprite(front_default=detail.sprites.front_default),
        types=[Type(name=slot.type.name) for slot in detail.types],
    )


def attach_evolution(pokemon: Pokemon, chain: Optional[EvolutionChainRecord]) -> Pokemon:
    if chain is not None:
        pokemon.evolution = Evolution(evolution_chain=describe_evolution_chain(chain.id))
    return pokemon


__all__ = ["attach_evolution", "build_pokemon", "describe_evolution_chain"]
