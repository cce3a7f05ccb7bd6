"""Read and write operations over the pokedex store."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from configs.constants import Constants
from src.errors import StorageWriteError
from src.storage.models import Ability, Evolution, Pokemon, Type, pokemon_ability, pokemon_type

logger = logging.getLogger(__name__)


class PokemonRepository:
    """
    Persists one Pokemon graph per transaction and answers the read queries.

    ``on_conflict`` decides what happens when the id is already stored:
    ``"replace"`` deletes the old row with its owned children and inserts the
    new graph in the same transaction, ``"fail"`` raises StorageWriteError.

    With ``intern_names`` the write reuses stored Ability/Type rows that have
    the same name and Evolution rows with the same text instead of inserting
    new ones.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        on_conflict: str = "replace",
        intern_names: bool = False,
    ) -> None:
        if on_conflict not in Constants.CONFLICT_POLICIES:
            raise ValueError(f"on_conflict must be one of {Constants.CONFLICT_POLICIES}, got {on_conflict!r}")
        self._session_factory = session_factory
        self.on_conflict = on_conflict
        self.intern_names = intern_names

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, pokemon: Pokemon) -> Pokemon:
        """Write *pokemon* and everything it owns or references as one unit."""
        try:
            with self._session_factory.begin() as session:
                existing = session.get(Pokemon, pokemon.id)
                if existing is not None:
                    if self.on_conflict == "fail":
                        raise StorageWriteError(pokemon.id, "pokemon already stored")
                    logger.debug(f"Replacing stored pokemon #{pokemon.id}")
                    session.delete(existing)
                    session.flush()

                if self.intern_names:
                    self._intern(session, pokemon)
                session.add(pokemon)
        except SQLAlchemyError as exc:
            raise StorageWriteError(pokemon.id, exc) from exc

        logger.debug(f"Saved pokemon #{pokemon.id} {pokemon.name}")
        return pokemon

    @staticmethod
    def _intern(session: Session, pokemon: Pokemon) -> None:
        def reuse(model, rows):
            seen: Dict[str, object] = {}
            result = []
            for row in rows:
                if row.name in seen:
                    continue
                stored = session.scalars(
                    select(model).where(model.name == row.name).order_by(model.id).limit(1)
                ).first()
                seen[row.name] = stored if stored is not None else row
                result.append(seen[row.name])
            return result

        pokemon.abilities = reuse(Ability, pokemon.abilities)
        pokemon.types = reuse(Type, pokemon.types)

        if pokemon.evolution is not None:
            stored = session.scalars(
                select(Evolution)
                .where(Evolution.evolution_chain == pokemon.evolution.evolution_chain)
                .order_by(Evolution.id)
                .limit(1)
            ).first()
            if stored is not None:
                pokemon.evolution = stored

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_by_id(self, pokemon_id: int) -> Optional[Pokemon]:
        """Return the stored Pokemon or ``None``."""
        with self._session_factory() as session:
            return session.get(Pokemon, pokemon_id)

    def find_by_name(self, name: str) -> List[Pokemon]:
        """Case-insensitive substring match; an empty string matches everything."""
        stmt = select(Pokemon).order_by(Pokemon.id)
        if name:
            stmt = stmt.where(Pokemon.name.icontains(name, autoescape=True))
        with self._session_factory() as session:
            return list(session.scalars(stmt))

    def list_distinct_types(self) -> List[Type]:
        """Type rows referenced by at least one Pokemon, distinct by row."""
        stmt = (
            select(Type)
            .join(pokemon_type, pokemon_type.c.type_id == Type.id)
            .distinct()
            .order_by(Type.id)
        )
        with self._session_factory() as session:
            return list(session.scalars(stmt))

    def list_distinct_abilities(self) -> List[Ability]:
        """Ability rows referenced by at least one Pokemon, distinct by row."""
        stmt = (
            select(Ability)
            .join(pokemon_ability, pokemon_ability.c.ability_id == Ability.id)
            .distinct()
            .order_by(Ability.id)
        )
        with self._session_factory() as session:
            return list(session.scalars(stmt))

    def count(self) -> int:
        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(Pokemon)) or 0


__all__ = ["PokemonRepository"]
