"""ORM models (SQLAlchemy 2.0).

One ``Pokemon`` row per catalog item, keyed by the upstream id. Stats and the
sprite are owned children; abilities and types hang off association tables;
the evolution row is referenced many-to-one.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


pokemon_ability = Table(
    "pokemon_ability",
    Base.metadata,
    Column("pokemon_id", ForeignKey("pokemon.id", ondelete="CASCADE"), primary_key=True),
    Column("ability_id", ForeignKey("ability.id"), primary_key=True),
)

pokemon_type = Table(
    "pokemon_type",
    Base.metadata,
    Column("pokemon_id", ForeignKey("pokemon.id", ondelete="CASCADE"), primary_key=True),
    Column("type_id", ForeignKey("type.id"), primary_key=True),
)


class Ability(Base):
    __tablename__ = "ability"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    def __repr__(self) -> str:
        return f"<Ability {self.id} {self.name}>"


class Type(Base):
    __tablename__ = "type"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)

    def __repr__(self) -> str:
        return f"<Type {self.id} {self.name}>"


class Evolution(Base):
    """Placeholder summary of the lineage, e.g. ``"Evolution chain id: 1"``."""

    __tablename__ = "evolution"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    evolution_chain: Mapped[str] = mapped_column(String(200), nullable=False)

    pokemon: Mapped[List["Pokemon"]] = relationship(back_populates="evolution")

    def __repr__(self) -> str:
        return f"<Evolution {self.id} {self.evolution_chain!r}>"


class Stat(Base):
    __tablename__ = "stat"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    base_stat: Mapped[int] = mapped_column(Integer, nullable=False)
    pokemon_id: Mapped[int] = mapped_column(
        ForeignKey("pokemon.id", ondelete="CASCADE"), nullable=False, index=True
    )

    pokemon: Mapped["Pokemon"] = relationship(back_populates="stats")


class Sprite(Base):
    __tablename__ = "sprite"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # PokeAPI leaves front_default null for some forms
    front_default: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    pokemon_id: Mapped[int] = mapped_column(
        ForeignKey("pokemon.id", ondelete="CASCADE"), nullable=False, unique=True
    )

    pokemon: Mapped["Pokemon"] = relationship(back_populates="sprite")


class Pokemon(Base):
    """A catalog item. ``id`` is the PokeAPI id and is never generated locally."""

    __tablename__ = "pokemon"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    base_experience: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    evolution_id: Mapped[Optional[int]] = mapped_column(ForeignKey("evolution.id"), nullable=True)

    abilities: Mapped[List[Ability]] = relationship(
        secondary=pokemon_ability, order_by=Ability.id, lazy="selectin"
    )
    types: Mapped[List[Type]] = relationship(
        secondary=pokemon_type, order_by=Type.id, lazy="selectin"
    )
    stats: Mapped[List[Stat]] = relationship(
        back_populates="pokemon",
        cascade="all, delete-orphan",
        order_by=Stat.id,
        lazy="selectin",
    )
    sprite: Mapped[Optional[Sprite]] = relationship(
        back_populates="pokemon",
        cascade="all, delete-orphan",
        uselist=False,
        lazy="selectin",
    )
    evolution: Mapped[Optional[Evolution]] = relationship(
        back_populates="pokemon", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Pokemon #{self.id} {self.name}>"


__all__ = [
    "Ability",
    "Base",
    "Evolution",
    "Pokemon",
    "Sprite",
    "Stat",
    "Type",
    "pokemon_ability",
    "pokemon_type",
]
