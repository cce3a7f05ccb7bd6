from src.pipeline.mapping import attach_evolution, build_pokemon, describe_evolution_chain
from src.scraper.records import DetailRecord, EvolutionChainRecord

from catalog_fakes import detail_payload


def test_describe_evolution_chain_format():
    assert describe_evolution_chain(1) == "Evolution chain id: 1"
    assert describe_evolution_chain(67) == "Evolution chain id: 67"


def test_build_pokemon_keeps_upstream_identity_and_fields():
    detail = DetailRecord.model_validate(
        detail_payload(6, "charizard", abilities=("blaze", "solar-power"), types=("fire", "flying"))
    )

    pokemon = build_pokemon(detail)

    assert pokemon.id == 6
    assert pokemon.name == "charizard"
    assert pokemon.base_experience == 64
    assert [a.name for a in pokemon.abilities] == ["blaze", "solar-power"]
    assert [t.name for t in pokemon.types] == ["fire", "flying"]
    assert [(s.name, s.base_stat) for s in pokemon.stats] == [("hp", 45), ("attack", 49), ("speed", 45)]
    assert pokemon.sprite.front_default == "https://img.pokeapi.test/sprites/6.png"
    assert pokemon.evolution is None


def test_build_pokemon_always_creates_fresh_rows():
    detail = DetailRecord.model_validate(detail_payload(1, "bulbasaur"))

    first = build_pokemon(detail)
    second = build_pokemon(detail)

    assert first.abilities[0] is not second.abilities[0]
    assert first.types[0] is not second.types[0]
    assert all(a.id is None for a in first.abilities)


def test_build_pokemon_with_absent_sprite_url():
    detail = DetailRecord.model_validate(detail_payload(10001, "deoxys-attack", front_default=None))

    pokemon = build_pokemon(detail)

    assert pokemon.sprite is not None
    assert pokemon.sprite.front_default is None


def test_attach_evolution():
    detail = DetailRecord.model_validate(detail_payload(2, "ivysaur"))

    with_chain = attach_evolution(build_pokemon(detail), EvolutionChainRecord(id=1))
    without_chain = attach_evolution(build_pokemon(detail), None)

    assert with_chain.evolution.evolution_chain == "Evolution chain id: 1"
    assert without_chain.evolution is None
