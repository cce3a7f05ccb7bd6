"""
PokeAPI client for the pokedex ingestion.

Wraps the four upstream resources the pipeline walks for every Pokemon:

  - List page     : ``/pokemon?limit=N``, one page with ``{name, url}`` refs
  - Detail        : the ``url`` from the list page (abilities, stats, sprites, types)
  - Species       : ``/pokemon-species/<id>/``, carries the evolution-chain URL
  - Evolution     : the chain URL from the species record

URLs returned inline by a previous response are used exactly as received.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from src.errors import RemoteFetchError
from src.scraper.base import BaseScraper, ScrapeConfig
from src.scraper.records import (
    DetailRecord,
    EvolutionChainRecord,
    ListPage,
    SpeciesRecord,
)


class CatalogClient(BaseScraper):
    """
    Fetches PokeAPI resources and decodes them into transfer records.

    Parameters
    ----------
    config : ScrapeConfig
        Client configuration.  Defaults to the public PokeAPI base URL.
    """

    def __init__(self, config: Optional[ScrapeConfig] = None, **kwargs: Any) -> None:
        super().__init__(config or ScrapeConfig(), **kwargs)

    # ------------------------------------------------------------------
    # PokeAPI-specific get() — supports relative paths AND full URLs
    # ------------------------------------------------------------------

    def resolve(self, endpoint: str) -> str:
        if endpoint.startswith("http"):
            return endpoint
        return f"{self.config.base_url}{endpoint}"

    def get(self, endpoint: str) -> Any:
        """
        Fetch *endpoint* from PokeAPI.

        Parameters
        ----------
        endpoint : str
            Either a relative path (``"/pokemon/1"``) or a full URL.
        """
        return self.get_json(self.resolve(endpoint))

    def _get_record(self, endpoint: str, record_type):
        data = self.get(endpoint)
        try:
            return record_type.model_validate(data)
        except ValidationError as exc:
            raise RemoteFetchError(self.resolve(endpoint), f"unexpected {record_type.__name__} payload: {exc}") from exc

    # ------------------------------------------------------------------
    # Typed fetch wrappers
    # ------------------------------------------------------------------

    def fetch_page(self, limit: int) -> ListPage:
        """Single list page; ``next`` is returned but never followed."""
        return self._get_record(f"/pokemon?limit={limit}", ListPage)

    def fetch_detail(self, url: str) -> DetailRecord:
        return self._get_record(url, DetailRecord)

    def fetch_species(self, pokemon_id: int) -> SpeciesRecord:
        return self._get_record(f"/pokemon-species/{pokemon_id}/", SpeciesRecord)

    def fetch_evolution_chain(self, url: str) -> EvolutionChainRecord:
        return self._get_record(url, EvolutionChainRecord)
