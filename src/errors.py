"""Exceptions raised by the catalog client and the storage layer."""

from __future__ import annotations

from typing import Optional


class PokedexError(Exception):
    """Base class for every error the ingestion pipeline recovers from per item."""


class RemoteFetchError(PokedexError):
    """A catalog request failed: network error, bad status, oversize or undecodable body."""

    def __init__(self, url: str, cause: object) -> None:
        super().__init__(f"Failed to fetch {url}: {cause}")
        self.url = url
        self.cause = cause


class StorageWriteError(PokedexError):
    """Persisting one creature graph failed."""

    def __init__(self, pokemon_id: Optional[int], cause: object) -> None:
        super().__init__(f"Failed to store pokemon {pokemon_id}: {cause}")
        self.pokemon_id = pokemon_id
        self.cause = cause


__all__ = ["PokedexError", "RemoteFetchError", "StorageWriteError"]
