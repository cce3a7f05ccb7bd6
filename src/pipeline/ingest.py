"""
Ingestion pipeline: PokeAPI → entity graph → store.

Per listed Pokemon the chain is

    detail  →  species  →  evolution chain (only when the species links one)

and the assembled graph is written as one transaction.  Fetch chains run on
a bounded fetch pool; writes are submitted to a separate storage pool so a
slow write never holds a fetch worker.  Items finish in any order.  Each one
yields an ItemResult; failures are logged and counted, never raised, so one
bad item cannot stop its siblings.  Only a failure to fetch the list page
itself ends the run with an exception.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional

from configs.constants import Constants
from src.errors import PokedexError, RemoteFetchError
from src.pipeline.mapping import attach_evolution, build_pokemon
from src.scraper.pokeapi import CatalogClient
from src.scraper.records import NamedResource
from src.storage.models import Pokemon
from src.storage.repository import PokemonRepository
from utils.custom_threading import ThreadExecutor, wait_any

logger = logging.getLogger(__name__)

FETCH_STAGE = "fetch"
STORE_STAGE = "store"


@dataclass
class PipelineConfig:
    """
    Parameters
    ----------
    page_limit : int
        Size of the single list page requested from ``/pokemon``.
    fetch_workers : int
        Maximum number of item chains talking to PokeAPI at once.
    storage_workers : int
        Threads issuing database writes.  Keep at 1 for SQLite.
    """

    page_limit: int = Constants.DEFAULT_PAGE_LIMIT
    fetch_workers: int = Constants.FETCH_WORKERS
    storage_workers: int = Constants.STORAGE_WORKERS

    def __post_init__(self) -> None:
        if self.page_limit < 1:
            raise ValueError("page_limit must be at least 1")


@dataclass
class ItemResult:
    """Outcome of one listed Pokemon."""

    name: str
    url: Optional[str]
    pokemon: Optional[Pokemon] = None
    stage: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchSummary:
    requested: int = 0
    succeeded: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0
    failures: List[ItemResult] = field(default_factory=list)

    def record(self, result: ItemResult) -> None:
        if result.ok:
            self.succeeded += 1
        else:
            self.failed += 1
            self.failures.append(result)


class IngestionPipeline:
    """Drives one full ingestion run against a CatalogClient and a PokemonRepository."""

    def __init__(
        self,
        client: CatalogClient,
        repository: PokemonRepository,
        config: Optional[PipelineConfig] = None,
    ) -> None:
        self.client = client
        self.repository = repository
        self.config = config or PipelineConfig()

    def assemble(self, ref: NamedResource) -> Pokemon:
        """Fetch detail, species and evolution chain for *ref* and build the graph."""
        if not ref.url:
            raise RemoteFetchError(ref.name, "list entry has no detail URL")

        detail = self.client.fetch_detail(ref.url)
        pokemon = build_pokemon(detail)

        species = self.client.fetch_species(detail.id)
        chain_url = species.evolution_chain_url
        if chain_url is None:
            logger.debug(f"{detail.name}: species has no evolution chain")
            return pokemon

        chain = self.client.fetch_evolution_chain(chain_url)
        return attach_evolution(pokemon, chain)

    def _store(self, pokemon: Pokemon) -> Pokemon:
        try:
            saved = self.repository.save(pokemon)
        except Exception as exc:
            logger.warning(f"Dropped {pokemon.name} during {STORE_STAGE}: {exc}")
            raise
        logger.info(f"Saved: {saved.name}")
        return saved

    def _fetch_and_hand_off(self, ref: NamedResource, store_pool: ThreadExecutor) -> Future:
        # the write is queued from the fetch worker, whether or not anyone reads the stream
        return store_pool.submit(self._store, self.assemble(ref))

    def stream(self, summary: Optional[BatchSummary] = None) -> Iterator[ItemResult]:
        """
        Run the ingestion, yielding each ItemResult as soon as it resolves.

        When *summary* is given it is filled in as results come out and
        carries the elapsed time once the generator is exhausted.  Closing
        the generator early does not cancel anything: every listed item is
        still fetched and stored before the close returns.
        """
        started = time.monotonic()
        page = self.client.fetch_page(self.config.page_limit)
        refs = page.results
        if summary is not None:
            summary.requested = len(refs)
        logger.info(f"Fetched list page: {len(refs)} of {page.count} pokemon")

        # the fetch pool shuts down first so its hand-offs land before the store pool drains
        with ThreadExecutor(self.config.storage_workers, "store") as store_pool, \
                ThreadExecutor(self.config.fetch_workers, "fetch") as fetch_pool:
            pending = {
                fetch_pool.submit(self._fetch_and_hand_off, ref, store_pool): (FETCH_STAGE, ref)
                for ref in refs
            }
            try:
                while pending:
                    done, _ = wait_any(pending)
                    for future in done:
                        stage, ref = pending.pop(future)
                        try:
                            value = future.result()
                        except Exception as exc:
                            if stage == FETCH_STAGE:
                                if isinstance(exc, PokedexError):
                                    logger.warning(f"Dropped {ref.name} during {stage}: {exc}")
                                else:
                                    logger.exception(f"Dropped {ref.name} during {stage}: unexpected error")
                            result = ItemResult(name=ref.name, url=ref.url, stage=stage, error=exc)
                        else:
                            if stage == FETCH_STAGE:
                                pending[value] = (STORE_STAGE, ref)
                                continue
                            result = ItemResult(name=ref.name, url=ref.url, pokemon=value)

                        if summary is not None:
                            summary.record(result)
                        yield result
            finally:
                if pending:
                    logger.info(f"Result stream closed with {len(pending)} items unreported, finishing them")

        elapsed = time.monotonic() - started
        if summary is not None:
            summary.elapsed_seconds = elapsed
        logger.info(f"Load time: {elapsed:.3f} s")

    def run(self, on_result: Optional[Callable[[ItemResult], None]] = None) -> BatchSummary:
        """Consume :py:meth:`stream` and return the batch summary."""
        summary = BatchSummary()
        for result in self.stream(summary):
            if on_result is not None:
                on_result(result)
        logger.info(
            f"Ingestion finished: {summary.succeeded}/{summary.requested} stored, "
            f"{summary.failed} failed in {summary.elapsed_seconds:.3f} s"
        )
        return summary


__all__ = ["BatchSummary", "IngestionPipeline", "ItemResult", "PipelineConfig"]
