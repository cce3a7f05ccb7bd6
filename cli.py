"""
pokedex-ingest unified CLI.

Single entry point for all project operations.

Usage
-----
# Ingestion
python cli.py ingest                              # full run, 1000 entries
python cli.py ingest --limit 151 --workers 8      # Gen 1 only, 8 fetch threads
python cli.py ingest --on-conflict fail           # refuse to overwrite stored ids

# Queries
python cli.py show 25                             # lookup by id
python cli.py search pika                         # substring search
python cli.py types                               # distinct stored types
python cli.py abilities                           # distinct stored abilities

# Service
python cli.py init-db                             # create the tables
python cli.py serve --port 8000                   # run the FastAPI app
"""

from __future__ import annotations

import argparse
import json
import sys

from configs.constants import Constants
from utils.logger import setup_logging


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _repository(args: argparse.Namespace):
    from src.storage.database import build_session_factory, create_db_engine, init_db
    from src.storage.repository import PokemonRepository

    engine = create_db_engine(args.database_url)
    init_db(engine)
    return PokemonRepository(
        build_session_factory(engine),
        on_conflict=getattr(args, "on_conflict", "replace"),
        intern_names=getattr(args, "intern_names", False),
    )


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


# ---------------------------------------------------------------------------
# Sub-command handlers
# ---------------------------------------------------------------------------


def cmd_ingest(args: argparse.Namespace) -> None:
    from src.pipeline.ingest import IngestionPipeline, PipelineConfig
    from src.scraper.base import ScrapeConfig
    from src.scraper.pokeapi import CatalogClient

    config = PipelineConfig(
        page_limit=args.limit,
        fetch_workers=args.workers,
        storage_workers=args.storage_workers,
    )
    client = CatalogClient(
        ScrapeConfig(base_url=args.base_url, timeout=args.timeout, pool_size=args.workers)
    )
    pipeline = IngestionPipeline(client, _repository(args), config)
    try:
        summary = pipeline.run()
    finally:
        client.close()

    print(
        f"{summary.succeeded} stored, {summary.failed} failed "
        f"of {summary.requested} in {summary.elapsed_seconds:.1f} s"
    )
    for failure in summary.failures:
        print(f"  ✗ {failure.name} ({failure.stage}): {failure.error}", file=sys.stderr)


def cmd_show(args: argparse.Namespace) -> None:
    from app.service import PokemonOut

    pokemon = _repository(args).find_by_id(args.id)
    if pokemon is None:
        print(f"No pokemon with id {args.id}", file=sys.stderr)
        sys.exit(1)
    _print_json(PokemonOut.model_validate(pokemon).model_dump())


def cmd_search(args: argparse.Namespace) -> None:
    matches = _repository(args).find_by_name(args.name)
    for pokemon in matches:
        print(f"#{pokemon.id:<5} {pokemon.name}")
    print(f"{len(matches)} match(es).")


def cmd_types(args: argparse.Namespace) -> None:
    for row in _repository(args).list_distinct_types():
        print(f"{row.id:<6} {row.name}")


def cmd_abilities(args: argparse.Namespace) -> None:
    for row in _repository(args).list_distinct_abilities():
        print(f"{row.id:<6} {row.name}")


def cmd_init_db(args: argparse.Namespace) -> None:
    repository = _repository(args)
    print(f"Database ready, {repository.count()} pokemon stored.")


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    from app.service import app

    app.state.repository = _repository(args)
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    root = argparse.ArgumentParser(
        prog="pokedex-ingest",
        description="PokeAPI → relational store ingestion — unified CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    root.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    root.add_argument(
        "--database-url",
        default=Constants.DATABASE_URL,
        metavar="URL",
        help="SQLAlchemy database URL (env: POKEDEX_DATABASE_URL)",
    )

    subparsers = root.add_subparsers(dest="command", required=True)

    # ================================================================
    # ingest
    # ================================================================
    ing = subparsers.add_parser("ingest", help="Fetch every pokemon from PokeAPI and store it")
    ing.add_argument("--limit", type=int, default=Constants.DEFAULT_PAGE_LIMIT, help="List page size")
    ing.add_argument("--workers", type=int, default=Constants.FETCH_WORKERS, help="Concurrent fetch chains")
    ing.add_argument("--storage-workers", type=int, default=Constants.STORAGE_WORKERS)
    ing.add_argument("--base-url", default=Constants.POKEAPI_BASE_URL, metavar="URL")
    ing.add_argument("--timeout", type=int, default=Constants.REQUEST_TIMEOUT, help="Seconds per request")
    ing.add_argument(
        "--on-conflict",
        choices=Constants.CONFLICT_POLICIES,
        default="replace",
        help="What to do when a pokemon id is already stored",
    )
    ing.add_argument(
        "--intern-names",
        action="store_true",
        help="Reuse stored ability/type/evolution rows with the same name",
    )
    ing.set_defaults(func=cmd_ingest)

    # ================================================================
    # queries
    # ================================================================
    show = subparsers.add_parser("show", help="Print one stored pokemon as JSON")
    show.add_argument("id", type=int)
    show.set_defaults(func=cmd_show)

    search = subparsers.add_parser("search", help="Case-insensitive name search")
    search.add_argument("name", nargs="?", default="", help="Substring, empty lists everything")
    search.set_defaults(func=cmd_search)

    subparsers.add_parser("types", help="List distinct stored types").set_defaults(func=cmd_types)
    subparsers.add_parser("abilities", help="List distinct stored abilities").set_defaults(
        func=cmd_abilities
    )

    # ================================================================
    # service
    # ================================================================
    subparsers.add_parser("init-db", help="Create the schema").set_defaults(func=cmd_init_db)

    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=cmd_serve)

    return root


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)

    # Dispatch to the appropriate handler
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
