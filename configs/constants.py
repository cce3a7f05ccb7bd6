"""
Constants
"""

# Ignore pylint warnings
# pylint: disable = line-too-long

import os


class Constants:
    """
    Constants configurations
    """

    POKEAPI_BASE_URL = os.environ.get("POKEDEX_API_BASE_URL", "https://pokeapi.co/api/v2")
    USER_AGENT = "pokedex-ingest/1.0"

    # the list endpoint is asked for one large page instead of following `next` links
    DEFAULT_PAGE_LIMIT = 1000

    # detail payloads are large, 16 MiB decode ceiling
    MAX_RESPONSE_BYTES = 16 * 1024 * 1024
    REQUEST_TIMEOUT = 30

    FETCH_WORKERS = int(os.environ.get("POKEDEX_FETCH_WORKERS", "16"))
    STORAGE_WORKERS = int(os.environ.get("POKEDEX_STORAGE_WORKERS", "1"))

    DATABASE_URL = os.environ.get("POKEDEX_DATABASE_URL", "sqlite:///data/pokedex.db")

    EVOLUTION_CHAIN_TEMPLATE = "Evolution chain id: {chain_id}"

    CONFLICT_POLICIES = ("replace", "fail")
