"""
Base HTTP client for the catalog ingestion.

Every client inherits from BaseScraper and gets:

  - A requests.Session with a connection pool sized to the fetch workers
  - get_json(): GET + bounded read + JSON decode, failures raised as
    RemoteFetchError carrying the URL and the underlying cause

Requests are plain: no retries, no rate limiting and no caching. A failed
request is reported to the caller, which decides whether to drop the item.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from configs.constants import Constants
from src.errors import RemoteFetchError

# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------


@dataclass
class ScrapeConfig:
    """
    Configuration shared by every BaseScraper subclass.

    Parameters
    ----------
    base_url : str
        Root that relative endpoints are joined to.
    timeout : int
        Per-request timeout in seconds.
    max_response_bytes : int
        Largest body accepted before the request is failed.  Detail payloads
        are big, so the default is 16 MiB.
    pool_size : int
        Number of pooled connections per host; match it to the number of
        threads issuing requests.
    user_agent : str
        Value sent in the User-Agent header.
    """

    base_url: str = field(default_factory=lambda: Constants.POKEAPI_BASE_URL)
    timeout: int = Constants.REQUEST_TIMEOUT
    max_response_bytes: int = Constants.MAX_RESPONSE_BYTES
    pool_size: int = Constants.FETCH_WORKERS
    user_agent: str = Constants.USER_AGENT

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        if self.max_response_bytes <= 0:
            raise ValueError("max_response_bytes must be positive")


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class BaseScraper:
    """Holds the HTTP session and turns responses into decoded JSON."""

    CHUNK_SIZE = 64 * 1024

    def __init__(self, config: ScrapeConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self._session = session if session is not None else self._build_session()
        self.logger = logging.getLogger(self.__class__.__name__)

    # ------------------------------------------------------------------
    # Session setup
    # ------------------------------------------------------------------

    def _build_session(self) -> requests.Session:
        """Build a requests.Session with a pool large enough for concurrent fetches."""
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=self.config.pool_size,
            pool_maxsize=self.config.pool_size,
            max_retries=0,
        )
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        session.headers["User-Agent"] = self.config.user_agent
        session.headers["Accept"] = "application/json"
        return session

    def close(self) -> None:
        self._session.close()

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------

    def _read_body(self, resp: requests.Response, url: str) -> bytes:
        limit = self.config.max_response_bytes
        declared = resp.headers.get("Content-Length")
        if declared is not None and declared.isdigit() and int(declared) > limit:
            raise RemoteFetchError(url, f"response of {declared} bytes exceeds {limit} byte limit")

        chunks = []
        size = 0
        for chunk in resp.iter_content(chunk_size=self.CHUNK_SIZE):
            size += len(chunk)
            if size > limit:
                raise RemoteFetchError(url, f"response exceeds {limit} byte limit")
            chunks.append(chunk)
        return b"".join(chunks)

    def get_json(self, url: str) -> Any:
        """
        GET *url* and return the parsed JSON body.

        Raises
        ------
        RemoteFetchError
            On connection errors, non-2xx statuses, bodies over
            ``max_response_bytes`` and invalid JSON.
        """
        self.logger.debug(f"GET {url}")
        try:
            resp = self._session.get(url, timeout=self.config.timeout, stream=True)
        except requests.RequestException as exc:
            raise RemoteFetchError(url, exc) from exc

        try:
            resp.raise_for_status()
            body = self._read_body(resp, url)
        except requests.HTTPError as exc:
            code = exc.response.status_code if exc.response is not None else "?"
            raise RemoteFetchError(url, f"HTTP {code}") from exc
        except requests.RequestException as exc:
            raise RemoteFetchError(url, exc) from exc
        finally:
            resp.close()

        try:
            return json.loads(body)
        except ValueError as exc:
            raise RemoteFetchError(url, f"invalid JSON: {exc}") from exc
