"""
TMDB client for CineScope.
- Async httpx client, one request per call.
- API key is injected at construction; a missing key is a startup error.
- No retries and no in-module caching: callers decide whether to retry or
  fall back to the local mirror.
"""
import logging
from typing import Optional, Dict
import httpx

from cinescope.core.config import settings
from cinescope.core.exceptions import ConfigurationError, NotFound, UpstreamUnavailable

TMDB_BASE = "https://api.themoviedb.org/3"
logger = logging.getLogger(__name__)


class TMDBClient:
    """Thin read-only client for the two TMDB endpoints the core needs."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = TMDB_BASE,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not api_key:
            raise ConfigurationError("TMDB API key not configured")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _get(self, path: str, params: Optional[Dict] = None) -> Dict:
        url = f"{self.base_url}{path}"
        query = {"api_key": self.api_key}
        if params:
            query.update(params)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(url, params=query)
        except httpx.TimeoutException as e:
            logger.warning(f"TMDB request timed out for {path}: {e}")
            raise UpstreamUnavailable("Metadata provider timed out") from e
        except httpx.HTTPError as e:
            logger.warning(f"TMDB request failed for {path}: {e}")
            raise UpstreamUnavailable() from e

        if resp.status_code == 404:
            raise NotFound("Movie not found")
        if resp.status_code == 401:
            logger.error("TMDB rejected the configured API key")
            raise ConfigurationError("Metadata provider rejected the API key")
        if resp.status_code >= 400:
            # 429 and 5xx are retryable by the caller; anything else is still the provider's failure
            logger.warning(f"TMDB returned {resp.status_code} for {path}")
            raise UpstreamUnavailable()

        try:
            return resp.json()
        except ValueError as e:
            logger.warning(f"TMDB returned a non-JSON body for {path}")
            raise UpstreamUnavailable() from e

    async def get_movie(self, tmdb_id: int) -> Dict:
        """Fetch the full metadata payload for one movie."""
        return await self._get(f"/movie/{tmdb_id}")

    async def discover_movies(self, with_genres: Optional[str] = None, sort_by: str = "popularity.desc", page: int = 1) -> Dict:
        """Discover movies with optional genre filter. Returns raw TMDB payload for the page."""
        params = {"sort_by": sort_by, "page": page}
        if with_genres:
            params["with_genres"] = with_genres
        return await self._get("/discover/movie", params)


def get_tmdb_client() -> TMDBClient:
    """Build the client from settings. Raises ConfigurationError when the key is missing."""
    return TMDBClient(
        settings.tmdb_api_key,
        base_url=settings.tmdb_base_url,
        timeout=settings.tmdb_timeout_seconds,
    )
