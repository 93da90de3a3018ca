"""Base feed client with common HTTP functionality."""

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class StatFetchError(Exception):
    """Exception raised when a stat feed can't be fetched or parsed."""

    pass


class BaseFeed:
    """Base class for JSON stat feeds."""

    DEFAULT_HEADERS = {
        "Accept": "application/json",
        "User-Agent": "teebox-settlement/1.0",
    }

    def __init__(self, base_url: str, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.DEFAULT_HEADERS,
                timeout=self.timeout,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    def _redact(self, text: str) -> str:
        return text

    async def fetch_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET a path and return the decoded JSON body."""
        try:
            response = await self.client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error fetching {path}: {e.response.status_code}")
            raise StatFetchError(f"HTTP {e.response.status_code}: {path}") from e
        except httpx.RequestError as e:
            logger.error(f"Request error fetching {path}: {self._redact(str(e))}")
            raise StatFetchError(f"Request failed: {path}") from e

        try:
            return response.json()
        except ValueError as e:
            raise StatFetchError(f"Unparseable JSON payload from {path}") from e

    @staticmethod
    def to_int(value: Any) -> Optional[int]:
        """Coerce a feed value to int, tolerating "+3", "-2", "E" and floats."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return int(round(value))
        if isinstance(value, str):
            cleaned = value.strip().upper()
            if cleaned == "E":
                return 0
            try:
                return int(float(cleaned.lstrip("+")))
            except ValueError:
                return None
        return None
