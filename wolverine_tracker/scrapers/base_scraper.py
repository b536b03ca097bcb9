from typing import Any, Dict, Optional

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from wolverine_tracker.config.settings import settings

# Define common HTTP status codes that warrant a retry
RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


class ScraperError(Exception):
    """Custom exception for scraper-related errors."""

    pass


class NetworkError(ScraperError):
    """Endpoint unreachable, timed out, or answered with a non-success status."""

    pass


class RateLimitError(NetworkError):
    """Exception raised for rate limit errors (429)."""

    pass


class MalformedPayloadError(ScraperError):
    """Response body is not JSON or does not have the expected shape."""

    pass


def _is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, (RateLimitError, httpx.TransportError)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return False


class BaseScraper:
    """Base class for JSON API scrapers."""

    source: str = "unknown"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        max_attempts: Optional[int] = None,
        backoff_multiplier: float = 1.0,
    ):
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.request_timeout_seconds),
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )
        self.max_attempts = max_attempts or settings.max_request_attempts
        self.backoff_multiplier = backoff_multiplier

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        **kwargs,
    ) -> httpx.Response:
        """Makes an asynchronous HTTP request with retry logic.

        Timeouts, connection failures, 429 and 5xx responses are retried with
        exponential backoff. Whatever is still failing after the last attempt
        is raised as a NetworkError.
        """
        logger.debug(f"Making request", method=method, url=url, params=params)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_multiplier, min=0, max=10),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._send(method, url, params=params, **kwargs)
        except RateLimitError:
            logger.error(f"Still rate limited by {self.source} at {url}, giving up")
            raise
        except httpx.HTTPStatusError as e:
            logger.warning(
                f"HTTP error during request for {self.source}: {e.response.status_code} at {url}"
            )
            raise NetworkError(f"HTTP error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.warning(
                f"Request error for {self.source} at {url}: {type(e).__name__}: {e}"
            )
            raise NetworkError(f"Request to {url} failed: {type(e).__name__}") from e

    async def _send(
        self, method: str, url: str, params: Optional[Dict[str, Any]] = None, **kwargs
    ) -> httpx.Response:
        response = await self.client.request(method, url, params=params, **kwargs)

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            logger.warning(
                f"Rate limit hit (429) for {self.source} at {url}. Retry-After: {retry_after}"
            )
            raise RateLimitError(f"Rate limited by {self.source}")

        if response.status_code in RETRYABLE_STATUS_CODES:
            logger.warning(
                f"Retryable status {response.status_code} from {self.source} at {url}"
            )
        response.raise_for_status()  # Raises HTTPStatusError for 4xx/5xx
        logger.debug(f"Request successful: {response.status_code} for {url}")
        return response

    async def _get_json(
        self, url: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """GETs ``url`` and returns its JSON object body."""
        response = await self._make_request("GET", url, params=params)
        try:
            payload = response.json()
        except ValueError as e:
            logger.debug(f"Raw response content: {response.text[:200]}")
            raise MalformedPayloadError(f"Response from {url} is not JSON") from e
        if not isinstance(payload, dict):
            raise MalformedPayloadError(
                f"Expected a JSON object from {url}, got {type(payload).__name__}"
            )
        return payload

    async def close(self):
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.info(f"Closed HTTP client for {self.source}")
