"""
UEX REST transport.

Sends signed request descriptors and turns the raw HTTP exchange into
either a parsed JSON body or an error from the shared taxonomy.

Order of checks for every response:
    1. the body is run through the UEX error classifier (``code`` != "0")
    2. HTTP status: 429 / 5xx -> ExchangeNotAvailable, other >= 400 ->
       ExchangeError
    3. the body must parse as JSON, otherwise NetworkError

Rate Limits:
    - One request per ``rate_limit_ms`` (default 1500 ms), enforced here
"""

import asyncio
import json
from typing import Any, Optional, Tuple

import aiohttp
import structlog

from src.adapters.uex.errors import UexErrorClassifier
from src.adapters.uex.signer import RequestDescriptor
from src.config.models import ConnectionSettings
from src.errors import ExchangeError, ExchangeNotAvailable, NetworkError, RequestTimeout

logger = structlog.get_logger(__name__)


class UexRestClient:
    """
    Async REST client for UEX.

    Owns one aiohttp ClientSession, throttles requests to the configured
    interval and classifies every response.

    Attributes:
        settings: Connection settings (interval, timeout, user agent).
        classifier: Error classifier applied to every body.

    Example:
        >>> client = UexRestClient(ConnectionSettings())
        >>> data = await client.send(signer.sign("get_ticker", params={"symbol": "ethbtc"}))
        >>> await client.close()
    """

    def __init__(
        self,
        settings: Optional[ConnectionSettings] = None,
        classifier: Optional[UexErrorClassifier] = None,
    ):
        """
        Initialize REST client.

        Args:
            settings: Connection settings (default: ConnectionSettings()).
            classifier: Error classifier (default: UexErrorClassifier()).
        """
        self.settings = settings or ConnectionSettings()
        self.classifier = classifier or UexErrorClassifier()

        self._session: Optional[aiohttp.ClientSession] = None
        self._last_request_time: Optional[float] = None
        self._request_interval = self.settings.rate_limit_ms / 1000.0
        self._lock = asyncio.Lock()

        logger.info(
            "rest_client_initialized",
            rate_limit_ms=self.settings.rate_limit_ms,
            timeout_seconds=self.settings.timeout_seconds,
        )

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Ensure aiohttp session is created."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.settings.timeout_seconds)
            self._session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": self.settings.user_agent},
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("rest_client_session_closed")

    async def _rate_limit(self) -> None:
        """
        Apply rate limiting using simple time-based throttling.

        Ensures minimum interval between requests. Concurrent callers are
        serialized so the interval holds across tasks.
        """
        async with self._lock:
            loop = asyncio.get_running_loop()
            if self._last_request_time is not None:
                time_since_last = loop.time() - self._last_request_time
                if time_since_last < self._request_interval:
                    await asyncio.sleep(self._request_interval - time_since_last)
            self._last_request_time = loop.time()

    async def _fetch(self, request: RequestDescriptor) -> Tuple[int, str]:
        """
        Perform the HTTP exchange.

        Returns:
            Tuple[int, str]: HTTP status and response text.

        Raises:
            NetworkError: If the connection fails.
            RequestTimeout: If the request times out.
        """
        session = await self._ensure_session()
        try:
            async with session.request(
                request.method,
                request.url,
                data=request.body,
                headers=request.headers,
            ) as response:
                return response.status, await response.text()

        except asyncio.TimeoutError:
            logger.error("rest_timeout", method=request.method, timeout=self.settings.timeout_seconds)
            raise RequestTimeout(
                f"uex {request.method} request timed out after {self.settings.timeout_seconds}s"
            )
        except aiohttp.ClientError as e:
            logger.error("rest_client_error", method=request.method, error=str(e))
            raise NetworkError(f"uex {request.method} request failed: {e}")

    def handle_response(self, status: int, body: str) -> Any:
        """
        Classify a raw response.

        Args:
            status: HTTP status code.
            body: Response text.

        Returns:
            Any: Parsed JSON body.

        Raises:
            BaseError: The classified upstream error, an HTTP status error or
                NetworkError for an unparseable body.
        """
        parsed = self.classifier.check(body)

        if status == 429 or status >= 500:
            logger.warning("rest_exchange_not_available", status=status)
            raise ExchangeNotAvailable(f"uex HTTP {status}: {body[:200]}", response=parsed)
        if status >= 400:
            logger.error("rest_request_failed", status=status, error=body[:200])
            raise ExchangeError(f"uex HTTP {status}: {body[:200]}", response=parsed)

        if parsed is not None:
            return parsed
        try:
            return json.loads(body)
        except ValueError as e:
            logger.error("rest_invalid_json", status=status, body=body[:200])
            raise NetworkError(f"uex returned a body that is not JSON: {e}")

    async def send(self, request: RequestDescriptor) -> Any:
        """
        Send a request and return the parsed, successful body.

        Args:
            request: Descriptor produced by the signer.

        Returns:
            Any: Parsed JSON body whose ``code`` is "0".
        """
        await self._rate_limit()
        status, body = await self._fetch(request)
        logger.debug("rest_response_received", method=request.method, status=status)
        return self.handle_response(status, body)
