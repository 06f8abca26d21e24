"""
HTTP capture provider.

Fetches a captured artifact (typically a PNG screenshot) from a capture
backend using an httpx AsyncClient:

- GET {base_url}{capture_path} returns the raw artifact bytes
- GET {base_url}/health is used for health checks

Transport-level retries are deliberately absent: the orchestrator owns the
retry loop, this client only maps failures onto typed errors.
"""

import time
from typing import Optional

import httpx
import structlog

from capture_flow.providers.base import CaptureResult
from capture_flow.retry.exceptions import (
    CaptureConnectionError,
    CaptureError,
    CaptureHTTPError,
    CaptureTimeoutError,
)

logger = structlog.get_logger(__name__)


class HttpCaptureProvider:
    """
    Capture provider backed by an HTTP endpoint.

    Failure mapping:
    - httpx.TimeoutException -> CaptureTimeoutError (retryable)
    - httpx.TransportError -> CaptureConnectionError (retryable)
    - HTTP 408/425/429/5xx -> CaptureHTTPError (retryable)
    - other HTTP errors -> CaptureHTTPError (fatal)
    - empty body -> CaptureResult(artifact=None), left to the orchestrator
    """

    def __init__(
        self,
        base_url: str,
        capture_path: str = "/capture",
        timeout: float = 30,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP capture provider.

        Args:
            base_url: Capture backend URL (e.g. http://capture:8080)
            capture_path: Path of the capture endpoint
            timeout: HTTP timeout in seconds
            connection_limits: httpx pool limits (default: 5 max connections)
            transport: Optional custom transport (e.g. httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.capture_path = capture_path
        self.timeout = timeout
        self._connection_limits = connection_limits or httpx.Limits(
            max_keepalive_connections=2,
            max_connections=5,
            keepalive_expiry=30.0,
        )
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            "HTTP capture provider initialized",
            base_url=self.base_url,
            capture_path=capture_path,
            timeout=timeout,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
                follow_redirects=True,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def capture(self) -> CaptureResult:
        """
        Fetch one artifact from the capture backend.

        Raises:
            CaptureTimeoutError: Backend did not answer in time
            CaptureConnectionError: Backend unreachable
            CaptureHTTPError: Backend answered with an error status
        """
        steps: list[str] = []
        url = f"{self.base_url}{self.capture_path}"
        start_time = time.monotonic()

        steps.append(f"Step 1: Request capture from {url}")
        try:
            client = await self._get_client()
            response = await client.get(self.capture_path)
            response.raise_for_status()

        except httpx.TimeoutException as e:
            logger.warning("Capture request timeout", url=url, timeout=self.timeout, error=str(e))
            raise CaptureTimeoutError(
                f"Capture request timeout after {self.timeout}s",
                details={"url": url, "timeout": self.timeout},
            ) from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error("Capture backend HTTP error", url=url, status_code=status_code)
            raise CaptureHTTPError(
                f"Capture backend returned HTTP {status_code}",
                status_code=status_code,
                details={"url": url},
            ) from e

        except httpx.TransportError as e:
            logger.warning("Capture network error", url=url, error=str(e))
            raise CaptureConnectionError(
                f"Network error: {e}",
                details={"url": url, "error_type": type(e).__name__},
            ) from e

        except httpx.HTTPError as e:
            raise CaptureError(
                f"Unexpected capture error: {e}",
                details={"url": url, "error_type": type(e).__name__},
            ) from e

        latency_ms = (time.monotonic() - start_time) * 1000
        content_type = response.headers.get("content-type", "image/png").split(";")[0].strip()
        artifact = response.content

        if not artifact:
            steps.append("Step 2: Capture backend returned an empty body")
            logger.warning("Capture returned empty artifact", url=url, latency_ms=round(latency_ms))
            return CaptureResult(artifact=None, steps=steps, content_type=content_type)

        steps.append(f"Step 2: Received {len(artifact)} bytes ({content_type})")
        logger.info(
            "Capture successful",
            url=url,
            size_bytes=len(artifact),
            content_type=content_type,
            latency_ms=round(latency_ms),
        )
        return CaptureResult(artifact=artifact, steps=steps, content_type=content_type)

    async def health_check(self) -> bool:
        """
        Check that the capture backend is reachable.

        Returns True if the backend responds with a success status, False otherwise.
        Never raises.
        """
        try:
            client = await self._get_client()
            response = await client.get("/health", timeout=5.0)
            response.raise_for_status()
            return True
        except Exception as e:
            logger.warning("Capture health check failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed capture HTTP client")
        self._client = None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
