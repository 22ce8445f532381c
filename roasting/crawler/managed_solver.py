"""
Managed challenge-solver client.
Delegates rendering to an external FlareSolverr-compatible service that runs
the page in its own browser and returns the final HTML.
"""

from typing import Any

import httpx

from roasting.crawler.backend import AcquisitionBackend
from roasting.crawler.errors import FetchError, FetchErrorKind
from roasting.crawler.fetch_result import BackendCapability, RelativeCost
from roasting.utils.config import ManagedSolverConfig, get_settings
from roasting.utils.logging import get_logger

logger = get_logger(__name__)


class ManagedSolverClient(AcquisitionBackend):
    """HTTP client for the external solver service.

    Only available when an endpoint is configured (FLARESOLVERR_URL). When
    present it is the trusted first backend: its output is returned without
    a quality check.
    """

    _capability = BackendCapability(
        name="managed_solver",
        requires_external_service=True,
        supports_js_execution=True,
        relative_cost=RelativeCost.LOW,
    )

    def __init__(
        self,
        config: ManagedSolverConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__()
        self._config = config or get_settings().solver
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def capability(self) -> BackendCapability:
        return self._capability

    @property
    def endpoint(self) -> str | None:
        if not self._config.endpoint:
            return None
        return self._config.endpoint.rstrip("/")

    def is_available(self) -> bool:
        return self.endpoint is not None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.request_timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
        await super().close()

    def _build_payload(self, url: str) -> dict[str, Any]:
        return {
            "cmd": "request.get",
            "url": url,
            "maxTimeout": self._config.max_timeout_ms,
        }

    async def fetch(self, url: str) -> str:
        """Ask the solver service to render ``url``.

        Args:
            url: Target URL.

        Returns:
            Rendered HTML from ``solution.response``.

        Raises:
            FetchError: network/timeout on transport problems, blocked when
                the service reports anything but ``status == "ok"``.
        """
        endpoint = self.endpoint
        if endpoint is None:
            raise FetchError(FetchErrorKind.NETWORK, "managed solver endpoint not configured")

        client = await self._get_client()
        logger.info("Trying managed solver", url=url[:80], endpoint=endpoint)

        try:
            response = await client.post(f"{endpoint}/v1", json=self._build_payload(url))
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Managed solver timeout", url=url[:80], error=str(e))
            raise FetchError(FetchErrorKind.TIMEOUT, "managed solver timed out")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning("Managed solver HTTP error", url=url[:80], status_code=status)
            raise FetchError(FetchErrorKind.NETWORK, "managed solver HTTP error", status=status)
        except httpx.RequestError as e:
            logger.warning("Managed solver request error", url=url[:80], error=str(e))
            raise FetchError(FetchErrorKind.NETWORK, f"managed solver unreachable: {e}")
        except ValueError as e:
            logger.warning("Managed solver returned invalid JSON", url=url[:80], error=str(e))
            raise FetchError(FetchErrorKind.NETWORK, "managed solver returned invalid JSON")

        if not isinstance(data, dict):
            raise FetchError(FetchErrorKind.NETWORK, "managed solver returned unexpected payload")

        status = data.get("status")
        if status != "ok":
            message = data.get("message") or "no message"
            logger.warning(
                "Managed solver failed",
                url=url[:80],
                solver_status=status,
                message=message,
            )
            raise FetchError(FetchErrorKind.BLOCKED, f"managed solver status {status}: {message}")

        solution = data.get("solution") or {}
        html = solution.get("response") if isinstance(solution, dict) else None
        if not html:
            logger.warning("Managed solver returned no HTML", url=url[:80])
            raise FetchError(FetchErrorKind.BLOCKED, "managed solver returned no HTML")

        logger.info(
            "Managed solver success",
            url=url[:80],
            upstream_status=solution.get("status"),
            content_length=len(html),
        )
        return html
