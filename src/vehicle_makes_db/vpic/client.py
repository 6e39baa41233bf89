"""Async vPIC API client using httpx.

This module provides a typed async interface to the two vPIC endpoints
the sync pipeline consumes. The client never retries: a failed request
surfaces as NetworkError and is picked up again on the next sync run.
"""

from __future__ import annotations

import secrets

import httpx

from vehicle_makes_db import __version__
from vehicle_makes_db.config import VPICConfig, get_settings
from vehicle_makes_db.exceptions import NetworkError
from vehicle_makes_db.logging import get_logger
from vehicle_makes_db.schemas import Make, VehicleType

from . import markup
from .markup import ParsedTree

logger = get_logger(__name__)


class VPICClient:
    """Async vPIC client for make and vehicle type retrieval.

    Usage:
        async with VPICClient() as client:
            makes = await client.get_all_makes()
            types = await client.get_vehicle_types(makes[0].make_id)

    A custom ``transport`` may be injected (e.g. ``httpx.MockTransport``
    in tests).
    """

    def __init__(
        self,
        config: VPICConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the vPIC client.

        Args:
            config: Remote source configuration (uses settings if not provided)
            transport: Optional httpx transport override
        """
        self._config = config or get_settings().vpic
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def _http(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url.rstrip("/"),
                timeout=httpx.Timeout(self._config.request_timeout_seconds),
                transport=self._transport,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> VPICClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    def _headers(self) -> dict[str, str]:
        """Build request headers with a fresh client identity.

        vPIC sits behind a firewall that throttles repeated identities, so
        every request gets its own User-Agent.
        """
        return {
            "User-Agent": (
                f"{self._config.user_agent_prefix}/{__version__} "
                f"(+{secrets.token_hex(8)})"
            ),
            "Accept": "application/xml, text/xml",
        }

    async def _get_document(self, path: str) -> ParsedTree:
        """Issue one GET request and parse the response body.

        Raises:
            NetworkError: On transport failure, timeout or non-2xx status
            ParseError: If the body is not a well-formed markup document
        """
        url = f"{self._config.base_url.rstrip('/')}{path}"
        try:
            response = await self._http.get(path, headers=self._headers())
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise NetworkError(f"Request to {path} timed out", url=url) from e
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"vPIC returned HTTP {e.response.status_code} for {path}",
                status_code=e.response.status_code,
                url=url,
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(f"Request to {path} failed: {e}", url=url) from e

        return markup.parse(response.content)

    # -------------------------------------------------------------------------
    # Raw documents
    # -------------------------------------------------------------------------
    async def fetch_all_makes(self) -> ParsedTree:
        """Fetch the full make list document."""
        logger.debug("Reading all makes from vPIC")
        return await self._get_document("/getallmakes?format=XML")

    async def fetch_types_for_make(self, make_id: str) -> ParsedTree:
        """Fetch the vehicle type document of one make."""
        logger.debug("Reading vehicle types for make {}", make_id)
        return await self._get_document(f"/GetVehicleTypesForMakeId/{make_id}?format=xml")

    # -------------------------------------------------------------------------
    # Extracted records
    # -------------------------------------------------------------------------
    async def get_all_makes(self) -> list[Make]:
        """Fetch every make as a shell (no vehicle types)."""
        makes = markup.extract_makes(await self.fetch_all_makes())
        logger.info("{} makes retrieved from vPIC", len(makes))
        return makes

    async def get_vehicle_types(self, make_id: str) -> list[VehicleType]:
        """Fetch the vehicle types of one make."""
        return markup.extract_types(await self.fetch_types_for_make(make_id))

    async def get_make_count(self) -> int:
        """Fetch the make count reported by vPIC."""
        return markup.extract_count(await self.fetch_all_makes())
