"""Invoice API client supplying match candidates."""

import logging
from typing import Any, Protocol

import httpx

from soa_recon.config import settings

logger = logging.getLogger(__name__)


class InvoiceSource(Protocol):
    """Anything that can supply candidate invoices for a vendor/company scope.

    Records may use canonical or aliased field names; the matching engine
    canonicalizes them.
    """

    async def get_invoices(
        self,
        vendor_id: str,
        company_id: str | None,
        statuses: list[str],
    ) -> list[dict[str, Any]]: ...


class InvoiceClientError(Exception):
    """Base exception for invoice client errors."""

    pass


class InvoiceAPIError(InvoiceClientError):
    """API request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class InvoiceClient:
    """Async client for the invoice records API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.invoice_api_url
        self.api_key = api_key or settings.invoice_api_key
        self.timeout = timeout or settings.invoice_api_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "InvoiceClient":
        """Async context manager entry."""
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "X-API-Key": self.api_key,
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make API request."""
        if self._client is None:
            raise InvoiceClientError("Client not initialized. Use async with context manager.")

        response = await self._client.request(method, path, params=params)

        if response.status_code >= 400:
            raise InvoiceAPIError(
                f"API error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        return response.json()

    async def get_invoices(
        self,
        vendor_id: str,
        company_id: str | None,
        statuses: list[str],
    ) -> list[dict[str, Any]]:
        """Get candidate invoices for a vendor.

        Args:
            vendor_id: Vendor the statement was issued by
            company_id: Optional company scope
            statuses: Invoice statuses to include

        Returns:
            Invoice records as returned by the API
        """
        params: dict[str, Any] = {"vendor_id": vendor_id}
        if company_id is not None:
            params["company_id"] = company_id
        if statuses:
            params["status"] = ",".join(statuses)

        data = await self._request("GET", "/api/invoices", params=params)
        items = data.get("items", [])
        logger.info(f"Fetched {len(items)} invoices for vendor {vendor_id}")
        return items
