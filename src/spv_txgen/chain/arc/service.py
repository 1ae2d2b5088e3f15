"""ARC HTTP client.

Two endpoints of the ARC v1 API are used: ``POST /v1/tx`` to broadcast
(raw or Extended Format hex) and ``GET /v1/tx/{txid}`` to read a status.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from spv_txgen.chain.arc.models import TXInfo
from spv_txgen.errors.chain_errors import ARCError

if TYPE_CHECKING:
    from spv_txgen.config.settings import ARCConfig

logger = logging.getLogger(__name__)

# ARC-specific status codes
_ERROR_MESSAGES = {
    401: "ARC authentication failed",
    409: "Transaction already exists (conflict)",
    460: "Transaction is not in extended format",
    461: "Transaction is malformed",
    463: "Transaction has malformed outputs",
    464: "Transaction input is invalid",
    465: "Fee too low",
    473: "Cumulative fee validation failed",
}


class ARCService:
    """Async HTTP client for the ARC transaction broadcasting API.

    Usage::

        arc = ARCService(config)
        await arc.connect()
        try:
            info = await arc.broadcast(ef_hex)
        finally:
            await arc.close()
    """

    def __init__(self, config: ARCConfig) -> None:
        self._config = config
        self._client: httpx.AsyncClient | None = None

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if self._config.token:
            headers["Authorization"] = f"Bearer {self._config.token}"
        if self._config.deployment_id:
            headers["XDeployment-ID"] = self._config.deployment_id

        self._client = httpx.AsyncClient(
            base_url=self._config.url.rstrip("/"),
            headers=headers,
            timeout=self._config.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def broadcast(self, raw_tx: str, *, wait_for: str | None = None) -> TXInfo:
        """Broadcast a transaction (raw or EF hex).

        Args:
            raw_tx: Transaction hex.
            wait_for: Status ARC should reach before answering; defaults to
                the configured ``wait_for``.

        Raises:
            ARCError: On network failure or a non-2xx response.
        """
        headers = {"X-WaitFor": wait_for or self._config.wait_for.value}
        if self._config.callback_url:
            headers["X-CallbackUrl"] = self._config.callback_url
        if self._config.callback_token:
            headers["X-CallbackToken"] = self._config.callback_token
        return await self._request(
            "POST", "/v1/tx", "broadcast", json={"rawTx": raw_tx}, headers=headers
        )

    async def query_transaction(self, txid: str) -> TXInfo:
        """Current ARC status of *txid*.

        Raises:
            ARCError: On network failure or a non-2xx response.
        """
        return await self._request("GET", f"/v1/tx/{txid}", "query")

    async def _request(
        self, method: str, path: str, operation: str, **kwargs: Any
    ) -> TXInfo:
        if self._client is None:
            msg = "ARC service not connected. Call connect() first."
            raise ARCError(msg, status_code=500)
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("ARC %s failed: %s", operation, exc)
            raise ARCError(f"ARC {operation} failed: {exc}") from exc
        if not response.is_success:
            raise self._error_for_status(response, operation)
        body = _json_object(response)
        if body is None:
            logger.warning("ARC %s returned a non-object body: %.200s", operation, response.text)
            raise ARCError(f"ARC {operation} returned an invalid body", status_code=502)
        return TXInfo.from_dict(body)

    @staticmethod
    def _error_for_status(response: httpx.Response, operation: str) -> ARCError:
        status = response.status_code
        body = _json_object(response) or {}
        detail = body.get("detail") or body.get("title") or response.text
        logger.warning("ARC %s returned %d: %s", operation, status, detail)
        message = _ERROR_MESSAGES.get(status, f"ARC {operation} failed ({status}): {detail}")
        return ARCError(message, status_code=status)


def _json_object(response: httpx.Response) -> dict[str, Any] | None:
    """The response body as a JSON object, or None for anything else."""
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None
