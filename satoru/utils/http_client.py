from typing import Optional, Dict, Any, Mapping

import httpx

from satoru.config.settings import settings
from satoru.utils.exceptions import NetworkError, HttpStatusError, UpstreamDataError
from satoru.utils.logger import http_logger

# ===========================
# HTTP Client
# ===========================
class HTTPClient:

    def __init__(self, timeout: Optional[float] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            client_args = {
                "follow_redirects": True,
                "limits": httpx.Limits(max_connections=None, max_keepalive_connections=None)
            }
            if self._timeout:
                client_args["timeout"] = httpx.Timeout(float(self._timeout))
            if self._transport is not None:
                client_args["transport"] = self._transport
            self._client = httpx.AsyncClient(**client_args)
        return self._client

    async def get(self, url: str, headers: Optional[Mapping[str, str]] = None,
                  params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        client = await self.get_client()

        try:
            response = await client.get(url, headers=dict(headers or {}), params=params)
        except httpx.RequestError as e:
            http_logger.debug(f"GET {url} failed: {type(e).__name__}")
            raise NetworkError(url, type(e).__name__) from e

        http_logger.debug(f"GET {response.url} - {response.status_code}")
        if not response.is_success:
            raise HttpStatusError(str(response.url), response.status_code, body=response.text)
        return response

    async def get_text(self, url: str, headers: Optional[Mapping[str, str]] = None,
                       params: Optional[Dict[str, Any]] = None) -> str:
        response = await self.get(url, headers=headers, params=params)
        return response.text

    async def get_json(self, url: str, headers: Optional[Mapping[str, str]] = None,
                       params: Optional[Dict[str, Any]] = None) -> Any:
        response = await self.get(url, headers=headers, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamDataError(f"Invalid JSON from {response.url}") from e

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

# ===========================
# Global HTTP Client Instance
# ===========================
http_client = HTTPClient(timeout=settings.HTTP_TIMEOUT)
