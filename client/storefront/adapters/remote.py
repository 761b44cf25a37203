import logging
from typing import Any, Dict, Optional

import httpx

from storefront.config import settings
from storefront.services.failures import TransportFailure

log = logging.getLogger(__name__)


class RemoteService:
    """
    Base for the remote storefront API clients.

    Owns one `httpx.AsyncClient`; every transport error, non-2xx status or
    undecodable body is raised as `TransportFailure`. Timeouts are left to
    httpx.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url or settings.BASE_API_URL,
            timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    @staticmethod
    def _headers(token: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, token: Optional[str], **kwargs) -> Any:
        try:
            response = await self.client.request(method, path, headers=self._headers(token), **kwargs)
        except httpx.HTTPError as e:
            log.error("%s %s failed: %s", method, path, e)
            raise TransportFailure() from e

        if not response.is_success:
            log.error("%s %s returned %s: %s", method, path, response.status_code, response.text)
            raise TransportFailure(self._server_message(response), status=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            log.error("%s %s returned a non-JSON body", method, path)
            raise TransportFailure(status=response.status_code) from e

    @staticmethod
    def _server_message(response: httpx.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return None

    async def aclose(self) -> None:
        await self.client.aclose()
