"""
Client for a remote Domain Finder HTTP API.

Agent-side wrappers do not resolve domains themselves; they forward the
list to a deployed API at a configurable base URL and hand back its JSON.
"""

from typing import Any, Optional

import httpx

from .config import DEFAULT_API_URL


class RelayClient:
    """Forwards domain lists to POST {api_url}/check."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._client = client

    @property
    def check_url(self) -> str:
        return f"{self._api_url}/check"

    async def check(self, domains: Any) -> dict:
        """
        Check domains through the remote API.

        Never raises: bad input and transport failures come back as
        {"error": ...} payloads.
        """
        if not isinstance(domains, list) or not domains:
            return {"error": "Please provide an array of domains to check"}

        try:
            if self._client is not None:
                response = await self._post(self._client, domains)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client, domains)
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            return {"error": f"API request failed: {e}"}

    async def _post(self, client: httpx.AsyncClient, domains: list) -> httpx.Response:
        return await client.post(
            self.check_url,
            json={"domains": domains},
            timeout=httpx.Timeout(self._timeout),
        )
