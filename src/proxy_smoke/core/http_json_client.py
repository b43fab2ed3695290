import logging
from typing import Any, Optional

import httpx

from proxy_smoke.config.config import Config

logger = logging.getLogger(__name__)


class HttpStatusError(Exception):
    """
    Raised when the server answers with a status code of 400 or above.
    """

    def __init__(self, status_code: int, text: str):
        super().__init__(f"HTTP {status_code}: {text}")
        self.status_code = status_code
        self.text = text


class HttpJsonClient:
    """
    Client issuing single JSON requests, used by the smoke checks.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_ms: float = Config.TIMEOUT_MS,
        verbose: bool = False,
    ):
        """
        Initialize the HttpJsonClient.

        Args:
            client (Optional[httpx.AsyncClient]): Client to send requests with. When
                omitted one is created and closed by ``aclose``.
            timeout_ms (float): Per-request timeout in milliseconds, forwarded to httpx.
            verbose (bool): Log the path, status and raw body of every response.
        """
        self._owns_client = client is None
        # Requests target the local proxy directly, never through HTTP(S)_PROXY
        self.client = client or httpx.AsyncClient(trust_env=False)
        self.timeout = httpx.Timeout(timeout_ms / 1000.0)
        self.verbose = verbose

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    async def fetch_json(self, url: str, body: Optional[Any] = None) -> Any:
        """
        Send one request and return the decoded JSON body.

        POSTs ``body`` as JSON when given, otherwise GETs. Transport errors from httpx
        propagate unchanged.

        Args:
            url (str): Absolute URL to request.
            body (Optional[Any]): JSON-serializable payload.

        Returns:
            Any: The parsed response body.

        Raises:
            HttpStatusError: If the response status is 400 or above.
            json.JSONDecodeError: If the response body is not valid JSON.
        """
        if body is not None:
            # httpx sets Content-Type: application/json for json= payloads
            resp = await self.client.post(url, json=body, timeout=self.timeout)
        else:
            resp = await self.client.get(url, timeout=self.timeout)

        text = resp.text
        if self.verbose:
            logger.info(f"{resp.request.url.path} -> {resp.status_code}")
            logger.info(text)

        if resp.status_code >= 400:
            raise HttpStatusError(resp.status_code, text)
        return resp.json()
