import httpx
from structlog import get_logger

from pakproperty.errors import ApiError, TransientNetworkError

logger = get_logger()

DEFAULT_BASE_URL = "http://localhost:8000/api"

class ApiClient:
    """HTTP access to the listings API.

    Attaches the bearer token to every request and turns failures into
    :class:`ApiError` (the server answered with an error) or
    :class:`TransientNetworkError` (no response at all).
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, token: str | None = None,
                 timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self.token = token
        self._client = httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self._client.aclose()

    async def request(self, method: str, path: str, **kwargs) -> dict:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as e:
            logger.warning("Request failed", method=method, path=path, error=str(e))
            raise TransientNetworkError() from e
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = body.get("message") if isinstance(body, dict) else None
            errors = body.get("errors") if isinstance(body, dict) else None
            logger.warning("Request rejected", method=method, path=path, status_code=response.status_code, message=message)
            raise ApiError(response.status_code, message, errors)
        try:
            return response.json()
        except ValueError:
            return {"success": True}

    async def get(self, path: str, params: dict | None = None) -> dict:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, **kwargs) -> dict:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> dict:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs) -> dict:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str) -> dict:
        return await self.request("DELETE", path)
