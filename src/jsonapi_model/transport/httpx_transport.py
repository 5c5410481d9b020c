import logging
import typing

import httpx

from ..serde.types import JSONValue
from .interfaces import JSONAPI_HEADERS, Transport, TransportResponse

logger = logging.getLogger(__name__)


class HttpxTransport(Transport):
    """
    A :py:class:`Transport` backed by :py:class:`httpx.AsyncClient`.

    Authentication, timeouts, retries and the like are configured on the client, which may be
    passed in; otherwise one is created on first use from ``client_kwargs`` and owned by the
    transport.  Non-success statuses raise :py:class:`httpx.HTTPStatusError`.
    """

    _client: typing.Optional[httpx.AsyncClient]
    _owns_client: bool
    _client_kwargs: typing.Dict[str, typing.Any]

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_kwargs)
        return self._client

    def _decode(self, response: httpx.Response) -> JSONValue:
        if not response.content:
            return None
        return response.json()

    async def request(
        self,
        method: str,
        url: str,
        body: JSONValue = None,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
    ) -> TransportResponse:
        request_headers = dict(JSONAPI_HEADERS)
        if headers is not None:
            request_headers.update(headers)
        response = await self.client.request(
            method,
            url,
            json=body,
            headers=request_headers,
        )
        logger.debug("%s %s -> %d", method, url, response.status_code)
        response.raise_for_status()
        return TransportResponse(
            status=response.status_code,
            body=self._decode(response),
            headers=dict(response.headers),
        )

    def is_not_found(self, error: BaseException) -> bool:
        return (
            isinstance(error, httpx.HTTPStatusError)
            and error.response.status_code == httpx.codes.NOT_FOUND
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def __init__(self, client: typing.Optional[httpx.AsyncClient] = None, **client_kwargs):
        self._client = client
        self._owns_client = client is None
        self._client_kwargs = client_kwargs
