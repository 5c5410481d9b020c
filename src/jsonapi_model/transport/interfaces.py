"""
The boundary between the entity layer and whatever performs HTTP requests.

Implementations raise their own errors for network failures and non-success statuses;
those errors reach the caller of the entity layer unchanged.
"""
import abc
import dataclasses
import typing

from ..serde.types import JSONValue

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"

JSONAPI_HEADERS: typing.Mapping[str, str] = {
    "Accept": JSONAPI_MEDIA_TYPE,
    "Content-Type": JSONAPI_MEDIA_TYPE,
}


@dataclasses.dataclass
class TransportResponse:
    status: int
    body: JSONValue = None
    headers: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)


class Transport(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    async def request(
        self,
        method: str,
        url: str,
        body: JSONValue = None,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
    ) -> TransportResponse:
        """
        Performs a single request.

        :param str method: the HTTP verb.
        :param str url: the absolute URL, query string included.
        :param JSONValue body: a JSON-compatible object sent as the request body, if any.
        :param Optional[Mapping[str, str]] headers: request headers.
        :return: the response with its body decoded, ``None`` for an empty body.
        """
        ...  # pragma: nocover

    def is_not_found(self, error: BaseException) -> bool:
        """
        Tells whether ``error``, raised by :py:meth:`request`, means the resource does not exist.
        """
        return False

    async def get(
        self, url: str, headers: typing.Optional[typing.Mapping[str, str]] = None
    ) -> TransportResponse:
        return await self.request("GET", url, headers=headers)

    async def delete(
        self, url: str, headers: typing.Optional[typing.Mapping[str, str]] = None
    ) -> TransportResponse:
        return await self.request("DELETE", url, headers=headers)

    async def head(
        self, url: str, headers: typing.Optional[typing.Mapping[str, str]] = None
    ) -> TransportResponse:
        return await self.request("HEAD", url, headers=headers)

    async def post(
        self,
        url: str,
        body: JSONValue = None,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
    ) -> TransportResponse:
        return await self.request("POST", url, body, headers)

    async def put(
        self,
        url: str,
        body: JSONValue = None,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
    ) -> TransportResponse:
        return await self.request("PUT", url, body, headers)

    async def patch(
        self,
        url: str,
        body: JSONValue = None,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
    ) -> TransportResponse:
        return await self.request("PATCH", url, body, headers)
