import dataclasses
import typing

from ..serde.types import JSONValue
from ..transport import Transport, TransportResponse


class NotFound(Exception):
    pass


class ServerError(Exception):
    pass


@dataclasses.dataclass
class RecordedRequest:
    method: str
    url: str
    body: JSONValue
    headers: typing.Mapping[str, str]


class RecordingTransport(Transport):
    """
    Answers requests from a queue of prepared responses and records every request.
    A queued exception is raised instead of being returned.
    """

    requests: typing.List[RecordedRequest]
    responses: typing.List[typing.Union[TransportResponse, BaseException]]

    def respond(self, body: JSONValue = None, status: int = 200) -> "RecordingTransport":
        self.responses.append(TransportResponse(status=status, body=body))
        return self

    def fail(self, error: BaseException) -> "RecordingTransport":
        self.responses.append(error)
        return self

    async def request(
        self,
        method: str,
        url: str,
        body: JSONValue = None,
        headers: typing.Optional[typing.Mapping[str, str]] = None,
    ) -> TransportResponse:
        self.requests.append(
            RecordedRequest(
                method=method,
                url=url,
                body=body,
                headers=dict(headers) if headers is not None else {},
            )
        )
        if not self.responses:
            raise AssertionError(f"unexpected request: {method} {url}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    def is_not_found(self, error: BaseException) -> bool:
        return isinstance(error, NotFound)

    @property
    def last_request(self) -> RecordedRequest:
        return self.requests[-1]

    def __init__(self):
        self.requests = []
        self.responses = []
