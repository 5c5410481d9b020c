import collections.abc
import functools
import math
import typing

from .assembly import GraphAssembler
from .serde.deserializer import ReprDeserializer
from .serde.models import (
    CollectionDocumentRepr,
    DocumentReprBase,
    LinksRepr,
    SingletonDocumentRepr,
)
from .serde.types import JSONValue
from .transport import TransportResponse

if typing.TYPE_CHECKING:
    from .builder import Builder  # noqa: F401
    from .entity import Entity  # noqa: F401

E = typing.TypeVar("E", bound="Entity")

_deserializer = ReprDeserializer()


class Response(typing.Generic[E]):
    """
    Typed access over the raw response document of a request.
    """

    entity_class: typing.Type[E]
    http_response: TransportResponse
    document_type: typing.Type[DocumentReprBase]
    _graph: typing.Optional[typing.Tuple[typing.List[E], typing.List["Entity"]]] = None

    @property
    def document(self) -> JSONValue:
        return self.http_response.body

    @property
    def status(self) -> int:
        return self.http_response.status

    @functools.cached_property
    def document_repr(self) -> DocumentReprBase:
        return _deserializer(self.document_type, self.document)

    def _get_graph(self) -> typing.Tuple[typing.List[E], typing.List["Entity"]]:
        if self._graph is None:
            primary, included = GraphAssembler(self.document_repr)(self.entity_class)
            self._graph = (typing.cast(typing.List[E], primary), included)
        return self._graph

    @property
    def included(self) -> typing.List["Entity"]:
        return self._get_graph()[1]

    @property
    def meta(self) -> typing.Dict[str, typing.Any]:
        return self.document_repr.meta

    @property
    def links(self) -> typing.Optional[LinksRepr]:
        return self.document_repr.links

    def __init__(
        self,
        entity_class: typing.Type[E],
        http_response: TransportResponse,
        document_type: typing.Type[DocumentReprBase],
    ):
        self.entity_class = entity_class
        self.http_response = http_response
        self.document_type = document_type
        self._graph = None


class SingularResponse(Response[E]):
    """
    The result of fetching a single resource. ``data`` is ``None`` when the server answered
    successfully with no resource.
    """

    @property
    def data(self) -> typing.Optional[E]:
        primary = self._get_graph()[0]
        return primary[0] if primary else None

    def __init__(
        self,
        entity_class: typing.Type[E],
        http_response: TransportResponse,
        document_type: typing.Type[DocumentReprBase] = SingletonDocumentRepr,
    ):
        super().__init__(entity_class, http_response, document_type)
        self._get_graph()


def _read_count(
    mapping: typing.Any, names: typing.Sequence[str]
) -> typing.Optional[int]:
    if not isinstance(mapping, collections.abc.Mapping):
        return None
    for name in names:
        value = mapping.get(name)
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.isdigit():
            return int(value)
    return None


class PluralResponse(Response[E]):
    """
    One page of a collection, with the pagination state needed to move to other pages.

    The page count and the total are read from ``meta.page`` or, failing that, from the
    top-level ``meta``.
    """

    builder: "Builder[E]"
    page: int
    page_size: int

    @property
    def data(self) -> typing.List[E]:
        return list(self._get_graph()[0])

    @property
    def total(self) -> typing.Optional[int]:
        retval = _read_count(self.meta.get("page"), ("total",))
        if retval is None:
            retval = _read_count(self.meta, ("total", "count"))
        return retval

    @property
    def page_count(self) -> typing.Optional[int]:
        retval = _read_count(
            self.meta.get("page"), ("last-page", "last_page", "total-pages", "total_pages")
        )
        if retval is None:
            retval = _read_count(self.meta, ("last-page", "total-pages", "total_pages", "page-count"))
        if retval is None:
            total = self.total
            if total is not None:
                retval = math.ceil(total / self.page_size)
        return retval

    @property
    def has_next_page(self) -> bool:
        links = self.links
        if links is not None and links.has_pagination:
            return links.next is not None
        page_count = self.page_count
        if page_count is not None:
            return self.page < page_count
        return len(self._get_graph()[0]) >= self.page_size

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    async def get_next_page(self) -> typing.Optional["PluralResponse[E]"]:
        if not self.has_next_page:
            return None
        return await self.builder.get(self.page + 1)

    async def get_previous_page(self) -> typing.Optional["PluralResponse[E]"]:
        if not self.has_previous_page:
            return None
        return await self.builder.get(self.page - 1)

    async def get_first_page(self) -> "PluralResponse[E]":
        return await self.builder.get(1)

    async def get_last_page(self) -> typing.Optional["PluralResponse[E]"]:
        page_count = self.page_count
        if page_count is None:
            return None
        return await self.builder.get(max(page_count, 1))

    def __len__(self) -> int:
        return len(self._get_graph()[0])

    def __iter__(self) -> typing.Iterator[E]:
        return iter(self._get_graph()[0])

    def __init__(
        self,
        builder: "Builder[E]",
        http_response: TransportResponse,
        page: int,
        page_size: int,
    ):
        super().__init__(builder.entity_class, http_response, CollectionDocumentRepr)
        self.builder = builder
        self.page = page
        self.page_size = page_size
        self._get_graph()


class SaveResponse(Response[E]):
    """
    The result of creating or updating an entity.  ``model_id`` is the identity found in the
    response body, if any.  The returned resource is only deserialized when ``data`` is read.
    """

    @property
    def model_id(self) -> typing.Optional[str]:
        body = self.document
        if not isinstance(body, collections.abc.Mapping):
            return None
        data = body.get("data")
        if not isinstance(data, collections.abc.Mapping):
            return None
        id_ = data.get("id")
        if isinstance(id_, bool) or not isinstance(id_, (str, int)):
            return None
        id_ = str(id_)
        return id_ if id_ else None

    @property
    def data(self) -> typing.Optional[E]:
        body = self.document
        if not isinstance(body, collections.abc.Mapping) or body.get("data") is None:
            return None
        primary = self._get_graph()[0]
        return primary[0] if primary else None

    def __init__(self, entity_class: typing.Type[E], http_response: TransportResponse):
        super().__init__(entity_class, http_response, SingletonDocumentRepr)
