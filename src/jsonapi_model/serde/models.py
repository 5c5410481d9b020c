"""
Classes in :py:mod:`jsonapi_model.serde.models` represent the elements of a JSON:API document
as they travel between the wire and the entity layer.

Every node remembers where it was read from in ``_source_``, so that problems found later can
point back into the response document.
"""

import dataclasses
import datetime
import decimal
import typing
from collections import OrderedDict

from .types import ResourceKey
from .utils import JSONPointer

Source = typing.Union[JSONPointer, str]
Meta = typing.Dict[str, typing.Any]


class MissingType:
    """
    Type of :py:data:`Missing`, which tells an absent member apart from an explicit ``null``.
    """

    def __bool__(self):
        return False

    def __repr__(self):
        return "Missing"

    def __init__(self):
        raise TypeError("Not directly instantiable")


Missing = object.__new__(MissingType)


def _meta(value: typing.Optional[Meta]) -> Meta:
    return dict(value) if value is not None else {}


@dataclasses.dataclass
class LinksRepr:
    """
    A ``links`` object.  Link objects are reduced to their ``href``.

    Ref.

    * `Document Links <https://jsonapi.org/format/#document-links>`_
    * `Pagination <https://jsonapi.org/format/#fetching-pagination>`_
    """

    self_: typing.Optional[str] = None
    related: typing.Optional[str] = None
    next: typing.Optional[str] = None
    prev: typing.Optional[str] = None
    first: typing.Optional[str] = None
    last: typing.Optional[str] = None
    _source_: typing.Optional[Source] = None

    @property
    def has_pagination(self) -> bool:
        return any(link is not None for link in (self.next, self.prev, self.first, self.last))


@dataclasses.dataclass
class ResourceIdRepr:
    """
    A `Resource Identifier Object <https://jsonapi.org/format/#document-resource-identifier-objects>`_.
    """

    type: str
    id: str
    meta: Meta = dataclasses.field(default_factory=dict)
    _source_: typing.Optional[Source] = None

    @property
    def key(self) -> ResourceKey:
        return (self.type, self.id)

    def __post_init__(self):
        self.meta = _meta(self.meta)


LinkageData = typing.Union[None, ResourceIdRepr, typing.Sequence[ResourceIdRepr]]


@dataclasses.dataclass
class LinkageRepr:
    """
    A relationship object and its `Resource Linkage <https://jsonapi.org/format/#document-resource-object-linkage>`_.

    ``data`` is :py:data:`Missing` when the relationship object carries only ``links`` or
    ``meta``, ``None`` for an empty to-one relationship, a :py:class:`ResourceIdRepr` for a
    to-one relationship and a tuple of them for a to-many relationship.
    """

    data: typing.Union[LinkageData, MissingType] = Missing
    links: typing.Optional[LinksRepr] = None
    meta: Meta = dataclasses.field(default_factory=dict)
    _source_: typing.Optional[Source] = None

    @property
    def is_to_many(self) -> bool:
        return not isinstance(self.data, (ResourceIdRepr, MissingType)) and self.data is not None

    def __post_init__(self):
        if self.is_to_many:
            self.data = tuple(typing.cast(typing.Sequence[ResourceIdRepr], self.data))
        self.meta = _meta(self.meta)


AttributeScalar = typing.Union[
    datetime.datetime, datetime.date, decimal.Decimal, str, int, float, bool, None
]
AttributeValue = typing.Union[
    typing.Sequence[typing.Any],
    typing.Mapping[str, typing.Any],
    AttributeScalar,
]


@dataclasses.dataclass
class ResourceRepr:
    """
    A `Resource Object <https://jsonapi.org/format/#document-resource-objects>`_.
    ``id`` is ``None`` for a resource that is about to be created.

    ``attributes`` and ``relationships`` may be given as any iterable of pairs; they are kept
    as :py:class:`OrderedDict` so that their order survives a round trip.
    """

    type: str
    id: typing.Optional[str] = None
    attributes: "OrderedDict[str, AttributeValue]" = dataclasses.field(
        default_factory=OrderedDict
    )
    relationships: "OrderedDict[str, LinkageRepr]" = dataclasses.field(
        default_factory=OrderedDict
    )
    links: typing.Optional[LinksRepr] = None
    meta: Meta = dataclasses.field(default_factory=dict)
    _source_: typing.Optional[Source] = None

    @property
    def key(self) -> typing.Optional[ResourceKey]:
        return (self.type, self.id) if self.id is not None else None

    def __getitem__(self, name: str) -> AttributeValue:
        return self.attributes[name]

    def __post_init__(self):
        self.attributes = OrderedDict(
            self.attributes.items() if isinstance(self.attributes, typing.Mapping) else self.attributes
        )
        self.relationships = OrderedDict(
            self.relationships.items()
            if isinstance(self.relationships, typing.Mapping)
            else self.relationships
        )
        self.meta = _meta(self.meta)


@dataclasses.dataclass
class DocumentReprBase:
    jsonapi: typing.Dict[str, typing.Any] = dataclasses.field(default_factory=dict)
    included: typing.Sequence[ResourceRepr] = ()
    links: typing.Optional[LinksRepr] = None
    meta: Meta = dataclasses.field(default_factory=dict)
    _source_: typing.Optional[Source] = None

    @property
    def primary(self) -> typing.Sequence[ResourceRepr]:
        raise NotImplementedError()

    def __post_init__(self):
        self.jsonapi = _meta(self.jsonapi)
        self.included = tuple(self.included)
        self.meta = _meta(self.meta)


@dataclasses.dataclass
class SingletonDocumentRepr(DocumentReprBase):
    """
    A document whose primary data is a single resource, or ``None``.
    """

    data: typing.Optional[ResourceRepr] = None

    @property
    def primary(self) -> typing.Sequence[ResourceRepr]:
        return (self.data,) if self.data is not None else ()


@dataclasses.dataclass
class CollectionDocumentRepr(DocumentReprBase):
    data: typing.Sequence[ResourceRepr] = ()

    @property
    def primary(self) -> typing.Sequence[ResourceRepr]:
        return self.data

    def __post_init__(self):
        super().__post_init__()
        self.data = tuple(self.data)
