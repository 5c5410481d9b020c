"""
Per-type configuration of entity classes.

Each :py:class:`~jsonapi_model.entity.Entity` subclass declares its configuration in a nested
``Meta`` class.  The declaration is read once, when the class is created, into an immutable
:py:class:`EntityConfig` that inherits every value the subclass does not name from the
configuration of its base class:

.. code-block:: python

   class Base(Entity):
       class Meta:
           base_url = "https://api.example.com/v1"

   class Book(Base):
       class Meta:
           type = "books"
           read_only_attributes = ("created_at",)
           dates = {"published_at": "%Y-%m-%d"}
           relationships = {"author": HasOne("authors")}
"""
import dataclasses
import functools
import typing
from urllib.parse import quote

from .exceptions import ConfigurationError, InvalidDeclarationError, UnknownResourceTypeError
from .pagination import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_PARAM_NAMES,
    PaginationParamNames,
    PaginationStrategy,
)
from .transport import Transport

if typing.TYPE_CHECKING:
    from .entity import Entity  # noqa: F401
    from .relations import RelationDeclaration  # noqa: F401


_default_transport: typing.Optional[Transport] = None


def get_default_transport() -> Transport:
    """
    Returns the transport used by entity classes that do not configure one,
    creating an :py:class:`~jsonapi_model.transport.httpx_transport.HttpxTransport` on first use.
    """
    global _default_transport
    if _default_transport is None:
        from .transport.httpx_transport import HttpxTransport

        _default_transport = HttpxTransport()
    return _default_transport


def set_default_transport(transport: typing.Optional[Transport]) -> None:
    global _default_transport
    _default_transport = transport


def member_url(collection_url: str, id: typing.Union[str, int]) -> str:
    """
    Returns the URL of the member ``id`` of a collection, with the id percent-encoded.
    """
    return f"{collection_url}/{quote(str(id), safe='')}"


@dataclasses.dataclass(frozen=True)
class EntityConfig:
    owner: type = dataclasses.field(compare=False, repr=False)
    type: typing.Optional[str] = None
    base_url: typing.Optional[str] = None
    endpoint: typing.Optional[str] = None
    page_size: int = DEFAULT_PAGE_SIZE
    pagination_strategy: PaginationStrategy = PaginationStrategy.OFFSET_BASED
    param_names: PaginationParamNames = DEFAULT_PARAM_NAMES
    read_only_attributes: typing.FrozenSet[str] = frozenset()
    dates: typing.Mapping[str, str] = dataclasses.field(default_factory=dict)
    transport: typing.Optional[Transport] = None
    relationships: typing.Mapping[str, "RelationDeclaration"] = dataclasses.field(
        default_factory=dict
    )

    @functools.cached_property
    def effective_type(self) -> str:
        if self.type is None:
            raise ConfigurationError(self.owner, "type")
        return self.type

    @functools.cached_property
    def effective_base_url(self) -> str:
        if self.base_url is None:
            raise ConfigurationError(self.owner, "base_url")
        return self.base_url.rstrip("/")

    @functools.cached_property
    def effective_endpoint(self) -> str:
        endpoint = self.endpoint if self.endpoint is not None else self.effective_type
        return endpoint.strip("/")

    @functools.cached_property
    def collection_url(self) -> str:
        return f"{self.effective_base_url}/{self.effective_endpoint}"

    @property
    def effective_transport(self) -> Transport:
        return self.transport if self.transport is not None else get_default_transport()

    def resource_url(self, id: typing.Union[str, int]) -> str:
        return member_url(self.collection_url, id)

    def is_date_attribute(self, name: str) -> bool:
        return name in self.dates


_META_FIELDS = frozenset(
    [
        "type",
        "base_url",
        "endpoint",
        "page_size",
        "pagination_strategy",
        "page_number_param",
        "page_size_param",
        "offset_param",
        "limit_param",
        "read_only_attributes",
        "dates",
        "transport",
        "relationships",
    ]
)


def handle_meta(
    owner: type, meta: typing.Optional[type], base: typing.Optional[EntityConfig]
) -> EntityConfig:
    """
    Reads the ``Meta`` declaration of ``owner`` on top of the configuration of its base class.

    :param type owner: the entity class being configured.
    :param Optional[type] meta: the ``Meta`` class declared on ``owner`` itself, if any.
    :param Optional[EntityConfig] base: the configuration of the base entity class, if any.
    """
    retval = (
        dataclasses.replace(base, owner=owner) if base is not None else EntityConfig(owner=owner)
    )
    if meta is None:
        return retval

    attrs = {k: v for k, v in vars(meta).items() if not k.startswith("__")}
    unknown = set(attrs) - _META_FIELDS
    if unknown:
        raise InvalidDeclarationError(
            f"unknown Meta attribute(s) in {owner.__name__}: {', '.join(sorted(unknown))}"
        )

    changes: typing.Dict[str, typing.Any] = {}
    for name in ("type", "base_url", "endpoint", "transport"):
        if name in attrs:
            changes[name] = attrs[name]
    if "page_size" in attrs:
        page_size = attrs["page_size"]
        if not isinstance(page_size, int) or page_size < 1:
            raise InvalidDeclarationError(
                f"Meta.page_size in {owner.__name__} must be a positive integer"
            )
        changes["page_size"] = page_size
    if "pagination_strategy" in attrs:
        changes["pagination_strategy"] = PaginationStrategy(attrs["pagination_strategy"])
    if "read_only_attributes" in attrs:
        changes["read_only_attributes"] = frozenset(attrs["read_only_attributes"])
    if "dates" in attrs:
        changes["dates"] = dict(attrs["dates"])

    param_changes = {
        field: attrs[meta_name]
        for meta_name, field in (
            ("page_number_param", "page_number"),
            ("page_size_param", "page_size"),
            ("offset_param", "offset"),
            ("limit_param", "limit"),
        )
        if meta_name in attrs
    }
    if param_changes:
        changes["param_names"] = dataclasses.replace(retval.param_names, **param_changes)

    if "relationships" in attrs:
        relationships = dict(retval.relationships)
        relationships.update(attrs["relationships"])
        changes["relationships"] = relationships

    return dataclasses.replace(retval, **changes)


class EntityRegistry:
    """
    Keeps track of entity classes by resource type name and by class name.
    """

    _by_type: typing.Dict[str, typing.Type["Entity"]]
    _by_name: typing.Dict[str, typing.Type["Entity"]]

    def register(self, entity_class: typing.Type["Entity"], type_name: str) -> None:
        self._by_type[type_name] = entity_class
        self._by_name[entity_class.__name__] = entity_class

    def lookup_type(self, type_name: str) -> typing.Optional[typing.Type["Entity"]]:
        return self._by_type.get(type_name)

    def resolve(self, name: str) -> typing.Type["Entity"]:
        """
        Returns the class registered under the resource type or class name ``name``.
        """
        retval = self._by_type.get(name) or self._by_name.get(name)
        if retval is None:
            raise UnknownResourceTypeError(name)
        return retval

    def __init__(self):
        self._by_type = {}
        self._by_name = {}


registry = EntityRegistry()
