"""
The base class of the application's entity classes.

.. code-block:: python

   class Author(Entity):
       class Meta:
           type = "authors"
           base_url = "https://api.example.com/v1"

   class Book(Entity):
       class Meta:
           type = "books"
           base_url = "https://api.example.com/v1"
           read_only_attributes = ("created_at",)
           dates = {"published_at": "%Y-%m-%d"}
           relationships = {"author": HasOne(Author)}

   response = await Book.where("genre", "sf").with_("author").get()
   for book in response:
       print(book["title"], book.get_relation("author")["name"])
"""
import collections.abc
import dataclasses
import enum
import logging
import typing
from collections import OrderedDict

from .builder import Builder
from .config import EntityConfig, handle_meta, registry
from .dates import format_date, parse_date
from .exceptions import InvalidAttributeValueError, InvalidDeclarationError, MissingIdentityError
from .query import SortDirection
from .relations import RelationDeclaration, Target, ToManyRelation, ToOneRelation
from .responses import PluralResponse, SaveResponse, SingularResponse
from .serde.builders import SingletonDocumentBuilder
from .serde.models import AttributeValue, ResourceRepr
from .serde.renderer import ReprRenderer
from .serde.types import JSONObject, ResourceKey
from .transport import JSONAPI_HEADERS
from .utils.types import NO_IDENTITY, NoIdentityType

logger = logging.getLogger(__name__)

E = typing.TypeVar("E", bound="Entity")

_renderer = ReprRenderer()


class RelationKind(enum.Enum):
    ABSENT = "absent"
    SINGLE = "single"
    MANY = "many"


@dataclasses.dataclass(frozen=True)
class RelationValue:
    """
    The value of a relation held by an entity: no entity, a single entity, or a sequence of them.
    """

    kind: RelationKind
    entities: typing.Tuple["Entity", ...] = ()

    @classmethod
    def of(cls, value: typing.Any) -> "RelationValue":
        if value is None:
            return cls(RelationKind.ABSENT)
        if isinstance(value, Entity):
            return cls(RelationKind.SINGLE, (value,))
        if isinstance(value, (str, bytes)) or not isinstance(value, collections.abc.Iterable):
            raise TypeError(f"{value!r} is neither an entity nor a sequence of entities")
        entities = tuple(value)
        for item in entities:
            if not isinstance(item, Entity):
                raise TypeError(f"{item!r} is not an entity")
        return cls(RelationKind.MANY, entities)

    def unwrap(self) -> typing.Union[None, "Entity", typing.List["Entity"]]:
        if self.kind is RelationKind.ABSENT:
            return None
        elif self.kind is RelationKind.SINGLE:
            return self.entities[0]
        else:
            return list(self.entities)


ABSENT = RelationValue(RelationKind.ABSENT)


def _reference(entity: "Entity") -> ResourceKey:
    key = entity.resource_key
    if key is None:
        raise MissingIdentityError(type(entity), "reference")
    return key


class Entity:
    jsonapi_config: typing.ClassVar[EntityConfig]

    _api_id: typing.Optional[str]
    _attributes: "OrderedDict[str, AttributeValue]"
    _relations: "OrderedDict[str, RelationValue]"

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        meta = cls.__dict__.get("Meta")
        cls.jsonapi_config = handle_meta(cls, meta, cls.jsonapi_config)
        if meta is not None and getattr(meta, "type", None) is not None:
            registry.register(cls, cls.jsonapi_config.effective_type)

    # identity

    @property
    def api_id(self) -> typing.Optional[str]:
        return self._api_id

    @api_id.setter
    def api_id(self, value: typing.Optional[str]) -> None:
        self.set_api_id(value)

    def get_api_id(self) -> typing.Optional[str]:
        return self._api_id

    def set_api_id(self, value: typing.Optional[str]) -> None:
        self._api_id = str(value) if value is not None else None

    @property
    def is_persisted(self) -> bool:
        return bool(self._api_id)

    @property
    def resource_key(self) -> typing.Optional[ResourceKey]:
        """
        ``(type, id)`` of the entity, or ``None`` if it has no identity.
        """
        if not self.is_persisted:
            return None
        return (self.jsonapi_config.effective_type, typing.cast(str, self._api_id))

    # attributes

    def _check_attribute_name(self, name: str) -> None:
        if name in self._relations or name in self.jsonapi_config.relationships:
            raise InvalidDeclarationError(
                f"{name} is a relation of {type(self).__name__} and cannot be used as an attribute"
            )

    def get_attribute(self, name: str) -> typing.Any:
        """
        Returns the value of the attribute, or ``None`` if it is not set.
        Date attributes are returned as :py:class:`datetime.datetime`.
        """
        value = self._attributes.get(name)
        config = self.jsonapi_config
        if value is not None and config.is_date_attribute(name):
            try:
                return parse_date(value, config.dates[name])
            except ValueError as e:
                raise InvalidAttributeValueError(type(self), name, value, str(e))
        return value

    def set_attribute(self, name: str, value: typing.Any) -> None:
        self._check_attribute_name(name)
        config = self.jsonapi_config
        if value is not None and config.is_date_attribute(name):
            format = config.dates[name]
            try:
                value = format_date(parse_date(value, format), format)
            except ValueError as e:
                raise InvalidAttributeValueError(type(self), name, value, str(e))
        self._attributes[name] = value

    def unset_attribute(self, name: str) -> None:
        del self._attributes[name]

    def has_attribute(self, name: str) -> bool:
        return name in self._attributes

    def get_attributes(self) -> typing.Dict[str, AttributeValue]:
        return dict(self._attributes)

    def __getitem__(self, name: str) -> typing.Any:
        if name not in self._attributes:
            raise KeyError(name)
        return self.get_attribute(name)

    def __setitem__(self, name: str, value: typing.Any) -> None:
        self.set_attribute(name, value)

    def __delitem__(self, name: str) -> None:
        self.unset_attribute(name)

    def __contains__(self, name: str) -> bool:
        return self.has_attribute(name)

    # relations

    @classmethod
    def get_relation_declaration(cls, name: str) -> typing.Optional[RelationDeclaration]:
        return cls.jsonapi_config.relationships.get(name)

    def get_relation_value(self, name: str) -> RelationValue:
        return self._relations.get(name, ABSENT)

    def get_relation(self, name: str) -> typing.Union[None, "Entity", typing.List["Entity"]]:
        return self.get_relation_value(name).unwrap()

    def set_relation(self, name: str, value: typing.Any) -> None:
        """
        Stores the value of a relation: ``None``, an entity or an iterable of entities.
        """
        if name in self._attributes:
            raise InvalidDeclarationError(
                f"{name} is an attribute of {type(self).__name__} and cannot be used as a relation"
            )
        self._relations[name] = value if isinstance(value, RelationValue) else RelationValue.of(value)

    def unset_relation(self, name: str) -> None:
        self._relations.pop(name, None)

    def has_relation(self, name: str) -> bool:
        return name in self._relations

    def get_relations(self) -> typing.Dict[str, typing.Union[None, "Entity", typing.List["Entity"]]]:
        return {name: value.unwrap() for name, value in self._relations.items()}

    def has_one(self, target: Target, name: str) -> ToOneRelation:
        return ToOneRelation(target, self, name)

    def has_many(self, target: Target, name: str) -> ToManyRelation:
        return ToManyRelation(target, self, name)

    def relation(self, name: str) -> typing.Union[ToOneRelation, ToManyRelation]:
        """
        Returns the descriptor of a relation declared in ``Meta.relationships``.
        """
        declaration = self.get_relation_declaration(name)
        if declaration is None:
            raise InvalidDeclarationError(f"{type(self).__name__} declares no relation {name}")
        return declaration.bind(self, name)

    def _collect_relations_keys(
        self,
        prefix: typing.Optional[str],
        retval: "OrderedDict[str, None]",
        walking: typing.Set[int],
    ) -> None:
        walking.add(id(self))
        for name, value in self._relations.items():
            path = f"{prefix}.{name}" if prefix else name
            retval[path] = None
            for related in value.entities:
                if id(related) not in walking:
                    related._collect_relations_keys(path, retval, walking)
        walking.discard(id(self))

    def get_relations_keys(self, prefix: typing.Optional[str] = None) -> typing.List[str]:
        """
        Returns the dotted paths of the relations populated on this entity and, recursively,
        on the entities it relates to.  A path comes before the paths nested under it.

        :param Optional[str] prefix: a path prepended to every returned path.
        """
        retval: "OrderedDict[str, None]" = OrderedDict()
        self._collect_relations_keys(prefix, retval, set())
        return list(retval)

    # wire representation

    def populate_from_resource(self, resource: ResourceRepr) -> None:
        """
        Overwrites the identity and the attributes with those of ``resource``.
        Relations are left untouched.
        """
        self.set_api_id(resource.id)
        for name, value in resource.attributes.items():
            self.set_attribute(name, value)

    def serialize(self) -> JSONObject:
        """
        Renders the entity as the document sent to create or update it.
        """
        config = self.jsonapi_config
        builder = SingletonDocumentBuilder()
        resource = builder.data
        resource.type = config.effective_type
        if self.is_persisted:
            resource.id = self._api_id
        for name, value in self._attributes.items():
            if name not in config.read_only_attributes:
                resource.add_attribute(name, value)
        for name, relation in self._relations.items():
            if relation.kind is RelationKind.SINGLE:
                resource.next_to_one_relationship(name).set(*_reference(relation.entities[0]))
            elif relation.kind is RelationKind.MANY and relation.entities:
                rel = resource.next_to_many_relationship(name)
                for related in relation.entities:
                    rel.next(*_reference(related))
        return _renderer(builder())

    # querying

    @classmethod
    def query(cls: typing.Type[E]) -> Builder[E]:
        return Builder(cls)

    @classmethod
    async def get(cls: typing.Type[E], page: typing.Optional[int] = None) -> PluralResponse[E]:
        return await cls.query().get(page)

    @classmethod
    async def first(cls: typing.Type[E]) -> SingularResponse[E]:
        return await cls.query().first()

    @classmethod
    async def find(cls: typing.Type[E], id: typing.Union[str, int]) -> SingularResponse[E]:
        return await cls.query().find(id)

    @classmethod
    def with_(cls: typing.Type[E], paths: typing.Union[str, typing.Iterable[str]]) -> Builder[E]:
        return cls.query().with_(paths)

    include = with_

    @classmethod
    def limit(cls: typing.Type[E], limit: int) -> Builder[E]:
        return cls.query().limit(limit)

    @classmethod
    def where(cls: typing.Type[E], attribute: str, value: typing.Any) -> Builder[E]:
        return cls.query().where(attribute, value)

    @classmethod
    def order_by(
        cls: typing.Type[E],
        attribute: str,
        direction: typing.Union[SortDirection, str] = SortDirection.ASC,
    ) -> Builder[E]:
        return cls.query().order_by(attribute, direction)

    @classmethod
    def option(cls: typing.Type[E], name: str, value: typing.Any) -> Builder[E]:
        return cls.query().option(name, value)

    # persistence

    def _adopt_identity(self: E, response: SaveResponse[E]) -> SaveResponse[E]:
        model_id = response.model_id
        if model_id:
            self.set_api_id(model_id)
        return response

    async def save(self: E) -> SaveResponse[E]:
        """
        Creates the entity if it has no identity, updates it otherwise.
        """
        if not self.is_persisted:
            return await self.create()
        config = self.jsonapi_config
        url = config.resource_url(typing.cast(str, self._api_id))
        logger.debug("updating %s", url)
        http_response = await config.effective_transport.patch(
            url, self.serialize(), headers=JSONAPI_HEADERS
        )
        return self._adopt_identity(SaveResponse(type(self), http_response))

    async def create(self: E) -> SaveResponse[E]:
        config = self.jsonapi_config
        url = config.collection_url
        logger.debug("creating %s at %s", type(self).__name__, url)
        http_response = await config.effective_transport.post(
            url, self.serialize(), headers=JSONAPI_HEADERS
        )
        return self._adopt_identity(SaveResponse(type(self), http_response))

    async def delete(self) -> None:
        if not self.is_persisted:
            raise MissingIdentityError(type(self), "delete")
        config = self.jsonapi_config
        url = config.resource_url(typing.cast(str, self._api_id))
        logger.debug("deleting %s", url)
        await config.effective_transport.delete(url, headers=JSONAPI_HEADERS)

    async def fresh(self: E) -> typing.Union[E, None, NoIdentityType]:
        """
        Fetches the entity again along with the relations loaded on it.

        :return: the fetched entity; ``None`` if the server does not know it anymore;
                 :py:data:`~jsonapi_model.utils.types.NO_IDENTITY` if it was never persisted.
        """
        if not self.is_persisted:
            return NO_IDENTITY
        builder = type(self).query().with_(self.get_relations_keys())
        try:
            response = await builder.find(typing.cast(str, self._api_id))
        except Exception as e:
            if self.jsonapi_config.effective_transport.is_not_found(e):
                logger.debug("%s %s was not found", type(self).__name__, self._api_id)
                return None
            raise
        return response.data

    def __repr__(self):
        return f"<{type(self).__name__} api_id={self._api_id!r} {dict(self._attributes)!r}>"

    def __init__(
        self,
        attributes: typing.Optional[typing.Mapping[str, typing.Any]] = None,
        *,
        api_id: typing.Optional[str] = None,
        **kwargs: typing.Any,
    ):
        self._api_id = None
        self._attributes = OrderedDict()
        self._relations = OrderedDict()
        self.set_api_id(api_id)
        if attributes is not None:
            for name, value in attributes.items():
                self.set_attribute(name, value)
        for name, value in kwargs.items():
            self.set_attribute(name, value)


Entity.jsonapi_config = EntityConfig(owner=Entity)
