"""
Declarations and descriptors of relations between entities.

A relation is declared either in the ``relationships`` table of ``Meta``:

.. code-block:: python

   class Book(Entity):
       class Meta:
           type = "books"
           relationships = {
               "author": HasOne("authors"),
               "chapters": HasMany("Chapter"),
           }

or from an accessor method, with the relation name given explicitly:

.. code-block:: python

   class Book(Entity):
       def author(self) -> ToOneRelation["Author"]:
           return self.has_one(Author, "author")

Either way the descriptor is bound to an owner instance and reads and writes the relation
stored in it; fetching is always explicit.
"""
import abc
import typing

from .builder import Builder
from .config import registry
from .deferred import Deferred
from .exceptions import MissingIdentityError
from .query import SortDirection
from .responses import PluralResponse, SingularResponse

if typing.TYPE_CHECKING:
    from .entity import Entity  # noqa: F401

E = typing.TypeVar("E", bound="Entity")

Target = typing.Union[typing.Type["Entity"], str]


def _defer_target(target: Target) -> typing.Union[typing.Type["Entity"], Deferred]:
    if isinstance(target, str):
        return Deferred(registry.resolve, target)
    return target


def _resolve_target(
    target: typing.Union[typing.Type["Entity"], Deferred]
) -> typing.Type["Entity"]:
    if isinstance(target, Deferred):
        return target()
    return target


class RelationDeclaration(metaclass=abc.ABCMeta):
    """
    :param Union[Type[Entity], str] target: the related entity class, or its resource type
                                            or class name when the class is defined later.
    """

    _target: typing.Union[typing.Type["Entity"], Deferred]

    @property
    def target(self) -> typing.Type["Entity"]:
        return _resolve_target(self._target)

    @abc.abstractmethod
    def bind(self, owner: "Entity", name: str) -> "Relation":
        ...  # pragma: nocover

    def __init__(self, target: Target):
        self._target = _defer_target(target)


class HasOne(RelationDeclaration):
    def bind(self, owner: "Entity", name: str) -> "ToOneRelation":
        return ToOneRelation(self._target, owner, name)


class HasMany(RelationDeclaration):
    def bind(self, owner: "Entity", name: str) -> "ToManyRelation":
        return ToManyRelation(self._target, owner, name)


class Relation(typing.Generic[E]):
    owner: "Entity"
    name: str
    _target: typing.Union[typing.Type[E], Deferred]

    @property
    def target(self) -> typing.Type[E]:
        return typing.cast(typing.Type[E], _resolve_target(self._target))

    @property
    def url(self) -> str:
        owner = self.owner
        if not owner.is_persisted:
            raise MissingIdentityError(type(owner), "query relations of")
        owner_url = owner.jsonapi_config.resource_url(typing.cast(str, owner.api_id))
        return f"{owner_url}/{self.name}"

    @property
    def is_loaded(self) -> bool:
        return self.owner.has_relation(self.name)

    def query(self) -> Builder[E]:
        """
        Opens a builder scoped to the relation endpoint of the owner.
        """
        return Builder(self.target, self.url)

    def where(self, attribute: str, value: typing.Any) -> Builder[E]:
        return self.query().where(attribute, value)

    def order_by(
        self, attribute: str, direction: typing.Union[SortDirection, str] = SortDirection.ASC
    ) -> Builder[E]:
        return self.query().order_by(attribute, direction)

    def with_(self, paths: typing.Union[str, typing.Iterable[str]]) -> Builder[E]:
        return self.query().with_(paths)

    include = with_

    def limit(self, limit: int) -> Builder[E]:
        return self.query().limit(limit)

    def option(self, name: str, value: typing.Any) -> Builder[E]:
        return self.query().option(name, value)

    async def first(self) -> SingularResponse[E]:
        return await self.query().first()

    def __repr__(self):
        return f"<{type(self).__name__} {type(self.owner).__name__}.{self.name}>"

    def __init__(
        self,
        target: typing.Union[typing.Type[E], Deferred, str],
        owner: "Entity",
        name: str,
    ):
        self._target = _defer_target(target)
        self.owner = owner
        self.name = name


class ToOneRelation(Relation[E]):
    @property
    def value(self) -> typing.Optional[E]:
        return typing.cast(typing.Optional[E], self.owner.get_relation(self.name))

    async def get(self) -> SingularResponse[E]:
        return await self.query().fetch_one()

    async def load(self) -> SingularResponse[E]:
        """
        Fetches the related entity and stores it in the owner.
        """
        response = await self.get()
        self.owner.set_relation(self.name, response.data)
        return response

    def associate(self, entity: E) -> None:
        self.owner.set_relation(self.name, entity)

    def dissociate(self) -> None:
        self.owner.set_relation(self.name, None)


class ToManyRelation(Relation[E]):
    @property
    def value(self) -> typing.List[E]:
        return typing.cast(typing.List[E], list(self.owner.get_relation_value(self.name).entities))

    async def get(self, page: typing.Optional[int] = None) -> PluralResponse[E]:
        return await self.query().get(page)

    async def load(self, page: typing.Optional[int] = None) -> PluralResponse[E]:
        """
        Fetches one page of the related entities and stores it in the owner, replacing what
        was there.
        """
        response = await self.get(page)
        self.owner.set_relation(self.name, response.data)
        return response

    def attach(self, entity: E) -> None:
        self.owner.set_relation(self.name, self.value + [entity])

    def detach(self, entity: typing.Union[E, typing.Tuple[str, str]]) -> None:
        """
        Removes ``entity`` from the owner's in-memory relation.  ``entity`` is matched by
        identity, or by ``(type, id)`` when a tuple or a persisted entity is given.
        """
        if isinstance(entity, tuple):
            key: typing.Optional[typing.Tuple[str, str]] = entity
        else:
            key = entity.resource_key
        self.owner.set_relation(
            self.name,
            [
                e
                for e in self.value
                if e is not entity and (key is None or e.resource_key != key)
            ],
        )
