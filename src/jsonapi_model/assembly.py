"""
Assembly of a deserialized response document into a graph of entity instances.

Every ``(type, id)`` pair of the document maps to exactly one instance, so resources that are
referenced more than once, circularly included, come out as the same object.
"""
import collections
import logging
import typing
from collections import OrderedDict

from .config import registry
from .exceptions import UnknownResourceTypeError
from .serde.models import (
    DocumentReprBase,
    LinkageRepr,
    MissingType,
    ResourceIdRepr,
    ResourceRepr,
    Source,
)
from .serde.types import ResourceKey

if typing.TYPE_CHECKING:
    from .entity import Entity  # noqa: F401

logger = logging.getLogger(__name__)

EntityClass = typing.Type["Entity"]


def resolve_entity_class(
    type_name: str,
    hint: typing.Optional[EntityClass],
    source: typing.Optional[Source] = None,
) -> EntityClass:
    """
    Picks the class for a resource of type ``type_name``: the hinted class when its type matches,
    otherwise the class registered for the type, otherwise the hinted class.
    """
    if hint is not None and hint.jsonapi_config.type == type_name:
        return hint
    registered = registry.lookup_type(type_name)
    if registered is not None:
        return registered
    if hint is not None:
        # the resource takes the hinted class's type, so it serializes back as that type
        logger.debug(
            "no class registered for resource type %s at %s, falling back to %s",
            type_name,
            source,
            hint.__name__,
        )
        return hint
    raise UnknownResourceTypeError(type_name, source)


class GraphAssembler:
    document: DocumentReprBase
    _pool: "OrderedDict[ResourceKey, ResourceRepr]"
    _instances: typing.Dict[ResourceKey, "Entity"]
    _pending: typing.Deque[typing.Tuple["Entity", ResourceRepr]]

    def _materialize(
        self,
        hint: typing.Optional[EntityClass],
        key: ResourceKey,
        source: typing.Optional[Source],
    ) -> "Entity":
        entity = self._instances.get(key)
        if entity is not None:
            return entity
        resource = self._pool.get(key)
        entity = resolve_entity_class(key[0], hint, source)()
        if resource is not None:
            entity.populate_from_resource(resource)
            self._pending.append((entity, resource))
        else:
            entity.set_api_id(key[1])
        self._instances[key] = entity
        return entity

    def _wire(self, entity: "Entity", name: str, linkage: LinkageRepr) -> None:
        data = linkage.data
        if isinstance(data, MissingType):
            return
        declaration = entity.get_relation_declaration(name)
        hint = declaration.target if declaration is not None else None
        if data is None:
            entity.set_relation(name, None)
            return
        rids = [data] if isinstance(data, ResourceIdRepr) else list(data)
        if hint is None:
            unknown = [rid.type for rid in rids if registry.lookup_type(rid.type) is None]
            if unknown:
                logger.debug(
                    "skipping undeclared relationship %s of %s to unknown type %s",
                    name,
                    type(entity).__name__,
                    unknown[0],
                )
                return
        related = [self._materialize(hint, rid.key, rid._source_) for rid in rids]
        if isinstance(data, ResourceIdRepr):
            entity.set_relation(name, related[0])
        else:
            entity.set_relation(name, related)

    def _drain(self) -> None:
        while self._pending:
            entity, resource = self._pending.popleft()
            for name, linkage in resource.relationships.items():
                self._wire(entity, name, linkage)

    def __call__(
        self, primary_class: EntityClass
    ) -> typing.Tuple[typing.List["Entity"], typing.List["Entity"]]:
        """
        Builds the graph.

        :param Type[Entity] primary_class: the class the primary data was requested for.
        :return: the primary entities in document order, and every other assembled entity.
        """
        primary: typing.List["Entity"] = []
        for resource in self.document.primary:
            key = resource.key
            if key is None:
                entity = resolve_entity_class(resource.type, primary_class, resource._source_)()
                entity.populate_from_resource(resource)
                self._pending.append((entity, resource))
            else:
                entity = self._materialize(primary_class, key, resource._source_)
            primary.append(entity)
        self._drain()

        for key, resource in self._pool.items():
            if key in self._instances:
                continue
            if registry.lookup_type(key[0]) is None:
                logger.debug("skipping unreferenced resource of unknown type %s", key[0])
                continue
            self._materialize(None, key, resource._source_)
            self._drain()

        primary_ids = set(id(entity) for entity in primary)
        included = [
            entity for entity in self._instances.values() if id(entity) not in primary_ids
        ]
        return primary, included

    def __init__(self, document: DocumentReprBase):
        self.document = document
        self._pool = OrderedDict()
        for resource in list(document.primary) + list(document.included):
            key = resource.key
            if key is not None and key not in self._pool:
                self._pool[key] = resource
        self._instances = {}
        self._pending = collections.deque()
