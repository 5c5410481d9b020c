"""
Mutable counterparts of the document representations, filled in step by step while an entity
is serialized and then frozen into :py:mod:`jsonapi_model.serde.models` objects by calling them.
"""

import typing
from collections import OrderedDict

from .models import AttributeValue, LinkageRepr, ResourceIdRepr, ResourceRepr, SingletonDocumentRepr


class ReprBuilder:
    parent: typing.Optional["ReprBuilder"]
    meta: typing.Dict[str, typing.Any]

    def __call__(self) -> typing.Any:
        raise NotImplementedError()

    def __init__(self, parent: typing.Optional["ReprBuilder"] = None):
        self.parent = parent
        self.meta = {}


class ResourceIdReprBuilder(ReprBuilder):
    type: str
    id: str

    def __call__(self) -> ResourceIdRepr:
        return ResourceIdRepr(type=self.type, id=self.id, meta=self.meta)

    def __init__(self, parent: ReprBuilder, type: str, id: str):
        super().__init__(parent)
        self.type = type
        self.id = id


class ToOneRelReprBuilder(ReprBuilder):
    data: typing.Optional[ResourceIdReprBuilder] = None

    def set(self, type: str, id: str) -> ResourceIdReprBuilder:
        self.data = ResourceIdReprBuilder(self, type, id)
        return self.data

    def nullify(self) -> None:
        self.data = None

    def __call__(self) -> LinkageRepr:
        return LinkageRepr(data=None if self.data is None else self.data(), meta=self.meta)


class ToManyRelReprBuilder(ReprBuilder):
    data: typing.List[ResourceIdReprBuilder]

    def next(self, type: str, id: str) -> ResourceIdReprBuilder:
        item = ResourceIdReprBuilder(self, type, id)
        self.data.append(item)
        return item

    def __call__(self) -> LinkageRepr:
        return LinkageRepr(data=[item() for item in self.data], meta=self.meta)

    def __init__(self, parent: typing.Optional[ReprBuilder] = None):
        super().__init__(parent)
        self.data = []


RelReprBuilder = typing.TypeVar("RelReprBuilder", ToOneRelReprBuilder, ToManyRelReprBuilder)


class ResourceReprBuilder(ReprBuilder):
    type: typing.Optional[str] = None
    id: typing.Optional[str] = None
    attributes: "OrderedDict[str, AttributeValue]"
    relationships: "OrderedDict[str, typing.Union[ToOneRelReprBuilder, ToManyRelReprBuilder]]"

    def add_attribute(self, name: str, value: AttributeValue) -> None:
        self.attributes[name] = value

    def _relationship(self, name: str, kind: typing.Type[RelReprBuilder]) -> RelReprBuilder:
        rel = self.relationships.setdefault(name, kind(self))
        if not isinstance(rel, kind):
            raise TypeError(f"relationship {name} was already started as {type(rel).__name__}")
        return rel

    def next_to_one_relationship(self, name: str) -> ToOneRelReprBuilder:
        return self._relationship(name, ToOneRelReprBuilder)

    def next_to_many_relationship(self, name: str) -> ToManyRelReprBuilder:
        return self._relationship(name, ToManyRelReprBuilder)

    def __call__(self) -> ResourceRepr:
        if self.type is None:
            raise ValueError("a resource needs a type")
        return ResourceRepr(
            type=self.type,
            id=self.id,
            attributes=self.attributes,
            relationships=[(name, rel()) for name, rel in self.relationships.items()],
            meta=self.meta,
        )

    def __init__(self, parent: typing.Optional[ReprBuilder] = None):
        super().__init__(parent)
        self.attributes = OrderedDict()
        self.relationships = OrderedDict()


class SingletonDocumentBuilder(ReprBuilder):
    """
    Builds the single-resource document sent as the body of a create or update request.
    """

    data: ResourceReprBuilder

    def __call__(self) -> SingletonDocumentRepr:
        return SingletonDocumentRepr(data=self.data(), meta=self.meta)

    def __init__(self):
        super().__init__(None)
        self.data = ResourceReprBuilder(self)
