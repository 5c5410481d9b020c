import collections.abc
import typing

from .exceptions import DeserializationError, DeserializationErrorItem
from .models import (
    AttributeValue,
    CollectionDocumentRepr,
    DocumentReprBase,
    LinkageData,
    LinkageRepr,
    LinksRepr,
    Missing,
    MissingType,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
)
from .types import JSONObject, JSONValue
from .utils import JSONPointer

EMPTY_ATTRIBUTES_DICT: typing.Mapping[str, JSONValue] = {}


class DeserializerContext:
    errors: typing.List[DeserializationErrorItem]

    def validation_error_occurred(self, pointer: JSONPointer, message: str) -> None:
        self.errors.append(DeserializationErrorItem(pointer=pointer, message=message))

    def __init__(self):
        self.errors = []


def _describe(value: JSONValue) -> str:
    if value is None:
        return "null"
    elif isinstance(value, bool):
        return "boolean"
    elif isinstance(value, (int, float)):
        return "number"
    elif isinstance(value, str):
        return "string"
    elif isinstance(value, collections.abc.Mapping):
        return "object"
    else:
        return "array"


class ReprDeserializer:
    """
    :py:class:`ReprDeserializer` converts a parsed JSON:API response document into
    :py:class:`SingletonDocumentRepr` or :py:class:`CollectionDocumentRepr`.

    Every structural problem found is recorded with a :py:class:`JSONPointer` to the offending
    node, and all of them are reported at once through :py:class:`DeserializationError`.
    """

    def _expect_object(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[JSONObject]:
        if not isinstance(value, collections.abc.Mapping):
            ctx.validation_error_occurred(
                pointer, f"value has type {_describe(value)} where object expected"
            )
            return None
        return value

    def _expect_string(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[str]:
        # identifiers are strings by the format, but numeric ids are common enough to accept
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            ctx.validation_error_occurred(
                pointer, f"value has type {_describe(value)} where string expected"
            )
            return None
        return str(value)

    def _convert_links(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[LinksRepr]:
        links = self._expect_object(ctx, pointer, value)
        if links is None:
            return None

        def href(name: str) -> typing.Optional[str]:
            v = links.get(name)
            if isinstance(v, collections.abc.Mapping):
                # link objects carry the URL in "href"
                v = v.get("href")
            if v is not None and not isinstance(v, str):
                ctx.validation_error_occurred(pointer / name, "link must be a string or null")
                return None
            return v

        return LinksRepr(
            self_=href("self"),
            related=href("related"),
            next=href("next"),
            prev=href("prev"),
            first=href("first"),
            last=href("last"),
            _source_=pointer,
        )

    def _convert_meta(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[typing.Dict[str, typing.Any]]:
        meta = self._expect_object(ctx, pointer, value)
        return dict(meta) if meta is not None else None

    def _convert_resource_id(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[ResourceIdRepr]:
        obj = self._expect_object(ctx, pointer, value)
        if obj is None:
            return None
        type_: typing.Optional[str] = None
        id_: typing.Optional[str] = None
        if "type" not in obj:
            ctx.validation_error_occurred(pointer / "type", 'value must have a property "type"')
        else:
            type_ = self._expect_string(ctx, pointer / "type", obj["type"])
        if "id" not in obj:
            ctx.validation_error_occurred(pointer / "id", 'value must have a property "id"')
        else:
            id_ = self._expect_string(ctx, pointer / "id", obj["id"])
        if type_ is None or id_ is None:
            return None
        return ResourceIdRepr(
            type=type_,
            id=id_,
            meta=self._convert_meta(ctx, pointer / "meta", obj["meta"]) if "meta" in obj else None,
            _source_=pointer,
        )

    def _convert_linkage(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[LinkageRepr]:
        obj = self._expect_object(ctx, pointer, value)
        if obj is None:
            return None

        data: typing.Union[LinkageData, MissingType] = Missing
        if "data" in obj:
            data_ = obj["data"]
            if data_ is None:
                data = None
            elif isinstance(data_, collections.abc.Mapping):
                data = self._convert_resource_id(ctx, pointer / "data", data_)
            elif isinstance(data_, collections.abc.Sequence) and not isinstance(data_, str):
                items = [
                    self._convert_resource_id(ctx, (pointer / "data")[i], v)
                    for i, v in enumerate(data_)
                ]
                data = tuple(item for item in items if item is not None)
            else:
                ctx.validation_error_occurred(
                    pointer / "data",
                    f"value has type {_describe(data_)} where null, object or array expected",
                )
        return LinkageRepr(
            data=data,
            links=(
                self._convert_links(ctx, pointer / "links", obj["links"])
                if "links" in obj
                else None
            ),
            meta=self._convert_meta(ctx, pointer / "meta", obj["meta"]) if "meta" in obj else None,
            _source_=pointer,
        )

    def _convert_resource(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Optional[ResourceRepr]:
        obj = self._expect_object(ctx, pointer, value)
        if obj is None:
            return None

        type_: typing.Optional[str] = None
        if "type" not in obj:
            ctx.validation_error_occurred(pointer / "type", 'value must have a property "type"')
        else:
            type_ = self._expect_string(ctx, pointer / "type", obj["type"])

        id_: typing.Optional[str] = None
        if obj.get("id") is not None:
            id_ = self._expect_string(ctx, pointer / "id", obj["id"])

        attributes: typing.Sequence[typing.Tuple[str, AttributeValue]] = ()
        attributes_ = self._expect_object(
            ctx, pointer / "attributes", obj.get("attributes", EMPTY_ATTRIBUTES_DICT)
        )
        if attributes_ is not None:
            attributes = tuple(attributes_.items())

        relationships: typing.List[typing.Tuple[str, LinkageRepr]] = []
        if "relationships" in obj:
            relationships_ = self._expect_object(
                ctx, pointer / "relationships", obj["relationships"]
            )
            if relationships_ is not None:
                for k, v in relationships_.items():
                    linkage = self._convert_linkage(ctx, pointer / "relationships" / k, v)
                    if linkage is not None:
                        relationships.append((k, linkage))

        if type_ is None:
            return None

        return ResourceRepr(
            type=type_,
            id=id_,
            attributes=attributes,
            relationships=relationships,
            links=(
                self._convert_links(ctx, pointer / "links", obj["links"])
                if "links" in obj
                else None
            ),
            meta=self._convert_meta(ctx, pointer / "meta", obj["meta"]) if "meta" in obj else None,
            _source_=pointer,
        )

    def _convert_resources(
        self, ctx: DeserializerContext, pointer: JSONPointer, value: JSONValue
    ) -> typing.Sequence[ResourceRepr]:
        if isinstance(value, str) or not isinstance(value, collections.abc.Sequence):
            ctx.validation_error_occurred(
                pointer, f"value has type {_describe(value)} where array expected"
            )
            return ()
        items = [self._convert_resource(ctx, pointer[i], v) for i, v in enumerate(value)]
        return tuple(item for item in items if item is not None)

    T = typing.TypeVar("T", bound=DocumentReprBase)

    def __call__(self, result_type: typing.Type[T], document: JSONValue) -> T:
        ctx = DeserializerContext()
        root = JSONPointer()
        retval: typing.Optional[DocumentReprBase] = None

        obj = self._expect_object(ctx, root, document)
        if obj is not None:
            if "data" not in obj and "meta" not in obj:
                ctx.validation_error_occurred(root, "either data or meta must be present")

            common: typing.Dict[str, typing.Any] = dict(
                jsonapi=(
                    self._convert_meta(ctx, root / "jsonapi", obj["jsonapi"])
                    if "jsonapi" in obj
                    else None
                ),
                included=(
                    self._convert_resources(ctx, root / "included", obj["included"])
                    if "included" in obj
                    else ()
                ),
                links=(
                    self._convert_links(ctx, root / "links", obj["links"])
                    if "links" in obj
                    else None
                ),
                meta=self._convert_meta(ctx, root / "meta", obj["meta"]) if "meta" in obj else None,
                _source_=root,
            )

            data = obj.get("data")
            if issubclass(result_type, CollectionDocumentRepr):
                retval = CollectionDocumentRepr(
                    data=(
                        self._convert_resources(ctx, root / "data", data)
                        if data is not None
                        else ()
                    ),
                    **common,
                )
            elif issubclass(result_type, SingletonDocumentRepr):
                retval = SingletonDocumentRepr(
                    data=(
                        self._convert_resource(ctx, root / "data", data)
                        if data is not None
                        else None
                    ),
                    **common,
                )
            else:
                raise TypeError(f"unsupported document type {result_type.__name__}")

        if ctx.errors:
            raise DeserializationError(document, ctx.errors)
        return typing.cast(ReprDeserializer.T, retval)
