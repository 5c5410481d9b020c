"""
:py:mod:`jsonapi_model.serde.renderer` turns document representations back into plain
JSON-compatible objects, ready to be handed to a transport.

.. code-block:: python

   payload = ReprRenderer()(
       SingletonDocumentRepr(
           data=ResourceRepr(
               type="books",
               attributes=[("title", "Dune")],
               relationships=[
                   ("author", LinkageRepr(data=ResourceIdRepr(type="authors", id="1"))),
               ],
           ),
       )
   )

Members whose value is empty or absent are left out of the output, except for the primary
``data`` and an explicit ``null`` linkage.
"""

import base64
import collections.abc
import datetime
import decimal
import typing
from collections import OrderedDict

from .models import (
    CollectionDocumentRepr,
    DocumentReprBase,
    LinkageRepr,
    LinksRepr,
    MissingType,
    ResourceIdRepr,
    ResourceRepr,
    SingletonDocumentRepr,
)
from .types import JSONValue, MutableJSONObject
from .utils import JSONPointer

_LINK_MEMBERS = (
    ("self", "self_"),
    ("related", "related"),
    ("first", "first"),
    ("prev", "prev"),
    ("next", "next"),
    ("last", "last"),
)

_JSON_SCALARS = (str, int, float, bool, type(None))


class ReprRenderer:
    """
    Renders :py:class:`SingletonDocumentRepr` and :py:class:`CollectionDocumentRepr`.

    :param bool render_decimal_as_str: emit :py:class:`decimal.Decimal` as a string rather than a float.
    :param Optional[tzinfo] assume_naive_timezone_as: timezone given to naive datetimes.
        Naive datetimes are rejected when it is ``None``.
    """

    _render_decimal_as_str: bool
    _assume_naive_timezone_as: typing.Optional[datetime.tzinfo]

    def _render_scalar(self, pointer: JSONPointer, value: typing.Any) -> JSONValue:
        if isinstance(value, _JSON_SCALARS):
            return value
        if isinstance(value, datetime.datetime):
            if value.tzinfo is None:
                if self._assume_naive_timezone_as is None:
                    raise ValueError(f"{pointer}: naive datetime {value}")
                value = value.replace(tzinfo=self._assume_naive_timezone_as)
            return value.astimezone(datetime.timezone.utc).isoformat()
        if isinstance(value, datetime.date):
            return value.isoformat()
        if isinstance(value, decimal.Decimal):
            return str(value) if self._render_decimal_as_str else float(value)
        if isinstance(value, (bytes, bytearray)):
            return base64.b64encode(value).decode("ascii")
        raise TypeError(f"{pointer}: unsupported type {value!r}")

    def _render_value(self, pointer: JSONPointer, value: typing.Any) -> JSONValue:
        if isinstance(value, collections.abc.Mapping):
            return OrderedDict((k, self._render_value(pointer / k, v)) for k, v in value.items())
        if isinstance(value, collections.abc.Sequence) and not isinstance(
            value, (str, bytes, bytearray)
        ):
            return [self._render_value(pointer[i], v) for i, v in enumerate(value)]
        return self._render_scalar(pointer, value)

    def _render_links(self, repr_: LinksRepr) -> MutableJSONObject:
        return {
            member: getattr(repr_, attr)
            for member, attr in _LINK_MEMBERS
            if getattr(repr_, attr) is not None
        }

    def _with_links_and_meta(
        self,
        retval: MutableJSONObject,
        repr_: typing.Union[LinkageRepr, ResourceRepr, DocumentReprBase],
    ) -> MutableJSONObject:
        if repr_.links is not None:
            retval["links"] = self._render_links(repr_.links)
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_identifier(self, repr_: ResourceIdRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {"type": repr_.type, "id": repr_.id}
        if repr_.meta:
            retval["meta"] = repr_.meta
        return retval

    def _render_linkage(self, repr_: LinkageRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {}
        data = repr_.data
        if data is None:
            retval["data"] = None
        elif isinstance(data, ResourceIdRepr):
            retval["data"] = self._render_identifier(data)
        elif not isinstance(data, MissingType):
            retval["data"] = [self._render_identifier(item) for item in data]
        return self._with_links_and_meta(retval, repr_)

    def _render_resource(self, pointer: JSONPointer, repr_: ResourceRepr) -> MutableJSONObject:
        retval: MutableJSONObject = {"type": repr_.type}
        if repr_.id is not None:
            retval["id"] = repr_.id
        if repr_.attributes:
            retval["attributes"] = self._render_value(pointer / "attributes", repr_.attributes)
        if repr_.relationships:
            retval["relationships"] = OrderedDict(
                (name, self._render_linkage(linkage))
                for name, linkage in repr_.relationships.items()
            )
        return self._with_links_and_meta(retval, repr_)

    def __call__(
        self, repr_: typing.Union[SingletonDocumentRepr, CollectionDocumentRepr]
    ) -> MutableJSONObject:
        root = JSONPointer()
        retval: MutableJSONObject = {}
        if isinstance(repr_, SingletonDocumentRepr):
            retval["data"] = (
                self._render_resource(root / "data", repr_.data) if repr_.data is not None else None
            )
        elif isinstance(repr_, CollectionDocumentRepr):
            retval["data"] = [
                self._render_resource((root / "data")[i], resource)
                for i, resource in enumerate(repr_.data)
            ]
        else:
            raise TypeError(f"cannot render {type(repr_).__name__}")
        if repr_.jsonapi:
            retval["jsonapi"] = repr_.jsonapi
        self._with_links_and_meta(retval, repr_)
        if repr_.included:
            retval["included"] = [
                self._render_resource((root / "included")[i], resource)
                for i, resource in enumerate(repr_.included)
            ]
        return retval

    def __init__(
        self,
        render_decimal_as_str: bool = True,
        assume_naive_timezone_as: typing.Optional[datetime.tzinfo] = None,
    ):
        self._render_decimal_as_str = render_decimal_as_str
        self._assume_naive_timezone_as = assume_naive_timezone_as
