import typing


def _escape(component: str) -> str:
    return component.replace("~", "~0").replace("/", "~1")


def _unescape(component: str) -> str:
    return component.replace("~1", "/").replace("~0", "~")


class JSONPointer:
    """
    A :py:class:`JSONPointer` points at a node inside a JSON document
    (`RFC 6901 <https://tools.ietf.org/html/rfc6901>`_).  The root is rendered as ``/``.

    .. code-block:: python

       p = JSONPointer() / "data" / "relationships"
       assert str(p[0]) == "/data/relationships/0"
    """

    components: typing.Tuple[str, ...]

    def __truediv__(self, component: str) -> "JSONPointer":
        return JSONPointer(components=self.components + (component,))

    def __getitem__(self, index: int) -> "JSONPointer":
        return JSONPointer(components=self.components + (str(index),))

    def __str__(self) -> str:
        return "/" + "/".join(_escape(c) for c in self.components)

    def __repr__(self) -> str:
        return f"JSONPointer({str(self)!r})"

    def __eq__(self, that: typing.Any) -> bool:
        if not isinstance(that, JSONPointer):
            return False
        return self.components == that.components

    def __hash__(self) -> int:
        return hash(self.components)

    def __init__(
        self,
        pointer: typing.Optional[str] = None,
        *,
        components: typing.Sequence[str] = (),
    ):
        if pointer is not None:
            if not pointer.startswith("/"):
                raise ValueError(f"invalid JSON pointer: {pointer!r}")
            stripped = pointer[1:]
            self.components = (
                tuple(_unescape(c) for c in stripped.split("/")) if stripped else ()
            )
        else:
            self.components = tuple(components)
