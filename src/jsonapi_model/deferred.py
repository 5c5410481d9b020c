import typing

T = typing.TypeVar("T")

_UNRESOLVED = object()


class Deferred(typing.Generic[T]):
    """
    Stands in for a value that can only be computed later, such as an entity class
    named in a relation before the class itself is defined.

    Calling the object computes the value once and returns the same result afterwards.
    If the computation raises, nothing is cached and the next call tries again.

    :param Callable[..., T] yielder: computes the value.
    :param args: positional arguments passed to ``yielder``.
    :param kwargs: keyword arguments passed to ``yielder``.
    """

    _yielder: typing.Callable[..., T]
    _args: typing.Tuple[typing.Any, ...]
    _kwargs: typing.Dict[str, typing.Any]
    _result: typing.Any = _UNRESOLVED

    @property
    def resolved(self) -> bool:
        return self._result is not _UNRESOLVED

    def __call__(self) -> T:
        if self._result is _UNRESOLVED:
            self._result = self._yielder(*self._args, **self._kwargs)
        return typing.cast(T, self._result)

    def __repr__(self) -> str:
        state = repr(self._result) if self.resolved else "unresolved"
        return f"Deferred({getattr(self._yielder, '__name__', self._yielder)}, {state})"

    def __init__(self, yielder: typing.Callable[..., T], *args, **kwargs) -> None:
        self._yielder = yielder
        self._args = args
        self._kwargs = kwargs
