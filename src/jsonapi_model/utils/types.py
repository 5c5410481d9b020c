import typing


class NoIdentityType:
    """
    Type of :py:data:`NO_IDENTITY`, the outcome of refreshing an entity that was never persisted.
    It is falsy, and distinct from ``None`` which stands for "not found".
    """

    _singleton: typing.ClassVar[typing.Optional["NoIdentityType"]] = None

    def __bool__(self):
        return False

    def __repr__(self):
        return "NO_IDENTITY"

    def __new__(cls) -> "NoIdentityType":
        if cls._singleton is None:
            cls._singleton = object.__new__(cls)
        return cls._singleton


NO_IDENTITY = NoIdentityType()
