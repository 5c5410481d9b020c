import abc
import typing

from .serde.models import AttributeValue, Source


class JSONAPIModelException(Exception, metaclass=abc.ABCMeta):
    @property
    @abc.abstractmethod
    def message(self) -> str:
        ...  # pragma: nocover

    def __str__(self):
        return self.message


class ConfigurationError(JSONAPIModelException):
    """
    Raised the first time a required per-type configuration value is needed but was never given.
    """

    entity_class: type
    name: str

    @property
    def message(self):
        return f"expected {self.entity_class.__name__} to have Meta.{self.name} defined"

    def __init__(self, entity_class: type, name: str):
        self.entity_class = entity_class
        self.name = name


class InvalidDeclarationError(JSONAPIModelException):
    _message: str

    @property
    def message(self):
        return self._message

    def __init__(self, message: str):
        self._message = message


class InvalidAttributeValueError(JSONAPIModelException):
    entity_class: type
    name: str
    actual: AttributeValue
    detail: typing.Optional[str]

    @property
    def message(self):
        return f'attribute ({self.name}) in "{self.entity_class.__name__}" contains an invalid value{" (" + self.detail + ")" if self.detail is not None else ""}: {self.actual!r}'

    def __init__(
        self,
        entity_class: type,
        name: str,
        actual: AttributeValue,
        detail: typing.Optional[str] = None,
    ):
        self.entity_class = entity_class
        self.name = name
        self.actual = actual
        self.detail = detail


class MissingIdentityError(JSONAPIModelException):
    """
    Raised when an operation needs a persisted entity and the entity has no identity.
    """

    entity_class: type
    operation: str

    @property
    def message(self):
        return f"cannot {self.operation} a {self.entity_class.__name__} with no identity"

    def __init__(self, entity_class: type, operation: str):
        self.entity_class = entity_class
        self.operation = operation


class UnknownResourceTypeError(JSONAPIModelException):
    name: str
    _source: typing.Optional[Source]

    @property
    def sources(self) -> typing.Sequence[Source]:
        if self._source is None:
            return []
        else:
            return [self._source]

    @property
    def message(self):
        source = f" (at {self._source})" if self._source is not None else ""
        return f'no entity class known for resource type "{self.name}"{source}'

    def __init__(self, name: str, source: typing.Optional[Source] = None):
        self.name = name
        self._source = source
