from .builder import Builder  # noqa: F401
from .config import EntityConfig, registry, set_default_transport  # noqa: F401
from .entity import Entity, RelationKind, RelationValue  # noqa: F401
from .exceptions import (  # noqa: F401
    ConfigurationError,
    InvalidAttributeValueError,
    InvalidDeclarationError,
    JSONAPIModelException,
    MissingIdentityError,
    UnknownResourceTypeError,
)
from .pagination import PaginationStrategy  # noqa: F401
from .query import SortDirection  # noqa: F401
from .relations import HasMany, HasOne, ToManyRelation, ToOneRelation  # noqa: F401
from .responses import PluralResponse, SaveResponse, SingularResponse  # noqa: F401
from .serde.exceptions import DeserializationError  # noqa: F401
from .transport import Transport, TransportResponse  # noqa: F401
from .utils.types import NO_IDENTITY  # noqa: F401
