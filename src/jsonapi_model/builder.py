import logging
import typing

from .config import member_url
from .pagination import pagination_params
from .query import Query, SortDirection
from .responses import PluralResponse, SingularResponse
from .serde.models import CollectionDocumentRepr, SingletonDocumentRepr
from .transport import JSONAPI_HEADERS, TransportResponse

if typing.TYPE_CHECKING:
    from .config import EntityConfig  # noqa: F401
    from .entity import Entity  # noqa: F401

logger = logging.getLogger(__name__)

E = typing.TypeVar("E", bound="Entity")


class Builder(typing.Generic[E]):
    """
    Accumulates the query intent for an entity class and issues the request.

    Mutators (:py:meth:`where`, :py:meth:`order_by`, :py:meth:`with_`, :py:meth:`limit`,
    :py:meth:`option`) return the builder itself, so that calls can be chained:

    .. code-block:: python

       response = await Book.where("genre", "sf").order_by("title").with_("author").get()

    Terminal coroutines (:py:meth:`get`, :py:meth:`first`, :py:meth:`find`) issue exactly one
    request each and leave the accumulated state untouched.

    :param Type[Entity] entity_class: the class the results are materialized into.
    :param Optional[str] url: the collection URL; a relation endpoint for builders opened from
                              a relation, the collection URL of ``entity_class`` otherwise.
    """

    entity_class: typing.Type[E]
    url: typing.Optional[str]
    query: Query

    @property
    def config(self) -> "EntityConfig":
        return self.entity_class.jsonapi_config

    @property
    def collection_url(self) -> str:
        return self.url if self.url is not None else self.config.collection_url

    def where(self, attribute: str, value: typing.Any) -> "Builder[E]":
        self.query.add_filter(attribute, value)
        return self

    def order_by(
        self, attribute: str, direction: typing.Union[SortDirection, str] = SortDirection.ASC
    ) -> "Builder[E]":
        self.query.add_sort(attribute, direction)
        return self

    def with_(self, paths: typing.Union[str, typing.Iterable[str]]) -> "Builder[E]":
        self.query.add_includes(paths)
        return self

    include = with_

    def limit(self, limit: int) -> "Builder[E]":
        self.query.set_limit(limit)
        return self

    def option(self, name: str, value: typing.Any) -> "Builder[E]":
        self.query.set_option(name, value)
        return self

    def _build_url(self, base: str, query_string: str) -> str:
        return f"{base}?{query_string}" if query_string else base

    async def _fetch(self, url: str) -> TransportResponse:
        logger.debug("fetching %s for %s", url, self.entity_class.__name__)
        return await self.config.effective_transport.get(url, headers=JSONAPI_HEADERS)

    async def get(self, page: typing.Optional[int] = None) -> PluralResponse[E]:
        """
        Fetches one page of the collection.

        :param Optional[int] page: the 1-based page number; the first page when omitted.
        """
        config = self.config
        page = max(page if page is not None else 1, 1)
        size = self.query.limit if self.query.limit is not None else config.page_size
        url = self._build_url(
            self.collection_url,
            self.query.to_query_string(
                pagination_params(config.pagination_strategy, page, size, config.param_names)
            ),
        )
        return PluralResponse(self, await self._fetch(url), page, size)

    async def first(self) -> SingularResponse[E]:
        config = self.config
        url = self._build_url(
            self.collection_url,
            self.query.to_query_string(
                pagination_params(config.pagination_strategy, 1, 1, config.param_names)
            ),
        )
        return SingularResponse(self.entity_class, await self._fetch(url), CollectionDocumentRepr)

    async def find(self, id: typing.Union[str, int]) -> SingularResponse[E]:
        """
        Fetches the resource identified by ``id``.  A resource that does not exist surfaces as
        the error the transport raises for it.
        """
        url = self._build_url(
            member_url(self.collection_url, id),
            self.query.to_query_string(),
        )
        return SingularResponse(self.entity_class, await self._fetch(url), SingletonDocumentRepr)

    async def fetch_one(self) -> SingularResponse[E]:
        """
        Fetches the single resource served at the builder URL, as a to-one relation endpoint does.
        """
        url = self._build_url(self.collection_url, self.query.to_query_string())
        return SingularResponse(self.entity_class, await self._fetch(url), SingletonDocumentRepr)

    def __init__(self, entity_class: typing.Type[E], url: typing.Optional[str] = None):
        self.entity_class = entity_class
        self.url = url
        self.query = Query()
