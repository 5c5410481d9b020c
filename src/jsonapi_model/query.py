import enum
import typing
from collections import OrderedDict
from urllib.parse import urlencode

from .pagination import PaginationParams


class SortDirection(enum.Enum):
    ASC = "asc"
    DESC = "desc"


def _render_param(value: typing.Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_render_param(v) for v in value)
    return str(value)


class Query:
    """
    The query intent accumulated by a :py:class:`~jsonapi_model.builder.Builder`.

    Parameters come out in a fixed order: filters, ``include``, ``sort``, pagination, and
    finally the options, which replace any parameter of the same name.
    """

    filters: typing.List[typing.Tuple[str, typing.Any]]
    sorts: typing.List[typing.Tuple[str, SortDirection]]
    includes: "OrderedDict[str, None]"
    limit: typing.Optional[int]
    options: "OrderedDict[str, typing.Any]"

    def add_filter(self, attribute: str, value: typing.Any) -> None:
        self.filters.append((attribute, value))

    def add_sort(
        self, attribute: str, direction: typing.Union[SortDirection, str] = SortDirection.ASC
    ) -> None:
        if isinstance(direction, str):
            direction = SortDirection(direction.lower())
        self.sorts.append((attribute, direction))

    def add_includes(self, paths: typing.Union[str, typing.Iterable[str]]) -> None:
        if isinstance(paths, str):
            paths = [paths]
        for path in paths:
            path = path.strip()
            if path:
                self.includes[path] = None

    def set_limit(self, limit: int) -> None:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit!r}")
        self.limit = limit

    def set_option(self, name: str, value: typing.Any) -> None:
        self.options[name] = value

    def to_params(
        self, pagination: typing.Optional[PaginationParams] = None
    ) -> "OrderedDict[str, str]":
        params: "OrderedDict[str, str]" = OrderedDict()
        for attribute, value in self.filters:
            params[f"filter[{attribute}]"] = _render_param(value)
        if self.includes:
            params["include"] = ",".join(self.includes)
        if self.sorts:
            params["sort"] = ",".join(
                ("-" if direction is SortDirection.DESC else "") + attribute
                for attribute, direction in self.sorts
            )
        if pagination is not None:
            for name, value in pagination.items():
                params[name] = _render_param(value)
        for name, value in self.options.items():
            params[name] = _render_param(value)
        return params

    def to_query_string(self, pagination: typing.Optional[PaginationParams] = None) -> str:
        return urlencode(self.to_params(pagination), safe="[],")

    def __init__(self):
        self.filters = []
        self.sorts = []
        self.includes = OrderedDict()
        self.limit = None
        self.options = OrderedDict()
