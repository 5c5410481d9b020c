"""
Mapping of a requested window of a collection onto query parameters.
"""
import dataclasses
import enum
import typing
from collections import OrderedDict

DEFAULT_PAGE_SIZE = 50


class PaginationStrategy(enum.Enum):
    PAGE_BASED = "page_based"
    """``page[number]`` / ``page[size]`` pairs"""
    OFFSET_BASED = "offset_based"
    """``page[offset]`` / ``page[limit]`` pairs"""


@dataclasses.dataclass(frozen=True)
class PaginationParamNames:
    page_number: str = "page[number]"
    page_size: str = "page[size]"
    offset: str = "page[offset]"
    limit: str = "page[limit]"


DEFAULT_PARAM_NAMES = PaginationParamNames()

PaginationParams = typing.Mapping[str, int]


def page_based_params(
    number: int, size: int, names: PaginationParamNames = DEFAULT_PARAM_NAMES
) -> PaginationParams:
    return OrderedDict([(names.page_number, number), (names.page_size, size)])


def offset_based_params(
    offset: int, limit: int, names: PaginationParamNames = DEFAULT_PARAM_NAMES
) -> PaginationParams:
    return OrderedDict([(names.offset, offset), (names.limit, limit)])


def pagination_params(
    strategy: PaginationStrategy,
    page: typing.Optional[int],
    size: int,
    names: PaginationParamNames = DEFAULT_PARAM_NAMES,
) -> PaginationParams:
    """
    Returns the query parameters that select the ``page``-th window (1-based) of ``size`` items.

    :param PaginationStrategy strategy: the strategy that decides the parameter shape.
    :param Optional[int] page: the page number; the first page when ``None``.
    :param int size: the number of items per page.
    :param PaginationParamNames names: the parameter names to use.
    """
    page = max(page if page is not None else 1, 1)
    if strategy is PaginationStrategy.PAGE_BASED:
        return page_based_params(page, size, names)
    elif strategy is PaginationStrategy.OFFSET_BASED:
        return offset_based_params((page - 1) * size, size, names)
    else:
        raise AssertionError("never get here")
