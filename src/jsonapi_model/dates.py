"""
Parsing and formatting of date attributes.

Values are accepted as :py:class:`datetime.datetime` / :py:class:`datetime.date` objects or as
strings. Strings are matched against the ``strptime`` pattern configured for the attribute
first, then handed to :py:func:`dateutil.parser.parse`, which understands ISO 8601 as well as
most human and RFC 2822 forms such as ``"August 1, 1965"``.
"""
import datetime
import typing

from dateutil import parser as dateutil_parser


def parse_date(value: typing.Any, format: typing.Optional[str] = None) -> datetime.datetime:
    """
    Parses ``value`` into a :py:class:`datetime.datetime`.

    :param Any value: a datetime, a date or a string.
    :param Optional[str] format: a ``strptime`` pattern tried before the lenient parser.
    :raises ValueError: if the value cannot be understood as a date.
    """
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise ValueError(f"{value!r} is not a date")
    if format is not None:
        try:
            return datetime.datetime.strptime(value, format)
        except ValueError:
            pass
    try:
        return dateutil_parser.parse(value)
    except (ValueError, OverflowError) as e:
        raise ValueError(f"{value!r} cannot be parsed as a date") from e


def format_date(value: datetime.datetime, format: str) -> str:
    return value.strftime(format)
