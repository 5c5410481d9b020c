import pytest

from ..builder import Builder
from ..serde.exceptions import DeserializationError
from ..transport import JSONAPI_HEADERS
from .models import Author, Book, Chapter
from .testing import NotFound


@pytest.fixture
def target():
    return Builder


def test_mutators_return_the_builder(target):
    builder = target(Book)
    assert builder.where("genre", "sf") is builder
    assert builder.order_by("title") is builder
    assert builder.with_("author") is builder
    assert builder.include("chapters") is builder
    assert builder.limit(3) is builder
    assert builder.option("fields[books]", "title") is builder


@pytest.mark.asyncio
async def test_get(target, transport):
    transport.respond({"data": []})
    await (
        target(Book)
        .where("genre", "sf")
        .where("available", True)
        .order_by("title", "desc")
        .order_by("published_at")
        .with_(["author", "chapters"])
        .get(2)
    )
    request = transport.last_request
    assert request.method == "GET"
    assert request.url == (
        "https://api.example.com/v1/books"
        "?filter[genre]=sf&filter[available]=true"
        "&include=author,chapters"
        "&sort=-title,published_at"
        "&page[offset]=50&page[limit]=50"
    )
    assert request.headers == JSONAPI_HEADERS


@pytest.mark.asyncio
async def test_get_page_based(target, transport):
    transport.respond({"data": []})
    await target(Chapter).get(3)
    assert transport.last_request.url == (
        "https://api.example.com/v1/book-chapters?page[number]=3&page[size]=20"
    )


@pytest.mark.asyncio
async def test_limit_sets_page_size(target, transport):
    transport.respond({"data": []}).respond({"data": []})
    await target(Book).limit(10).get()
    assert transport.last_request.url == (
        "https://api.example.com/v1/books?page[offset]=0&page[limit]=10"
    )
    await target(Chapter).limit(10).get(2)
    assert transport.last_request.url == (
        "https://api.example.com/v1/book-chapters?page[number]=2&page[size]=10"
    )


@pytest.mark.asyncio
async def test_options_win(target, transport):
    transport.respond({"data": []})
    await target(Book).option("page[limit]", 5).option("fields[books]", "title").get()
    assert transport.last_request.url == (
        "https://api.example.com/v1/books?page[offset]=0&page[limit]=5&fields[books]=title"
    )


@pytest.mark.asyncio
async def test_terminal_calls_keep_state(target, transport):
    transport.respond({"data": []}).respond({"data": []})
    builder = target(Book).where("genre", "sf")
    await builder.get()
    first_url = transport.last_request.url
    await builder.get()
    assert transport.last_request.url == first_url
    assert len(transport.requests) == 2


@pytest.mark.asyncio
async def test_first(target, transport):
    transport.respond(
        {
            "data": [
                {"type": "books", "id": "1", "attributes": {"title": "Dune"}},
            ],
        }
    )
    response = await target(Book).order_by("title").first()
    assert transport.last_request.url == (
        "https://api.example.com/v1/books?sort=title&page[offset]=0&page[limit]=1"
    )
    assert isinstance(response.data, Book)
    assert response.data.api_id == "1"


@pytest.mark.asyncio
async def test_first_empty(target, transport):
    transport.respond({"data": []})
    response = await target(Book).first()
    assert response.data is None


@pytest.mark.asyncio
async def test_find(target, transport):
    transport.respond(
        {
            "data": {
                "type": "books",
                "id": "5",
                "attributes": {"title": "Dune"},
                "relationships": {"author": {"data": {"type": "authors", "id": "2"}}},
            },
            "included": [
                {"type": "authors", "id": "2", "attributes": {"name": "Frank Herbert"}},
            ],
        }
    )
    response = await target(Book).with_("author").find(5)
    assert transport.last_request.url == "https://api.example.com/v1/books/5?include=author"
    book = response.data
    assert isinstance(book, Book)
    assert book["title"] == "Dune"
    author = book.get_relation("author")
    assert isinstance(author, Author)
    assert author["name"] == "Frank Herbert"
    assert response.included == [author]


@pytest.mark.asyncio
async def test_find_quotes_id(target, transport):
    transport.respond({"data": None})
    response = await target(Book).find("a/b c")
    assert transport.last_request.url == "https://api.example.com/v1/books/a%2Fb%20c"
    assert response.data is None


@pytest.mark.asyncio
async def test_find_not_found(target, transport):
    error = NotFound()
    transport.fail(error)
    with pytest.raises(NotFound) as e:
        await target(Book).find("404")
    assert e.value is error


@pytest.mark.asyncio
async def test_malformed_document(target, transport):
    transport.respond({"data": [{"id": "1"}, {"type": "books", "id": True}]})
    with pytest.raises(DeserializationError) as e:
        await target(Book).get()
    assert [str(item.pointer) for item in e.value.errors] == ["/data/0/type", "/data/1/id"]


@pytest.mark.asyncio
async def test_scoped_url(target, transport):
    transport.respond({"data": []})
    await target(Chapter, "https://api.example.com/v1/books/1/chapters").get()
    assert transport.last_request.url == (
        "https://api.example.com/v1/books/1/chapters?page[number]=1&page[size]=20"
    )
