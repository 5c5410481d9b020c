import datetime

import pytest

from ..entity import Entity, RelationKind, RelationValue
from ..exceptions import (
    ConfigurationError,
    InvalidAttributeValueError,
    InvalidDeclarationError,
    MissingIdentityError,
)
from ..transport import JSONAPI_HEADERS
from ..utils.types import NO_IDENTITY
from .models import Author, Book, Chapter, Publisher
from .testing import NotFound, ServerError


class TestConfiguration:
    def test_urls(self):
        assert Book.jsonapi_config.collection_url == "https://api.example.com/v1/books"
        assert Book.jsonapi_config.resource_url("3") == "https://api.example.com/v1/books/3"
        assert Book.jsonapi_config.resource_url("a/b c") == (
            "https://api.example.com/v1/books/a%2Fb%20c"
        )
        assert Book.jsonapi_config.resource_url(7) == "https://api.example.com/v1/books/7"
        assert Chapter.jsonapi_config.collection_url == "https://api.example.com/v1/book-chapters"

    def test_missing_type(self):
        class Untyped(Entity):
            class Meta:
                base_url = "https://example.com"

        with pytest.raises(ConfigurationError) as e:
            Untyped.jsonapi_config.collection_url
        assert str(e.value) == "expected Untyped to have Meta.type defined"

    def test_missing_base_url(self):
        class Homeless(Entity):
            class Meta:
                type = "homeless-things"

        with pytest.raises(ConfigurationError) as e:
            Homeless.jsonapi_config.collection_url
        assert e.value.name == "base_url"

    def test_subclass_inherits(self):
        class SpecialBook(Book):
            class Meta:
                page_size = 5

        config = SpecialBook.jsonapi_config
        assert config.owner is SpecialBook
        assert config.type == "books"
        assert config.page_size == 5
        assert config.read_only_attributes == frozenset(["created_at"])
        assert set(config.relationships) == {"author", "chapters", "publisher"}


class TestAttributes:
    def test_item_access(self):
        book = Book({"title": "Dune"}, pages=412)
        assert book["title"] == "Dune"
        assert book.get_attribute("pages") == 412
        assert "title" in book
        assert "isbn" not in book
        assert book.get_attribute("isbn") is None
        with pytest.raises(KeyError):
            book["isbn"]
        del book["pages"]
        assert book.get_attributes() == {"title": "Dune"}

    def test_insertion_order(self):
        book = Book()
        book["b"] = 1
        book["a"] = 2
        book["c"] = 3
        book["a"] = 4
        assert list(book.get_attributes().items()) == [("b", 1), ("a", 4), ("c", 3)]

    def test_attribute_cannot_be_relation(self):
        book = Book()
        with pytest.raises(InvalidDeclarationError):
            book["author"] = "Frank Herbert"

        author = Author()
        author.set_relation("agent", None)
        with pytest.raises(InvalidDeclarationError):
            author["agent"] = "someone"

        author["nickname"] = "F"
        with pytest.raises(InvalidDeclarationError):
            author.set_relation("nickname", None)


class TestDates:
    def test_roundtrip(self):
        book = Book()
        book["published_at"] = "1965-08-01"
        assert book.get_attributes()["published_at"] == "1965-08-01"
        assert book["published_at"] == datetime.datetime(1965, 8, 1)

    def test_datetime_is_formatted(self):
        book = Book()
        book["published_at"] = datetime.datetime(1965, 8, 1, 12, 30)
        assert book.get_attributes()["published_at"] == "1965-08-01"
        assert book["published_at"] == datetime.datetime(1965, 8, 1)

    def test_iso_input(self):
        book = Book()
        book["published_at"] = "1965-08-01T10:00:00Z"
        assert book.get_attributes()["published_at"] == "1965-08-01"

    @pytest.mark.parametrize("value", ["August 1, 1965", "Sun, 01 Aug 1965 00:00:00 GMT"])
    def test_lenient_input(self, value):
        book = Book()
        book["published_at"] = value
        assert book.get_attributes()["published_at"] == "1965-08-01"
        assert book["published_at"] == datetime.datetime(1965, 8, 1)

    def test_none(self):
        book = Book(published_at=None)
        assert book["published_at"] is None

    def test_unparseable_write(self):
        book = Book()
        with pytest.raises(InvalidAttributeValueError) as e:
            book["published_at"] = "last tuesday"
        assert e.value.name == "published_at"
        assert "published_at" not in book

    def test_unparseable_read(self):
        book = Book()
        book._attributes["published_at"] = "garbage"
        with pytest.raises(InvalidAttributeValueError):
            book["published_at"]


class TestRelations:
    def test_relation_value(self):
        author = Author(api_id="1")
        assert RelationValue.of(None).kind is RelationKind.ABSENT
        assert RelationValue.of(author) == RelationValue(RelationKind.SINGLE, (author,))
        assert RelationValue.of([author]).kind is RelationKind.MANY
        assert RelationValue.of([]).unwrap() == []
        with pytest.raises(TypeError):
            RelationValue.of("author")
        with pytest.raises(TypeError):
            RelationValue.of([author, 1])

    def test_get_set(self):
        book = Book()
        author = Author()
        assert book.get_relation("author") is None
        assert not book.has_relation("author")
        book.set_relation("author", author)
        assert book.get_relation("author") is author
        book.set_relation("chapters", (Chapter(), Chapter()))
        assert isinstance(book.get_relation("chapters"), list)
        assert list(book.get_relations()) == ["author", "chapters"]
        book.unset_relation("author")
        assert not book.has_relation("author")

    def test_relations_keys(self):
        author = Author(api_id="1")
        book = Book(api_id="2")
        other = Book(api_id="3")
        author.set_relation("books", [book, other])
        book.set_relation("author", author)
        other.set_relation("chapters", [Chapter(api_id="4")])
        assert book.get_relations_keys() == ["author", "author.books", "author.books.chapters"]
        assert book.get_relations_keys("parent") == [
            "parent.author",
            "parent.author.books",
            "parent.author.books.chapters",
        ]

    def test_relations_keys_nested_to_one(self):
        author = Author(api_id="1")
        author.set_relation("books", [Book(api_id="2")])
        book = Book(api_id="3")
        book.set_relation("author", author)
        assert book.get_relations_keys() == ["author", "author.books"]

    def test_relations_keys_absent(self):
        book = Book()
        book.set_relation("publisher", None)
        book.set_relation("chapters", [])
        assert book.get_relations_keys() == ["publisher", "chapters"]


class TestSerialize:
    def test_new(self):
        book = Book(title="Dune", created_at="yesterday", published_at="1965-08-01")
        book.set_relation("author", Author(api_id="1"))
        book.set_relation("chapters", [])
        book.set_relation("publisher", None)
        assert book.serialize() == {
            "data": {
                "type": "books",
                "attributes": {
                    "title": "Dune",
                    "published_at": "1965-08-01",
                },
                "relationships": {
                    "author": {"data": {"type": "authors", "id": "1"}},
                },
            },
        }

    def test_persisted(self):
        book = Book(api_id="7", title="Dune")
        book.set_relation("chapters", [Chapter(api_id="1"), Chapter(api_id="2")])
        assert book.serialize() == {
            "data": {
                "type": "books",
                "id": "7",
                "attributes": {"title": "Dune"},
                "relationships": {
                    "chapters": {
                        "data": [
                            {"type": "chapters", "id": "1"},
                            {"type": "chapters", "id": "2"},
                        ],
                    },
                },
            },
        }

    def test_empty(self):
        assert Author().serialize() == {"data": {"type": "authors"}}

    def test_empty_id_is_not_persisted(self):
        book = Book(api_id="")
        assert not book.is_persisted
        assert "id" not in book.serialize()["data"]

    def test_unsaved_related(self):
        book = Book()
        book.set_relation("author", Author())
        with pytest.raises(MissingIdentityError):
            book.serialize()


class TestPersistence:
    @pytest.mark.asyncio
    async def test_create(self, transport):
        transport.respond(
            {"data": {"type": "books", "id": "12", "attributes": {"title": "Dune"}}}, 201
        )
        book = Book(title="Dune")
        response = await book.save()
        request = transport.last_request
        assert request.method == "POST"
        assert request.url == "https://api.example.com/v1/books"
        assert request.body == {"data": {"type": "books", "attributes": {"title": "Dune"}}}
        assert request.headers == JSONAPI_HEADERS
        assert book.api_id == "12"
        assert response.model_id == "12"
        assert response.status == 201
        assert response.data is not book
        assert response.data["title"] == "Dune"

    @pytest.mark.asyncio
    async def test_update(self, transport):
        transport.respond({"data": {"type": "books", "id": "12"}})
        book = Book(api_id="12", title="Dune")
        await book.save()
        request = transport.last_request
        assert request.method == "PATCH"
        assert request.url == "https://api.example.com/v1/books/12"
        assert request.body["data"]["id"] == "12"

    @pytest.mark.asyncio
    async def test_create_without_identity_in_response(self, transport):
        transport.respond(None, 204)
        book = Book(title="Dune")
        response = await book.create()
        assert response.model_id is None
        assert response.data is None
        assert book.api_id is None

    @pytest.mark.asyncio
    async def test_save_propagates_errors(self, transport):
        error = ServerError()
        transport.fail(error)
        book = Book(title="Dune")
        with pytest.raises(ServerError) as e:
            await book.save()
        assert e.value is error
        assert book.api_id is None

    @pytest.mark.asyncio
    async def test_delete(self, transport):
        transport.respond(None, 204)
        assert await Book(api_id="3").delete() is None
        assert transport.last_request.method == "DELETE"
        assert transport.last_request.url == "https://api.example.com/v1/books/3"

    @pytest.mark.asyncio
    async def test_identity_is_encoded_in_urls(self, transport):
        book = Book(api_id="a/b c", title="Dune")
        transport.respond({"data": {"type": "books", "id": "a/b c"}})
        await book.save()
        assert transport.last_request.url == "https://api.example.com/v1/books/a%2Fb%20c"
        transport.respond(None, 204)
        await book.delete()
        assert transport.last_request.url == "https://api.example.com/v1/books/a%2Fb%20c"
        assert book.relation("author").url == "https://api.example.com/v1/books/a%2Fb%20c/author"

    @pytest.mark.asyncio
    async def test_delete_without_identity(self, transport):
        with pytest.raises(MissingIdentityError) as e:
            await Book().delete()
        assert str(e.value) == "cannot delete a Book with no identity"
        assert transport.requests == []


class TestFresh:
    @pytest.mark.asyncio
    async def test_not_persisted(self, transport):
        assert await Book().fresh() is NO_IDENTITY
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_found(self, transport):
        transport.respond(
            {
                "data": {
                    "type": "books",
                    "id": "3",
                    "attributes": {"title": "Dune Messiah"},
                    "relationships": {"author": {"data": {"type": "authors", "id": "1"}}},
                },
                "included": [{"type": "authors", "id": "1", "attributes": {"name": "Frank"}}],
            }
        )
        book = Book(api_id="3", title="Dune")
        author = Author(api_id="1")
        author.set_relation("books", [book])
        book.set_relation("author", author)
        fresh = await book.fresh()
        assert transport.last_request.url == (
            "https://api.example.com/v1/books/3?include=author,author.books"
        )
        assert isinstance(fresh, Book)
        assert fresh is not book
        assert fresh["title"] == "Dune Messiah"
        assert fresh.get_relation("author")["name"] == "Frank"

    @pytest.mark.asyncio
    async def test_empty(self, transport):
        transport.respond({"data": None})
        assert await Book(api_id="3").fresh() is None

    @pytest.mark.asyncio
    async def test_not_found(self, transport):
        transport.fail(NotFound())
        assert await Book(api_id="3").fresh() is None

    @pytest.mark.asyncio
    async def test_other_errors(self, transport):
        transport.fail(ServerError())
        with pytest.raises(ServerError):
            await Book(api_id="3").fresh()


@pytest.mark.asyncio
async def test_class_entry_points(transport):
    transport.respond({"data": []})
    response = await Publisher.where("country", "NL").get()
    assert len(response) == 0
    assert transport.last_request.url == (
        "https://api.example.com/v1/publishers?filter[country]=NL&page[offset]=0&page[limit]=50"
    )
