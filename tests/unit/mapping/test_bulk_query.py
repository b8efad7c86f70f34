"""Unit tests for bulk query synthesis."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from core.errors import NotMappableError, QueryError
from core.types import RemoteId
from mapping.bulk_query import build_has_all_query
from mapping.mapper_client import TagMapClient
from mapping.type_registry import mapped_type, register_type, tag_field
from remote.memory_store import InMemoryRemoteStore


@mapped_type
@dataclass
class Book:
    title: str = tag_field(default="")
    author: str = tag_field(default="")


@mapped_type
@dataclass
class Pamphlet:
    title: str = tag_field(default="")


class Empty:
    pass


register_type(Empty, [])


class _RejectingStore(InMemoryRemoteStore):
    def find_matching(self, query: str) -> tuple[RemoteId, ...] | None:
        return None


def test_build_has_all_query_joins_clauses() -> None:
    """Every tag path should become one 'has' clause joined by 'and'."""
    query = build_has_all_query(["alice/books/title", "alice/books/author"])

    assert query == "has alice/books/title and has alice/books/author"


def test_build_has_all_query_rejects_empty_input() -> None:
    """An empty clause list has no meaningful query."""
    with pytest.raises(ValueError):
        build_has_all_query([])


def test_find_all_returns_objects_with_every_tag(client: TagMapClient) -> None:
    """Only objects carrying all mapped tags should match."""
    first_id = client.write(Book(title="Dune", author="Herbert"), "books")
    second_id = client.write(Book(title="Emma", author="Austen"), "books")
    client.write(Pamphlet(title="Flyer"), "books")

    books = client.find_all("books", Book)

    assert set(books.ids) == {first_id, second_id} and len(books) == 2
    assert sorted(book.title for book in books) == ["Dune", "Emma"]


def test_find_all_sequence_is_restartable(client: TagMapClient) -> None:
    """Each iteration should read the objects again."""
    book = Book(title="Dune", author="Herbert")
    client.write(book, "books")
    books = client.find_all("books", Book)
    first_pass = [item.title for item in books]

    book.title = "Dune Messiah"
    client.write(book, "books")
    second_pass = [item.title for item in books]

    assert first_pass == ["Dune"] and second_pass == ["Dune Messiah"]


def test_find_all_is_scoped_by_namespace(client: TagMapClient) -> None:
    """Instances written under another namespace should not match."""
    client.write(Book(title="Dune", author="Herbert"), "archive")
    client.resolve_namespace("books")
    client.resolve_tag("books", "title")
    client.resolve_tag("books", "author")

    assert len(client.find_all("books", Book)) == 0


def test_find_all_refuses_type_without_fields(client: TagMapClient) -> None:
    """A type with no mapped fields should never send a vacuous query."""
    with pytest.raises(NotMappableError):
        client.find_all("books", Empty)


def test_find_all_raises_when_store_rejects_query(client: TagMapClient) -> None:
    """A rejected query should surface as a query error."""
    rejecting_client = client.with_store(_RejectingStore(usernames=("alice",)))

    with pytest.raises(QueryError):
        rejecting_client.find_all("books", Book)
