import httpx
import pytest

from mavlib.infrastructure.catalog.open_library import (
    OpenLibraryCatalogSupplier,
    normalize_document,
)

DUNE_DOC = {
    "key": "/works/OL893415W",
    "title": "Dune",
    "author_name": ["Frank Herbert"],
    "isbn": ["9780441172719", "0441172717"],
    "cover_i": 11481354,
    "first_publish_year": 1965,
    "first_sentence": ["In the week before their departure to Arrakis..."],
}


def make_transport(pages: dict[str, object], calls: list):
    def handler(request: httpx.Request) -> httpx.Response:
        subject = request.url.params["subject"]
        calls.append((request.url.path, subject, request.url.params["limit"]))
        body = pages.get(subject)
        if body is None:
            return httpx.Response(500, json={"error": "unavailable"})
        return httpx.Response(200, json=body)

    return httpx.MockTransport(handler)


def test_normalize_document_maps_fields():
    book = normalize_document(DUNE_DOC, "Science Fiction", copies=5)

    assert book.id == "OL893415W"
    assert book.author == "Frank Herbert"
    assert book.isbn == "9780441172719"
    assert book.category == "Science Fiction"
    assert book.cover_image == "https://covers.openlibrary.org/b/id/11481354-L.jpg"
    assert book.description.startswith("In the week")
    assert book.published_year == 1965
    assert (book.total_copies, book.available_copies) == (5, 5)
    assert 3.0 <= book.rating <= 5.0
    assert normalize_document(DUNE_DOC, "Science Fiction", copies=5).rating == book.rating


def test_normalize_document_defaults():
    book = normalize_document({"key": "/works/OL1W", "title": "Untold"}, "Poetry", copies=2)

    assert book.author == "Unknown"
    assert book.isbn == "/works/OL1W"
    assert book.description == "No description available."
    assert book.cover_image == ""
    assert normalize_document({"key": "/works/OL2W"}, "Poetry", copies=2) is None


async def test_fetch_books_per_genre():
    calls = []
    transport = make_transport({
        "science_fiction": {"docs": [DUNE_DOC]},
        "poetry": {"docs": [{"key": "/works/OL7W", "title": "Leaves of Grass",
                             "author_name": ["Walt Whitman"]}]},
    }, calls)
    supplier = OpenLibraryCatalogSupplier(
        base_url="https://openlibrary.test/", genres=["Science Fiction", "Poetry"],
        books_per_genre=3, default_copies=4, transport=transport,
    )

    books = await supplier.fetch_books()

    assert [b.title for b in books] == ["Dune", "Leaves of Grass"]
    assert [b.category for b in books] == ["Science Fiction", "Poetry"]
    assert all(b.total_copies == 4 for b in books)
    assert calls == [("/search.json", "science_fiction", "3"), ("/search.json", "poetry", "3")]


async def test_failing_genre_is_skipped():
    calls = []
    transport = make_transport({"poetry": {"docs": [DUNE_DOC, {"title": ""}]}}, calls)
    supplier = OpenLibraryCatalogSupplier(
        genres=["Horror", "Poetry"], transport=transport,
    )

    books = await supplier.fetch_books()

    assert [b.title for b in books] == ["Dune"]
    assert len(calls) == 2


async def test_duplicate_works_across_genres_are_dropped():
    calls = []
    transport = make_transport({
        "science_fiction": {"docs": [DUNE_DOC]},
        "classics": {"docs": [DUNE_DOC]},
    }, calls)
    supplier = OpenLibraryCatalogSupplier(genres=["Science Fiction", "Classics"], transport=transport)

    books = await supplier.fetch_books()

    assert [b.category for b in books] == ["Science Fiction"]


@pytest.mark.parametrize("body", [{"docs": None}, {"numFound": 0}])
async def test_malformed_payload_yields_no_books(body):
    transport = make_transport({"fantasy": body}, [])
    supplier = OpenLibraryCatalogSupplier(genres=["Fantasy"], transport=transport)

    assert await supplier.fetch_books() == []


async def test_connection_error_yields_no_books():
    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    supplier = OpenLibraryCatalogSupplier(genres=["Fantasy"], transport=httpx.MockTransport(handler))

    assert await supplier.fetch_books() == []
