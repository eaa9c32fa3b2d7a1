"""Catalog supplier backed by the Open Library search API.

Queries ``/search.json?subject=<genre>`` once per genre using **httpx** and
normalizes each document into a :class:`Book`. A genre that fails is logged
and skipped; the caller decides what to do with an empty result.
"""

import hashlib
import logging
from typing import Any, Optional

import httpx

from mavlib.domain.entities import Book
from mavlib.domain.repositories import ICatalogSupplier

logger = logging.getLogger(__name__)

GENRE_QUERIES = {
    "Science Fiction": "science_fiction",
}

COVER_URL = "https://covers.openlibrary.org/b/id/{cover_id}-L.jpg"


def _rating_for(book_id: str) -> float:
    """Stable pseudo-rating in [3.0, 5.0] derived from the record id."""
    digest = int(hashlib.md5(book_id.encode("utf-8")).hexdigest(), 16)
    return round(3.0 + (digest % 21) / 10, 1)


def normalize_document(doc: dict[str, Any], genre: str, copies: int) -> Optional[Book]:
    """Map an Open Library search document to a Book, or ``None`` if untitled."""
    title = doc.get("title")
    if not title:
        return None
    key = doc.get("key") or ""
    book_id = key.replace("/works/", "") if key else (doc.get("cover_edition_key") or title)

    authors = doc.get("author_name") or []
    isbns = doc.get("isbn") or []
    first_sentence = doc.get("first_sentence")
    if isinstance(first_sentence, list):
        first_sentence = first_sentence[0] if first_sentence else None
    cover_id = doc.get("cover_i")

    return Book(
        id=book_id,
        title=title,
        author=authors[0] if authors else "Unknown",
        isbn=isbns[0] if isbns else (doc.get("cover_edition_key") or key or title),
        category=genre,
        description=first_sentence or "No description available.",
        cover_image=COVER_URL.format(cover_id=cover_id) if cover_id else "",
        published_year=doc.get("first_publish_year") or 2000,
        rating=_rating_for(book_id),
        total_copies=copies,
        available_copies=copies,
    )


class OpenLibraryCatalogSupplier(ICatalogSupplier):

    def __init__(
        self,
        base_url: str = "https://openlibrary.org",
        genres: Optional[list[str]] = None,
        books_per_genre: int = 10,
        default_copies: int = 5,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.genres = list(genres or [])
        self.books_per_genre = books_per_genre
        self.default_copies = default_copies
        self.timeout = timeout
        self.transport = transport

    async def fetch_books(self) -> list[Book]:
        books: list[Book] = []
        seen: set[str] = set()
        async with httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        ) as client:
            for genre in self.genres:
                for book in await self._fetch_genre(client, genre):
                    if book.id in seen:
                        continue
                    seen.add(book.id)
                    books.append(book)
        logger.info("Open Library returned %d books across %d genres", len(books), len(self.genres))
        return books

    async def _fetch_genre(self, client: httpx.AsyncClient, genre: str) -> list[Book]:
        subject = GENRE_QUERIES.get(genre, genre.lower())
        try:
            response = await client.get(
                "/search.json", params={"subject": subject, "limit": self.books_per_genre}
            )
            response.raise_for_status()
            docs = response.json().get("docs")
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Open Library fetch failed for genre %s: %s", genre, exc)
            return []
        if not isinstance(docs, list):
            return []
        books = [normalize_document(doc, genre, self.default_copies) for doc in docs]
        return [book for book in books if book is not None]
