"""Catalog service: ingestion, admin edits and read access to books."""

import logging
from dataclasses import replace
from typing import Optional
from uuid import uuid4

from mavlib.domain.entities import Book, CatalogState, LendingFailure
from mavlib.domain.repositories import ICatalogRepository, ICatalogSupplier
from mavlib.domain.services import ICatalogService, ILendingLedger

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "title",
        "author",
        "isbn",
        "category",
        "description",
        "cover_image",
        "published_year",
        "rating",
        "total_copies",
    }
)


def _with_valid_copies(book: Book) -> Book:
    """Clamp supplier copy counts so ``0 <= available <= total`` holds."""
    total = max(book.total_copies, 0)
    available = min(max(book.available_copies, 0), total)
    if (total, available) != (book.total_copies, book.available_copies):
        logger.warning(
            "Book %s has inconsistent copies (%d/%d), clamped to %d/%d",
            book.id, book.available_copies, book.total_copies, available, total,
        )
        return replace(book, total_copies=total, available_copies=available)
    return book


class CatalogService(ICatalogService):
    """Catalog Store write surface.

    Copy counts on edit are kept consistent with the ledger: the number of
    copies currently on loan is preserved when ``total_copies`` changes, and
    deletion is refused while any loan references the book.
    """

    def __init__(
        self,
        catalog_repository: ICatalogRepository,
        ledger: ILendingLedger,
        fallback_supplier: ICatalogSupplier,
    ):
        self.catalog_repository = catalog_repository
        self.ledger = ledger
        self.fallback_supplier = fallback_supplier

    @property
    def state(self) -> CatalogState:
        return self.catalog_repository.get_state()

    async def load(self, supplier: ICatalogSupplier) -> int:
        """Fetch the initial catalog; fall back to the bundled records.

        Supplier failures are logged and never propagated. Returns the
        number of books installed.
        """
        self.catalog_repository.set_state(CatalogState.LOADING)
        books: list[Book] = []
        try:
            books = await supplier.fetch_books()
        except Exception as exc:
            logger.warning("Catalog supplier failed, using bundled records: %s", exc)
        if not books:
            logger.info("Catalog supplier returned no books, using bundled records")
            books = await self.fallback_supplier.fetch_books()

        books = [_with_valid_copies(book) for book in books]
        with self.ledger.lock:
            self.catalog_repository.replace_all(books)
            self.catalog_repository.set_state(CatalogState.READY)
        count = len(self.catalog_repository.list_all())
        logger.info("Catalog ready with %d books", count)
        return count

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def list_books(
        self, category: Optional[str] = None, author: Optional[str] = None
    ) -> list[Book]:
        books = self.catalog_repository.list_all()
        if category:
            books = [b for b in books if b.category == category]
        if author:
            books = [b for b in books if b.author == author]
        return books

    def get_book(self, book_id: str) -> Optional[Book]:
        return self.catalog_repository.get_by_id(book_id)

    # ------------------------------------------------------------------
    # Admin edits
    # ------------------------------------------------------------------
    def add_book(self, **fields) -> Book:
        unknown = set(fields) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown book fields: {', '.join(sorted(unknown))}")
        total = fields.get("total_copies", 0)
        if total < 0:
            raise ValueError("total_copies must not be negative")
        book = Book(id=f"book-{uuid4().hex}", available_copies=total, **fields)
        with self.ledger.lock:
            created = self.catalog_repository.add(book)
        logger.info("Book added: %s '%s' (%d copies)", created.id, created.title, total)
        return created

    def update_failure(self, book_id: str, **changes) -> Optional[LendingFailure]:
        with self.ledger.lock:
            book = self.catalog_repository.get_by_id(book_id)
            if book is None:
                return LendingFailure.BOOK_NOT_FOUND
            if "total_copies" in changes:
                on_loan = book.total_copies - book.available_copies
                if changes["total_copies"] - on_loan < 0:
                    return LendingFailure.INVALID_COPIES
            return None

    def update_book(self, book_id: str, **changes) -> bool:
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown book fields: {', '.join(sorted(unknown))}")
        with self.ledger.lock:
            failure = self.update_failure(book_id, **changes)
            if failure is not None:
                logger.info("Update refused for book %s: %s", book_id, failure.value)
                return False
            book = self.catalog_repository.get_by_id(book_id)
            on_loan = book.total_copies - book.available_copies
            updated = replace(book, **changes)
            updated.available_copies = updated.total_copies - on_loan
            self.catalog_repository.update(updated)
            self.ledger.sync_book_snapshots(updated)
        logger.info("Book updated: %s (%s)", book_id, ", ".join(sorted(changes)) or "no changes")
        return True

    def delete_failure(self, book_id: str) -> Optional[LendingFailure]:
        with self.ledger.lock:
            if self.catalog_repository.get_by_id(book_id) is None:
                return LendingFailure.BOOK_NOT_FOUND
            if self.ledger.has_active_loans(book_id):
                return LendingFailure.BOOK_ON_LOAN
            return None

    def delete_book(self, book_id: str) -> bool:
        with self.ledger.lock:
            failure = self.delete_failure(book_id)
            if failure is not None:
                logger.info("Delete refused for book %s: %s", book_id, failure.value)
                return False
            deleted = self.catalog_repository.delete(book_id)
        if deleted:
            logger.info("Book deleted: %s", book_id)
        return deleted
