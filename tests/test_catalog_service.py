import pytest

from conftest import READER_ID, STAFF_ID
from mavlib.domain.entities import Book, CatalogState, LendingFailure, Role
from mavlib.domain.repositories import ICatalogSupplier
from mavlib.infrastructure.catalog.bundled import BUNDLED_BOOKS, BundledCatalogSupplier
from mavlib.infrastructure.memory.repository import CatalogRepository


class StaticSupplier(ICatalogSupplier):
    def __init__(self, books=None, error=None):
        self.books = books or []
        self.error = error

    async def fetch_books(self) -> list[Book]:
        if self.error:
            raise self.error
        return self.books


@pytest.fixture
def loading_service(catalog_service):
    catalog_service.catalog_repository.replace_all([])
    catalog_service.catalog_repository.set_state(CatalogState.LOADING)
    return catalog_service


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------
async def test_load_installs_supplier_books(loading_service):
    remote = [Book(id="ol-1", title="Remote", author="Someone", isbn="1", category="Poetry",
                   total_copies=5, available_copies=5)]

    count = await loading_service.load(StaticSupplier(remote))

    assert count == 1
    assert loading_service.state is CatalogState.READY
    assert [b.title for b in loading_service.list_books()] == ["Remote"]


@pytest.mark.parametrize("supplier", [
    StaticSupplier(error=RuntimeError("network down")),
    StaticSupplier([]),
])
async def test_load_falls_back_to_bundled_records(loading_service, supplier):
    count = await loading_service.load(supplier)

    assert count == len(BUNDLED_BOOKS)
    assert loading_service.state is CatalogState.READY


async def test_load_clamps_inconsistent_copy_counts(loading_service):
    remote = [
        Book(id="over", title="Too Many", author="A", isbn="1", category="Poetry",
             total_copies=2, available_copies=7),
        Book(id="under", title="Too Few", author="B", isbn="2", category="Poetry",
             total_copies=2, available_copies=-3),
        Book(id="neg", title="Negative Total", author="C", isbn="3", category="Poetry",
             total_copies=-1, available_copies=1),
    ]

    await loading_service.load(StaticSupplier(remote))

    books = {b.id: b for b in loading_service.list_books()}
    for book in books.values():
        assert 0 <= book.available_copies <= book.total_copies
    assert (books["over"].available_copies, books["over"].total_copies) == (2, 2)
    assert (books["under"].available_copies, books["under"].total_copies) == (0, 2)
    assert (books["neg"].available_copies, books["neg"].total_copies) == (0, 0)


async def test_load_makes_borrow_possible(loading_service, ledger):
    assert ledger.borrow_failure(READER_ID, "1") is LendingFailure.CATALOG_LOADING

    await loading_service.load(BundledCatalogSupplier())

    assert ledger.borrow(READER_ID, "1") is True


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
def test_list_books_filters(catalog_service):
    assert {b.title for b in catalog_service.list_books(category="Science Fiction")} == {
        "Dune", "Children of Dune",
    }
    assert [b.title for b in catalog_service.list_books(author="Harper Lee")] == [
        "To Kill a Mockingbird",
    ]
    assert catalog_service.list_books(category="Poetry", author="Frank Herbert") == []
    assert len(catalog_service.list_books()) == len(BUNDLED_BOOKS)


def test_get_book(catalog_service):
    assert catalog_service.get_book("2").title == "The Hobbit"
    assert catalog_service.get_book("nope") is None


# ---------------------------------------------------------------------------
# Admin edits
# ---------------------------------------------------------------------------
def test_add_book_starts_fully_available(catalog_service, search_engine):
    book = catalog_service.add_book(
        title="Neuromancer", author="William Gibson", isbn="9780441569595",
        category="Science Fiction", rating=4.1, total_copies=3,
    )

    assert book.id.startswith("book-")
    assert book.available_copies == 3
    assert catalog_service.get_book(book.id).title == "Neuromancer"
    assert [r.title for r in search_engine.search("neuromancer", Role.READER).books] == ["Neuromancer"]


def test_add_book_rejects_bad_input(catalog_service):
    with pytest.raises(ValueError):
        catalog_service.add_book(title="X", author="Y", isbn="1", category="Z", total_copies=-1)
    with pytest.raises(ValueError):
        catalog_service.add_book(title="X", author="Y", isbn="1", category="Z", shelf="A3")


def test_update_total_copies_keeps_loans_on_loan(catalog_service, ledger):
    ledger.borrow(READER_ID, "1")
    ledger.borrow(STAFF_ID, "1")

    assert catalog_service.update_book("1", total_copies=6) is True
    book = catalog_service.get_book("1")
    assert (book.total_copies, book.available_copies) == (6, 4)

    assert catalog_service.update_book("1", total_copies=2) is True
    book = catalog_service.get_book("1")
    assert (book.total_copies, book.available_copies) == (2, 0)


def test_update_below_copies_on_loan_is_refused(catalog_service, ledger):
    ledger.borrow(READER_ID, "1")
    ledger.borrow(STAFF_ID, "1")

    assert catalog_service.update_failure("1", total_copies=1) is LendingFailure.INVALID_COPIES
    assert catalog_service.update_book("1", total_copies=1) is False
    assert catalog_service.get_book("1").total_copies == 4


def test_update_unknown_book(catalog_service):
    assert catalog_service.update_failure("nope", title="X") is LendingFailure.BOOK_NOT_FOUND
    assert catalog_service.update_book("nope", title="X") is False


def test_update_rejects_unknown_fields(catalog_service):
    with pytest.raises(ValueError):
        catalog_service.update_book("1", available_copies=99)


def test_update_syncs_active_loan_snapshots(catalog_service, ledger):
    ledger.borrow(READER_ID, "1")

    catalog_service.update_book("1", title="Dune Messiah", rating=3.9)

    snapshot = ledger.get_active_loan(READER_ID, "1").book
    assert snapshot.title == "Dune Messiah"
    assert snapshot.rating == 3.9


def test_delete_refused_while_on_loan(catalog_service, ledger, search_engine):
    ledger.borrow(READER_ID, "13")

    assert catalog_service.delete_failure("13") is LendingFailure.BOOK_ON_LOAN
    assert catalog_service.delete_book("13") is False
    assert catalog_service.get_book("13") is not None

    ledger.return_loan(ledger.get_active_loan(READER_ID, "13").id)

    assert catalog_service.delete_book("13") is True
    assert catalog_service.get_book("13") is None
    assert search_engine.search("watchmen", Role.READER).books == []


def test_delete_unknown_book(catalog_service):
    assert catalog_service.delete_failure("nope") is LendingFailure.BOOK_NOT_FOUND
    assert catalog_service.delete_book("nope") is False


def test_service_state_follows_repository():
    from mavlib.services.catalog_service import CatalogService

    service = CatalogService(CatalogRepository(), ledger=None, fallback_supplier=BundledCatalogSupplier())
    assert service.state is CatalogState.LOADING
