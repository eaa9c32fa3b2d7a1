from datetime import datetime, timedelta, timezone

import pytest

from mavlib.domain.entities import Book
from mavlib.infrastructure.catalog.bundled import BundledCatalogSupplier, bundled_books, demo_users
from mavlib.infrastructure.memory.repository import CatalogRepository, LoanRepository, UserRepository
from mavlib.services.catalog_service import CatalogService
from mavlib.services.ledger import LendingLedger
from mavlib.services.report_service import ReportService
from mavlib.services.search import SearchEngine

READER_ID = "user-1"
STAFF_ID = "user-2"
ADMIN_ID = "user-3"


class FixedClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


def make_book(book_id="b1", title="Dune", author="Frank Herbert", isbn="123",
              category="Science Fiction", copies=1, rating=4.0) -> Book:
    return Book(
        id=book_id,
        title=title,
        author=author,
        isbn=isbn,
        category=category,
        rating=rating,
        total_copies=copies,
        available_copies=copies,
    )


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def catalog_repo():
    return CatalogRepository(bundled_books())


@pytest.fixture
def user_repo():
    return UserRepository(demo_users())


@pytest.fixture
def loan_repo():
    return LoanRepository()


@pytest.fixture
def ledger(catalog_repo, loan_repo, user_repo, clock):
    return LendingLedger(
        catalog_repository=catalog_repo,
        loan_repository=loan_repo,
        user_repository=user_repo,
        clock=clock,
    )


@pytest.fixture
def catalog_service(catalog_repo, ledger):
    return CatalogService(catalog_repo, ledger, BundledCatalogSupplier())


@pytest.fixture
def search_engine(catalog_repo, user_repo):
    return SearchEngine(catalog_repo, user_repo)


@pytest.fixture
def report_service(catalog_repo, user_repo, ledger, clock):
    return ReportService(catalog_repo, user_repo, ledger, clock=clock)
