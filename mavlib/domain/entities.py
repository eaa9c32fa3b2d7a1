"""Domain entities for the library catalog and lending tracker."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from mavlib.core.clock import utcnow


class Role(str, Enum):
    READER = "reader"
    STAFF = "staff"
    ADMIN = "admin"


class CatalogState(str, Enum):
    """Readiness gate for the Catalog Store.

    ``LOADING`` while the supplier is still fetching; ``READY`` once the book
    list (remote or bundled fallback) has been installed.
    """

    LOADING = "loading"
    READY = "ready"


class LendingFailure(str, Enum):
    """Why a lending or catalog edit operation was refused."""

    NOT_AUTHENTICATED = "not_authenticated"
    CATALOG_LOADING = "catalog_loading"
    BOOK_NOT_FOUND = "book_not_found"
    NO_COPIES = "no_copies"
    ALREADY_BORROWED = "already_borrowed"
    LOAN_NOT_FOUND = "loan_not_found"
    RENEWAL_LIMIT = "renewal_limit"
    BOOK_ON_LOAN = "book_on_loan"
    INVALID_COPIES = "invalid_copies"


class ResultType(str, Enum):
    BOOK = "book"
    AUTHOR = "author"
    CATEGORY = "category"
    USER = "user"
    PAGE = "page"
    FEATURE = "feature"


@dataclass
class Book:
    id: str
    title: str
    author: str
    isbn: str
    category: str
    description: str = ""
    cover_image: str = ""
    published_year: int = 2000
    rating: float = 0.0  # 0.0 - 5.0
    total_copies: int = 0
    available_copies: int = 0

    @property
    def is_available(self) -> bool:
        return self.available_copies > 0


@dataclass
class Loan:
    """An active or closed borrowing of one copy.

    ``book`` is a copy of the catalog record taken at borrow time; it is only
    refreshed by the ledger's explicit snapshot sync after an admin edit.
    """

    id: str
    book_id: str
    user_id: str
    book: Book
    borrow_date: datetime
    due_date: datetime
    renewal_count: int = 0
    is_overdue: bool = False
    return_date: Optional[datetime] = None


@dataclass
class User:
    id: str
    name: str
    email: str
    role: Role
    hashed_password: str = ""
    membership_date: datetime = field(default_factory=utcnow)
    borrow_history: list[Loan] = field(default_factory=list)
    token: Optional[str] = None
    expires_at: Optional[datetime] = None


@dataclass(frozen=True)
class Identity:
    """The caller as seen by the ledger and the search engine.

    Anonymous callers and explicit guests carry no ``actor_id``.
    """

    actor_id: Optional[str] = None
    role: Optional[Role] = None
    is_guest: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.actor_id is not None

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls()

    @classmethod
    def guest(cls) -> "Identity":
        return cls(is_guest=True)


@dataclass(frozen=True)
class SearchResult:
    id: str
    type: ResultType
    title: str
    route: str
    priority: int
    subtitle: Optional[str] = None
    description: Optional[str] = None
    ref_id: Optional[str] = None


@dataclass
class GroupedSearchResults:
    books: list[SearchResult] = field(default_factory=list)
    authors: list[SearchResult] = field(default_factory=list)
    categories: list[SearchResult] = field(default_factory=list)
    users: list[SearchResult] = field(default_factory=list)
    pages: list[SearchResult] = field(default_factory=list)
    features: list[SearchResult] = field(default_factory=list)
    all: list[SearchResult] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.books or self.authors or self.categories
            or self.users or self.pages or self.features
        )
