"""Domain-level application service interfaces (ports).

These abstract classes define the contracts that the API layer depends on.
Concrete implementations live in ``mavlib/services/`` and are wired together
by the composition root in ``mavlib/core/dependencies.py``.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from mavlib.domain.entities import (
    Book,
    GroupedSearchResults,
    LendingFailure,
    Loan,
    Role,
)


class ILendingLedger(ABC):
    """State machine for loans: ACTIVE -(renew)-> ACTIVE, ACTIVE -(return)-> CLOSED.

    Every mutating operation returns a plain boolean; the matching
    ``*_failure`` query names the reason a call would be refused.
    Implementations expose a re-entrant ``lock`` that other writers of the
    catalog (admin edits, ingestion) must hold.
    """

    @abstractmethod
    def borrow(self, actor_id: Optional[str], book_id: str) -> bool:
        pass

    @abstractmethod
    def return_loan(self, loan_id: str) -> bool:
        pass

    @abstractmethod
    def renew(self, loan_id: str) -> bool:
        pass

    @abstractmethod
    def recompute_overdue(self, now: Optional[datetime] = None) -> int:
        """Refresh ``is_overdue`` on every active loan; return the overdue count."""
        pass

    @abstractmethod
    def is_borrowed_by_actor(self, actor_id: Optional[str], book_id: str) -> bool:
        pass

    @abstractmethod
    def borrow_failure(self, actor_id: Optional[str], book_id: str) -> Optional[LendingFailure]:
        pass

    @abstractmethod
    def renew_failure(self, loan_id: str) -> Optional[LendingFailure]:
        pass

    @abstractmethod
    def get_loan(self, loan_id: str) -> Optional[Loan]:
        pass

    @abstractmethod
    def get_active_loan(self, actor_id: str, book_id: str) -> Optional[Loan]:
        pass

    @abstractmethod
    def get_closed_loan(self, actor_id: str, loan_id: str) -> Optional[Loan]:
        """Look up a returned loan in the actor's borrow history."""
        pass

    @abstractmethod
    def active_loans(self, actor_id: Optional[str] = None) -> list[Loan]:
        pass

    @abstractmethod
    def has_active_loans(self, book_id: str) -> bool:
        pass

    @abstractmethod
    def sync_book_snapshots(self, book: Book) -> int:
        pass


class ICatalogService(ABC):

    @abstractmethod
    def list_books(
        self, category: Optional[str] = None, author: Optional[str] = None
    ) -> list[Book]:
        pass

    @abstractmethod
    def get_book(self, book_id: str) -> Optional[Book]:
        pass

    @abstractmethod
    def add_book(self, **fields) -> Book:
        pass

    @abstractmethod
    def update_book(self, book_id: str, **changes) -> bool:
        pass

    @abstractmethod
    def delete_book(self, book_id: str) -> bool:
        pass

    @abstractmethod
    def update_failure(self, book_id: str, **changes) -> Optional[LendingFailure]:
        pass

    @abstractmethod
    def delete_failure(self, book_id: str) -> Optional[LendingFailure]:
        pass


class ISearchEngine(ABC):

    @abstractmethod
    def search(self, query: str, role: Optional[Role] = None) -> GroupedSearchResults:
        """Rank and group catalog, vocabulary, page and (admin-only) user matches."""
        pass
