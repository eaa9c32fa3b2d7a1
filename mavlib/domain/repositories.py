"""Repository interfaces (ports) for dependency inversion."""

from abc import ABC, abstractmethod
from typing import Optional

from mavlib.domain.entities import Book, CatalogState, Loan, User


class ICatalogRepository(ABC):
    """Catalog Store: book records plus the readiness gate."""

    @abstractmethod
    def get_state(self) -> CatalogState:
        pass

    @abstractmethod
    def set_state(self, state: CatalogState) -> None:
        pass

    @abstractmethod
    def replace_all(self, books: list[Book]) -> None:
        """Install a freshly supplied book list, replacing the current one."""
        pass

    @abstractmethod
    def get_by_id(self, book_id: str) -> Optional[Book]:
        pass

    @abstractmethod
    def list_all(self) -> list[Book]:
        pass

    @abstractmethod
    def add(self, book: Book) -> Book:
        pass

    @abstractmethod
    def update(self, book: Book) -> Book:
        pass

    @abstractmethod
    def delete(self, book_id: str) -> bool:
        pass


class IUserRepository(ABC):
    """User Directory."""

    @abstractmethod
    def create(self, user: User) -> User:
        pass

    @abstractmethod
    def get_by_id(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def list_all(self) -> list[User]:
        pass

    @abstractmethod
    def update(self, user: User) -> User:
        pass

    @abstractmethod
    def append_history(self, user_id: str, loan: Loan) -> bool:
        """Archive a closed loan in the actor's borrow history."""
        pass


class ILoanRepository(ABC):
    """The active-loan set owned by the Lending Ledger."""

    @abstractmethod
    def add(self, loan: Loan) -> Loan:
        pass

    @abstractmethod
    def get_by_id(self, loan_id: str) -> Optional[Loan]:
        pass

    @abstractmethod
    def update(self, loan: Loan) -> Loan:
        pass

    @abstractmethod
    def remove(self, loan_id: str) -> Optional[Loan]:
        pass

    @abstractmethod
    def list_all(self) -> list[Loan]:
        pass

    @abstractmethod
    def find_active(self, user_id: str, book_id: str) -> Optional[Loan]:
        pass

    @abstractmethod
    def list_by_user(self, user_id: str) -> list[Loan]:
        pass

    @abstractmethod
    def list_by_book(self, book_id: str) -> list[Loan]:
        pass


class ICatalogSupplier(ABC):

    @abstractmethod
    async def fetch_books(self) -> list[Book]:
        """Return the initial book records; may raise or return ``[]``."""
        pass


class ISessionStore(ABC):
    """Session-scoped key/value records (authenticated session, guest flag).

    Records are opaque dicts to the core; backends decide how to encode them.
    """

    @abstractmethod
    async def save(self, token: str, record: dict, ttl_seconds: int) -> None:
        pass

    @abstractmethod
    async def load(self, token: str) -> Optional[dict]:
        pass

    @abstractmethod
    async def delete(self, token: str) -> bool:
        pass
