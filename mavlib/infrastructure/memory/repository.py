"""In-memory repository implementations.

State is owned by a single browsing session, so each repository is a plain
dict keyed by id. Entities are copied on the way in and on the way out;
callers never share an object with the store and must write changes back
through ``update``.
"""

from dataclasses import replace
from typing import Optional

from mavlib.domain.entities import Book, CatalogState, Loan, User
from mavlib.domain.repositories import ICatalogRepository, ILoanRepository, IUserRepository


def _copy_book(book: Book) -> Book:
    return replace(book)


def _copy_loan(loan: Loan) -> Loan:
    return replace(loan, book=_copy_book(loan.book))


def _copy_user(user: User) -> User:
    return replace(user, borrow_history=[_copy_loan(loan) for loan in user.borrow_history])


# ---------------------------------------------------------------------------
# Catalog Repository
# ---------------------------------------------------------------------------
class CatalogRepository(ICatalogRepository):

    def __init__(self, books: Optional[list[Book]] = None):
        self._books: dict[str, Book] = {}
        self._state = CatalogState.LOADING
        if books is not None:
            self.replace_all(books)
            self._state = CatalogState.READY

    def get_state(self) -> CatalogState:
        return self._state

    def set_state(self, state: CatalogState) -> None:
        self._state = state

    def replace_all(self, books: list[Book]) -> None:
        self._books = {}
        for book in books:
            # first occurrence of an id wins
            self._books.setdefault(book.id, _copy_book(book))

    def get_by_id(self, book_id: str) -> Optional[Book]:
        book = self._books.get(book_id)
        return _copy_book(book) if book else None

    def list_all(self) -> list[Book]:
        return [_copy_book(book) for book in self._books.values()]

    def add(self, book: Book) -> Book:
        if book.id in self._books:
            raise ValueError(f"Book {book.id} already exists")
        self._books[book.id] = _copy_book(book)
        return _copy_book(book)

    def update(self, book: Book) -> Book:
        if book.id not in self._books:
            raise KeyError(book.id)
        self._books[book.id] = _copy_book(book)
        return _copy_book(book)

    def delete(self, book_id: str) -> bool:
        return self._books.pop(book_id, None) is not None


# ---------------------------------------------------------------------------
# User Repository
# ---------------------------------------------------------------------------
class UserRepository(IUserRepository):

    def __init__(self, users: Optional[list[User]] = None):
        self._users: dict[str, User] = {}
        for user in users or []:
            self.create(user)

    def create(self, user: User) -> User:
        if self.get_by_email(user.email) is not None:
            raise ValueError("Email already registered")
        self._users[user.id] = _copy_user(user)
        return _copy_user(user)

    def get_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return _copy_user(user) if user else None

    def get_by_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == wanted:
                return _copy_user(user)
        return None

    def list_all(self) -> list[User]:
        return [_copy_user(user) for user in self._users.values()]

    def update(self, user: User) -> User:
        if user.id not in self._users:
            raise KeyError(user.id)
        self._users[user.id] = _copy_user(user)
        return _copy_user(user)

    def append_history(self, user_id: str, loan: Loan) -> bool:
        user = self._users.get(user_id)
        if user is None:
            return False
        user.borrow_history.append(_copy_loan(loan))
        return True


# ---------------------------------------------------------------------------
# Loan Repository
# ---------------------------------------------------------------------------
class LoanRepository(ILoanRepository):

    def __init__(self):
        self._loans: dict[str, Loan] = {}

    def add(self, loan: Loan) -> Loan:
        self._loans[loan.id] = _copy_loan(loan)
        return _copy_loan(loan)

    def get_by_id(self, loan_id: str) -> Optional[Loan]:
        loan = self._loans.get(loan_id)
        return _copy_loan(loan) if loan else None

    def update(self, loan: Loan) -> Loan:
        if loan.id not in self._loans:
            raise KeyError(loan.id)
        self._loans[loan.id] = _copy_loan(loan)
        return _copy_loan(loan)

    def remove(self, loan_id: str) -> Optional[Loan]:
        loan = self._loans.pop(loan_id, None)
        return _copy_loan(loan) if loan else None

    def list_all(self) -> list[Loan]:
        return [_copy_loan(loan) for loan in self._loans.values()]

    def find_active(self, user_id: str, book_id: str) -> Optional[Loan]:
        for loan in self._loans.values():
            if loan.user_id == user_id and loan.book_id == book_id:
                return _copy_loan(loan)
        return None

    def list_by_user(self, user_id: str) -> list[Loan]:
        return [_copy_loan(loan) for loan in self._loans.values() if loan.user_id == user_id]

    def list_by_book(self, book_id: str) -> list[Loan]:
        return [_copy_loan(loan) for loan in self._loans.values() if loan.book_id == book_id]
