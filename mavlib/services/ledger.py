"""Lending ledger: borrow, renew and return bookkeeping.

The ledger is the only writer of loan records and the only component that
moves ``available_copies`` on borrow/return. Every mutation, including the
periodic overdue sweep, runs under one re-entrant lock so a sweep and a
borrow/return in the same tick never interleave.
"""

import logging
import threading
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from mavlib.core.clock import Clock, utcnow
from mavlib.domain.entities import Book, CatalogState, LendingFailure, Loan
from mavlib.domain.repositories import ICatalogRepository, ILoanRepository, IUserRepository
from mavlib.domain.services import ILendingLedger

logger = logging.getLogger(__name__)


class LendingLedger(ILendingLedger):
    """In-memory lending ledger over the catalog, loan and user stores."""

    def __init__(
        self,
        catalog_repository: ICatalogRepository,
        loan_repository: ILoanRepository,
        user_repository: IUserRepository,
        loan_period: timedelta = timedelta(days=14),
        renewal_period: timedelta = timedelta(days=14),
        max_renewals: int = 2,
        clock: Clock = utcnow,
    ):
        self.catalog_repository = catalog_repository
        self.loan_repository = loan_repository
        self.user_repository = user_repository
        self.loan_period = loan_period
        self.renewal_period = renewal_period
        self.max_renewals = max_renewals
        self.clock = clock
        self.lock = threading.RLock()

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------
    def borrow_failure(self, actor_id: Optional[str], book_id: str) -> Optional[LendingFailure]:
        with self.lock:
            if not actor_id or self.user_repository.get_by_id(actor_id) is None:
                return LendingFailure.NOT_AUTHENTICATED
            if self.catalog_repository.get_state() is not CatalogState.READY:
                return LendingFailure.CATALOG_LOADING
            book = self.catalog_repository.get_by_id(book_id)
            if book is None:
                return LendingFailure.BOOK_NOT_FOUND
            if book.available_copies <= 0:
                return LendingFailure.NO_COPIES
            if self.loan_repository.find_active(actor_id, book_id) is not None:
                return LendingFailure.ALREADY_BORROWED
            return None

    def renew_failure(self, loan_id: str) -> Optional[LendingFailure]:
        with self.lock:
            loan = self.loan_repository.get_by_id(loan_id)
            if loan is None:
                return LendingFailure.LOAN_NOT_FOUND
            if loan.renewal_count >= self.max_renewals:
                return LendingFailure.RENEWAL_LIMIT
            return None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def borrow(self, actor_id: Optional[str], book_id: str) -> bool:
        with self.lock:
            failure = self.borrow_failure(actor_id, book_id)
            if failure is not None:
                logger.info("Borrow refused for actor=%s book=%s: %s", actor_id, book_id, failure.value)
                return False

            book = self.catalog_repository.get_by_id(book_id)
            book.available_copies -= 1
            self.catalog_repository.update(book)

            now = self.clock()
            loan = Loan(
                id=f"loan-{uuid4().hex}",
                book_id=book_id,
                user_id=actor_id,
                book=replace(book),
                borrow_date=now,
                due_date=now + self.loan_period,
                renewal_count=0,
                is_overdue=False,
            )
            self.loan_repository.add(loan)
            logger.info(
                "Loan %s opened: actor=%s book=%s due=%s (%d/%d copies left)",
                loan.id, actor_id, book_id, loan.due_date.isoformat(),
                book.available_copies, book.total_copies,
            )
            return True

    def return_loan(self, loan_id: str) -> bool:
        with self.lock:
            loan = self.loan_repository.get_by_id(loan_id)
            if loan is None:
                logger.info("Return refused: unknown loan %s", loan_id)
                return False

            book = self.catalog_repository.get_by_id(loan.book_id)
            if book is not None:
                book.available_copies = min(book.available_copies + 1, book.total_copies)
                self.catalog_repository.update(book)
            else:
                logger.warning("Loan %s references missing book %s", loan_id, loan.book_id)

            closed = replace(loan, return_date=self.clock())
            if not self.user_repository.append_history(loan.user_id, closed):
                logger.warning("Loan %s closed for unknown actor %s", loan_id, loan.user_id)
            self.loan_repository.remove(loan_id)
            logger.info("Loan %s closed: actor=%s book=%s", loan_id, loan.user_id, loan.book_id)
            return True

    def renew(self, loan_id: str) -> bool:
        with self.lock:
            failure = self.renew_failure(loan_id)
            if failure is not None:
                logger.info("Renewal refused for loan %s: %s", loan_id, failure.value)
                return False

            loan = self.loan_repository.get_by_id(loan_id)
            loan.due_date = loan.due_date + self.renewal_period
            loan.renewal_count += 1
            loan.is_overdue = loan.due_date < self.clock()
            self.loan_repository.update(loan)
            logger.info(
                "Loan %s renewed (%d/%d), due %s",
                loan_id, loan.renewal_count, self.max_renewals, loan.due_date.isoformat(),
            )
            return True

    def recompute_overdue(self, now: Optional[datetime] = None) -> int:
        with self.lock:
            now = now or self.clock()
            overdue = 0
            for loan in self.loan_repository.list_all():
                flag = loan.due_date < now
                if flag != loan.is_overdue:
                    loan.is_overdue = flag
                    self.loan_repository.update(loan)
                if flag:
                    overdue += 1
            logger.debug("Overdue sweep at %s: %d overdue", now.isoformat(), overdue)
            return overdue

    def sync_book_snapshots(self, book: Book) -> int:
        """Copy an edited catalog record into every active loan of that book."""
        with self.lock:
            loans = self.loan_repository.list_by_book(book.id)
            for loan in loans:
                loan.book = replace(book)
                self.loan_repository.update(loan)
            if loans:
                logger.info("Synced book %s into %d active loans", book.id, len(loans))
            return len(loans)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def is_borrowed_by_actor(self, actor_id: Optional[str], book_id: str) -> bool:
        if not actor_id:
            return False
        return self.loan_repository.find_active(actor_id, book_id) is not None

    def get_loan(self, loan_id: str) -> Optional[Loan]:
        return self.loan_repository.get_by_id(loan_id)

    def get_active_loan(self, actor_id: str, book_id: str) -> Optional[Loan]:
        return self.loan_repository.find_active(actor_id, book_id)

    def get_closed_loan(self, actor_id: str, loan_id: str) -> Optional[Loan]:
        user = self.user_repository.get_by_id(actor_id)
        if user is None:
            return None
        return next((loan for loan in reversed(user.borrow_history) if loan.id == loan_id), None)

    def active_loans(self, actor_id: Optional[str] = None) -> list[Loan]:
        if actor_id is None:
            loans = self.loan_repository.list_all()
        else:
            loans = self.loan_repository.list_by_user(actor_id)
        return sorted(loans, key=lambda loan: (loan.due_date, loan.id))

    def has_active_loans(self, book_id: str) -> bool:
        return bool(self.loan_repository.list_by_book(book_id))
