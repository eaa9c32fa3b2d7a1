"""Read-only summaries for the dashboard, admin and category views."""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from mavlib.core.clock import Clock, utcnow
from mavlib.domain.entities import Book
from mavlib.domain.repositories import ICatalogRepository, IUserRepository
from mavlib.domain.services import ILendingLedger


@dataclass
class DashboardStats:
    borrowed: int
    due_this_week: int
    overdue: int
    read: int
    recommended: list[Book] = field(default_factory=list)


@dataclass
class AdminStats:
    total_books: int
    total_users: int
    total_borrowed: int
    total_overdue: int


@dataclass
class CategoryStats:
    name: str
    total_books: int
    available: int
    avg_rating: float
    most_popular_book: Optional[str]


class ReportService:

    def __init__(
        self,
        catalog_repository: ICatalogRepository,
        user_repository: IUserRepository,
        ledger: ILendingLedger,
        due_soon: timedelta = timedelta(days=7),
        recommendation_limit: int = 4,
        clock: Clock = utcnow,
    ):
        self.catalog_repository = catalog_repository
        self.user_repository = user_repository
        self.ledger = ledger
        self.due_soon = due_soon
        self.recommendation_limit = recommendation_limit
        self.clock = clock

    def dashboard(self, actor_id: str) -> DashboardStats:
        now = self.clock()
        loans = self.ledger.active_loans(actor_id)
        user = self.user_repository.get_by_id(actor_id)
        borrowed_ids = {loan.book_id for loan in loans}
        return DashboardStats(
            borrowed=len(loans),
            due_this_week=sum(1 for loan in loans if now <= loan.due_date <= now + self.due_soon),
            overdue=sum(1 for loan in loans if loan.is_overdue),
            read=len(user.borrow_history) if user else 0,
            recommended=self.recommendations(exclude=borrowed_ids),
        )

    def recommendations(self, exclude: set[str]) -> list[Book]:
        """Highest-rated available books the actor does not hold."""
        candidates = [
            book for book in self.catalog_repository.list_all()
            if book.is_available and book.id not in exclude
        ]
        candidates.sort(key=lambda b: (-b.rating, b.title.casefold(), b.id))
        return candidates[: self.recommendation_limit]

    def admin_summary(self) -> AdminStats:
        loans = self.ledger.active_loans()
        return AdminStats(
            total_books=len(self.catalog_repository.list_all()),
            total_users=len(self.user_repository.list_all()),
            total_borrowed=len(loans),
            total_overdue=sum(1 for loan in loans if loan.is_overdue),
        )

    def category_stats(self) -> list[CategoryStats]:
        by_category: dict[str, list[Book]] = {}
        for book in self.catalog_repository.list_all():
            by_category.setdefault(book.category, []).append(book)

        stats = []
        for name in sorted(by_category):
            books = by_category[name]
            top = min(books, key=lambda b: (-b.rating, b.title.casefold()))
            stats.append(CategoryStats(
                name=name,
                total_books=len(books),
                available=sum(1 for b in books if b.is_available),
                avg_rating=round(sum(b.rating for b in books) / len(books), 2),
                most_popular_book=top.title,
            ))
        return stats
