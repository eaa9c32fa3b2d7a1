"""Multi-entity search and ranking.

Each query scans the catalog, the author and category vocabulary derived from
it, a static registry of pages/features and, for admins only, the user
directory. Candidates get a priority (0 for an exact match, otherwise a
per-type base; an author is also exact on one whole word of the name),
are sorted by ``(priority, type, title)`` and grouped by type.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import quote

from mavlib.domain.entities import (
    CatalogState,
    GroupedSearchResults,
    ResultType,
    Role,
    SearchResult,
)
from mavlib.domain.repositories import ICatalogRepository, IUserRepository
from mavlib.domain.services import ISearchEngine

logger = logging.getLogger(__name__)

BASE_PRIORITY = {
    ResultType.BOOK: 1,
    ResultType.AUTHOR: 2,
    ResultType.CATEGORY: 3,
    ResultType.USER: 2,
    ResultType.PAGE: 4,
    ResultType.FEATURE: 5,
}

ADMIN_PANEL_TITLE = "Admin Panel"


@dataclass(frozen=True)
class Destination:
    type: ResultType
    title: str
    route: str
    description: str


PAGE_REGISTRY = (
    Destination(ResultType.PAGE, "Home", "/", "Go to the main page"),
    Destination(ResultType.PAGE, "Dashboard", "/dashboard", "View your personal dashboard"),
    Destination(ResultType.PAGE, "Categories", "/categories", "Browse books by category"),
    Destination(ResultType.PAGE, ADMIN_PANEL_TITLE, "/admin", "Manage library resources"),
    Destination(ResultType.FEATURE, "Borrow Books", "/", "Find and borrow a new book"),
    Destination(ResultType.FEATURE, "Return Books", "/dashboard", "Manage your borrowed books"),
)


def _sort_key(result: SearchResult) -> tuple:
    return (result.priority, result.type.value, result.title.casefold(), result.title, result.id)


class SearchEngine(ISearchEngine):
    """Deterministic substring-and-priority ranker.

    Role gating is applied per call from the role passed in, so a role change
    shows up on the next query. Nothing is cached between calls.
    """

    def __init__(
        self,
        catalog_repository: ICatalogRepository,
        user_repository: IUserRepository,
        pages: Iterable[Destination] = PAGE_REGISTRY,
        quick_list_limit: int = 15,
    ):
        self.catalog_repository = catalog_repository
        self.user_repository = user_repository
        self.pages = tuple(pages)
        self.quick_list_limit = quick_list_limit

    def search(self, query: str, role: Optional[Role] = None) -> GroupedSearchResults:
        raw = (query or "").strip()
        if not raw:
            return GroupedSearchResults()
        folded = raw.casefold()

        candidates: list[SearchResult] = []
        if self.catalog_repository.get_state() is CatalogState.READY:
            books = self.catalog_repository.list_all()
            candidates.extend(self._match_books(books, raw, folded))
            candidates.extend(self._match_vocabulary(
                ResultType.AUTHOR, (b.author for b in books), folded, "Author", "author",
                word_exact=True,
            ))
            candidates.extend(self._match_vocabulary(
                ResultType.CATEGORY, (b.category for b in books), folded, "Category", "category",
            ))
        else:
            logger.debug("Catalog still loading; skipping catalog matches for %r", raw)
        candidates.extend(self._match_pages(folded, role))
        if role is Role.ADMIN:
            candidates.extend(self._match_users(folded))

        ranked = sorted(self._dedupe(candidates), key=_sort_key)
        grouped = GroupedSearchResults(
            books=[r for r in ranked if r.type is ResultType.BOOK],
            authors=[r for r in ranked if r.type is ResultType.AUTHOR],
            categories=[r for r in ranked if r.type is ResultType.CATEGORY],
            users=[r for r in ranked if r.type is ResultType.USER],
            pages=[r for r in ranked if r.type is ResultType.PAGE],
            features=[r for r in ranked if r.type is ResultType.FEATURE],
            all=ranked[: self.quick_list_limit],
        )
        logger.debug("Search %r (role=%s): %d results", raw, role, len(ranked))
        return grouped

    # ------------------------------------------------------------------
    # Candidate generation
    # ------------------------------------------------------------------
    @staticmethod
    def _match_books(books, raw: str, folded: str) -> list[SearchResult]:
        results = []
        for book in books:
            matched = (
                folded in book.title.casefold()
                or folded in book.author.casefold()
                or raw in book.isbn  # identifiers are matched case-sensitively
                or folded in book.category.casefold()
            )
            if not matched:
                continue
            results.append(SearchResult(
                id=f"book-{book.id}",
                type=ResultType.BOOK,
                title=book.title,
                subtitle=f"by {book.author}",
                description=book.description,
                route=f"/book/{book.id}",
                priority=0 if book.title.casefold() == folded else BASE_PRIORITY[ResultType.BOOK],
                ref_id=book.id,
            ))
        return results

    @staticmethod
    def _match_vocabulary(
        result_type: ResultType,
        values: Iterable[str],
        folded: str,
        label: str,
        param: str,
        word_exact: bool = False,
    ) -> list[SearchResult]:
        """Match distinct vocabulary values.

        With ``word_exact`` a query equal to one whole word of the value
        (e.g. a first or last name) also counts as an exact match.
        """
        results = []
        for value in sorted(set(values)):
            value_folded = value.casefold()
            if folded not in value_folded:
                continue
            exact = value_folded == folded or (word_exact and folded in value_folded.split())
            results.append(SearchResult(
                id=f"{result_type.value}-{value}",
                type=result_type,
                title=value,
                subtitle=label,
                route=f"/categories?{param}={quote(value)}",
                priority=0 if exact else BASE_PRIORITY[result_type],
            ))
        return results

    def _match_pages(self, folded: str, role: Optional[Role]) -> list[SearchResult]:
        results = []
        for index, page in enumerate(self.pages):
            if page.title == ADMIN_PANEL_TITLE and role is not Role.ADMIN:
                continue
            if folded not in page.title.casefold():
                continue
            results.append(SearchResult(
                id=f"{page.type.value}-{index}",
                type=page.type,
                title=page.title,
                description=page.description,
                route=page.route,
                priority=0 if page.title.casefold() == folded else BASE_PRIORITY[page.type],
            ))
        return results

    def _match_users(self, folded: str) -> list[SearchResult]:
        results = []
        for user in self.user_repository.list_all():
            name, email = user.name.casefold(), user.email.casefold()
            if folded not in name and folded not in email:
                continue
            exact = folded in (name, email)
            results.append(SearchResult(
                id=f"user-{user.id}",
                type=ResultType.USER,
                title=user.name,
                subtitle=user.email,
                route="/admin?tab=users",
                priority=0 if exact else BASE_PRIORITY[ResultType.USER],
                ref_id=user.id,
            ))
        return results

    @staticmethod
    def _dedupe(results: list[SearchResult]) -> list[SearchResult]:
        seen: set[str] = set()
        unique = []
        for result in results:
            if result.id in seen:
                continue
            seen.add(result.id)
            unique.append(result)
        return unique
