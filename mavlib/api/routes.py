"""Book API routes (catalog reads, admin edits, borrow)."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from mavlib.api.errors import failure_exception
from mavlib.api.schemas import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
    LoanResponse,
)
from mavlib.core.dependencies import (
    get_admin,
    get_catalog_service,
    get_current_actor,
    get_ledger,
)
from mavlib.domain.entities import Identity
from mavlib.domain.services import ICatalogService, ILendingLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/books", tags=["books"])


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
@router.get("/", response_model=BookListResponse)
async def list_books(
    catalog_service: Annotated[ICatalogService, Depends(get_catalog_service)],
    category: Optional[str] = None,
    author: Optional[str] = None,
) -> BookListResponse:
    """List the catalog, optionally narrowed to one category or author."""
    books = catalog_service.list_books(category=category, author=author)
    return BookListResponse(
        books=[BookResponse.model_validate(b) for b in books],
        total=len(books),
        catalog_state=catalog_service.state,
    )


@router.get("/{book_id}", response_model=BookResponse)
async def get_book(
    book_id: str,
    catalog_service: Annotated[ICatalogService, Depends(get_catalog_service)],
) -> BookResponse:
    book = catalog_service.get_book(book_id)
    if not book:
        raise HTTPException(status_code=404, detail="Book not found")
    return BookResponse.model_validate(book)


# ---------------------------------------------------------------------------
# Admin edits
# ---------------------------------------------------------------------------
@router.post("/", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    body: BookCreate,
    catalog_service: Annotated[ICatalogService, Depends(get_catalog_service)],
    admin: Annotated[Identity, Depends(get_admin)],
) -> BookResponse:
    """Add a book; every copy starts on the shelf."""
    book = catalog_service.add_book(**body.model_dump())
    logger.info("Admin %s added book %s", admin.actor_id, book.id)
    return BookResponse.model_validate(book)


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: str,
    body: BookUpdate,
    catalog_service: Annotated[ICatalogService, Depends(get_catalog_service)],
    admin: Annotated[Identity, Depends(get_admin)],
) -> BookResponse:
    """Edit book details; active loans pick up the new record."""
    changes = body.model_dump(exclude_none=True)
    if not catalog_service.update_book(book_id, **changes):
        raise failure_exception(catalog_service.update_failure(book_id, **changes))
    return BookResponse.model_validate(catalog_service.get_book(book_id))


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: str,
    catalog_service: Annotated[ICatalogService, Depends(get_catalog_service)],
    admin: Annotated[Identity, Depends(get_admin)],
) -> None:
    """Remove a book. Refused while any copy is on loan."""
    if not catalog_service.delete_book(book_id):
        raise failure_exception(catalog_service.delete_failure(book_id))


# ---------------------------------------------------------------------------
# Borrow
# ---------------------------------------------------------------------------
@router.post(
    "/{book_id}/borrow", response_model=LoanResponse, status_code=status.HTTP_201_CREATED
)
async def borrow_book(
    book_id: str,
    identity: Annotated[Identity, Depends(get_current_actor)],
    ledger: Annotated[ILendingLedger, Depends(get_ledger)],
) -> LoanResponse:
    """Borrow one copy for the signed-in actor."""
    if not ledger.borrow(identity.actor_id, book_id):
        raise failure_exception(ledger.borrow_failure(identity.actor_id, book_id))
    loan = ledger.get_active_loan(identity.actor_id, book_id)
    return LoanResponse.model_validate(loan)
