"""Global search route."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from mavlib.api.schemas import GroupedSearchResponse, SearchResultResponse
from mavlib.core.dependencies import get_identity, get_search_engine
from mavlib.domain.entities import Identity
from mavlib.domain.services import ISearchEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/search", tags=["search"])


@router.get("/", response_model=GroupedSearchResponse)
async def search(
    identity: Annotated[Identity, Depends(get_identity)],
    search_engine: Annotated[ISearchEngine, Depends(get_search_engine)],
    q: str = "",
) -> GroupedSearchResponse:
    """Search books, authors, categories, pages and features.

    Users and the Admin Panel page are only returned to admins. The role is
    read from the caller's session on every request.
    """
    grouped = search_engine.search(q, identity.role)

    def convert(results):
        return [SearchResultResponse.model_validate(r) for r in results]

    return GroupedSearchResponse(
        query=q,
        books=convert(grouped.books),
        authors=convert(grouped.authors),
        categories=convert(grouped.categories),
        users=convert(grouped.users),
        pages=convert(grouped.pages),
        features=convert(grouped.features),
        all=convert(grouped.all),
    )
