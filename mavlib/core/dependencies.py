"""Dependency injection container.

One :class:`LibraryContainer` holds the state of a browsing session (catalog,
active loans, user directory) plus the services built over it. The
application stores it on ``app.state`` and route handlers reach it through
the providers below.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from mavlib.core.clock import Clock, utcnow
from mavlib.core.config import Settings, get_settings
from mavlib.domain.entities import Identity, Role
from mavlib.domain.repositories import ICatalogSupplier, ISessionStore
from mavlib.domain.services import ICatalogService, ILendingLedger, ISearchEngine
from mavlib.infrastructure.catalog.bundled import BundledCatalogSupplier, demo_users
from mavlib.infrastructure.catalog.open_library import OpenLibraryCatalogSupplier
from mavlib.infrastructure.memory.repository import CatalogRepository, LoanRepository, UserRepository
from mavlib.infrastructure.sessions.memory import MemorySessionStore
from mavlib.infrastructure.sessions.redis_store import RedisSessionStore
from mavlib.services.auth_service import AuthService
from mavlib.services.catalog_service import CatalogService
from mavlib.services.ledger import LendingLedger
from mavlib.services.rate_limiter import LoginRateLimiter
from mavlib.services.report_service import ReportService
from mavlib.services.search import SearchEngine

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# ---------------------------------------------------------------------------
# Infrastructure providers
# ---------------------------------------------------------------------------
def get_session_store(settings: Settings, clock: Clock = utcnow) -> ISessionStore:
    """Return the configured session backend."""
    if settings.session_backend == "memory":
        return MemorySessionStore(clock=clock)
    elif settings.session_backend == "redis":
        return RedisSessionStore.from_url(settings.redis_url)
    raise ValueError(f"Unknown session backend: {settings.session_backend}")


def get_catalog_supplier(settings: Settings) -> ICatalogSupplier:
    """Return the configured catalog supplier."""
    if settings.catalog_source == "bundled":
        return BundledCatalogSupplier()
    elif settings.catalog_source == "remote":
        return OpenLibraryCatalogSupplier(
            base_url=settings.catalog_base_url,
            genres=settings.catalog_genres,
            books_per_genre=settings.catalog_books_per_genre,
            default_copies=settings.catalog_default_copies,
            timeout=settings.catalog_fetch_timeout,
        )
    raise ValueError(f"Unknown catalog source: {settings.catalog_source}")


# ---------------------------------------------------------------------------
# Container
# ---------------------------------------------------------------------------
@dataclass
class LibraryContainer:
    settings: Settings
    catalog_repository: CatalogRepository
    user_repository: UserRepository
    loan_repository: LoanRepository
    ledger: LendingLedger
    catalog_service: CatalogService
    search_engine: SearchEngine
    report_service: ReportService
    auth_service: AuthService
    session_store: ISessionStore
    catalog_supplier: ICatalogSupplier


def build_container(
    settings: Optional[Settings] = None,
    clock: Clock = utcnow,
    session_store: Optional[ISessionStore] = None,
    catalog_supplier: Optional[ICatalogSupplier] = None,
) -> LibraryContainer:
    """Wire repositories and services for one session.

    The catalog starts in the ``loading`` state; call
    ``catalog_service.load(container.catalog_supplier)`` to fill it.
    """
    settings = settings or get_settings()
    catalog_repo = CatalogRepository()
    user_repo = UserRepository(demo_users())
    loan_repo = LoanRepository()

    ledger = LendingLedger(
        catalog_repository=catalog_repo,
        loan_repository=loan_repo,
        user_repository=user_repo,
        loan_period=timedelta(days=settings.loan_period_days),
        renewal_period=timedelta(days=settings.renewal_period_days),
        max_renewals=settings.max_renewals,
        clock=clock,
    )
    catalog_service = CatalogService(
        catalog_repository=catalog_repo,
        ledger=ledger,
        fallback_supplier=BundledCatalogSupplier(),
    )
    search_engine = SearchEngine(
        catalog_repository=catalog_repo,
        user_repository=user_repo,
        quick_list_limit=settings.search_quick_list_limit,
    )
    report_service = ReportService(
        catalog_repository=catalog_repo,
        user_repository=user_repo,
        ledger=ledger,
        due_soon=timedelta(days=settings.due_soon_days),
        recommendation_limit=settings.recommendation_limit,
        clock=clock,
    )
    store = session_store or get_session_store(settings, clock)
    rate_limiter = LoginRateLimiter(
        max_attempts=settings.login_max_attempts,
        window=timedelta(minutes=settings.login_lockout_minutes),
        clock=clock,
    )
    auth_service = AuthService(
        user_repository=user_repo,
        session_store=store,
        rate_limiter=rate_limiter,
        session_ttl=timedelta(minutes=settings.session_ttl_minutes),
        clock=clock,
    )
    return LibraryContainer(
        settings=settings,
        catalog_repository=catalog_repo,
        user_repository=user_repo,
        loan_repository=loan_repo,
        ledger=ledger,
        catalog_service=catalog_service,
        search_engine=search_engine,
        report_service=report_service,
        auth_service=auth_service,
        session_store=store,
        catalog_supplier=catalog_supplier or get_catalog_supplier(settings),
    )


# ---------------------------------------------------------------------------
# Service providers
# ---------------------------------------------------------------------------
def get_container(request: Request) -> LibraryContainer:
    return request.app.state.container


def get_ledger(container: Annotated[LibraryContainer, Depends(get_container)]) -> ILendingLedger:
    return container.ledger


def get_catalog_service(
    container: Annotated[LibraryContainer, Depends(get_container)],
) -> ICatalogService:
    return container.catalog_service


def get_search_engine(
    container: Annotated[LibraryContainer, Depends(get_container)],
) -> ISearchEngine:
    return container.search_engine


def get_report_service(
    container: Annotated[LibraryContainer, Depends(get_container)],
) -> ReportService:
    return container.report_service


def get_auth_service(
    container: Annotated[LibraryContainer, Depends(get_container)],
) -> AuthService:
    return container.auth_service


# ---------------------------------------------------------------------------
# Identity dependencies
# ---------------------------------------------------------------------------
async def get_identity(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Identity:
    """Resolve the caller; anonymous when no valid session token is sent."""
    return await auth_service.resolve(token)


async def get_current_actor(identity: Annotated[Identity, Depends(get_identity)]) -> Identity:
    """Require a signed-in actor (guests and anonymous callers are rejected)."""
    if not identity.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in to continue",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


async def get_admin(identity: Annotated[Identity, Depends(get_current_actor)]) -> Identity:
    if identity.role is not Role.ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return identity
