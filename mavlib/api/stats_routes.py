"""Dashboard, admin and category statistics routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from mavlib.api.schemas import (
    AdminStatsResponse,
    CategoryStatsResponse,
    DashboardResponse,
    UserResponse,
)
from mavlib.core.dependencies import (
    LibraryContainer,
    get_admin,
    get_container,
    get_current_actor,
    get_report_service,
)
from mavlib.domain.entities import Identity
from mavlib.services.report_service import ReportService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["stats"])


@router.get("/stats/dashboard", response_model=DashboardResponse)
async def dashboard(
    identity: Annotated[Identity, Depends(get_current_actor)],
    report_service: Annotated[ReportService, Depends(get_report_service)],
) -> DashboardResponse:
    """Loan counts and reading suggestions for the signed-in actor."""
    return DashboardResponse.model_validate(report_service.dashboard(identity.actor_id))


@router.get("/stats/admin", response_model=AdminStatsResponse)
async def admin_stats(
    admin: Annotated[Identity, Depends(get_admin)],
    report_service: Annotated[ReportService, Depends(get_report_service)],
) -> AdminStatsResponse:
    return AdminStatsResponse.model_validate(report_service.admin_summary())


@router.get("/stats/categories", response_model=list[CategoryStatsResponse])
async def category_stats(
    report_service: Annotated[ReportService, Depends(get_report_service)],
) -> list[CategoryStatsResponse]:
    return [CategoryStatsResponse.model_validate(s) for s in report_service.category_stats()]


@router.get("/admin/users", response_model=list[UserResponse])
async def list_users(
    admin: Annotated[Identity, Depends(get_admin)],
    container: Annotated[LibraryContainer, Depends(get_container)],
) -> list[UserResponse]:
    """The user directory, for admins."""
    return [UserResponse.model_validate(u) for u in container.user_repository.list_all()]
