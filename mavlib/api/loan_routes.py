"""Loan API routes (list, return, renew)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mavlib.api.errors import failure_exception
from mavlib.api.schemas import LoanResponse
from mavlib.core.dependencies import get_current_actor, get_ledger
from mavlib.domain.entities import Identity, LendingFailure, Loan, Role
from mavlib.domain.services import ILendingLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/loans", tags=["loans"])


def _owned_loan(ledger: ILendingLedger, loan_id: str, identity: Identity) -> Loan:
    """Fetch an active loan the caller may act on (owner, staff or admin)."""
    loan = ledger.get_loan(loan_id)
    if loan is None:
        raise failure_exception(LendingFailure.LOAN_NOT_FOUND)
    if loan.user_id != identity.actor_id and identity.role not in (Role.STAFF, Role.ADMIN):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your loan")
    return loan


@router.get("/", response_model=list[LoanResponse])
async def list_loans(
    identity: Annotated[Identity, Depends(get_current_actor)],
    ledger: Annotated[ILendingLedger, Depends(get_ledger)],
    include_all: Annotated[bool, Query(alias="all")] = False,
) -> list[LoanResponse]:
    """The caller's active loans; staff and admins may ask for every loan."""
    if include_all:
        if identity.role not in (Role.STAFF, Role.ADMIN):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Staff role required")
        loans = ledger.active_loans()
    else:
        loans = ledger.active_loans(identity.actor_id)
    return [LoanResponse.model_validate(loan) for loan in loans]


@router.post("/{loan_id}/return", response_model=LoanResponse)
async def return_loan(
    loan_id: str,
    identity: Annotated[Identity, Depends(get_current_actor)],
    ledger: Annotated[ILendingLedger, Depends(get_ledger)],
) -> LoanResponse:
    """Return a borrowed copy; the closed loan moves to the actor's history."""
    loan = _owned_loan(ledger, loan_id, identity)
    if not ledger.return_loan(loan_id):
        raise failure_exception(LendingFailure.LOAN_NOT_FOUND)
    logger.info("Loan %s returned by %s", loan_id, identity.actor_id)
    return LoanResponse.model_validate(ledger.get_closed_loan(loan.user_id, loan_id) or loan)


@router.post("/{loan_id}/renew", response_model=LoanResponse)
async def renew_loan(
    loan_id: str,
    identity: Annotated[Identity, Depends(get_current_actor)],
    ledger: Annotated[ILendingLedger, Depends(get_ledger)],
) -> LoanResponse:
    """Extend the due date; at most two renewals per loan."""
    _owned_loan(ledger, loan_id, identity)
    if not ledger.renew(loan_id):
        raise failure_exception(ledger.renew_failure(loan_id))
    return LoanResponse.model_validate(ledger.get_loan(loan_id))
