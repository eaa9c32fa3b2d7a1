"""Declarative messages for refused lending and catalog operations."""

from typing import Optional

from fastapi import HTTPException, status

from mavlib.domain.entities import LendingFailure

FAILURE_RESPONSES = {
    LendingFailure.NOT_AUTHENTICATED: (status.HTTP_401_UNAUTHORIZED, "Sign in to borrow books"),
    LendingFailure.CATALOG_LOADING: (status.HTTP_503_SERVICE_UNAVAILABLE, "The catalog is still loading"),
    LendingFailure.BOOK_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Book not found"),
    LendingFailure.NO_COPIES: (status.HTTP_409_CONFLICT, "No copies available"),
    LendingFailure.ALREADY_BORROWED: (status.HTTP_409_CONFLICT, "You already have this book borrowed"),
    LendingFailure.LOAN_NOT_FOUND: (status.HTTP_404_NOT_FOUND, "Loan not found"),
    LendingFailure.RENEWAL_LIMIT: (status.HTTP_409_CONFLICT, "Maximum renewals reached"),
    LendingFailure.BOOK_ON_LOAN: (status.HTTP_409_CONFLICT, "Cannot delete a borrowed book"),
    LendingFailure.INVALID_COPIES: (
        status.HTTP_409_CONFLICT,
        "Total copies cannot be lower than the copies currently on loan",
    ),
}


def failure_exception(failure: Optional[LendingFailure]) -> HTTPException:
    """Build the HTTP error for a refused operation.

    ``failure`` is ``None`` when the precondition no longer fails by the time
    the reason is looked up; that is reported as a conflict.
    """
    if failure is None:
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                "code": "conflict",
                "message": "The request conflicted with another change, try again",
            },
        )
    status_code, detail = FAILURE_RESPONSES[failure]
    return HTTPException(status_code=status_code, detail={"code": failure.value, "message": detail})
