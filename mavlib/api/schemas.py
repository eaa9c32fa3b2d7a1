"""Pydantic schemas for API requests and responses."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from mavlib.domain.entities import CatalogState, ResultType, Role


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------
class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: Role = Role.READER


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


# ---------------------------------------------------------------------------
# Books
# ---------------------------------------------------------------------------
class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    isbn: str = Field(..., min_length=1, max_length=32)
    category: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    cover_image: str = ""
    published_year: int = 2000
    rating: float = Field(0.0, ge=0.0, le=5.0)
    total_copies: int = Field(1, ge=0)


class BookUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    author: Optional[str] = Field(None, min_length=1, max_length=255)
    isbn: Optional[str] = Field(None, min_length=1, max_length=32)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    cover_image: Optional[str] = None
    published_year: Optional[int] = None
    rating: Optional[float] = Field(None, ge=0.0, le=5.0)
    total_copies: Optional[int] = Field(None, ge=0)


class BookResponse(BaseModel):
    id: str
    title: str
    author: str
    isbn: str
    category: str
    description: str
    cover_image: str
    published_year: int
    rating: float
    total_copies: int
    available_copies: int
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class BookListResponse(BaseModel):
    books: list[BookResponse]
    total: int
    catalog_state: CatalogState


# ---------------------------------------------------------------------------
# Loans
# ---------------------------------------------------------------------------
class LoanResponse(BaseModel):
    id: str
    book_id: str
    user_id: str
    book: BookResponse
    borrow_date: datetime
    due_date: datetime
    renewal_count: int
    is_overdue: bool
    return_date: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------
class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: Role
    membership_date: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(UserResponse):
    borrow_history: list[LoanResponse] = []


class SessionResponse(TokenResponse):
    user: UserResponse


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------
class SearchResultResponse(BaseModel):
    id: str
    type: ResultType
    title: str
    subtitle: Optional[str] = None
    description: Optional[str] = None
    route: str
    priority: int
    ref_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class GroupedSearchResponse(BaseModel):
    query: str
    books: list[SearchResultResponse]
    authors: list[SearchResultResponse]
    categories: list[SearchResultResponse]
    users: list[SearchResultResponse]
    pages: list[SearchResultResponse]
    features: list[SearchResultResponse]
    all: list[SearchResultResponse]

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------
class DashboardResponse(BaseModel):
    borrowed: int
    due_this_week: int
    overdue: int
    read: int
    recommended: list[BookResponse]

    model_config = ConfigDict(from_attributes=True)


class AdminStatsResponse(BaseModel):
    total_books: int
    total_users: int
    total_borrowed: int
    total_overdue: int

    model_config = ConfigDict(from_attributes=True)


class CategoryStatsResponse(BaseModel):
    name: str
    total_books: int
    available: int
    avg_rating: float
    most_popular_book: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

