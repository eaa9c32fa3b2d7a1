"""Authentication service (identity collaborator).

Supplies the caller identity consumed by the ledger and the search engine.
Session records live in a session store as opaque blobs; on restore the
current role is always re-read from the user directory.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional
from uuid import uuid4

from mavlib.core.clock import Clock, utcnow
from mavlib.core.security import hash_password, new_session_token, verify_password
from mavlib.domain.entities import Identity, Role, User
from mavlib.domain.repositories import ISessionStore, IUserRepository
from mavlib.services.rate_limiter import LoginRateLimiter

logger = logging.getLogger(__name__)

SESSION_KIND = "session"
GUEST_KIND = "guest"


class LoginLockedError(ValueError):
    """Raised when an email is locked out by the rate limiter."""

    def __init__(self, email: str, until: Optional[datetime]):
        super().__init__("Too many failed login attempts, try again later")
        self.email = email
        self.until = until


class AuthService:
    """Handles signup, login, guest sessions and session restore."""

    def __init__(
        self,
        user_repository: IUserRepository,
        session_store: ISessionStore,
        rate_limiter: LoginRateLimiter,
        session_ttl: timedelta = timedelta(hours=24),
        clock: Clock = utcnow,
    ):
        self.user_repository = user_repository
        self.session_store = session_store
        self.rate_limiter = rate_limiter
        self.session_ttl = session_ttl
        self.clock = clock

    async def signup(
        self, name: str, email: str, password: str, role: Role = Role.READER
    ) -> tuple[User, str]:
        """Register a new actor and open a session for them."""
        if self.user_repository.get_by_email(email) is not None:
            raise ValueError("User with this email already exists")
        user = User(
            id=f"user-{uuid4().hex}",
            name=name,
            email=email.strip(),
            role=role,
            hashed_password=hash_password(password),
            membership_date=self.clock(),
        )
        self.user_repository.create(user)
        logger.info("User registered: %s (%s)", user.id, role.value)
        token = await self._open_session(user)
        return self.user_repository.get_by_id(user.id), token

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """Authenticate and return the actor with a new session token."""
        if self.rate_limiter.is_locked(email):
            raise LoginLockedError(email, self.rate_limiter.locked_until(email))

        user = self.user_repository.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            self.rate_limiter.record_failure(email)
            raise ValueError("Invalid email or password")

        self.rate_limiter.reset(email)
        token = await self._open_session(user)
        logger.info("User logged in: %s", user.id)
        return self.user_repository.get_by_id(user.id), token

    async def get_profile(self, actor_id: str) -> Optional[User]:
        return self.user_repository.get_by_id(actor_id)

    async def continue_as_guest(self) -> str:
        token = new_session_token()
        await self.session_store.save(
            token, {"kind": GUEST_KIND}, int(self.session_ttl.total_seconds())
        )
        logger.info("Guest session opened")
        return token

    async def logout(self, token: str) -> bool:
        record = await self.session_store.load(token)
        deleted = await self.session_store.delete(token)
        if record and record.get("kind") == SESSION_KIND:
            user = self.user_repository.get_by_id(record.get("actor_id", ""))
            if user is not None and user.token == token:
                user.token = None
                user.expires_at = None
                self.user_repository.update(user)
        return deleted

    async def resolve(self, token: Optional[str]) -> Identity:
        """Reconstruct the caller identity from a session token."""
        if not token:
            return Identity.anonymous()
        record = await self.session_store.load(token)
        if not record:
            return Identity.anonymous()
        if record.get("kind") == GUEST_KIND:
            return Identity.guest()
        user = self.user_repository.get_by_id(record.get("actor_id", ""))
        if user is None:
            logger.warning("Session refers to unknown actor %s", record.get("actor_id"))
            return Identity.anonymous()
        return Identity(actor_id=user.id, role=user.role)

    async def _open_session(self, user: User) -> str:
        token = new_session_token()
        expires_at = self.clock() + self.session_ttl
        await self.session_store.save(
            token,
            {"kind": SESSION_KIND, "actor_id": user.id, "expires_at": expires_at.isoformat()},
            int(self.session_ttl.total_seconds()),
        )
        user.token = token
        user.expires_at = expires_at
        self.user_repository.update(user)
        return token
