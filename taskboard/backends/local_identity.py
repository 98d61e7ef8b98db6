"""In-process identity provider for local runs and tests.

Accounts live in the ``accounts`` table of the local SQL database. There is no
e-mail confirmation: ``sign_up`` signs the new user in immediately.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, List, Mapping, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from taskboard.backends.base import SIGNED_IN, SIGNED_OUT, AuthSession, SessionListener
from taskboard.backends.sql import Account, get_engine, init_db
from taskboard.errors import UpstreamError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_ITERATIONS = 310_000


def hash_password(password: str, salt_b64: Optional[str] = None) -> Tuple[str, str]:
    salt = base64.b64decode(salt_b64) if salt_b64 else secrets.token_bytes(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _ITERATIONS)
    return base64.b64encode(digest).decode("utf-8"), base64.b64encode(salt).decode("utf-8")


def verify_password(password: str, expected_hash: str, salt_b64: str) -> bool:
    computed, _ = hash_password(password, salt_b64)
    return hmac.compare_digest(computed, expected_hash)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class LocalIdentityProvider:
    def __init__(self, database_url: str) -> None:
        init_db(database_url)
        self._sessionmaker = sessionmaker(bind=get_engine(database_url), autoflush=False, expire_on_commit=False)
        self._session: Optional[AuthSession] = None
        self._listeners: List[SessionListener] = []

    # -- accounts ----------------------------------------------------------------

    def _find(self, email: str) -> Optional[Account]:
        try:
            with self._sessionmaker() as s:
                return s.execute(select(Account).filter_by(email=_normalize_email(email))).scalars().first()
        except SQLAlchemyError as exc:
            raise UpstreamError("Identity service unavailable") from exc

    def _create(self, email: str, password: str, metadata: Mapping[str, Any]) -> Account:
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise UpstreamError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters")
        pw_hash, pw_salt = hash_password(password)
        account = Account(
            user_id=str(uuid.uuid4()),
            email=_normalize_email(email),
            password_hash=pw_hash,
            password_salt=pw_salt,
            user_metadata=json.dumps(dict(metadata or {})),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        try:
            with self._sessionmaker() as s:
                s.add(account)
                s.commit()
        except IntegrityError as exc:
            raise UpstreamError("User already registered") from exc
        except SQLAlchemyError as exc:
            raise UpstreamError("Identity service unavailable") from exc
        return account

    def ensure_account(self, email: str, password: str, metadata: Optional[Mapping[str, Any]] = None) -> str:
        """Create the account unless it exists; return its user id."""
        existing = self._find(email)
        if existing is not None:
            return existing.user_id
        account = self._create(email, password, metadata or {})
        logger.info("Seeded local account email=%s", account.email)
        return account.user_id

    @staticmethod
    def _to_session(account: Account) -> AuthSession:
        try:
            meta = json.loads(account.user_metadata or "{}")
        except ValueError:
            meta = {}
        return AuthSession(
            user_id=account.user_id,
            email=account.email,
            metadata=meta if isinstance(meta, dict) else {},
            access_token=secrets.token_urlsafe(32),
        )

    # -- IdentityProvider ----------------------------------------------------------

    def sign_in(self, email: str, password: str) -> AuthSession:
        account = self._find(email)
        if account is None or not verify_password(password or "", account.password_hash, account.password_salt):
            raise UpstreamError("Invalid login credentials")
        self._session = self._to_session(account)
        self._emit(SIGNED_IN)
        return self._session

    def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> Optional[AuthSession]:
        if self._find(email) is not None:
            raise UpstreamError("User already registered")
        account = self._create(email, password, metadata)
        self._session = self._to_session(account)
        self._emit(SIGNED_IN)
        return self._session

    def sign_out(self) -> None:
        if self._session is None:
            return
        self._session = None
        self._emit(SIGNED_OUT)

    def current_session(self) -> Optional[AuthSession]:
        return self._session

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, event: str) -> None:
        for cb in list(self._listeners):
            cb(event, self._session)
