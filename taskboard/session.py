"""Authenticated principal for one browser session."""

from __future__ import annotations

import logging
import uuid
from typing import Callable, List, Optional

from taskboard.backends.base import SIGNED_OUT, USER_UPDATED, AuthSession, IdentityProvider, RecordBackend
from taskboard.errors import UpstreamError, ValidationError
from taskboard.models import Principal, Role

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_NAME = "New User"

PrincipalListener = Callable[[Optional[Principal]], None]


class SessionContext:
    """Tracks who is signed in and keeps their ``profiles`` row at hand.

    The identity provider owns credentials; this class only maps its session
    to a :class:`Principal`, seeding a profile row the first time a user
    authenticates.
    """

    def __init__(self, identity: IdentityProvider, backend: RecordBackend) -> None:
        self.identity = identity
        self.backend = backend
        self.principal: Optional[Principal] = None
        self.loading = False
        self._listeners: List[PrincipalListener] = []
        self._unsubscribe = identity.on_session_change(self._on_identity_event)

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    def on_change(self, callback: PrincipalListener) -> Callable[[], None]:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # -- flows -------------------------------------------------------------------

    def restore(self) -> Optional[Principal]:
        """Pick up an existing provider session, if any."""
        self.loading = True
        try:
            session = self.identity.current_session()
            if session is None:
                self._set_principal(None)
            else:
                self._load(session)
        finally:
            self.loading = False
        return self.principal

    def sign_in(self, email: str, password: str) -> Principal:
        missing = [n for n, v in (("email", email), ("password", password)) if not (v or "").strip()]
        if missing:
            raise ValidationError("Missing required fields", fields=missing)
        self.loading = True
        try:
            session = self.identity.sign_in(email.strip(), password)
            self._load(session)
        finally:
            self.loading = False
        logger.info("Signed in user=%s role=%s", self.principal.user_id, self.principal.role.value)
        return self.principal

    def sign_up(self, email: str, password: str, name: str) -> Optional[Principal]:
        """Register a new account. ``None`` means the provider wants the address confirmed first."""
        fields = (("name", name), ("email", email), ("password", password))
        missing = [n for n, v in fields if not (v or "").strip()]
        if missing:
            raise ValidationError("Missing required fields", fields=missing)
        self.loading = True
        try:
            session = self.identity.sign_up(email.strip(), password, {"name": name.strip()})
            if session is None:
                logger.info("Sign-up for %s awaits e-mail confirmation", email.strip())
                return None
            self._load(session)
        finally:
            self.loading = False
        return self.principal

    def sign_out(self) -> None:
        try:
            self.identity.sign_out()
        finally:
            if self.principal is not None:
                logger.info("Signed out user=%s", self.principal.user_id)
            self._set_principal(None)

    def invalidate(self) -> None:
        """Forget the provider session after it rejected our credentials."""
        logger.warning("Session invalidated by the identity provider")
        try:
            self.identity.sign_out()
        except UpstreamError as exc:
            logger.warning("Sign-out after invalidation failed: %s", exc)
        finally:
            self._set_principal(None)

    def close(self) -> None:
        self._unsubscribe()
        self._listeners.clear()

    # -- internals ---------------------------------------------------------------

    def _on_identity_event(self, event: str, session: Optional[AuthSession]) -> None:
        logger.debug("Identity event %s", event)
        if event == SIGNED_OUT or session is None:
            self._set_principal(None)
            return
        self._load(session, force=event == USER_UPDATED)

    def _load(self, session: AuthSession, *, force: bool = False) -> None:
        if not force and self.principal is not None and self.principal.user_id == session.user_id:
            return
        self._set_principal(Principal.from_row(self._profile_row(session)))

    def _profile_row(self, session: AuthSession) -> dict:
        rows = self.backend.select("profiles", filters={"user_id": session.user_id}, limit=1)
        if rows:
            return rows[0]
        claimed = self._claim_profile(session)
        if claimed is not None:
            return claimed
        name = str((session.metadata or {}).get("name") or "").strip() or DEFAULT_PROFILE_NAME
        row = {
            "id": str(uuid.uuid4()),
            "user_id": session.user_id,
            "name": name,
            "email": session.email,
            "role": Role.EMPLOYEE.value,
        }
        saved = self.backend.insert("profiles", row)
        logger.info("Created profile for user=%s", session.user_id)
        return {**row, **(saved or {})}

    def _claim_profile(self, session: AuthSession) -> Optional[dict]:
        """Link a manager-created profile with the same e-mail and no account yet."""
        email = (session.email or "").strip().lower()
        if not email:
            return None
        for row in self.backend.select("profiles", filters={"email": email}):
            if row.get("user_id"):
                continue
            saved = self.backend.update("profiles", row["id"], {"user_id": session.user_id})
            if saved is None:
                continue
            logger.info("Linked profile %s to user=%s", row["id"], session.user_id)
            return {**row, **saved}
        return None

    def _set_principal(self, principal: Optional[Principal]) -> None:
        if principal == self.principal:
            return
        self.principal = principal
        for cb in list(self._listeners):
            cb(principal)
