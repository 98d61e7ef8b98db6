"""Hosted backend: Supabase auth and PostgREST tables via ``supabase-py``.

Only the documented row-level interface is used: select with equality
filters, ordering, limits and embedded foreign columns, plus insert, update
by id and delete. Row-level security on the project decides what each user
may read or write; the client never enforces it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Mapping, Optional, Sequence

import httpx
from supabase import AuthError, Client, PostgrestAPIError, create_client

from taskboard.backends.base import AuthSession, Embed, Row, SessionListener
from taskboard.errors import UpstreamError

logger = logging.getLogger(__name__)

# PostgREST codes for an expired or rejected JWT.
_SESSION_ERROR_CODES = {"PGRST301", "PGRST302", "PGRST303"}


def make_client(url: str, key: str) -> Client:
    return create_client(url, key)


def _upstream(exc: Exception, action: str) -> UpstreamError:
    code = str(getattr(exc, "code", "") or "")
    message = getattr(exc, "message", None) or str(exc)
    logger.warning("Supabase %s failed code=%s: %s", action, code or "-", message)
    return UpstreamError(f"{action} failed: {message}", invalidates_session=code in _SESSION_ERROR_CODES)


def select_columns(embed: Sequence[Embed]) -> str:
    """``*`` plus one PostgREST embedded resource per :class:`Embed`."""
    parts = ["*"]
    for e in embed:
        parts.append(f"{e.alias}:{e.table}!{e.foreign_key}({e.column})")
    return ", ".join(parts)


class SupabaseRecordBackend:
    def __init__(self, client: Client) -> None:
        self.client = client

    def select(
        self,
        table: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        embed: Sequence[Embed] = (),
    ) -> List[Row]:
        q = self.client.table(table).select(select_columns(embed))
        for col, value in (filters or {}).items():
            q = q.eq(col, value)
        if order_by:
            q = q.order(order_by, desc=descending)
        if limit:
            q = q.limit(int(limit))
        try:
            return list(q.execute().data or [])
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise _upstream(exc, f"Loading {table}") from exc

    def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        try:
            data = self.client.table(table).insert(dict(row)).execute().data or []
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise _upstream(exc, f"Saving to {table}") from exc
        if not data:
            raise UpstreamError(f"Saving to {table} returned no row")
        return data[0]

    def update(self, table: str, row_id: str, patch: Mapping[str, Any]) -> Optional[Row]:
        try:
            data = self.client.table(table).update(dict(patch)).eq("id", row_id).execute().data or []
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise _upstream(exc, f"Updating {table}") from exc
        return data[0] if data else None

    def delete(self, table: str, *, filters: Mapping[str, Any]) -> int:
        if not filters:
            raise UpstreamError("Refusing to delete without a filter")
        q = self.client.table(table).delete()
        for col, value in filters.items():
            q = q.eq(col, value)
        try:
            return len(q.execute().data or [])
        except (PostgrestAPIError, httpx.HTTPError) as exc:
            raise _upstream(exc, f"Deleting from {table}") from exc


def _to_session(session: Any) -> Optional[AuthSession]:
    if session is None or getattr(session, "user", None) is None:
        return None
    user = session.user
    return AuthSession(
        user_id=str(user.id),
        email=user.email or "",
        metadata=dict(user.user_metadata or {}),
        access_token=getattr(session, "access_token", None),
    )


class SupabaseIdentityProvider:
    def __init__(self, client: Client) -> None:
        self.client = client

    def sign_in(self, email: str, password: str) -> AuthSession:
        try:
            res = self.client.auth.sign_in_with_password({"email": email, "password": password})
        except (AuthError, httpx.HTTPError) as exc:
            raise _upstream(exc, "Sign in") from exc
        session = _to_session(res.session)
        if session is None:
            raise UpstreamError("Sign in failed: no session returned")
        return session

    def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> Optional[AuthSession]:
        try:
            res = self.client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": dict(metadata)}}
            )
        except (AuthError, httpx.HTTPError) as exc:
            raise _upstream(exc, "Sign up") from exc
        # No session until the address is confirmed, when confirmation is on.
        return _to_session(res.session)

    def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except (AuthError, httpx.HTTPError) as exc:
            raise _upstream(exc, "Sign out") from exc

    def current_session(self) -> Optional[AuthSession]:
        try:
            return _to_session(self.client.auth.get_session())
        except (AuthError, httpx.HTTPError) as exc:
            raise _upstream(exc, "Session restore") from exc

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        def _relay(event: Any, session: Any) -> None:
            callback(str(getattr(event, "value", event)), _to_session(session))

        subscription = self.client.auth.on_auth_state_change(_relay)
        return subscription.unsubscribe
