"""Ports for the two external boundaries: identity and record storage.

The rest of the package depends on these Protocols only, so the hosted
service, the local SQL database and the test fakes are interchangeable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

Row = Dict[str, Any]

# Identity events, named like the hosted service's auth events.
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"
USER_UPDATED = "USER_UPDATED"


@dataclass(frozen=True)
class AuthSession:
    """Opaque session: only the user id and sign-up metadata are relied upon."""

    user_id: str
    email: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    access_token: Optional[str] = None


SessionListener = Callable[[str, Optional[AuthSession]], None]


@dataclass(frozen=True)
class Embed:
    """Embed ``table.column`` of the row referenced by ``foreign_key`` under ``alias``.

    The embedded value arrives as ``{alias: {column: value}}`` (or ``None``).
    """

    alias: str
    table: str
    foreign_key: str
    column: str = "name"


class RecordBackend(Protocol):
    def select(
        self,
        table: str,
        *,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        embed: Sequence[Embed] = (),
    ) -> List[Row]: ...

    def insert(self, table: str, row: Mapping[str, Any]) -> Row: ...

    def update(self, table: str, row_id: str, patch: Mapping[str, Any]) -> Optional[Row]:
        """Return the updated row, or ``None`` when no row has ``row_id``."""
        ...

    def delete(self, table: str, *, filters: Mapping[str, Any]) -> int:
        """Delete matching rows, returning how many were removed."""
        ...


class IdentityProvider(Protocol):
    def sign_in(self, email: str, password: str) -> AuthSession: ...

    def sign_up(self, email: str, password: str, metadata: Mapping[str, Any]) -> Optional[AuthSession]:
        """Create an account. Returns ``None`` when the provider requires e-mail confirmation first."""
        ...

    def sign_out(self) -> None: ...

    def current_session(self) -> Optional[AuthSession]: ...

    def on_session_change(self, callback: SessionListener) -> Callable[[], None]:
        """Register ``callback(event, session)``; returns an unsubscribe function."""
        ...
