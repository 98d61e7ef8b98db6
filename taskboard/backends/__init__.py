"""Storage and identity backends, and the factory that picks a pair."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from taskboard.backends.base import (
    SIGNED_IN,
    SIGNED_OUT,
    TOKEN_REFRESHED,
    USER_UPDATED,
    AuthSession,
    Embed,
    IdentityProvider,
    RecordBackend,
    Row,
    SessionListener,
)
from taskboard.config import AppConfig

logger = logging.getLogger(__name__)

__all__ = [
    "SIGNED_IN",
    "SIGNED_OUT",
    "TOKEN_REFRESHED",
    "USER_UPDATED",
    "AuthSession",
    "Backends",
    "Embed",
    "IdentityProvider",
    "RecordBackend",
    "Row",
    "SessionListener",
    "build_backends",
]


@dataclass(frozen=True)
class Backends:
    records: RecordBackend
    identity: IdentityProvider


def build_backends(config: AppConfig) -> Backends:
    if config.backend == "supabase":
        from taskboard.backends.supabase_backend import (
            SupabaseIdentityProvider,
            SupabaseRecordBackend,
            make_client,
        )

        if not (config.supabase_url and config.supabase_key):
            raise ValueError("SUPABASE_URL and SUPABASE_KEY are required for the supabase backend")
        client = make_client(config.supabase_url, config.supabase_key)
        logger.info("Using Supabase backend url=%s", config.supabase_url)
        return Backends(records=SupabaseRecordBackend(client), identity=SupabaseIdentityProvider(client))

    from taskboard.backends.local_identity import LocalIdentityProvider
    from taskboard.backends.sql import SqlRecordBackend

    records = SqlRecordBackend(config.database_url)
    identity = LocalIdentityProvider(config.database_url)
    if config.dev_email and config.dev_password:
        _seed_dev_account(config, records, identity)
    return Backends(records=records, identity=identity)


def _seed_dev_account(config: AppConfig, records: RecordBackend, identity) -> None:
    """Make sure the configured local account and its profile (with its role) exist."""
    user_id = identity.ensure_account(config.dev_email, config.dev_password, {"name": config.dev_name})
    if records.select("profiles", filters={"user_id": user_id}, limit=1):
        return
    records.insert(
        "profiles",
        {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "name": config.dev_name,
            "email": config.dev_email.strip().lower(),
            "role": config.dev_role,
        },
    )
    logger.info("Seeded %s profile for %s", config.dev_role, config.dev_email)
