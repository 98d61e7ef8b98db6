from __future__ import annotations

import os
from typing import Iterable, Optional


def env_str(name: str, default: str) -> str:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip() or default


def env_optional_str(name: str) -> Optional[str]:
    value = (os.environ.get(name) or "").strip()
    return value or None


def env_int(name: str, default: int, *, minimum: Optional[int] = None) -> int:
    raw = os.environ.get(name)
    try:
        value = int(raw.strip()) if raw is not None else default
    except ValueError:
        value = default
    if minimum is not None:
        value = max(minimum, value)
    return value


def env_choice(name: str, choices: Iterable[str], default: str) -> str:
    """Lower-cased value of ``name`` if it is one of ``choices``, else ``default``."""
    value = (os.environ.get(name) or "").strip().lower()
    return value if value in set(choices) else default
