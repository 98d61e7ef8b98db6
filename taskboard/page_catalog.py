"""Page catalog for Taskboard.

Single source of truth for navigation: which page scripts exist and which
roles may open them. ``app.py`` builds ``st.navigation`` from this list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Union

from taskboard.models import Role

ALL_ROLES: FrozenSet[Role] = frozenset(Role)

SIGN_IN_PAGE = "pages/0_Sign_In.py"


@dataclass(frozen=True)
class PageSpec:
    """Specification for a navigation page."""

    path: str
    title_key: str
    icon: str
    roles: FrozenSet[Role]
    default: bool = False


def get_page_catalog() -> List[PageSpec]:
    return [
        PageSpec(
            path="pages/1_Dashboard.py",
            title_key="nav.dashboard",
            icon="📊",
            roles=ALL_ROLES,
            default=True,
        ),
        PageSpec(
            path="pages/2_Employees.py",
            title_key="nav.employees",
            icon="👥",
            roles=frozenset({Role.MANAGER}),
        ),
        PageSpec(
            path="pages/3_Tasks.py",
            title_key="nav.tasks",
            icon="📋",
            roles=frozenset({Role.MANAGER, Role.EMPLOYEE}),
        ),
        PageSpec(
            path="pages/4_Files.py",
            title_key="nav.files",
            icon="📁",
            roles=frozenset({Role.MANAGER, Role.EMPLOYEE}),
        ),
    ]


def _role(role: Union[Role, str, None]) -> Optional[Role]:
    if role is None:
        return None
    return role if isinstance(role, Role) else Role.parse(role)


def pages_for_role(role: Union[Role, str, None]) -> List[PageSpec]:
    """Pages the role may navigate to, in catalog order. Nothing for anonymous users."""
    r = _role(role)
    if r is None:
        return []
    return [p for p in get_page_catalog() if r in p.roles]


def is_page_allowed(path: str, role: Union[Role, str, None]) -> bool:
    return any(p.path == path for p in pages_for_role(role))


def known_page_paths() -> List[str]:
    return [p.path for p in get_page_catalog()]
