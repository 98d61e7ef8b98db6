from pathlib import Path

from taskboard.i18n import TRANSLATIONS
from taskboard.models import Role
from taskboard.page_catalog import SIGN_IN_PAGE, get_page_catalog, is_page_allowed, known_page_paths, pages_for_role

ROOT = Path(__file__).resolve().parents[1]


def test_catalog_pages_exist_on_disk():
    for path in known_page_paths() + [SIGN_IN_PAGE]:
        assert (ROOT / path).is_file(), path


def test_titles_are_translated():
    for page in get_page_catalog():
        assert page.title_key in TRANSLATIONS["en"]


def test_exactly_one_default_page():
    assert [p.path for p in get_page_catalog() if p.default] == ["pages/1_Dashboard.py"]


def test_pages_per_role():
    assert [p.path for p in pages_for_role(Role.MANAGER)] == known_page_paths()
    assert [p.path for p in pages_for_role("employee")] == [
        "pages/1_Dashboard.py",
        "pages/3_Tasks.py",
        "pages/4_Files.py",
    ]
    assert [p.path for p in pages_for_role(Role.VIEWER)] == ["pages/1_Dashboard.py"]
    assert pages_for_role(None) == []


def test_is_page_allowed():
    assert is_page_allowed("pages/2_Employees.py", "manager")
    assert not is_page_allowed("pages/2_Employees.py", Role.EMPLOYEE)
    assert not is_page_allowed("pages/1_Dashboard.py", None)
