import pytest

from taskboard.i18n import STATUS_KEYS, TRANSLATIONS, Localizer


def test_english_and_arabic_share_keys():
    assert set(TRANSLATIONS["en"]) == set(TRANSLATIONS["ar"])


def test_every_status_key_is_translated():
    for key in STATUS_KEYS.values():
        assert key in TRANSLATIONS["en"]


def test_direction_follows_locale():
    loc = Localizer("en")
    assert loc.direction == "ltr"
    loc.set_locale("ar")
    assert loc.direction == "rtl"
    assert loc.is_rtl
    assert loc.t("nav.tasks") == TRANSLATIONS["ar"]["nav.tasks"]


def test_unknown_locale_is_ignored():
    loc = Localizer("ar")
    loc.set_locale("fr")
    assert loc.locale == "ar"
    assert Localizer("de").locale == "en"


def test_missing_key_falls_back_to_key():
    assert Localizer().t("no.such.key") == "no.such.key"


@pytest.mark.parametrize(
    "value, expected",
    [("progress", "In Progress"), ("approved", "Approved"), ("urgent", "Urgent"), ("mystery", "mystery")],
)
def test_status_labels(value, expected):
    assert Localizer("en").status(value) == expected
