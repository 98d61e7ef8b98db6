import pytest

from taskboard.files import format_file_size, is_extension_blocked, mime_category


@pytest.mark.parametrize(
    "size,expected",
    [(0, "0 Bytes"), (512, "512 Bytes"), (1024, "1 KB"), (1536, "1.5 KB"), (int(2.5 * 1024 * 1024), "2.5 MB")],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_blocked_extensions_are_case_insensitive():
    assert is_extension_blocked("setup.EXE")
    assert is_extension_blocked("deploy.sh")
    assert not is_extension_blocked("report.pdf")
    assert not is_extension_blocked("README")


def test_mime_category_prefers_extension_then_mime_type():
    assert mime_category("scan.PDF") == "pdf"
    assert mime_category("notes.docx") == "document"
    assert mime_category("blob", "image/heic") == "image"
    assert mime_category("blob", "application/vnd.ms-excel") == "spreadsheet"
    assert mime_category("archive.zip") == "file"
