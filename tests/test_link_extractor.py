import pytest

from site_audit.crawler.link_extractor import DEFAULT_IGNORED_EXTENSIONS, LinkExtractor
from site_audit.errors import ExtractionError

BASE = "https://example.com/docs/"


@pytest.mark.parametrize(
    "html,expected",
    [
        ('<a href="/a">A</a><a href="b">B</a>', ["https://example.com/a", "https://example.com/docs/b"]),
        ('<a href="/a">1</a><a href="/a">2</a>', ["https://example.com/a"]),
        ('<a name="anchor">x</a><a href="">self</a>', [BASE]),
        ('<a href="/img.PNG">i</a><a href="/report.pdf?v=2">p</a><a href="/page">p</a>', ["https://example.com/page"]),
        (
            '<a href="https://other.org/x">ext</a><a href="https://sub.example.com">sub</a>',
            ["https://other.org/x", "https://sub.example.com"],
        ),
        ('<p>no links</p>', []),
        ('<a href="  /padded  ">p</a>', ["https://example.com/padded"]),
        ('<a href="mailto:me@example.com">m</a>', ["mailto:me@example.com"]),
    ],
)
def test_extract_with_default_ignores(html, expected):
    extractor = LinkExtractor.with_default_ignores()
    assert extractor.extract(BASE, html) == expected


def test_extract_accepts_bytes():
    extractor = LinkExtractor()
    assert extractor.extract(BASE, b'<a href="/x">x</a>') == ["https://example.com/x"]


def test_no_ignores_by_default():
    extractor = LinkExtractor()
    assert extractor.extract(BASE, '<a href="/a.png">i</a>') == ["https://example.com/a.png"]


def test_extra_ignored_extensions_are_normalised():
    extractor = LinkExtractor.with_default_ignores(extra=["DAT", ".Bin"])
    html = '<a href="/file.dat">d</a><a href="/file.bin">b</a><a href="/file.jpg">j</a><a href="/ok">o</a>'
    assert extractor.extract(BASE, html) == ["https://example.com/ok"]
    assert ".dat" in extractor.ignored
    assert DEFAULT_IGNORED_EXTENSIONS <= extractor.ignored


def test_parser_rejection_is_extraction_error(monkeypatch):
    import site_audit.crawler.link_extractor as module

    def reject(*args, **kwargs):
        raise module.ParserRejectedMarkup("bad markup")

    monkeypatch.setattr(module, "BeautifulSoup", reject)
    with pytest.raises(ExtractionError):
        LinkExtractor().extract(BASE, "<a")
