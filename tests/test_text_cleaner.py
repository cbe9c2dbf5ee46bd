"""Feed text cleanup."""

from mirror.services.text_cleaner import clean_text, strip_cdata


def test_strip_cdata() -> None:
    assert strip_cdata("<![CDATA[Hello]]>") == "Hello"


def test_clean_text_removes_html_and_entities() -> None:
    raw = "<![CDATA[<p>Rain &amp; wind <b>tonight</b></p>]]>"
    assert clean_text(raw) == "Rain & wind tonight"


def test_clean_text_collapses_whitespace_and_truncates() -> None:
    assert clean_text("a  \n\n b   c", max_length=3) == "a b"


def test_clean_text_empty() -> None:
    assert clean_text(None) == ""
    assert clean_text("") == ""
