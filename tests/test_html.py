import pytest

from captivedetect.parsers.html import extract_text, is_success_body, normalize_text


def test_extract_text_skips_script_and_style():
    html = ("<html><head><style>body{}</style><script>var a=1;</script></head>"
            "<body><p>Hello <b>world</b></p></body></html>")
    assert extract_text(html) == "Hello world"


def test_extract_text_decodes_entities():
    assert extract_text("<p>Tom &amp; Jerry</p>") == "Tom & Jerry"


def test_normalize_text():
    assert normalize_text("  Success!\n") == "success"
    assert normalize_text("Su-cc ess") == "success"
    assert normalize_text("") == ""


@pytest.mark.parametrize("body, expected", [
    ("<html>success</html>", True),
    ("<HTML><HEAD><TITLE>Success</TITLE></HEAD><BODY>Success</BODY></HTML>", False),
    ("<html><body> Success. </body></html>", True),
    ("success", True),
    ("<html>unexpected content</html>", False),
    ("<html>Redirecting...</html>", False),
    ("", False),
])
def test_is_success_body(body, expected):
    assert is_success_body(body) is expected
