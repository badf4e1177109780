import pytest

from safemark.sanitize.declarations import CssDeclaration, parse_declarations, sanitize_style_text
from safemark.sanitize.policy import ALLOWED_CSS_PROPERTIES


def test_out_of_range_width_is_dropped():
    out = sanitize_style_text("color:#ff0000;width:9999px;font-weight:bold")
    assert out == "color:#ff0000;font-weight:bold"


@pytest.mark.parametrize(
    "text",
    [
        "color:red;background:url(https://evil.test/x)",
        "color:red;width:expression(alert(1))",
        "content:'javascript:alert(1)'",
        "color:red;font-family:VBScript:x",
        "color: red; background-image: URL(x)",
    ],
)
def test_blocked_tokens_reject_the_whole_block(text):
    assert sanitize_style_text(text) == ""


def test_important_is_preserved_once():
    assert sanitize_style_text("color: red !important") == "color:red !important"
    assert sanitize_style_text("color: red !IMPORTANT ") == "color:red !important"


def test_duplicate_or_obfuscated_important_is_rejected():
    assert sanitize_style_text("color: red !important !important") == ""
    assert sanitize_style_text("color: red ! important") == ""
    assert sanitize_style_text("color: !important") == ""


def test_unknown_properties_are_dropped():
    assert sanitize_style_text("background:red;behavior:x;color:blue") == "color:blue"


def test_keyword_values_are_lowercased():
    assert sanitize_style_text("POSITION: Absolute; Text-Decoration: Underline") == (
        "position:absolute;text-decoration:underline"
    )


@pytest.mark.parametrize(
    "text, expected",
    [
        ("position: fixed", ""),
        ("font-weight: 700", "font-weight:700"),
        ("font-weight: 750", ""),
        ("display: inline-block", "display:inline-block"),
        ("display: grid", ""),
        ("opacity: 0.5", "opacity:0.5"),
        ("opacity: 1.5", ""),
        ("z-index: 10", "z-index:10"),
        ("z-index: 10000", ""),
        ("z-index: 007", "z-index:7"),
        ("transform: translate(10px, 20px) rotate(45deg)", "transform:translate(10px, 20px) rotate(45deg)"),
        ("transform: matrix(1,0,0,1,0,0)", ""),
        ("transform: NONE", "transform:none"),
        ('content: "hi"', 'content:"hi"'),
        ("content: 'a\\'b'", "content:'a\\'b'"),
        ('content: "<b>"', ""),
        ("content: attr(title)", ""),
        ("content: Open-Quote", "content:open-quote"),
        ("padding: 4px 8px", "padding:4px 8px"),
        ("margin: 0 auto", ""),
        ("line-height: 1.5", ""),
        ("border-radius: 4px", "border-radius:4px"),
        ("font-family: Arial, Helvetica, sans-serif", "font-family:Arial, Helvetica, sans-serif"),
        ('font-family: "Times New Roman"', ""),
        ("border: 1px solid #ccc", "border:1px solid #ccc"),
        ("border: 1px 2px", ""),
        ("border-top-color: blue", "border-top-color:blue"),
        ("inset: 0 AUTO", "inset:0 auto"),
        ("top: auto", "top:auto"),
        ("pointer-events: none", "pointer-events:none"),
    ],
)
def test_property_validators(text, expected):
    assert sanitize_style_text(text) == expected


def test_control_characters_and_long_values_are_dropped():
    assert sanitize_style_text("color:r\x01ed;font-weight:bold") == "font-weight:bold"
    assert sanitize_style_text("font-family:" + "a" * 161) == ""


def test_malformed_segments_are_skipped():
    assert sanitize_style_text("color red;:red;;font-style:italic") == "font-style:italic"


def test_empty_and_non_string_input():
    assert sanitize_style_text("") == ""
    assert sanitize_style_text("   ") == ""
    assert sanitize_style_text(None) == ""


def test_output_is_idempotent():
    once = sanitize_style_text("Color: RED !important; margin: 1px 2px; display: FLEX")
    assert sanitize_style_text(once) == once


def test_surviving_properties_are_allow_listed():
    out = sanitize_style_text("color:red;float:left;width:10px;cursor:pointer;opacity:1")
    props = [d.split(":", 1)[0] for d in out.split(";")]
    assert props == ["color", "width", "opacity"]
    assert set(props) <= ALLOWED_CSS_PROPERTIES


def test_parse_declarations():
    decls = parse_declarations(" Color : red ; width:1px !important; nonsense ")
    assert decls == [
        CssDeclaration("color", "red"),
        CssDeclaration("width", "1px", important=True),
    ]
