import pytest

from safemark.sanitize.declarations import CssDeclaration
from safemark.sanitize.stylesheet import CssRule, parse_rules, sanitize_stylesheet_text, scope_selector

C = ".markdown-content"


def test_plain_selector_is_prefixed():
    assert sanitize_stylesheet_text("p{color:red}") == f"{C} p{{color:red}}"


@pytest.mark.parametrize("root", ["body", "html", ":root", "BODY"])
def test_global_roots_become_the_container(root):
    assert sanitize_stylesheet_text(f"{root}{{color:red}}") == f"{C}{{color:red}}"


def test_leading_root_in_compound_selector():
    assert scope_selector("body p") == f"{C} p"
    assert scope_selector("html body p") == f"{C} body p"
    assert scope_selector("body.dark p") == f"{C}.dark p"
    assert scope_selector("bodyguard") == f"{C} bodyguard"


def test_host_aliases_are_rewritten():
    assert scope_selector("#pet-message-preview .x") == f"{C} .x"
    assert scope_selector("div #pet-context-preview") == f"{C} div {C}"
    assert scope_selector(".context-editor-preview > p") == f"{C} > p"
    assert scope_selector("#pet-message-preview-extra") == f"{C} #pet-message-preview-extra"


def test_already_scoped_selectors_are_kept():
    assert scope_selector(f"{C} p") == f"{C} p"
    assert scope_selector(f"{C}") == C
    assert scope_selector(f"{C}.dark > p") == f"{C}.dark > p"


def test_look_alike_container_class_is_not_trusted():
    assert scope_selector(".markdown-content-evil") == f"{C} .markdown-content-evil"


def test_sibling_combinators_stay_inside_the_container():
    assert scope_selector(f"{C} ~ div") == f"{C} {C} ~ div"
    assert scope_selector(f"{C}+p") == f"{C} {C}+p"
    assert scope_selector("+ p") == ""
    assert scope_selector("~ p") == ""


def test_multiple_selectors_are_joined():
    out = sanitize_stylesheet_text("h1, h2 ,{font-weight:bold}")
    assert out == f"{C} h1, {C} h2{{font-weight:bold}}"


@pytest.mark.parametrize(
    "css",
    [
        "@import 'https://evil.test/x.css'; p{color:red}",
        "@media print { p{color:red} }",
        "body{color:red;background:url(javascript:x)}",
        "p{color:red} a{width:expression(alert(1))}",
        "p{color:red} /* javascript: */",
        "p{color:red}\na{font-family:vbscript:x}",
    ],
)
def test_blocked_sheets_are_rejected_entirely(css):
    assert sanitize_stylesheet_text(css) == ""


def test_rules_without_safe_declarations_are_dropped():
    css = "p{position:fixed} a{color:blue}"
    assert sanitize_stylesheet_text(css) == f"{C} a{{color:blue}}"


def test_pseudo_elements_get_a_content_declaration():
    assert sanitize_stylesheet_text("p::before{color:red}") == f'{C} p::before{{color:red;content:""}}'
    assert sanitize_stylesheet_text("p:after{color:red}") == f'{C} p:after{{color:red;content:""}}'
    assert sanitize_stylesheet_text("p::after{content:'x'}") == f"{C} p::after{{content:'x'}}"


def test_rules_are_emitted_one_per_line():
    out = sanitize_stylesheet_text("p{color:red} em{font-style:italic}")
    assert out.splitlines() == [f"{C} p{{color:red}}", f"{C} em{{font-style:italic}}"]


def test_malformed_blocks_are_skipped():
    assert sanitize_stylesheet_text("p color:red") == ""
    assert sanitize_stylesheet_text("{color:red}") == ""
    assert sanitize_stylesheet_text("p{}") == ""
    assert sanitize_stylesheet_text(None) == ""


def test_custom_container_class():
    out = sanitize_stylesheet_text("body p{color:red}", container_class="chat-root", aliases=())
    assert out == ".chat-root p{color:red}"


def test_output_is_idempotent():
    css = "body{color:red} #pet-message-preview p::before{color:blue} .markdown-content ~ a{opacity:0.5}"
    once = sanitize_stylesheet_text(css)
    assert once
    assert sanitize_stylesheet_text(once) == once


def test_every_selector_is_scoped():
    css = "p, :root, html div, .x > .y, #pet-context-preview, a:hover{color:red}"
    out = sanitize_stylesheet_text(css)
    selectors = out.split("{", 1)[0].split(", ")
    assert len(selectors) == 6
    assert all(s.startswith(C) for s in selectors)


def test_parse_rules():
    rules = parse_rules("a, b {color:red; width:1px !important}")
    assert rules == [
        CssRule(["a", "b"], [CssDeclaration("color", "red"), CssDeclaration("width", "1px", True)]),
    ]


@pytest.mark.parametrize(
    "css",
    [
        "</style><img src=x onerror=alert(1)>{color:red}",
        "p</style/><img src=x onerror=alert(1)>{color:red}",
        "p{color:red} </STYLE x>{color:red}",
    ],
)
def test_sheets_with_end_tags_are_rejected_entirely(css):
    assert sanitize_stylesheet_text(css) == ""


@pytest.mark.parametrize("selector", ["p<img", 'a[title="x"]', "a[title='x']", "p\\3c img"])
def test_selectors_with_markup_characters_are_dropped(selector):
    assert scope_selector(selector) == ""


def test_unsafe_selector_drops_only_its_rule():
    out = sanitize_stylesheet_text("p<img src=x>{color:red} a{color:blue}")
    assert out == f"{C} a{{color:blue}}"


def test_content_is_only_added_for_surviving_pseudo_elements():
    assert sanitize_stylesheet_text("+ p::before, p{color:red}") == f"{C} p{{color:red}}"
    out = sanitize_stylesheet_text("+ p, p::after{color:red}")
    assert out == f'{C} p::after{{color:red;content:""}}'
