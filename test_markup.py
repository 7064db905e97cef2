"""

"""

import lxml.html

from mkdn import Context, Parser, render
from mkdn.markup import hash_html_blocks, scan_as_dialect, scan_as_markup


def t(mkdn, html, **options):
    assert render(mkdn, **options) == html


def _():
    return Context(Parser())


def test_scan_as_markup():
    """"""
    ctx = _()
    parsed, rest = scan_as_markup(ctx, "<div>a</div>\nrest", ctx.protect_block,
                                  True)
    assert ctx.unprotect(parsed) == "<div>a</div>"
    assert rest == "\nrest"


def test_scan_as_markup_nested():
    """"""
    ctx = _()
    parsed, rest = scan_as_markup(ctx, "<div><div>x</div></div>tail",
                                  ctx.protect_block, True)
    assert ctx.unprotect(parsed) == "<div><div>x</div></div>"
    assert rest == "tail"


def test_scan_as_markup_unbalanced():
    """"""
    ctx = _()
    assert scan_as_markup(ctx, "<div>open", ctx.protect_block, True) == \
        ("<", "div>open")


def test_scan_as_dialect_enclosing():
    """"""
    ctx = _()
    assert scan_as_dialect(ctx, "a\n</div>\nb", enclosing="div") == \
        ("a\n", "</div>\nb")


def test_scan_as_dialect_span_mode():
    """"""
    ctx = _()
    parsed, rest = scan_as_dialect(ctx, "a\nb", span=True)
    assert parsed.count("\x1A") == 4
    assert ctx.unprotect(parsed) == "a\nb"
    assert rest == ""


def test_hash_html_blocks():
    """"""
    ctx = _()
    hashed = hash_html_blocks(ctx, "<table>\n<tr><td>x</td></tr>\n</table>\n")
    assert "<" not in hashed
    assert ctx.unprotect(hashed.strip()) == \
        "<table>\n<tr><td>x</td></tr>\n</table>"
    ctx = Context(Parser(no_markup=True))
    assert hash_html_blocks(ctx, "<div>x</div>") == "<div>x</div>"


def test_markdown_attribute_block_mode():
    """"""
    t('<div markdown="1">\n*hi*\n</div>',
      "<div>\n\n<p><em>hi</em></p>\n\n</div>\n")


def test_markdown_attribute_span_mode():
    """"""
    html = render('<p markdown="1">*x*\n</p>')
    doc = lxml.html.fragment_fromstring(html, create_parent="div")
    assert len(doc.cssselect("p")) == 1
    assert doc.cssselect("p > em")[0].text == "x"
    assert "markdown" not in html


def span_paragraph(mkdn):
    html = render(mkdn)
    assert "\x1A" not in html
    doc = lxml.html.fragment_fromstring(html, create_parent="div")
    assert len(doc.cssselect("p")) == 1
    return doc.cssselect("p")[0]


def test_span_mode_trailing_backslash():
    """"""
    assert span_paragraph('<p markdown="1">a\\\nb</p>').text == "a\\\nb"


def test_span_mode_definition_lines_stay_text():
    """"""
    p = span_paragraph('<p markdown="1">a\n[x]: /u\n[x]</p>')
    assert p.text == "a\n[x]: /u\n[x]"
    p = span_paragraph('<p markdown="1">[^1]: x\n[^1]</p>')
    assert p.text == "[^1]: x\n[^1]"


def test_span_mode_underscores_at_line_edges():
    """"""
    p = span_paragraph('<p markdown="1">_a_\n__b__</p>')
    assert [em.text for em in p.cssselect("em")] == ["a"]
    assert [strong.text for strong in p.cssselect("strong")] == ["b"]


def test_markdown_attribute_ignored_value():
    """"""
    t('<div markdown="0">\n*x*\n</div>', '<div markdown="0">\n*x*\n</div>\n')


def test_context_tags():
    """"""
    t("<ins>\nx\n</ins>", "<ins>\nx\n</ins>\n")
    t("a <ins>x</ins> b", "<p>a <ins>x</ins> b</p>\n")


def test_comments_and_instructions():
    """"""
    t("<!-- *x* -->", "<!-- *x* -->\n")
    t("<?php echo 1; ?>\n\nok", "<?php echo 1; ?>\n\n<p>ok</p>\n")


def test_clean_tags():
    """"""
    t("<script>\nvar a = 1 < 2 && *b*;\n</script>",
      "<script>\nvar a = 1 < 2 && *b*;\n</script>\n")


def test_unbalanced_markup_terminates():
    """"""
    html = render("<div>\nunclosed *em*")
    assert "unclosed" in html
    assert "\x1A" not in html
