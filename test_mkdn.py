import lxml.html

from mkdn import render


def t(mkdn, html, **options):
    assert render(mkdn, **options) == html


def dom(mkdn, **options):
    return lxml.html.fragment_fromstring(render(mkdn, **options),
                                         create_parent="div")


def test_paragraph():
    t("foo bar", "<p>foo bar</p>\n")
    t("foo\nbar\n\nbaz", "<p>foo\nbar</p>\n\n<p>baz</p>\n")
    t("", "\n")


def test_link():
    t("a [basic](//basic) link",
      '<p>a <a href="//basic">basic</a> link</p>\n')


def test_link_with_title_and_attributes():
    t('[a](/x "T"){.c #i}',
      '<p><a href="/x" title="T" id="i" class="c">a</a></p>\n')


def test_reference_link():
    t('[x]: /u "T"\n\n[see][x]',
      '<p><a href="/u" title="T">see</a></p>\n')
    t("[X]: /u\n\n[see] [x] and [x][]",
      '<p><a href="/u">see</a> and <a href="/u">x</a></p>\n')


def test_unresolved_reference_is_literal():
    t('[x]: /u "T"\n\n[see][missing]', "<p>[see][missing]</p>\n")
    t("just [brackets]", "<p>just [brackets]</p>\n")


def test_shortcut_link():
    t("[home]: /\n\nback [home]", '<p>back <a href="/">home</a></p>\n')


def test_link_text_holds_no_links():
    html = render("[a [b](/x)](/c)")
    assert html.count("<a ") == 1
    assert html == '<p><a href="/c">a [b](/x)</a></p>\n'


def test_auto_link():
    t("<http://example.com/?a=1&b=2>",
      '<p><a href="http://example.com/?a=1&amp;b=2">'
      "http://example.com/?a=1&amp;b=2</a></p>\n")


def test_tel_auto_link():
    link = dom("<tel:+15555550100>").cssselect("a")[0]
    assert link.get("href") == "tel:+15555550100"
    assert link.text == "+15555550100"


def test_email_auto_link():
    html = render("<jane@example.org>")
    assert "jane@example.org" not in html
    link = lxml.html.fragment_fromstring(html, create_parent="div") \
                    .cssselect("a")[0]
    assert link.get("href") == "mailto:jane@example.org"
    assert link.text == "jane@example.org"
    assert html == render("<mailto:jane@example.org>")


def test_image():
    t('![alt](/i.png "T")',
      '<p><img src="/i.png" alt="alt" title="T"></p>\n')
    t("![logo][l]\n\n[l]: /logo.png",
      '<p><img src="/logo.png" alt="logo"></p>\n')
    t("![nothing][none]", "<p>![nothing][none]</p>\n")


def test_empty_element_suffix():
    t("a  \nb", "<p>a<br />\nb</p>\n", empty_element_suffix=" />")
    t("***", "<hr />\n", empty_element_suffix=" />")


def test_hard_break():
    t("a  \nb", "<p>a<br>\nb</p>\n")


def test_header():
    t("# Title {#x}", '<h1 id="x">Title</h1>\n')
    t("Title\n=====", "<h1>Title</h1>\n")
    t("Sub {.s}\n---", '<h2 class="s">Sub</h2>\n')
    t("### Three ###", "<h3>Three</h3>\n")


def test_emphasis():
    t("*a *b* c*", "<p><em>a <em>b</em> c</em></p>\n")
    t("***x***", "<p><strong><em>x</em></strong></p>\n")
    t("**bold** and _em_", "<p><strong>bold</strong> and <em>em</em></p>\n")


def test_horizontal_rule():
    t("a\n\n***\n\nb", "<p>a</p>\n\n<hr>\n\n<p>b</p>\n")


def test_lists():
    t("- a\n- b", "<ul>\n<li>a</li>\n<li>b</li>\n</ul>\n")
    t("3. x\n4. y", '<ol start="3">\n<li>x</li>\n<li>y</li>\n</ol>\n')
    t("1. x\n2. y", "<ol>\n<li>x</li>\n<li>y</li>\n</ol>\n")


def test_number_inside_paragraph_is_not_a_list():
    t("I recommend upgrading to version\n8. Oops, not a list",
      "<p>I recommend upgrading to version\n8. Oops, not a list</p>\n")


def test_table():
    doc = dom("A | B\n---|:--:\n1 | 2")
    assert [th.text for th in doc.cssselect("thead th")] == ["A", "B"]
    assert [th.get("align") for th in doc.cssselect("th")] == [None,
                                                               "center"]
    assert [td.text for td in doc.cssselect("tbody td")] == ["1", "2"]
    assert doc.cssselect("tbody td")[1].get("align") == "center"


def test_table_escaped_pipe():
    doc = dom("A | B\n--|--\n1 \\| x | 2")
    assert [td.text for td in doc.cssselect("tbody td")] == ["1 | x", "2"]


def test_footnote_order():
    doc = dom("Alpha[^b] and beta[^a].\n\n[^a]: Note A.\n[^b]: Note B.")
    notes = doc.cssselect("div.footnotes li")
    assert [li.get("id") for li in notes] == ["fn:b", "fn:a"]
    assert [a.text for a in doc.cssselect("sup a")] == ["1", "2"]
    assert notes[0].cssselect("p")[0].text.startswith("Note B.")


def test_code():
    t("Use `a < b` & `x`",
      "<p>Use <code>a &lt; b</code> &amp; <code>x</code></p>\n")
    t("`&amp;`", "<p><code>&amp;amp;</code></p>\n")
    t("Para\n\n  x < y", "<p>Para</p>\n\n<pre><code>x &lt; y\n</code></pre>\n")
    t("```python\nprint('<hi>')\n```",
      '<pre><code class="python">print(\'&lt;hi&gt;\')\n</code></pre>\n')


def test_plain_text_is_encoded():
    t('AT&T says "<3"', "<p>AT&amp;T says &quot;&lt;3&quot;</p>\n")
    t("&copy; &#169;", "<p>&copy; &#169;</p>\n")


def test_block_quote():
    t("> quote", "<blockquote>\n  <p>quote</p>\n</blockquote>\n")


def test_definition_list():
    t("Term\n: Definition",
      "<dl>\n<dt>Term</dt>\n<dd>Definition</dd>\n</dl>\n")


def test_abbreviation():
    t("*[HTML]: HyperText Markup Language\n\nHTML is fun",
      '<p><abbr title="HyperText Markup Language">HTML</abbr> is fun</p>\n')


def test_raw_markup():
    t("<div>\n*not emphasized*\n</div>", "<div>\n*not emphasized*\n</div>\n")
    t("<!-- *x* -->\n\nok", "<!-- *x* -->\n\n<p>ok</p>\n")
    t("an <b>inline</b> tag", "<p>an <b>inline</b> tag</p>\n")


def test_no_markup():
    t("<b>x</b> & y", "<p>&lt;b>x&lt;/b> &amp; y</p>\n", no_markup=True)


def test_no_entities():
    t("&copy;", "<p>&amp;copy;</p>\n", no_entities=True)


def test_no_residual_tokens():
    text = ("# T\x1A {#t}\n\n> *a* `b`\n\n- [l](/l)\n- x[^1]\n\n"
            "<div markdown=\"1\">\n**d**\n</div>\n\n[^1]: n *e*")
    assert "\x1A" not in render(text)
