"""

"""

import lxml.html

from mkdn import render, textslug


def t(mkdn, html, **options):
    assert render(mkdn, **options) == html


def dom(mkdn, **options):
    return lxml.html.fragment_fromstring(render(mkdn, **options),
                                         create_parent="div")


def test_header_ids():
    """"""
    t("## Surfing with @Alice", '<h2 id="surfing_with_alice">'
      "Surfing with @Alice</h2>\n", header_id_func=textslug)
    t("## Named {#given}", '<h2 id="given">Named</h2>\n',
      header_id_func=textslug)
    t("# Plain", "<h1>Plain</h1>\n", header_id_func=lambda text: None)


def test_dash_item_is_not_a_header():
    """"""
    doc = dom("- a\n---")
    assert not doc.cssselect("h2")
    assert [li.text for li in doc.cssselect("ul li")] == ["a"]
    assert len(doc.cssselect("hr")) == 1


def test_horizontal_rules():
    """"""
    t("- - -", "<hr>\n")
    t("___", "<hr>\n")
    t("  * * * *", "<hr>\n")


def test_indented_code():
    """"""
    t("    code", "<pre><code>code\n</code></pre>\n", tab_width=4)
    t("  code", "<pre><code>code\n</code></pre>\n")
    t("  <b> &amp;", "<pre><code>&lt;b&gt; &amp;amp;\n</code></pre>\n")


def test_fenced_code_attributes():
    """"""
    t("~~~ {.x #c}\ncode\n~~~", '<pre><code id="c" class="x">code\n'
      "</code></pre>\n")
    t("~~~ {.x #c}\ncode\n~~~", '<pre id="c" class="x"><code>code\n'
      "</code></pre>\n", code_attr_on_pre=True)
    t("```py\nx\n```", '<pre><code class="language-py">x\n</code></pre>\n',
      code_class_prefix="language-")


def test_fenced_code_content_hook():
    """"""
    t("```py\nx\n```", '<pre><code class="py">[py]x\n</code></pre>\n',
      code_block_content_func=lambda code, lang: f"[{lang}]{code}")


def test_fenced_code_leading_blank_lines():
    """"""
    t("```\n\n\nx\n```", "<pre><code><br><br>x\n</code></pre>\n")


def test_fenced_code_is_not_parsed():
    """"""
    t("```\n<div>\n*x*\n```", "<pre><code>&lt;div&gt;\n*x*\n</code></pre>\n")


def test_loose_list():
    """"""
    t("- a\n\n- b", "<ul>\n<li><p>a</p></li>\n<li><p>b</p></li>\n</ul>\n")


def test_nested_list():
    """"""
    doc = dom("- a\n  - b\n- c")
    assert [li.text.strip() for li in doc.cssselect("div > ul > li")] == \
        ["a", "c"]
    assert [li.text for li in doc.cssselect("ul ul li")] == ["b"]


def test_adjacent_lists_of_different_kinds():
    """"""
    doc = dom("- a\n1. b")
    assert [li.text for li in doc.cssselect("ul li")] == ["a"]
    assert [li.text for li in doc.cssselect("ol li")] == ["b"]


def test_ordered_list_start():
    """"""
    t("3. x", "<ol>\n<li>x</li>\n</ol>\n", enhanced_ordered_list=False)
    t("0. x", '<ol start="0">\n<li>x</li>\n</ol>\n')


def test_block_quote_with_code():
    """"""
    doc = dom("> para\n>\n>     code", tab_width=4)
    assert doc.cssselect("blockquote p")[0].text == "para"
    assert doc.cssselect("blockquote pre code")[0].text == "code\n"


def test_nested_block_quote():
    """"""
    doc = dom("> a\n>\n> > b")
    assert doc.cssselect("blockquote > p")[0].text == "a"
    assert doc.cssselect("blockquote blockquote p")[0].text == "b"


def test_leading_pipe_table():
    """"""
    doc = dom("| A | B |\n|---|--:|\n| 1 | 2 |")
    assert [th.text for th in doc.cssselect("th")] == ["A", "B"]
    assert [td.text for td in doc.cssselect("td")] == ["1", "2"]
    assert [td.get("align") for td in doc.cssselect("td")] == [None, "right"]


def test_table_short_row():
    """"""
    doc = dom("A | B\n--|--\nonly |")
    assert [td.text for td in doc.cssselect("td")] == ["only", None]


def test_table_without_body():
    """"""
    doc = dom("A | B\n--|--")
    assert len(doc.cssselect("th")) == 2
    assert not doc.cssselect("tbody tr")


def test_table_alignment_classes():
    """"""
    doc = dom("A | B\n:--|:-:", table_align_class_tmpl="go-%%")
    assert [th.get("class") for th in doc.cssselect("th")] == ["go-left",
                                                               "go-center"]
    assert doc.cssselect("th")[0].get("align") is None


def test_table_cell_markup():
    """"""
    doc = dom("A | B\n--|--\n`a|b` | *c*")
    assert doc.cssselect("td code")[0].text == "a|b"
    assert doc.cssselect("td em")[0].text == "c"


def test_definition_list():
    """"""
    doc = dom("Apple\nPomme\n: Fruit\n: Company")
    assert [dt.text for dt in doc.cssselect("dt")] == ["Apple", "Pomme"]
    assert [dd.text for dd in doc.cssselect("dd")] == ["Fruit", "Company"]


def test_loose_definition():
    """"""
    doc = dom("Term\n\n: First\n\n  Second")
    assert [p.text for p in doc.cssselect("dd p")] == ["First", "Second"]
