"""
block-level stages

Each stage finds one construct anchored at line starts, renders it and puts
a block token in its place so later stages and paragraph formation leave it
alone.

"""

import functools

import regex

from .attributes import attr_catch_re, parse_attributes
from .encoding import escape_code
from .gamut import stage
from .spans import parse_span
from .store import is_block_token

__all__ = ["do_headers", "do_horizontal_rules", "do_fenced_code_blocks",
           "do_code_blocks", "do_block_quotes", "do_lists",
           "process_list_items", "do_definition_lists",
           "process_definition_items", "do_tables", "form_paragraphs"]

marker_ul_re = r"[*+\-]"
marker_ol_re = r"\d+[.]"

setext_header_re = regex.compile(rf"""
    (?P<text>^.+?)
    (?:[ ]+{attr_catch_re})?
    [ ]*\n
    (?P<rule>=+|-+)[ ]*\n+
""", regex.X | regex.M)
atx_header_re = regex.compile(rf"""
    ^(?P<level>\#{{1,6}})
    [ ]*
    (?P<text>.+?)
    [ ]*
    \#*                             # optional closing hashes
    (?:[ ]+{attr_catch_re})?
    [ ]*
    \n+
""", regex.X | regex.M)
horizontal_rule_re = regex.compile(r"""
    ^[ ]{0,3}
    (?P<marker>[-*_])
    (?>[ ]{0,2}(?P=marker)){2,}
    [ ]*
    $
""", regex.X | regex.M)
fenced_code_re = regex.compile(rf"""
    (?:\n|\A)
    (?P<indent>[ ]{{0,3}})
    (?P<fence>~{{3,}}|`{{3,}})
    [ ]*
    (?:\.?(?P<lang>[-_:a-zA-Z0-9]+))?
    [ ]*
    (?:{attr_catch_re})?
    [ ]*\n
    (?P<code>
      (?>
        (?!(?P=indent)[ ]*(?P=fence)[ ]*\n)     # not a closing fence
        .*\n+
      )+
    )
    (?P=indent)[ ]*(?P=fence)[ ]*(?=\n)
""", regex.X | regex.M)
block_quote_re = regex.compile(r"""
    (?P<quote>
      (?>
        ^[ ]*>[ ]?
          .+\n
        (?:.+\n)*
        \n*
      )+
    )
""", regex.X | regex.M)
pre_re = regex.compile(r"(\s*<pre\b[^>]*>.+?</pre>)", regex.S)


def _header(ctx, level, text, attr):
    attrs = parse_attributes(attr)
    hook = ctx.parser.header_id_func
    if not attrs.id and hook:
        attrs.id = hook(text) or None
    attr = attrs.serialize(ctx.parser.no_markup)
    block = f"<h{level}{attr}>{ctx.run_span_gamut(text)}</h{level}>"
    return "\n" + ctx.protect_block(block) + "\n\n"


@stage
def do_headers(ctx, text):
    """
    render underlined and `#`-prefixed headers

    Both forms take a trailing `{#id .class}` annotation. Without an
    explicit id the header id hook, when set, supplies one.

    """
    def setext(match):
        if (match.group("rule")[0] == "-" and
                match.group("text").startswith("- ")):
            return match.group(0)
        level = 1 if match.group("rule")[0] == "=" else 2
        return _header(ctx, level, match.group("text"), match.group("attr"))

    def atx(match):
        return _header(ctx, len(match.group("level")), match.group("text"),
                       match.group("attr"))

    text = setext_header_re.sub(setext, text)
    return atx_header_re.sub(atx, text)


@stage
def do_horizontal_rules(ctx, text):
    suffix = ctx.parser.empty_element_suffix
    return horizontal_rule_re.sub(
        lambda m: "\n" + ctx.protect_block(f"<hr{suffix}") + "\n", text)


@stage
def do_fenced_code_blocks(ctx, text):
    """
    render ``` and ~~~ fenced code verbatim

    Content goes through the code content hook when one is set and is
    escaped otherwise; it is never parsed as dialect text. The fence may
    carry a language name and an attribute annotation.

    """
    parser = ctx.parser

    def fenced(match):
        code = match.group("code")
        indent = len(match.group("indent"))
        if indent:
            code = regex.sub(rf"^[ ]{{1,{indent}}}", "", code, flags=regex.M)
        lang = match.group("lang") or ""
        if parser.code_block_content_func:
            code = parser.code_block_content_func(code, lang)
        else:
            code = escape_code(code)
        suffix = parser.empty_element_suffix
        code = regex.sub(r"\A\n+", lambda m: f"<br{suffix}" * len(m.group(0)),
                         code)
        classes = [parser.code_class_prefix + lang] if lang else []
        attr = ctx.attributes(match.group("attr"), classes=classes)
        if parser.code_attr_on_pre:
            block = f"<pre{attr}><code>{code}</code></pre>"
        else:
            block = f"<pre><code{attr}>{code}</code></pre>"
        return "\n\n" + ctx.protect_block(block) + "\n\n"

    return fenced_code_re.sub(fenced, text)


@functools.lru_cache()
def _code_block_re(tab_width):
    return regex.compile(rf"""
        (?:\n\n|\A\n?)
        (?P<code>
          (?>
            [ ]{{{tab_width}}}        # a full indent opens every line
            .*\n+
          )+
        )
        (?:(?=^[ ]{{0,{tab_width}}}\S)|\Z)
    """, regex.X | regex.M)


@stage
def do_code_blocks(ctx, text):
    """render indented code blocks"""
    def code_block(match):
        code = escape_code(ctx.outdent(match.group("code")))
        code = regex.sub(r"\A\n+|\n+\Z", "", code)
        block = f"<pre><code>{code}\n</code></pre>"
        return "\n\n" + ctx.protect_block(block) + "\n\n"

    return _code_block_re(ctx.parser.tab_width).sub(code_block, text)


@stage
def do_block_quotes(ctx, text):
    """render `>` quoted regions through the full block gamut"""
    def unindent_pre(match):
        return regex.sub(r"^  ", "", match.group(1), flags=regex.M)

    def block_quote(match):
        quote = regex.sub(r"^[ ]*>[ ]?|^[ ]+$", "", match.group("quote"),
                          flags=regex.M)
        quote = ctx.run_block_gamut(quote)
        quote = regex.sub(r"^", "  ", quote, flags=regex.M)
        quote = pre_re.sub(unindent_pre, quote)
        block = f"<blockquote>\n{quote}\n</blockquote>"
        return "\n" + ctx.protect_block(block) + "\n\n"

    return block_quote_re.sub(block_quote, text)


@functools.lru_cache()
def _whole_list_re(marker_re, other_marker_re, less_than_tab, nested):
    # only an already open list lets a marker start right after text
    lead = r"^" if nested else r"(?:(?<=\n)\n|\A\n?)"
    return regex.compile(lead + rf"""
        (?P<list>
          (?P<indent>[ ]{{0,{less_than_tab}}})
          (?P<marker>{marker_re})
          [ ]+
          (?s:.+?)
          (?:
              \Z
            |
              \n{{2,}}
              (?=\S)
              (?![ ]*{marker_re}[ ]+)           # not another item
            |
              (?=\n(?P=indent){other_marker_re}[ ]+)   # another kind of list
          )
        )
    """, regex.X | regex.M)


@stage
def do_lists(ctx, text):
    """render ordered and unordered lists"""
    less_than_tab = ctx.parser.tab_width - 1

    def whole_list(match):
        marker = match.group("marker")
        if regex.match(marker_ul_re, marker):
            list_type, marker_any = "ul", marker_ul_re
        else:
            list_type, marker_any = "ol", marker_ol_re
        items = process_list_items(ctx, match.group("list") + "\n",
                                   marker_any)
        start = ""
        if list_type == "ol" and ctx.parser.enhanced_ordered_list:
            number = int(marker[:-1])
            if number != 1:
                start = f' start="{number}"'
        block = f"<{list_type}{start}>\n{items}</{list_type}>"
        return "\n" + ctx.protect_block(block) + "\n\n"

    for marker_re, other_marker_re in ((marker_ul_re, marker_ol_re),
                                       (marker_ol_re, marker_ul_re)):
        whole_list_re = _whole_list_re(marker_re, other_marker_re,
                                       less_than_tab, ctx.list_level > 0)
        text = whole_list_re.sub(whole_list, text)
    return text


@functools.lru_cache()
def _list_item_re(marker_any_re):
    return regex.compile(rf"""
        (?P<leading_line>\n)?
        (?P<leading_space>^[ ]*)
        (?P<marker_space>{marker_any_re}(?:[ ]+|(?=\n)))
        (?P<item>(?s:.*?))
        (?:(?P<tailing_blank>\n+(?=\n))|\n)
        (?=
          \n*
          (?:\Z|(?P=leading_space)(?:{marker_any_re})(?:[ ]+|(?=\n)))
        )
    """, regex.X | regex.M)


def process_list_items(ctx, list_str, marker_any_re):
    """
    return the `<li>` elements of one list

    Items next to blank lines are loose and go through the block gamut.
    Tight items only get sub-list handling and the span gamut.

    """
    def list_item(match):
        item = match.group("item")
        if (match.group("leading_line") or match.group("tailing_blank") or
                "\n\n" in item):
            indent = " " * len(match.group("marker_space"))
            item = match.group("leading_space") + indent + item
            item = ctx.run_block_gamut(ctx.outdent(item) + "\n")
        else:
            item = do_lists(ctx, ctx.outdent(item))
            item = regex.sub(r"\n+\Z", "", item)
            item = ctx.run_span_gamut(item)
        return f"<li>{item}</li>\n"

    ctx.list_level += 1
    try:
        list_str = regex.sub(r"\n{2,}\Z", "\n", list_str)
        return _list_item_re(marker_any_re).sub(list_item, list_str)
    finally:
        ctx.list_level -= 1


@functools.lru_cache()
def _definition_list_re(less_than_tab):
    n = less_than_tab
    return regex.compile(rf"""
        (?>\A\n?|(?<=\n\n))
        (?>
          (?P<list>
            [ ]{{0,{n}}}
            (?>.*\S.*\n)+                   # defined terms
            \n?
            [ ]{{0,{n}}}:[ ]+               # colon starting a definition
            (?s:.+?)
            (?:
                \Z
              |
                \n{{2,}}
                (?=\S)
                (?!                         # not another term
                  [ ]{{0,{n}}}
                  (?:\S.*\n)+?
                  \n?
                  [ ]{{0,{n}}}:[ ]+
                )
                (?![ ]{{0,{n}}}:[ ]+)       # not another definition
            )
          )
        )
    """, regex.X | regex.M)


@functools.lru_cache()
def _definition_term_re(less_than_tab):
    return regex.compile(rf"""
        (?>\A\n?|\n\n+)
        (?P<terms>
          [ ]{{0,{less_than_tab}}}
          (?![:][ ]|[ ])
          (?>\S.*\n)+?
        )
        (?=\n?[ ]{{0,3}}:[ ])
    """, regex.X | regex.M)


@functools.lru_cache()
def _definition_re(less_than_tab):
    return regex.compile(rf"""
        \n(?P<leading_line>\n+)?
        (?P<marker_space>[ ]{{0,{less_than_tab}}}[:][ ]+)
        (?P<definition>(?s:.+?))
        (?=
          \n+
          (?:[ ]{{0,{less_than_tab}}}[:][ ]|<dt>|\Z)
        )
    """, regex.X | regex.M)


@stage
def do_definition_lists(ctx, text):
    """render terms followed by `:` definitions as `<dl>`"""
    def definition_list(match):
        items = process_definition_items(ctx, match.group("list")).strip()
        return ctx.protect_block(f"<dl>\n{items}\n</dl>") + "\n\n"

    less_than_tab = ctx.parser.tab_width - 1
    return _definition_list_re(less_than_tab).sub(definition_list, text)


def process_definition_items(ctx, list_str):
    """return the `<dt>` and `<dd>` elements of one definition list"""
    def terms(match):
        rendered = ""
        for term in match.group("terms").strip().split("\n"):
            rendered += f"\n<dt>{ctx.run_span_gamut(term.strip())}</dt>"
        return rendered + "\n"

    def definition(match):
        body = match.group("definition")
        if match.group("leading_line") or regex.search(r"\n{2,}", body):
            body = " " * len(match.group("marker_space")) + body
            body = ctx.run_block_gamut(ctx.outdent(body + "\n\n"))
            body = f"\n{body}\n"
        else:
            body = ctx.run_span_gamut(ctx.outdent(body.rstrip()))
        return f"\n<dd>{body}</dd>\n"

    less_than_tab = ctx.parser.tab_width - 1
    list_str = regex.sub(r"\n{2,}\Z", "\n", list_str)
    list_str = _definition_term_re(less_than_tab).sub(terms, list_str)
    return _definition_re(less_than_tab).sub(definition, list_str)


@functools.lru_cache()
def _table_re(less_than_tab, leading_pipe):
    n = less_than_tab
    if leading_pipe:
        return regex.compile(rf"""
            ^[ ]{{0,{n}}}[|]
            (?P<head>.+)\n
            [ ]{{0,{n}}}[|]
            (?P<underline>[ ]*[-:]+[-| :]*)\n
            (?P<content>(?>[ ]*[|].*\n)*)
            (?=\n|\Z)
        """, regex.X | regex.M)
    return regex.compile(rf"""
        ^[ ]{{0,{n}}}
        (?P<head>\S.*[|].*)\n
        [ ]{{0,{n}}}
        (?P<underline>[-:]+[ ]*[|][-| :]*)\n
        (?P<content>(?>.*[|].*\n)*)
        (?=\n|\Z)
    """, regex.X | regex.M)


def _alignment(ctx, separator):
    if regex.match(r"^ *-+: *$", separator):
        name = "right"
    elif regex.match(r"^ *:-+: *$", separator):
        name = "center"
    elif regex.match(r"^ *:-+ *$", separator):
        name = "left"
    else:
        return ""
    template = ctx.parser.table_align_class_tmpl
    if template:
        return ' class="{}"'.format(template.replace("%%", name))
    return f' align="{name}"'


def _split_cells(row, col_count=None):
    if col_count == 1:
        return [row]
    return regex.split(r" *[|] *", row, maxsplit=(col_count or 1) - 1)


@stage
def do_tables(ctx, text):
    """
    render pipe tables

    A separator row of dashes is required under the header row; colons in
    it set each column's alignment. Rows are span-parsed before they are
    split so pipes inside code spans or escaped as `\\|` stay in their cell.

    """
    def table(head, underline, content):
        head = regex.sub(r"[|] *$", "", head, flags=regex.M)
        underline = regex.sub(r"[|] *$", "", underline, flags=regex.M)
        content = regex.sub(r"[|] *$", "", content, flags=regex.M)

        aligns = [_alignment(ctx, s) for s in _split_cells(underline)]
        headers = _split_cells(parse_span(ctx, head))
        col_count = len(headers)
        aligns += [""] * (col_count - len(aligns))

        html = "<table>\n<thead>\n<tr>\n"
        for align, header in zip(aligns, headers):
            html += f"  <th{align}>{ctx.run_span_gamut(header.strip())}</th>\n"
        html += "</tr>\n</thead>\n<tbody>\n"
        content = content.strip("\n")
        for row in content.split("\n") if content else []:
            cells = _split_cells(parse_span(ctx, row), col_count)
            cells += [""] * (col_count - len(cells))
            html += "<tr>\n"
            for align, cell in zip(aligns, cells):
                html += f"  <td{align}>{ctx.run_span_gamut(cell.strip())}</td>\n"
            html += "</tr>\n"
        html += "</tbody>\n</table>"
        return ctx.protect_block(html) + "\n"

    def leading_pipe(match):
        content = regex.sub(r"^ *[|]", "", match.group("content"),
                            flags=regex.M)
        return table(match.group("head"), match.group("underline"), content)

    def no_leading_pipe(match):
        return table(match.group("head"), match.group("underline"),
                     match.group("content"))

    less_than_tab = ctx.parser.tab_width - 1
    text = _table_re(less_than_tab, True).sub(leading_pipe, text)
    return _table_re(less_than_tab, False).sub(no_leading_pipe, text)


def form_paragraphs(ctx, text):
    """
    wrap what is left in paragraphs and restore protected blocks

    Paragraphs that open with a block token or consist of a clean token
    are left unwrapped.

    """
    text = regex.sub(r"\A\n+|\n+\Z", "", text)
    grafs = []
    for graf in regex.split(r"\n{2,}", text):
        if not graf:
            continue
        graf = ctx.run_span_gamut(graf).strip(" \t\n\r\0\x0b")
        if not is_block_token(graf):
            graf = f"<p>{graf}</p>"
        grafs.append(graf)
    return ctx.unprotect("\n\n".join(grafs))
