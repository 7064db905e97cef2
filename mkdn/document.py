"""
document-level stages

Definitions of links, footnotes and abbreviations are stripped from the
document into the run's tables before block processing starts. Footnotes
are rendered and appended once the body is done.

"""

import functools

import regex

from .attributes import attr_catch_re
from .gamut import stage
from .spans import footnote_placeholder_re

__all__ = ["strip_link_definitions", "strip_footnotes", "strip_abbreviations",
           "run_basic_block_gamut", "append_footnotes"]


@functools.lru_cache()
def _link_definition_re(less_than_tab):
    return regex.compile(rf"""
        ^[ ]{{0,{less_than_tab}}}\[(?P<id>.+)\][ ]?:
          [ ]*
          \n?                   # maybe one newline
          [ ]*
        (?:
          <(?P<angled>.+?)>
        |
          (?P<url>\S+?)
        )
          [ ]*
          \n?                   # maybe one newline
          [ ]*
        (?:
          (?<=\s)
          ["(]
          (?P<title>.*?)
          [")]
          [ ]*
        )?
        (?:[ ]*{attr_catch_re})?
        (?:\n+|\Z)
    """, regex.X | regex.M)


@functools.lru_cache()
def _footnote_definition_re(less_than_tab):
    return regex.compile(rf"""
        ^[ ]{{0,{less_than_tab}}}\[\^(?P<id>.+?)\][ ]?:
          [ ]*
          \n?                   # maybe one newline
        (?P<text>               # no blank lines allowed
          (?:
            .+
          |
            \n
            (?!\[.+?\][ ]?:\s)          # not another definition
            # not a blank line then unindented text
            (?!\n+[ ]{{0,{less_than_tab}}}\S)
          )*
        )
    """, regex.X | regex.M)


@functools.lru_cache()
def _abbreviation_definition_re(less_than_tab):
    return regex.compile(rf"""
        ^[ ]{{0,{less_than_tab}}}\*\[(?P<term>.+?)\][ ]?:
        (?P<description>.*)
    """, regex.X | regex.M)


@stage
def strip_link_definitions(ctx, text):
    """collect `[id]: url "title" {attrs}` lines into the link table"""
    def define(match):
        ctx.links.define(match.group("id"),
                         match.group("angled") or match.group("url"),
                         match.group("title"),
                         ctx.attributes(match.group("attr")))
        return ""

    less_than_tab = ctx.parser.tab_width - 1
    return _link_definition_re(less_than_tab).sub(define, text)


@stage
def strip_footnotes(ctx, text):
    """collect `[^id]: text` definitions into the footnote table"""
    def define(match):
        ctx.footnotes.define(match.group("id"), ctx.outdent(match.group("text")))
        return ""

    less_than_tab = ctx.parser.tab_width - 1
    return _footnote_definition_re(less_than_tab).sub(define, text)


@stage
def strip_abbreviations(ctx, text):
    """collect `*[term]: description` lines into the abbreviation table"""
    def define(match):
        ctx.abbreviations.define(match.group("term"),
                                 match.group("description"))
        return ""

    less_than_tab = ctx.parser.tab_width - 1
    return _abbreviation_definition_re(less_than_tab).sub(define, text)


@stage
def run_basic_block_gamut(ctx, text):
    return ctx.run_basic_block_gamut(text)


def _class_and_title(ctx, class_name, title):
    attr = ""
    if class_name:
        attr += f' class="{ctx.encode_attribute(class_name)}"'
    if title:
        attr += f' title="{ctx.encode_attribute(title)}"'
    return attr


def _footnote_marker(ctx, match):
    reference = ctx.footnotes.reference(match.group(1))
    if reference is None:
        return f"[^{match.group(1)}]"
    note_id, number, ref_count = reference
    parser = ctx.parser
    attr = _class_and_title(ctx, parser.fn_link_class, parser.fn_link_title)
    attr = attr.replace("%%", str(number))
    note_id = ctx.encode_attribute(note_id)
    mark = ref_count if ref_count > 1 else ""
    return (f'<sup id="fnref{mark}:{note_id}">'
            f'<a href="#fn:{note_id}"{attr}>{number}</a></sup>')


@stage
def append_footnotes(ctx, text):
    """
    resolve footnote markers and append the footnote list

    Footnotes are numbered and listed in the order their first reference
    appears. Each gets one back-link per reference. A footnote body may
    reference further footnotes, which are appended in turn.

    """
    marker = functools.partial(_footnote_marker, ctx)
    text = footnote_placeholder_re.sub(marker, text)
    footnotes = ctx.footnotes
    if not footnotes.ordered:
        return text

    parser = ctx.parser
    backlink_attr = _class_and_title(ctx, parser.fn_backlink_class,
                                     parser.fn_backlink_title)
    text += "\n\n<div class=\"footnotes\">\n"
    text += f"<hr{parser.empty_element_suffix}\n"
    text += "<ol>\n\n"
    number = 0
    while footnotes.ordered:
        note_id, body, ref_count = footnotes.pop()
        body = ctx.run_block_gamut(body + "\n\n")
        body = footnote_placeholder_re.sub(marker, body)

        number += 1
        attr = backlink_attr.replace("%%", str(number))
        note_id = ctx.encode_attribute(note_id)
        backlink = f'<a href="#fnref:{note_id}"{attr}>&#8617;</a>'
        for ref_number in range(2, ref_count + 1):
            backlink += (f' <a href="#fnref{ref_number}:{note_id}"{attr}>'
                         "&#8617;</a>")
        if body.endswith("</p>"):
            body = body[:-4] + f"&#160;{backlink}</p>"
        else:
            body += f"\n\n<p>{backlink}</p>"
        text += f'<li id="fn:{note_id}">\n{body}\n</li>\n\n'
    text += "</ol>\n</div>"
    return text
