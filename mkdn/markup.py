"""
raw markup embedded in dialect text

Two scanners call each other. `scan_as_dialect` walks dialect text looking
for block-level tags, comments, code fences, indented code and code spans.
A block tag hands over to `scan_as_markup`, which walks raw markup until the
tag is balanced and protects what it saw. A tag carrying `markdown="1"`,
`markdown="block"` or `markdown="span"` hands its contents back to
`scan_as_dialect` so they are rendered as dialect text.

    <div markdown="1">
    *rendered*
    </div>

Both return a `(processed, remainder)` pair.

"""

import functools
import logging

import regex

from .attributes import attr_nocatch_re

__all__ = ["hash_html_blocks", "scan_as_dialect", "scan_as_markup",
           "block_tags_re", "context_block_tags_re", "contain_span_tags_re",
           "clean_tags_re", "auto_close_tags_re"]

log = logging.getLogger(__name__)

# always block level
block_tags_re = ("p|div|h[1-6]|blockquote|pre|table|dl|ol|ul|address|form|"
                 "fieldset|iframe|hr|legend|article|section|nav|aside|hgroup|"
                 "header|footer|figcaption|figure")
# block level only when alone on their line
context_block_tags_re = ("script|noscript|style|ins|del|iframe|object|source|"
                         "track|param|math|svg|canvas|audio|video")
# `markdown="1"` means span mode inside these
contain_span_tags_re = "p|h[1-6]|li|dd|dt|td|th|legend|address"
# contents never touched
clean_tags_re = "script|style|math|svg"
auto_close_tags_re = "hr|img|param|source|track"

block_tag_open_re = regex.compile(rf"<(?:{block_tags_re})\b")
context_tag_open_re = regex.compile(rf"<(?:{context_block_tags_re})\b")
clean_tag_open_re = regex.compile(rf"<(?:{clean_tags_re})\b")
span_tag_open_re = regex.compile(rf"<(?:{contain_span_tags_re})\b")
auto_close_tag_re = regex.compile(rf"</?(?:{auto_close_tags_re})\b")
tag_name_re = regex.compile(r"<([\w:$]*)\b")

newline_before_re = regex.compile(r"(?:\A\n?|\n\n)[ ]*\Z")
newline_after_re = regex.compile(r"""
    (?>[ ]*<!--.*?-->)?         # optional comment
    [ ]*\n
""", regex.X | regex.S)
tag_indent_re = regex.compile(r"(?:^|\n)( *?)(?! ).*?(?=\n?\Z)")

markdown_attr_re = regex.compile(r"""
    \s*
    markdown
    \s*=\s*
    (?>
      (?P<quote>["'])
      (?P<value>.*?)
      (?P=quote)
    |
      (?P<bare>[^\s>]*)
    )
""", regex.X | regex.S)
markup_tag_re = regex.compile(r"""
    (?P<tag>
      </?
        [\w:$]+
        (?:
          (?=[\s"'/a-zA-Z0-9])      # allowed after the tag name
          (?>
            ".*?"                   # quoted values may hold `>`
          | '.*?'
          | .+?
          )*?
        )?
      >
    |
      <!--.*?-->
    |
      <\?.*?\?> | <%.*?%>
    |
      <!\[CDATA\[.*?\]\]>
    )
""", regex.X | regex.S)


@functools.lru_cache()
def _dialect_tag_re(enclosing, span, indent, tab_width):
    names = [block_tags_re, context_block_tags_re, clean_tags_re]
    if enclosing:
        names.append(rf"(?!\s){enclosing}")
    names = "|".join(names)
    code = "" if span else rf"""
        |
          (?:^[ ]*\n|^|\n[ ]*\n)            # indented code block
          [ ]{{{indent + tab_width}}}[^\n]*\n
          (?>
            (?:[ ]{{{indent + tab_width}}}[^\n]*|[ ]*)\n
          )*
        |
          (?<=^|\n)                         # fenced code block marker
          [ ]{{0,{indent + 3}}}(?:~{{3,}}|`{{3,}})
          [ ]*
          (?:\.?[-_:a-zA-Z0-9]+)?
          [ ]*
          (?:{attr_nocatch_re})?
          [ ]*
          (?=\n)
    """
    return regex.compile(rf"""
        (?P<tag>
          </?
            (?>{names})
            (?:
              (?=[\s"'/a-zA-Z0-9])
              (?>
                ".*?"
              | '.*?'
              | .+?
              )*?
            )?
          >
        |
          <!--.*?-->
        |
          <\?.*?\?> | <%.*?%>
        |
          <!\[CDATA\[.*?\]\]>
        {code}
        |
          `+                                # code span marker
        )
    """, regex.X | regex.S)


@functools.lru_cache()
def _fence_marker_re(indent):
    return regex.compile(rf"""
        \n?
        (?P<indent>[ ]{{0,{indent + 3}}})
        (?P<fence>~{{3,}}|`{{3,}})
        [ ]*
        (?:\.?[-_:a-zA-Z0-9]+)?
        [ ]*
        (?:{attr_nocatch_re})?
        [ ]*
        \n?\Z
    """, regex.X)


def hash_html_blocks(ctx, text):
    """protect every block of raw markup in `text`"""
    if ctx.parser.no_markup:
        return text
    text, _ = scan_as_dialect(ctx, text)
    return text


def scan_as_dialect(ctx, text, indent=0, enclosing="", span=False):
    """
    protect raw markup found in dialect `text`

    `indent` is the indentation of the enclosing tag; code blocks must be
    indented past it. With an `enclosing` tag name the scan stops at the
    first unmatched closing tag of that name and returns it as part of the
    remainder. In `span` mode both sides of every newline get an empty
    token so no line of the contents can start a block or a definition.

    """
    if not text:
        return "", ""
    tag_re = _dialect_tag_re(enclosing, span, indent, ctx.parser.tab_width)
    depth = 0
    parsed = ""
    while True:
        match = tag_re.search(text)
        before = text if match is None else text[:match.start()]
        if span:
            void = ctx.protect("")
            before = void + before.replace("\n", f"{void}\n{void}") + void
        parsed += before
        if match is None:
            text = ""
            break
        tag = match.group("tag")
        text = text[match.end():]

        fence = _fence_marker_re(indent).match(tag)
        if fence:
            fence_indent = len(fence.group("indent"))
            closing = regex.match(rf"(?>.*\n)*?[ ]{{{fence_indent},}}"
                                  rf"{regex.escape(fence.group('fence'))}"
                                  r"[ ]*(?:\n|\Z)", text)
            if closing:
                parsed += tag + closing.group(0)
                text = text[closing.end():]
            else:
                parsed += tag
        elif tag[0] in "\n ":
            # indented code passes through for `do_code_blocks`
            parsed += tag
        elif tag[0] == "`":
            closing = regex.match(r"(?>.+?|\n(?!\n))*?(?<!`)"
                                  + regex.escape(tag) + r"(?!`)", text)
            if closing:
                parsed += tag + closing.group(0)
                text = text[closing.end():]
            else:
                parsed += tag
        elif (block_tag_open_re.match(tag) or
              (context_tag_open_re.match(tag) and
               newline_before_re.search(parsed) and
               newline_after_re.match(text))):
            block_text, text = scan_as_markup(ctx, tag + text,
                                              ctx.protect_block, True)
            parsed += f"\n\n{block_text}\n\n"
        elif clean_tag_open_re.match(tag) or tag[1] in "!?":
            block_text, text = scan_as_markup(ctx, tag + text,
                                              ctx.protect_clean, False)
            parsed += block_text
        elif enclosing and regex.match(rf"</?(?:{enclosing})\b", tag):
            if tag[1] == "/":
                depth -= 1
            elif tag[-2] != "/":
                depth += 1
            if depth < 0:
                text = tag + text
                break
            parsed += tag
        else:
            parsed += tag
    return parsed, text


def scan_as_markup(ctx, text, protect, allow_dialect_attr):
    """
    protect the raw markup element opening `text`

    The element ends when its tag name is balanced. Everything seen goes
    through `protect` except the contents of tags that opt back into dialect
    text, which are scanned by `scan_as_dialect`. Unbalanced markup running
    to the end of `text` gives up after one character so the caller moves on.

    """
    if not text:
        return "", ""
    original = text
    depth = 0
    block_text = ""
    parsed = ""
    base = tag_name_re.match(text)
    base_tag_re = None
    if base:
        base_tag_re = regex.compile(rf"</?{regex.escape(base.group(1))}\b")

    while True:
        match = markup_tag_re.search(text)
        if match is None:
            log.debug("unbalanced markup at %r", original[:40])
            return original[:1], original[1:]
        block_text += text[:match.start()]
        tag = match.group("tag")
        text = text[match.end():]

        if auto_close_tag_re.match(tag) or tag[1] in "!?":
            block_text += tag
        else:
            if base_tag_re and base_tag_re.match(tag):
                if tag[1] == "/":
                    depth -= 1
                elif tag[-2] != "/":
                    depth += 1
            name = tag_name_re.match(tag)
            attr = None
            if allow_dialect_attr and name:
                attr = markdown_attr_re.search(tag)
            mode = None
            if attr:
                mode = attr.group("value") if attr.group("quote") \
                    else attr.group("bare")
            if mode in ("1", "block", "span"):
                tag = markdown_attr_re.sub("", tag)
                span_mode = mode == "span" or (mode != "block" and
                                               bool(span_tag_open_re.match(tag)))
                indent_match = tag_indent_re.search(block_text)
                indent = len(indent_match.group(1)) if indent_match else 0

                block_text += tag
                parsed += protect(block_text)

                block_text, text = scan_as_dialect(
                    ctx, text, indent, regex.escape(name.group(1)), span_mode)
                if indent > 0:
                    block_text = regex.sub(rf"^[ ]{{1,{indent}}}", "",
                                           block_text, flags=regex.M)
                if span_mode:
                    parsed += block_text
                else:
                    parsed += f"\n\n{block_text}\n\n"
                block_text = ""
            else:
                block_text += tag
        if depth <= 0:
            break

    parsed += protect(block_text)
    return parsed, text
