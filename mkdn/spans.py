"""
span-level stages

Everything here works on the text of one block: escapes, code spans and raw
inline tags are protected first, then footnote markers, images, links and
autolinks are resolved before the remaining text is entity-encoded.

"""

import functools

import regex

from . import encoding
from .attributes import attr_catch_re
from .gamut import stage

__all__ = ["parse_span", "do_footnotes", "do_images", "do_anchors",
           "do_auto_links", "encode_amps_and_angles", "do_hard_breaks",
           "do_abbreviations", "footnote_placeholder_re"]

escape_chars_re = r"[\\`*_{}\[\]()>\#+\-.!:|]"
footnote_placeholder_re = regex.compile(r"F\x1Afn:(.*?)\x1A:")


@functools.lru_cache()
def nested_brackets_re(depth):
    return (r"(?>[^\[\]]+|\[" * depth) + (r"\])*" * depth)


@functools.lru_cache()
def nested_url_parenthesis_re(depth):
    return (r"(?>[^()\s]+|\(" * depth) + (r"(?>\)))*" * depth)


@functools.lru_cache()
def _span_re(no_markup):
    markup = "" if no_markup else r"""
        | <!--.*?-->                        # comment
        | <\?.*?\?> | <%.*?%>               # processing instruction
        | <(?!(?:https?|ftp|dict|tel):)     # leave autolinks alone
          [/!$]?[-a-zA-Z0-9:_]+             # regular tags
          (?>
            \s
            (?>[^"'>]+|"[^"]*"|'[^']*')*
          )?
          >
    """
    return regex.compile(r"""
        (?P<token>
            \\""" + escape_chars_re + r"""
        | (?<![`\\])`+                      # code span marker
        """ + markup + r"""
        )
    """, regex.X | regex.S)


@stage
def parse_span(ctx, text):
    """
    protect escaped characters, code spans and raw inline markup

    Raw tags are only recognized when markup is allowed.

    """
    span_re = _span_re(ctx.parser.no_markup)
    output = []
    while True:
        match = span_re.search(text)
        if match is None:
            output.append(text)
            break
        output.append(text[:match.start()])
        replacement, text = _handle_span_token(ctx, match.group("token"),
                                               text[match.end():])
        output.append(replacement)
    return "".join(output)


def _handle_span_token(ctx, token, remainder):
    if token[0] == "\\":
        return ctx.protect(f"&#{ord(token[1])};"), remainder
    if token[0] == "`":
        closing = regex.match(r"(.*?[^`])" + regex.escape(token) + r"(?!`)",
                              remainder, regex.S)
        if closing is None:
            return token, remainder
        code = encoding.escape_code(closing.group(1).strip())
        return (ctx.protect(f"<code>{code}</code>"),
                remainder[closing.end():])
    return ctx.protect(token), remainder


@stage
def do_footnotes(ctx, text):
    """swap `[^id]` markers for placeholders resolved once the run ends"""
    if ctx.in_anchor:
        return text
    return regex.sub(r"\[\^(.+?)\]", lambda m: f"F\x1Afn:{m.group(1)}\x1A:",
                     text)


@functools.lru_cache()
def _reference_re(bang, depth):
    return regex.compile(rf"""
        (?P<whole>
          {bang}\[
            (?P<text>{nested_brackets_re(depth)})
          \]
          [ ]?                  # one optional space
          (?:\n[ ]*)?           # one optional newline followed by spaces
          \[
            (?P<id>.*?)
          \]
        )
    """, regex.X | regex.S)


@functools.lru_cache()
def _inline_re(bang, depth, url_depth):
    angled = r"<(?P<angled>\S*)>" if bang else r"<(?P<angled>.+?)>"
    spacing = r"\s?" if bang else ""
    return regex.compile(rf"""
        (?P<whole>
          {bang}\[
            (?P<text>{nested_brackets_re(depth)})
          \]
          {spacing}
          \(
            [ \n]*
            (?:
              {angled}
            |
              (?P<url>{nested_url_parenthesis_re(url_depth)})
            )
            [ \n]*
            (?:
              (?P<quote>['"])
              (?P<title>.*?)
              (?P=quote)
              [ \n]*
            )?
          \)
          (?:[ ]?{attr_catch_re})?
        )
    """, regex.X | regex.S)


shortcut_re = regex.compile(r"(?P<whole>\[(?P<text>[^\[\]]+)\])", regex.S)


def _title_attribute(ctx, title):
    if title is None:
        return ""
    return f' title="{ctx.encode_attribute(title)}"'


@stage
def do_images(ctx, text):
    """turn `![alt][id]` and `![alt](src "title")` into `<img>` elements"""
    parser = ctx.parser
    suffix = parser.empty_element_suffix

    def reference(match):
        link_id = match.group("id") or match.group("text")
        ref = ctx.links.get(link_id)
        if ref is None:
            return match.group("whole")
        url, _ = ctx.encode_url(ref.url)
        alt = ctx.encode_attribute(match.group("text"))
        result = f'<img src="{url}" alt="{alt}"'
        result += _title_attribute(ctx, ref.title)
        result += ref.attributes or ""
        return ctx.protect(result + suffix)

    def inline(match):
        url, _ = ctx.encode_url(match.group("angled") or
                                match.group("url") or "")
        alt = ctx.encode_attribute(match.group("text"))
        result = f'<img src="{url}" alt="{alt}"'
        result += _title_attribute(ctx, match.group("title"))
        result += ctx.attributes(match.group("attr"))
        return ctx.protect(result + suffix)

    depth = parser.nested_brackets_depth
    text = _reference_re("!", depth).sub(reference, text)
    text = _inline_re("!", depth,
                      parser.nested_url_parenthesis_depth).sub(inline, text)
    return text


@stage
def do_anchors(ctx, text):
    """
    turn link syntax into `<a>` elements

    Reference links are resolved first, then inline links, then bare
    `[text]` shortcuts. Unknown references are left as they were written.
    Link text is itself span-rendered but never holds another link.

    """
    if ctx.in_anchor:
        return text
    parser = ctx.parser

    def reference(match):
        link_text = match.group("text")
        link_id = match.groupdict().get("id") or link_text
        ref = ctx.links.get(link_id)
        if ref is None:
            return match.group("whole")
        url, _ = ctx.encode_url(ref.url)
        result = f'<a href="{url}"'
        result += _title_attribute(ctx, ref.title)
        result += ref.attributes or ""
        result += f">{ctx.run_span_gamut(link_text)}</a>"
        return ctx.protect(result)

    def inline(match):
        url = match.group("angled") or match.group("url") or ""
        # `<url with spaces>` was protected as a tag by `parse_span`
        unprotected = ctx.unprotect(url)
        if unprotected != url:
            url = regex.sub(r"^<(.*)>$", r"\1", unprotected, flags=regex.S)
        url, _ = ctx.encode_url(url)
        result = f'<a href="{url}"'
        result += _title_attribute(ctx, match.group("title"))
        result += ctx.attributes(match.group("attr"))
        result += f">{ctx.run_span_gamut(match.group('text'))}</a>"
        return ctx.protect(result)

    depth = parser.nested_brackets_depth
    ctx.in_anchor = True
    try:
        text = _reference_re("", depth).sub(reference, text)
        text = _inline_re("", depth,
                          parser.nested_url_parenthesis_depth).sub(inline,
                                                                   text)
        text = shortcut_re.sub(reference, text)
    finally:
        ctx.in_anchor = False
    return text


url_autolink_re = regex.compile(r"<((?:https?|ftp|dict|tel):[^'\">\s]+)>",
                                regex.I)
email_autolink_re = regex.compile(r"""
    <
    (?:mailto:)?
    (
      (?:
        [-!\#$%&'*+/=?^_`.{|}~\w]+
      |
        ".*?"
      )
      @
      (?:
        [-a-z0-9\x80-\uffff]+(?:\.[-a-z0-9\x80-\uffff]+)*\.[a-z]+
      |
        \[[\d.a-fA-F:]+\]               # IPv4 & IPv6
      )
    )
    >
""", regex.X | regex.I)


@stage
def do_auto_links(ctx, text):
    """turn `<http://...>` and `<user@host>` into links"""
    def url_link(match):
        url, display = ctx.encode_url(match.group(1))
        return ctx.protect(f'<a href="{url}">{display}</a>')

    def email_link(match):
        url, display = ctx.encode_url(f"mailto:{match.group(1)}")
        return ctx.protect(f'<a href="{url}">{display}</a>')

    text = url_autolink_re.sub(url_link, text)
    return email_autolink_re.sub(email_link, text)


@stage
def encode_amps_and_angles(ctx, text):
    return encoding.encode_amps_and_angles(text, ctx.parser.no_entities)


@stage
def do_hard_breaks(ctx, text):
    """two or more trailing spaces end a line with `<br>`"""
    suffix = ctx.parser.empty_element_suffix
    return regex.sub(r" {2,}\n", lambda m: ctx.protect(f"<br{suffix}\n"),
                     text)


@stage
def do_abbreviations(ctx, text):
    """wrap known abbreviations in `<abbr>`"""
    abbreviations = ctx.abbreviations
    if not abbreviations:
        return text

    def abbreviate(match):
        term = match.group(0)
        description = abbreviations.descriptions.get(term)
        if description is None:
            return term
        if not description:
            return ctx.protect(f"<abbr>{term}</abbr>")
        title = ctx.encode_attribute(description)
        return ctx.protect(f'<abbr title="{title}">{term}</abbr>')

    return abbreviations.pattern.sub(abbreviate, text)
