"""
the parser and the state of a single run

    >>> parser = Parser(tab_width=4)
    >>> parser.transform("# Title {#x}")
    '<h1 id="x">Title</h1>\\n'

"""

import json
import logging
import os
import pathlib

import regex

from . import blocks, document, emphasis, spans  # noqa: F401 (stages)
from . import encoding
from .attributes import parse_attributes
from .blocks import form_paragraphs
from .gamut import Gamut
from .markup import hash_html_blocks
from .references import Abbreviations, Footnotes, LinkReferences
from .store import BLOCK, CLEAN, GENERAL, ProtectedSpans

__all__ = ["Parser", "Context", "render", "render_file"]

log = logging.getLogger(__name__)


class Context:

    """
    the mutable state of one transform

    Holds the protected spans, the link, footnote and abbreviation tables,
    the list nesting depth and whether a link is being rendered. Stages
    receive it as their first argument.

    """

    def __init__(self, parser):
        self.parser = parser
        self.store = ProtectedSpans()
        self.links = LinkReferences(parser.predef_urls, parser.predef_titles)
        self.footnotes = Footnotes(parser.fn_id_prefix)
        self.abbreviations = Abbreviations(parser.predef_abbr)
        self.list_level = 0
        self.in_anchor = False

    def protect(self, text, boundary=GENERAL):
        return self.store.protect(text, boundary)

    def protect_block(self, text):
        return self.store.protect(text, BLOCK)

    def protect_clean(self, text):
        return self.store.protect(text, CLEAN)

    def unprotect(self, text):
        return self.store.unprotect(text)

    def outdent(self, text):
        return encoding.outdent(text, self.parser.tab_width)

    def encode_attribute(self, text):
        return encoding.encode_attribute(text, self.parser.no_entities)

    def encode_url(self, url):
        """return the encoded `url` and its display text"""
        return encoding.encode_url_attribute(url, self.parser.url_filter_func,
                                             self.parser.no_entities)

    def attributes(self, attr, default_id=None, classes=()):
        """return serialized attributes for an annotation's inside"""
        if not attr and not default_id and not classes:
            return ""
        attrs = parse_attributes(attr, default_id, classes)
        return attrs.serialize(self.parser.no_markup)

    def run_block_gamut(self, text):
        """protect newly exposed raw markup then run the block gamut"""
        return self.run_basic_block_gamut(hash_html_blocks(self, text))

    def run_basic_block_gamut(self, text):
        text = self.parser.block_gamut.run(self, text)
        return form_paragraphs(self, text)

    def run_span_gamut(self, text):
        return self.parser.span_gamut.run(self, text)


class Parser:

    """
    a configured Markdown Extra to HTML transformer

    Options are given as keywords and override the class attributes below.
    Hooks are plain callables: `url_filter_func(url)` returns a url,
    `header_id_func(text)` returns an id (or None) for headers without an
    explicit one and `code_block_content_func(code, language)` returns the
    markup for fenced code in place of plain escaping.

    A parser keeps no state between runs and may be shared.

    """

    tab_width = 2
    no_markup = False
    no_entities = False
    empty_element_suffix = ">"
    predef_urls = {}
    predef_titles = {}
    predef_abbr = {}
    url_filter_func = None
    header_id_func = None
    code_block_content_func = None
    fn_id_prefix = ""
    fn_link_title = ""
    fn_backlink_title = ""
    fn_link_class = "footnote-ref"
    fn_backlink_class = "footnote-backref"
    table_align_class_tmpl = ""
    code_class_prefix = ""
    code_attr_on_pre = False
    enhanced_ordered_list = True
    nested_brackets_depth = 6
    nested_url_parenthesis_depth = 4

    options = ("tab_width", "no_markup", "no_entities",
               "empty_element_suffix", "predef_urls", "predef_titles",
               "predef_abbr", "url_filter_func", "header_id_func",
               "code_block_content_func", "fn_id_prefix", "fn_link_title",
               "fn_backlink_title", "fn_link_class", "fn_backlink_class",
               "table_align_class_tmpl", "code_class_prefix",
               "code_attr_on_pre", "enhanced_ordered_list",
               "nested_brackets_depth", "nested_url_parenthesis_depth")

    document_gamut = Gamut(do_fenced_code_blocks=5,
                           strip_footnotes=15,
                           strip_link_definitions=20,
                           strip_abbreviations=25,
                           run_basic_block_gamut=30,
                           append_footnotes=50)
    block_gamut = Gamut(do_fenced_code_blocks=5,
                        do_headers=10,
                        do_tables=15,
                        do_horizontal_rules=20,
                        do_lists=40,
                        do_definition_lists=45,
                        do_code_blocks=50,
                        do_block_quotes=60)
    span_gamut = Gamut(parse_span=-30,
                       do_footnotes=5,
                       do_images=10,
                       do_anchors=20,
                       do_auto_links=30,
                       encode_amps_and_angles=40,
                       do_italics_and_bold=50,
                       do_hard_breaks=60,
                       do_abbreviations=70)

    def __init__(self, **options):
        for name, value in options.items():
            if name not in self.options:
                raise TypeError(f"unknown option `{name}`")
            setattr(self, name, value)
        log.debug("parser created with %s", sorted(options))

    @classmethod
    def from_config(cls, path=None, **overrides):
        """
        return a parser configured from a JSON object of options

        The object is read from `path` or else the file named by the
        `MKDNCFG` environment variable. A missing or unreadable file leaves
        the defaults in place. Keyword `overrides` win over the file.

        """
        config = {}
        path = path or os.getenv("MKDNCFG")
        try:
            with pathlib.Path(path).open() as fp:
                config = json.load(fp)
        except (FileNotFoundError, TypeError):
            log.debug("no parser config at `%s`", path)
        except (OSError, ValueError) as err:
            log.warning("ignoring parser config at `%s`: %s", path, err)
        if not isinstance(config, dict):
            log.warning("ignoring parser config at `%s`: not an object", path)
            config = {}
        config.update(overrides)
        return cls(**config)

    def transform(self, text):
        """return the HTML rendering of dialect `text`"""
        ctx = Context(self)
        text = encoding.normalize(text, self.tab_width)
        text = hash_html_blocks(ctx, text)
        text = regex.sub(r"^[ ]+$", "", text, flags=regex.M)
        text = self.document_gamut.run(ctx, text)
        return ctx.store.unprotect_all(text).rstrip("\n") + "\n"

    parse = transform

    def transform_file(self, path):
        """return the rendering of the file at `path` or None if unreadable"""
        try:
            text = pathlib.Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as err:
            log.warning("can't read `%s`: %s", path, err)
            return None
        return self.transform(text)


def render(text, **options):
    """
    return HTML rendered from Markdown Extra `text`

        >>> render("*[HTML]: HyperText Markup Language\\n\\nHTML is fun")
        '<p><abbr title="HyperText Markup Language">HTML</abbr> is fun</p>\\n'

    """
    return Parser(**options).transform(text)


def render_file(path, **options):
    """return HTML rendered from the file at `path` or None if unreadable"""
    return Parser(**options).transform_file(path)
