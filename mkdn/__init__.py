"""
render Markdown Extra plaintext to HTML

Plaintext to HTML that strives to use concise, human-readable textual anno-
tations: headers, lists, quotes, code, links and emphasis from the classic
dialect plus tables, footnotes, definition lists, fenced code, abbreviations
and `{#id .class}` attribute annotations.

Raw HTML passes through untouched unless disallowed, and a block of raw
HTML may opt back into rendering with a `markdown="1"` attribute.

    >>> render("foo *bar*")
    '<p>foo <em>bar</em></p>\\n'

>   The idea was to make writing simple web pages ... as easy as writing
>   an email, by allowing you to use much the same syntax and converting
>   it automatically into HTML ...

--- Aaron Swartz, [Markdown][1] -- March 19, 2004

[1]: http://www.aaronsw.com/weblog/001189

"""

# TODO smart quotes, dashes, ellipses
# TODO table of contents

from .hooks import highlight, textslug
from .parse import Context, Parser, render, render_file

__all__ = ["render", "render_file", "Parser", "Context", "textslug",
           "highlight"]
