"""
ready-made hooks

    >>> from mkdn import render
    >>> render("## Surfing with @Alice & @Bob!", header_id_func=textslug)
    '<h2 id="surfing_with_alice_and_bob">Surfing with @Alice &amp; @Bob!</h2>\\n'

"""

import pygments
import pygments.formatters
import pygments.lexers
import pygments.util
import regex
import unidecode

from .encoding import escape_code

__all__ = ["textslug", "highlight"]

_id_breaks = regex.compile(r'[\s!"#$%&\'()*+,./:;<=>?@\[\\\]^_`{|}~-]+')


def textslug(title, delim="_", lower=True):
    """
    return an id-friendly slug for header `title`

    Words are transliterated to ASCII and joined by `delim`. Punctuation
    never reaches the id and " & " reads as "and". Suitable as a
    `header_id_func`; a title with no words gives no id.

        >>> textslug("Surfing with @Alice & @Bob!")
        'surfing_with_alice_and_bob'
        >>> textslug("Ça va? Oui: 2 + 2", delim="-")
        'ca-va-oui-2-2'

    """
    title = unidecode.unidecode(title.replace(" & ", " and "))
    if lower:
        title = title.lower()
    return delim.join(word for word in _id_breaks.split(title) if word)


def highlight(code, language=""):
    """
    return `code` as syntax highlighted markup

    Suitable as a `code_block_content_func`. Unknown or missing languages
    fall back to plain escaping.

    """
    if not language:
        return escape_code(code)
    try:
        lexer = pygments.lexers.get_lexer_by_name(language)
    except pygments.util.ClassNotFound:
        return escape_code(code)
    formatter = pygments.formatters.HtmlFormatter(nowrap=True)
    return pygments.highlight(code, lexer, formatter)
