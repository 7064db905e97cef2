"""
emphasis and strong emphasis

A single left-to-right scan over one span. Delimiter runs are found with a
pattern chosen by the currently open flavors (`*` or `_`) so that a closer
only matches the flavor that opened it. Pending openers live on a stack
with the text gathered since each one; closing a frame wraps its text and
protects the result.

    >>> from mkdn import render
    >>> render("*a *b* c*")
    '<p><em>a <em>b</em> c</em></p>\\n'
    >>> render("***x***")
    '<p><strong><em>x</em></strong></p>\\n'

"""

import functools

import regex

from .gamut import stage
from .store import after_token_re, before_token_re

__all__ = ["do_italics_and_bold"]

_word_start = rf"(?:(?<![a-zA-Z0-9_])|{after_token_re})"
_word_end = rf"(?:(?![a-zA-Z0-9_])|{before_token_re})"

em_relist = {
    "": rf"(?:(?<!\*)\*(?!\*)|{_word_start}_(?!_))(?![.,:;]?\s)",
    "*": r"(?<![\s*])\*(?!\*)",
    "_": rf"(?<![\s_])_{_word_end}",
}
strong_relist = {
    "": rf"(?:(?<!\*)\*\*(?!\*)|{_word_start}__(?!_))(?![.,:;]?\s)",
    "**": r"(?<![\s*])\*\*(?!\*)",
    "__": rf"(?<![\s_])__{_word_end}",
}
em_strong_relist = {
    "": rf"(?:(?<!\*)\*\*\*(?!\*)|{_word_start}___(?!_))(?![.,:;]?\s)",
    "***": r"(?<![\s*])\*\*\*(?!\*)",
    "___": rf"(?<![\s_])___{_word_end}",
}


def _nested_opener_re(run):
    char = regex.escape(run[0])
    return rf"(?<![^\s]){regex.escape(run)}(?![\s{char}])"


@functools.lru_cache()
def _token_re(em, strong, nested):
    """
    return the delimiter pattern for the given open flavors

    When `nested` an already open flavor may also be reopened by a run that
    starts a word after whitespace; such runs match the `open` group.

    """
    relist = []
    if em + strong in em_strong_relist:
        relist.append(em_strong_relist[em + strong])
    relist.append(em_relist[em])
    relist.append(strong_relist[strong])
    openers = []
    if nested:
        if em:
            openers.append(_nested_opener_re(em))
        if strong:
            openers.append(_nested_opener_re(strong))
    if openers:
        relist.append("(?P<open>{})".format("|".join(openers)))
    return regex.compile("|".join(relist))


def _open_flavors(tokens):
    em = strong = ""
    for token in tokens:
        if len(token) == 1:
            em = token
        elif len(token) == 2:
            strong = token
        elif len(token) == 3:
            em, strong = token[0], token[:2]
    return em, strong


@stage
def do_italics_and_bold(ctx, text):
    """wrap balanced `*` and `_` runs in `<em>` and `<strong>`"""
    tokens = [""]
    texts = [""]
    em = strong = ""
    tree_char_em = False
    pos = 0

    def wrap(tag, span):
        return ctx.protect(f"<{tag}>{ctx.run_span_gamut(span)}</{tag}>")

    def fold():
        token = tokens.pop()
        span = texts.pop()
        texts[-1] += token + span

    while True:
        match = _token_re(em, strong, not tree_char_em).search(text, pos)
        if match is None:
            texts[-1] += text[pos:]
            while tokens[-1]:
                fold()
            break
        texts[-1] += text[pos:match.start()]
        pos = match.end()
        token = match.group(0)
        token_len = len(token)

        if match.groupdict().get("open"):
            tokens.append(token)
            texts.append("")
        elif tree_char_em:
            if token_len == 3:
                tokens.pop()
                span = ctx.run_span_gamut(texts.pop())
                texts[-1] += ctx.protect(f"<strong><em>{span}</em></strong>")
            else:
                # the rest of the three-char run stays open
                tokens[-1] = token[0] * (3 - token_len)
                tag = "strong" if token_len == 2 else "em"
                texts[-1] = wrap(tag, texts[-1])
            tree_char_em = False
        elif token_len == 3:
            if em:
                for _ in range(2):
                    if len(tokens) == 1:
                        break
                    opener = tokens.pop()
                    tag = "strong" if len(opener) == 2 else "em"
                    span = texts.pop()
                    texts[-1] += wrap(tag, span)
            else:
                tokens.append(token)
                texts.append("")
                tree_char_em = True
        elif token_len == 2:
            if strong:
                while len(tokens) > 1 and len(tokens[-1]) == 1:
                    fold()
                if len(tokens) > 1:
                    tokens.pop()
                    span = texts.pop()
                    texts[-1] += wrap("strong", span)
            else:
                tokens.append(token)
                texts.append("")
        elif em:
            if len(tokens[-1]) == 1:
                tokens.pop()
                span = texts.pop()
                texts[-1] += wrap("em", span)
            else:
                texts[-1] += token
        else:
            tokens.append(token)
            texts.append("")
        em, strong = _open_flavors(tokens)
    return texts[0]
