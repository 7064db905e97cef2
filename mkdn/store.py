"""
protected spans

Rendered fragments are swapped out of the working text for short tokens so
that later passes can't reinterpret them. A token looks like
`B\\x1A12B`: a boundary character, the substitute control character, a
per-run id and the boundary character again.

    >>> spans = ProtectedSpans()
    >>> token = spans.protect("<hr>", BLOCK)
    >>> spans.unprotect(f"before {token} after")
    'before <hr> after'

"""

import regex

__all__ = ["ProtectedSpans", "GENERAL", "BLOCK", "CLEAN", "MARKER", "token_re",
           "after_token_re", "before_token_re", "is_block_token"]

MARKER = "\x1A"

GENERAL = "X"
BLOCK = "B"
CLEAN = "C"

token_re = regex.compile(r"(.)\x1A([0-9]+)\1")
# inline tokens are word boundaries to emphasis and abbreviations
after_token_re = r"(?<=\x1A[0-9]+X)"
before_token_re = r"(?=X\x1A)"
block_token_re = regex.compile(r"^B\x1A[0-9]+B|^C\x1A[0-9]+C$")


def is_block_token(text):
    """return True if `text` opens with a block token or is a clean token"""
    return bool(block_token_re.match(text))


class ProtectedSpans:

    """
    a write-once store of rendered fragments keyed by integer id

    Fragments are flattened on the way in: any token already inside a new
    fragment is resolved first so a single pass restores everything.

    """

    def __init__(self):
        self.fragments = {}
        self.counter = 0

    def __len__(self):
        return len(self.fragments)

    def protect(self, text, boundary=GENERAL):
        """return a fresh token standing in for `text`"""
        text = self.unprotect(text)
        self.counter += 1
        self.fragments[self.counter] = text
        return f"{boundary}{MARKER}{self.counter}{boundary}"

    def unprotect(self, text):
        """swap every token in `text` back for its fragment"""
        return token_re.sub(self._restore, text)

    def unprotect_all(self, text):
        """unprotect until no token is left"""
        while True:
            restored = self.unprotect(text)
            if restored == text:
                return restored
            text = restored

    def _restore(self, match):
        try:
            return self.fragments[int(match.group(2))]
        except KeyError:
            return match.group(0)
