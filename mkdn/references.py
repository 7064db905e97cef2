"""Link, footnote and abbreviation definitions collected during a run."""

import collections

import regex

from .store import MARKER, after_token_re, before_token_re

__all__ = ["Reference", "LinkReferences", "Footnotes", "Abbreviations"]

Reference = collections.namedtuple("Reference", "url title attributes")


class LinkReferences:

    """
    link definitions keyed by their normalized id

        >>> links = LinkReferences({"Home": "/"})
        >>> links.get("home")
        Reference(url='/', title=None, attributes=None)

    """

    def __init__(self, urls=None, titles=None):
        self.references = {}
        titles = {self.normalize(k): v for k, v in (titles or {}).items()}
        for link_id, url in (urls or {}).items():
            link_id = self.normalize(link_id)
            self.references[link_id] = Reference(url, titles.get(link_id),
                                                 None)

    def __contains__(self, link_id):
        return self.normalize(link_id) in self.references

    def __len__(self):
        return len(self.references)

    @staticmethod
    def normalize(link_id):
        """lower-case and turn embedded newlines into spaces"""
        return regex.sub(r"[ ]?\n", " ", link_id.lower())

    def define(self, link_id, url, title=None, attributes=None):
        self.references[self.normalize(link_id)] = Reference(url, title,
                                                             attributes)

    def get(self, link_id):
        return self.references.get(self.normalize(link_id))


class Footnotes:

    """
    footnote bodies and the order in which they were first referenced

    Numbers are handed out at first reference, not at definition, so the
    rendered list follows reading order.

    """

    def __init__(self, prefix=""):
        self.prefix = prefix
        self.definitions = {}
        self.ordered = collections.OrderedDict()
        self.ref_counts = {}
        self.numbers = {}
        self.counter = 1

    def define(self, note_id, body):
        self.definitions[self.prefix + note_id] = body

    def reference(self, note_id):
        """
        return the prefixed id, number and reference count for a new
        reference to `note_id`, or None if it was never defined

        """
        note_id = self.prefix + note_id
        if note_id not in self.definitions:
            return None
        if note_id not in self.numbers:
            self.ordered[note_id] = self.definitions[note_id]
            self.ref_counts[note_id] = 1
            self.numbers[note_id] = self.counter
            self.counter += 1
        else:
            self.ref_counts[note_id] += 1
        return note_id, self.numbers[note_id], self.ref_counts[note_id]

    def pop(self):
        """return the next referenced footnote's id, body and ref count"""
        note_id, body = self.ordered.popitem(last=False)
        ref_count = self.ref_counts.pop(note_id)
        del self.definitions[note_id]
        return note_id, body, ref_count


class Abbreviations:

    """abbreviation descriptions and a pattern finding their terms"""

    def __init__(self, predefined=None):
        self.descriptions = {}
        self._pattern = None
        for term, description in (predefined or {}).items():
            self.define(term, description)

    def __bool__(self):
        return bool(self.descriptions)

    def define(self, term, description):
        self.descriptions[term] = description.strip()
        self._pattern = None

    @property
    def pattern(self):
        """
        the alternation of all known terms bounded by non-word characters

        Terms are never found inside a token but may touch one.

        """
        if self._pattern is None:
            terms = sorted(self.descriptions, key=len, reverse=True)
            alternation = "|".join(regex.escape(term) for term in terms)
            self._pattern = regex.compile(
                rf"(?:(?<![\w{MARKER}])|{after_token_re})"
                rf"(?:{alternation})"
                rf"(?:(?![\w{MARKER}])|{before_token_re})")
        return self._pattern
