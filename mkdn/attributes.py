"""
the `{#id .class key=value}` attribute annotation

    >>> attrs = parse_attributes("#intro .lead .wide data-x=1")
    >>> attrs.id, attrs.classes, attrs.pairs
    ('intro', ['lead', 'wide'], [('data-x', '1')])
    >>> attrs.serialize()
    ' id="intro" class="lead wide" data-x="1"'

"""

import regex

from .encoding import encode_attribute

__all__ = ["Attributes", "parse_attributes", "attr_catch_re",
           "attr_nocatch_re"]

# the braces are part of both expressions; the catching one names its group
attr_catch_re = r"\{(?P<attr>(?:[ ]*[\#.a-z][-_:a-zA-Z0-9=]+)+)[ ]*\}"
attr_nocatch_re = r"\{(?:[ ]*[\#.a-z][-_:a-zA-Z0-9=]+)+[ ]*\}"

element_re = regex.compile(r"[#.a-z][-_:a-zA-Z0-9=]+")


class Attributes:

    """an element id, its classes and any other key/value pairs"""

    def __init__(self, id=None, classes=None, pairs=None):
        self.id = id
        self.classes = list(classes or [])
        self.pairs = list(pairs or [])

    def __bool__(self):
        return bool(self.id or self.classes or self.pairs)

    def __repr__(self):
        return (f"Attributes(id={self.id!r}, classes={self.classes!r}, "
                f"pairs={self.pairs!r})")

    def serialize(self, no_markup=False):
        """
        return the attributes as a string ready to follow a tag name

        Key/value pairs are dropped when raw markup is disallowed.

        """
        attr = ""
        if self.id:
            attr += f' id="{encode_attribute(self.id)}"'
        if self.classes:
            attr += ' class="{}"'.format(" ".join(self.classes))
        if self.pairs and not no_markup:
            attr += " " + " ".join(f'{k}="{v}"' for k, v in self.pairs)
        return attr


def parse_attributes(text, default_id=None, classes=()):
    """
    return `Attributes` parsed from the inside of an annotation

    Only the first `#id` counts; `default_id` stands in when there is none.
    Given `classes` come before any found in `text`.

    """
    attrs = Attributes(classes=classes)
    for element in element_re.findall(text or ""):
        if element[0] == ".":
            attrs.classes.append(element[1:])
        elif element[0] == "#":
            if attrs.id is None:
                attrs.id = element[1:]
        elif element.find("=") > 0:
            key, _, value = element.partition("=")
            attrs.pairs.append((key, value))
    if not attrs.id:
        attrs.id = default_id
    return attrs
