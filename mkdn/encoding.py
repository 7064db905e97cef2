"""Character escaping, entity encoding and whitespace normalization."""

import html
import zlib

import regex

__all__ = ["normalize", "detab", "outdent", "escape_code",
           "encode_amps_and_angles", "encode_attribute",
           "encode_url_attribute", "obfuscate"]

bom_re = regex.compile(r"^(?:\ufeff|\xef\xbb\xbf)")
line_ending_re = regex.compile(r"\r\n?")
ampersand_re = regex.compile(r"&(?!#?[xX]?(?:[0-9a-fA-F]+|\w+);)")
mailto_re = regex.compile(r"^mailto:", regex.I)
tel_re = regex.compile(r"^tel:", regex.I)


def normalize(text, tab_width):
    """
    return `text` ready for the gamuts

    Strips a leading byte order mark and every substitute character (they
    delimit protected span tokens), unifies line endings, guarantees two
    trailing newlines and expands tabs.

    """
    text = bom_re.sub("", text).replace("\x1A", "")
    text = line_ending_re.sub("\n", text)
    text += "\n\n"
    return detab(text, tab_width)


def detab(text, tab_width):
    """expand tabs to the next multiple of `tab_width` on each line"""
    if "\t" not in text:
        return text
    return text.expandtabs(tab_width)


def outdent(text, tab_width):
    """remove one level of line-leading indentation"""
    return regex.sub(r"^(\t|[ ]{1,%d})" % tab_width, "", text,
                     flags=regex.M)


def escape_code(code):
    """escape `&`, `<` and `>` leaving quotes alone"""
    return html.escape(code, quote=False)


def encode_amps_and_angles(text, no_entities=False):
    """
    encode ampersands, left angle brackets and double quotes

    Valid named and numeric entities pass through unless `no_entities`.

        >>> encode_amps_and_angles('AT&T &copy; <b> "q"')
        'AT&amp;T &copy; &lt;b> &quot;q&quot;'

    """
    if no_entities:
        text = text.replace("&", "&amp;")
    else:
        text = ampersand_re.sub("&amp;", text)
    return text.replace("<", "&lt;").replace('"', "&quot;")


def encode_attribute(text, no_entities=False):
    """encode `text` for a double-quoted attribute value"""
    return encode_amps_and_angles(text, no_entities)


def encode_url_attribute(url, url_filter=None, no_entities=False):
    """
    return an encoded `url` and the text to display for it

    Applies `url_filter` first. `mailto:` addresses are obfuscated and shown
    without their scheme, as are `tel:` numbers.

    """
    if url_filter:
        url = url_filter(url)
    if mailto_re.match(url):
        return obfuscate(url, head_length=7)
    url = encode_attribute(url, no_entities)
    if tel_re.match(url):
        return url, url[4:]
    return url, url


def obfuscate(text, head_length=0):
    """
    return `text` with most ASCII characters as decimal or hex entities

    The choice per character is deterministic (seeded from the CRC of the
    text). `@` and attribute-breaking characters are always encoded. The
    second value is the same encoding less the first `head_length` chars.

    """
    if not text:
        return "", ""
    seed = int(abs(zlib.crc32(text.encode("utf-8")) / len(text)))
    chars = []
    for position, char in enumerate(text):
        ordinal = ord(char)
        if ordinal < 128:
            r = (seed * (1 + position)) % 100
            if r > 90 and char not in '@"&>':
                pass
            elif r < 45:
                char = f"&#x{ordinal:x};"
            else:
                char = f"&#{ordinal};"
        chars.append(char)
    encoded = "".join(chars)
    tail = "".join(chars[head_length:]) if head_length else encoded
    return encoded, tail
