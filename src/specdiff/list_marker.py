# -*- coding: utf-8 -*-
"""
Marcadores de listas ordenadas.

While creating a diff, list items can be inserted or removed, which shifts
the numbering a renderer would compute on its own.  Instead of relying on
the renderer's list markers, the marker text is written into each item
before diffing, so both sides keep their original numbering.

Formats follow the usual nested list styles: decimal, then lower-alpha,
then lower-roman, repeating every three levels.
"""
from genshi.core import TEXT

from .config import DiffConfig
from .utils import split_siblings, is_element, chunk_localname

_ALPHABET = u'abcdefghijklmnopqrstuvwxyz'
_ROMAN_ONES = u'ixcm'
_ROMAN_FIVES = u'vld'


def decimal_to_text(ordinal):
    return u'%d' % ordinal


def roman_to_text(ordinal, achars=_ROMAN_ONES, bchars=_ROMAN_FIVES):
    """
    Roman numeral built digit by digit: each decimal place has a "one"
    symbol (achars) and a "five" symbol (bchars).  Only 1..3999 can be
    written this way; other values fall back to decimal.

    >>> roman_to_text(1994)
    'mcmxciv'
    """
    if ordinal < 1 or ordinal > 3999:
        return decimal_to_text(ordinal)
    digits = decimal_to_text(ordinal)
    roman_pos = len(digits)
    result = []
    for dp in digits:
        roman_pos -= 1
        d = int(dp)
        if 1 <= d <= 3:
            result.append(achars[roman_pos] * d)
        elif d == 4:
            result.append(achars[roman_pos] + bchars[roman_pos])
        elif 5 <= d <= 8:
            result.append(bchars[roman_pos] + achars[roman_pos] * (d - 5))
        elif d == 9:
            result.append(achars[roman_pos] + achars[roman_pos + 1])
    return u''.join(result)


def char_list_to_text(ordinal, chars=_ALPHABET):
    """Bijective base-N numbering: a..z, aa, ab, ..."""
    if ordinal < 1:
        return decimal_to_text(ordinal)
    base = len(chars)
    buf = []
    while True:
        ordinal -= 1
        buf.append(chars[ordinal % base])
        ordinal //= base
        if ordinal <= 0:
            break
    return u''.join(reversed(buf))


def list_marker(index, depth):
    """
    Marker text for the zero-based `index`-th item of an ordered list with
    `depth` ordered-list ancestors (the list itself included).

    >>> list_marker(0, 1), list_marker(26, 2), list_marker(8, 3)
    ('1', 'aa', 'ix')
    """
    ordinal = index + 1
    if depth <= 0:
        return decimal_to_text(ordinal)
    level = depth % 3
    if level == 1:
        return decimal_to_text(ordinal)
    if level == 2:
        return char_list_to_text(ordinal)
    return roman_to_text(ordinal)


def textify(events, config=None, depth=0):
    """
    Return a copy of `events` where every <li> directly under an <ol> starts
    with its marker text (e.g. "b. ").  Recomputed on every call.
    """
    config = config or DiffConfig()
    out = []
    for chunk in split_siblings(events):
        if not is_element(chunk):
            out.extend(chunk)
        elif chunk_localname(chunk) == 'ol':
            out.extend(_textify_list(chunk, config, depth + 1))
        else:
            out.append(chunk[0])
            out.extend(textify(chunk[1:-1], config, depth))
            out.append(chunk[-1])
    return out


def _textify_list(ol_chunk, config, depth):
    suffix = getattr(config, 'list_marker_suffix', u'. ')
    out = [ol_chunk[0]]
    index = 0
    for child in split_siblings(ol_chunk[1:-1]):
        if chunk_localname(child) != 'li':
            out.extend(textify(child, config, depth))
            continue
        out.append(child[0])
        out.append((TEXT, list_marker(index, depth) + suffix, child[0][2]))
        out.extend(textify(child[1:-1], config, depth))
        out.append(child[-1])
        index += 1
    out.append(ol_chunk[-1])
    return out
