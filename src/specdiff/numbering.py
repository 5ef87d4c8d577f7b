# -*- coding: utf-8 -*-
"""
Numeración de identidad de elementos.

Raw tree alignment cannot handle an element that was split in two or two
elements that were merged.  To work around it, both trees are first split
by the text based path diff so each text can match even if its parent got
split or merged.  That step can split more than necessary (e.g. produce an
extra list item), so every element gets a unique number beforehand
(`add_numbering`); adjacent pieces that still share a number are joined
again (`combine_nodes`) and the numbers are dropped at the end
(`remove_numbering`).
"""
from genshi.core import QName, START

from .config import DiffConfig
from .normalization import change_kind, unmark
from .utils import split_siblings, is_element, chunk_localname, chunk_attr, map_inner


def _numbering_attr(config):
    return getattr(config, 'numbering_attr', 'tree-diff-num')


def add_numbering(events, prefix, config=None):
    """
    Return `events` with a "<prefix><n>" identity attribute on every element
    below the root, numbered in document order.
    """
    attr = QName(_numbering_attr(config or DiffConfig()))
    out = []
    i = 0
    for idx, (etype, data, pos) in enumerate(events):
        if etype == START and idx > 0:
            tag, attrs = data
            data = (tag, attrs | [(attr, u'%s%d' % (prefix, i))])
            i += 1
        out.append((etype, data, pos))
    return out


def remove_numbering(events, config=None):
    """Return `events` without identity attributes."""
    attr = _numbering_attr(config or DiffConfig())
    out = []
    for etype, data, pos in events:
        if etype == START:
            tag, attrs = data
            if attrs.get(attr) is not None:
                data = (tag, attrs - attr)
        out.append((etype, data, pos))
    return out


def combine_nodes(events, name=None, config=None):
    """
    Join adjacent sibling elements that carry the same identity number.

    The later element's children are appended to the earlier one, which keeps
    its attributes.  Only elements named `name` start a join (any element if
    None).  Text or comments between two elements keep them apart.  Outer
    levels are joined first, so children that become adjacent are joined too.

    When only one of the two elements is marked as inserted or deleted, the
    marker moves down to that element's children before the join, so the
    unchanged part doesn't turn into a change and the changed part stays one.
    """
    config = config or DiffConfig()
    attr = _numbering_attr(config)

    merged = []
    for chunk in split_siblings(events):
        if merged and is_element(chunk) and is_element(merged[-1]):
            prev = merged[-1]
            num = chunk_attr(prev, attr)
            if (num is not None and chunk_attr(chunk, attr) == num
                    and (name is None or chunk_localname(prev) == name)):
                if change_kind(prev, config) != change_kind(chunk, config):
                    prev = unmark(prev, config)
                    chunk = unmark(chunk, config)
                merged[-1] = prev[:-1] + chunk[1:-1] + prev[-1:]
                continue
        merged.append(chunk)

    out = []
    for chunk in merged:
        if is_element(chunk):
            out.extend(map_inner(chunk, lambda inner: combine_nodes(inner, name, config)))
        else:
            out.extend(chunk)
    return out
