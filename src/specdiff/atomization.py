# -*- coding: utf-8 -*-
"""
Segmentación de texto y conversión entre eventos y objetos planos.

The tree diff engine compares plain objects (the wire form), where text is
the minimum unit.  Text is therefore split into small units first, so a one
word change doesn't turn a whole paragraph into a delete + insert.
"""
from genshi.core import QName, Attrs, START, END, TEXT, COMMENT

from .config import (
    DiffConfig, BLOCK_TAGS, string_types, _whitespace_only_re,
    _space_before_word_re, _punctuation_re
)
from .parser import POS
from .utils import (
    qname_localname, compress_spaces, split_siblings, is_element,
    chunk_localname
)


def split_text_into(child_nodes, text, config=None):
    """
    Split `text` by whitespace and punctuation, appending the units to
    `child_nodes`.

    Whitespace is appended to the unit before it instead of becoming a unit
    of its own; otherwise each space would match any space in an unrelated
    sentence.  Punctuation characters are units of their own.
    """
    config = config or DiffConfig()
    space_re = getattr(config, 'space_regex', _space_before_word_re)
    punct_re = getattr(config, 'punctuation_regex', _punctuation_re)
    while True:
        space = space_re.search(text)
        punct = punct_re.search(text)
        if space is None and punct is None:
            break
        if punct is not None and (space is None or punct.start() < space.start()):
            idx = punct.start()
            if idx > 0:
                child_nodes.append(text[:idx])
            child_nodes.append(text[idx:idx + 1])
            text = text[idx + 1:]
        else:
            idx = space.start()
            child_nodes.append(text[:idx + 1])
            text = text[idx + 1:]
    if text:
        child_nodes.append(text)
    return child_nodes


def is_block(chunk, config):
    return chunk_localname(chunk) in getattr(config, 'block_tags', BLOCK_TAGS)


def is_unnecessary_text(siblings, idx, config):
    """
    Whitespace-only text next to a comment or a block element is source
    formatting.  The diff is bad at repeated structures (like <li>s) that are
    separated by identical whitespace, so such text is dropped.
    """
    if not _whitespace_only_re.match(siblings[idx][0][1] or u''):
        return False
    for neighbour_idx in (idx - 1, idx + 1):
        if 0 <= neighbour_idx < len(siblings):
            neighbour = siblings[neighbour_idx]
            if neighbour[0][0] == COMMENT or is_block(neighbour, config):
                return True
    return False


def create_plain_object(name, id=None, attributes=None):
    """Plain object for an empty element."""
    obj = {
        'name': name,
        'attributes': attributes if attributes is not None else {},
        'childNodes': [],
        'textLength': 0,
    }
    if id:
        obj['id'] = id
    return obj


def events_to_plain(events, config=None):
    """Convert an element chunk (START..END) to its plain object tree."""
    config = config or DiffConfig()
    tag, attrs = events[0][1]
    attributes = dict((qname_localname(k), v) for k, v in attrs)
    result = create_plain_object(qname_localname(tag), attributes.get('id'), attributes)

    siblings = split_siblings(events[1:-1])
    for idx, chunk in enumerate(siblings):
        if is_element(chunk):
            child = events_to_plain(chunk, config)
            result['childNodes'].append(child)
            result['textLength'] += child['textLength']
        elif chunk[0][0] == TEXT:
            if is_unnecessary_text(siblings, idx, config):
                continue
            text = chunk[0][1]
            result['textLength'] += len(compress_spaces(text))
            split_text_into(result['childNodes'], text, config)
    return result


def plain_to_events(node):
    """Convert a plain object tree (or a text string) back to events."""
    if isinstance(node, string_types):
        return [(TEXT, node, POS)]
    tag = QName(node['name'])
    attrs = Attrs([(QName(k), v) for k, v in node.get('attributes', {}).items()])
    events = [(START, (tag, attrs), POS)]
    for child in node.get('childNodes', ()):
        events.extend(plain_to_events(child))
    events.append((END, tag, POS))
    return events
