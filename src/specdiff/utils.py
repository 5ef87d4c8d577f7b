# -*- coding: utf-8 -*-
"""
Funciones utilitarias para specdiff.
"""
from genshi.core import QName, START, END

from .config import text_type, _spaces_re


def qname_localname(qname):
    """
    Normalize a tag or attribute name like 'tag' or '{ns}tag' to its localname.
    Always coerce to text so comparisons don't depend on QName instances.
    """
    s = text_type(qname)
    if '}' in s:
        left, right = s.split('}', 1)
        if left.startswith('{') or '://' in left or left.startswith('http'):
            return right
    return s


def collapse_ws(s):
    """Colapsa espacios en blanco múltiples en un solo espacio."""
    return _spaces_re.sub(u' ', s).strip()


def compress_spaces(s):
    """Like `collapse_ws` but keeps leading/trailing space (as one space)."""
    return _spaces_re.sub(u' ', s)


def find_block_end(events, start_idx):
    """Encuentra el índice siguiente al END que cierra el START en start_idx."""
    depth = 0
    n = len(events)
    j = start_idx
    while j < n:
        etype = events[j][0]
        if etype == START:
            depth += 1
        elif etype == END:
            depth -= 1
            if depth == 0:
                return j + 1
        j += 1
    return j


def split_siblings(events):
    """
    Group a flat event list into sibling chunks: one chunk per element
    (START..END inclusive) and one per TEXT/COMMENT event.
    """
    chunks = []
    i = 0
    n = len(events)
    while i < n:
        if events[i][0] == START:
            j = find_block_end(events, i)
            chunks.append(events[i:j])
            i = j
        else:
            chunks.append(events[i:i + 1])
            i += 1
    return chunks


def is_element(chunk):
    return bool(chunk) and chunk[0][0] == START


def chunk_localname(chunk):
    """Localname of an element chunk, None for text/comment chunks."""
    if not is_element(chunk):
        return None
    return qname_localname(chunk[0][1][0])


def chunk_attr(chunk, name):
    """Value of attribute `name` on an element chunk (None otherwise)."""
    if not is_element(chunk):
        return None
    return chunk[0][1][1].get(name)


def class_list(value):
    return [c for c in (value or u'').split() if c]


def has_class(attrs, class_name):
    return class_name in class_list(attrs.get('class'))


def add_classes(attrs, *class_names):
    """Return `attrs` (genshi Attrs) with `class_names` appended to its class."""
    classes = class_list(attrs.get('class'))
    for name in class_names:
        if name not in classes:
            classes.append(name)
    return attrs | [(QName('class'), u' '.join(classes))]


def remove_classes(attrs, *class_names):
    """Return `attrs` without `class_names`; an emptied class is dropped."""
    classes = [c for c in class_list(attrs.get('class')) if c not in class_names]
    if classes:
        return attrs | [(QName('class'), u' '.join(classes))]
    return attrs - 'class'


def map_inner(chunk, func):
    """Return an element chunk with `func` applied to its children events."""
    return [chunk[0]] + list(func(chunk[1:-1])) + [chunk[-1]]
