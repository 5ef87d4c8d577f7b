# -*- coding: utf-8 -*-
"""
Normalización del orden de marcadores de cambio.

The engines always place a deletion before an insertion at the same
position, but `combine_nodes` can join an element ending with an insertion
to one starting with a deletion.  `swap_ins_del` restores the
deletion-before-insertion order.
"""
from genshi.core import QName, Attrs, START, END, TEXT, COMMENT

from .config import DiffConfig, BLOCK_TAGS, _whitespace_only_re
from .parser import POS
from .utils import (
    split_siblings, is_element, chunk_localname, has_class, add_classes,
    remove_classes, map_inner
)


def marker_classes(kind, config):
    """Classes of a change marker of `kind` ('ins' or 'del')."""
    marker = getattr(config, kind + '_class', 'htmldiff-' + kind)
    return [marker, getattr(config, 'change_class', 'htmldiff-change')]


def change_kind(chunk, config):
    """'ins', 'del' or None for a sibling chunk."""
    if not is_element(chunk):
        return None
    attrs = chunk[0][1][1]
    if has_class(attrs, getattr(config, 'del_class', 'htmldiff-del')):
        return 'del'
    if has_class(attrs, getattr(config, 'ins_class', 'htmldiff-ins')):
        return 'ins'
    return None


def unmark(chunk, config=None):
    """
    Move the change marker of an element chunk down to its children, so the
    element itself can hold unchanged content as well.
    """
    config = config or DiffConfig()
    kind = change_kind(chunk, config)
    if kind is None:
        return chunk
    tag, attrs = chunk[0][1]
    attrs = remove_classes(attrs, *(marker_classes('ins', config) + marker_classes('del', config)))
    start = (START, (tag, attrs), chunk[0][2])
    return [start] + mark_events(chunk[1:-1], kind, config) + [chunk[-1]]


def _is_blank(chunk):
    kind, data, _pos = chunk[0]
    return kind == COMMENT or (kind == TEXT and _whitespace_only_re.match(data) is not None)


def mark_events(events, kind, config=None):
    """
    Mark sibling `events` as deleted/inserted ('del'/'ins'): block elements
    get the marker classes, any other run is wrapped in a ``del``/``ins``
    element.  Content that already carries a marker is left as is.
    """
    config = config or DiffConfig()
    block_tags = getattr(config, 'block_tags', BLOCK_TAGS)
    classes = marker_classes(kind, config)
    out = []
    run = []

    def flush_run():
        if any(not _is_blank(chunk) for chunk in run):
            tag = QName(kind)
            out.append((START, (tag, Attrs([(QName('class'), u' '.join(classes))])), POS))
            out.extend(ev for chunk in run for ev in chunk)
            out.append((END, tag, POS))
        else:
            out.extend(ev for chunk in run for ev in chunk)
        del run[:]

    for chunk in split_siblings(events):
        if change_kind(chunk, config) is not None:
            flush_run()
            out.extend(chunk)
        elif is_element(chunk) and chunk_localname(chunk) in block_tags:
            flush_run()
            tag, attrs = chunk[0][1]
            out.append((START, (tag, add_classes(attrs, *classes)), chunk[0][2]))
            out.extend(chunk[1:])
        else:
            run.append(chunk)
    flush_run()
    return out


def swap_ins_del(events, config=None):
    """
    Move deletions before insertions inside every run of adjacent change
    elements, at every nesting level.  Relative order among deletions and
    among insertions is kept, so applying it twice changes nothing.
    """
    config = config or DiffConfig()
    out = []
    run = []

    def flush_run():
        out.extend(ev for kind, chunk in run if kind == 'del' for ev in chunk)
        out.extend(ev for kind, chunk in run if kind == 'ins' for ev in chunk)
        del run[:]

    for chunk in split_siblings(events):
        if is_element(chunk):
            chunk = map_inner(chunk, lambda inner: swap_ins_del(inner, config))
        kind = change_kind(chunk, config)
        if kind is not None:
            run.append((kind, chunk))
            continue
        flush_run()
        out.extend(chunk)
    flush_run()
    return out
