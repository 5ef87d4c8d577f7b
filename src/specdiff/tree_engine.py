# -*- coding: utf-8 -*-
"""
Motor de diff de árboles.

Takes two plain object trees (see `atomization.events_to_plain`) and returns
one merged tree where removed content sits inside ``del`` wrappers and added
content inside ``ins`` wrappers.  Block elements are never wrapped (a
``<del>`` directly inside ``<ol>`` is not valid markup); they get the marker
classes on themselves instead.
"""
from difflib import SequenceMatcher

from .atomization import create_plain_object
from .config import DiffConfig, BLOCK_TAGS, string_types
from .utils import compress_spaces


class TreeDiffEngine(object):
    """Engine side of the ``{nodeObj1, nodeObj2}`` request."""

    def __init__(self, config=None):
        self.config = config or DiffConfig()
        self._keys = {}

    def handle(self, data):
        return self.diff(data['nodeObj1'], data['nodeObj2'])

    def diff(self, old, new):
        self._keys = {}
        try:
            if (not isinstance(old, string_types) and not isinstance(new, string_types)
                    and old['name'] == new['name']):
                return self.diff_node(old, new)
            root = create_plain_object('div')
            root['childNodes'] = self.mark([old], 'del') + self.mark([new], 'ins')
            root['textLength'] = text_length(root)
            return root
        finally:
            self._keys = {}

    def key(self, node):
        """Structural key: text, or element name plus its children's keys."""
        if isinstance(node, string_types):
            return node
        cached = self._keys.get(id(node))
        if cached is None:
            cached = ('<', node['name'], tuple(self.key(c) for c in node['childNodes']))
            self._keys[id(node)] = cached
        return cached

    def diff_node(self, old, new):
        node = create_plain_object(new['name'], new.get('id'), dict(new['attributes']))
        node['childNodes'] = self.diff_children(old['childNodes'], new['childNodes'])
        node['textLength'] = text_length(node)
        return node

    def diff_children(self, old_children, new_children):
        matcher = SequenceMatcher(None,
                                  [self.key(c) for c in old_children],
                                  [self.key(c) for c in new_children],
                                  autojunk=False)
        out = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == 'equal':
                out.extend(new_children[j1:j2])
            else:
                out.extend(self.diff_region(old_children[i1:i2], new_children[j1:j2]))
        return self.merge_adjacent_change_tags(out)

    def diff_region(self, old_part, new_part):
        """
        Second, coarser pass over a changed region: elements only need the
        same name to be paired, and paired elements are diffed recursively
        when their texts are similar enough.
        """
        def coarse(node):
            if isinstance(node, string_types):
                return node
            return ('<', node['name'])

        matcher = SequenceMatcher(None, [coarse(c) for c in old_part],
                                  [coarse(c) for c in new_part], autojunk=False)
        out = []
        # Deletions are always emitted before insertions within a changed run.
        pending_del = []
        pending_ins = []

        def flush_pending():
            out.extend(self.mark(pending_del, 'del'))
            out.extend(self.mark(pending_ins, 'ins'))
            del pending_del[:]
            del pending_ins[:]

        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag != 'equal':
                pending_del.extend(old_part[i1:i2])
                pending_ins.extend(new_part[j1:j2])
                continue
            for old, new in zip(old_part[i1:i2], new_part[j1:j2]):
                if isinstance(new, string_types):
                    flush_pending()
                    out.append(new)
                elif self.similar(old, new):
                    flush_pending()
                    out.append(self.diff_node(old, new))
                else:
                    pending_del.append(old)
                    pending_ins.append(new)
        flush_pending()
        return out

    def similar(self, old, new):
        old_units = list(iter_text(old))
        new_units = list(iter_text(new))
        if not old_units and not new_units:
            return True
        ratio = SequenceMatcher(None, old_units, new_units, autojunk=False).ratio()
        return ratio >= getattr(self.config, 'similarity_threshold', 0.3)

    def _marker_class(self, kind):
        marker = getattr(self.config, kind + '_class', 'htmldiff-' + kind)
        return u'%s %s' % (marker, getattr(self.config, 'change_class', 'htmldiff-change'))

    def _wrapper(self, kind, children):
        wrapper = create_plain_object(kind, attributes={'class': self._marker_class(kind)})
        wrapper['childNodes'] = list(children)
        wrapper['textLength'] = text_length(wrapper)
        return wrapper

    def is_wrapper(self, node, kind=None):
        if isinstance(node, string_types):
            return False
        if kind is not None and node['name'] != kind:
            return False
        return (node['name'] in ('ins', 'del')
                and node['attributes'].get('class') == self._marker_class(node['name']))

    def mark(self, nodes, kind):
        """Mark `nodes` as deleted/inserted ('del'/'ins')."""
        block_tags = getattr(self.config, 'block_tags', BLOCK_TAGS)
        out = []
        run = []
        for node in nodes:
            if not isinstance(node, string_types) and node['name'] in block_tags:
                if run:
                    out.append(self._wrapper(kind, run))
                    run = []
                marked = dict(node)
                attributes = dict(node['attributes'])
                classes = attributes.get('class', u'').split()
                classes.extend(c for c in self._marker_class(kind).split() if c not in classes)
                attributes['class'] = u' '.join(classes)
                marked['attributes'] = attributes
                out.append(marked)
            else:
                run.append(node)
        if run:
            out.append(self._wrapper(kind, run))
        return out

    def merge_adjacent_change_tags(self, children):
        """
        Merge adjacent wrappers of the same kind:
          <ins>en</ins><ins> negrita</ins> -> <ins>en negrita</ins>
        """
        out = []
        for child in children:
            prev = out[-1] if out else None
            if (prev is not None and self.is_wrapper(child)
                    and self.is_wrapper(prev, child['name'])):
                merged = self._wrapper(child['name'], prev['childNodes'] + child['childNodes'])
                out[-1] = merged
                continue
            out.append(child)
        return out


def iter_text(node):
    """Text units of a plain object tree, in order."""
    if isinstance(node, string_types):
        yield node
        return
    for child in node['childNodes']:
        for unit in iter_text(child):
            yield unit


def text_length(node):
    return sum(len(compress_spaces(unit)) for unit in iter_text(node))
