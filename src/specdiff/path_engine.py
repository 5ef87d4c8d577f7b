# -*- coding: utf-8 -*-
"""
Motor de diff basado en rutas.

Both fragments are flattened into tokens: text units, comments and empty
elements, each remembering the chain of elements ("path") it lives in.
Tokens are aligned with `difflib`, ignoring the elements entirely, which
makes this engine good at following text across split or merged elements
and bad at everything structural.  It answers two requests:

* ``splitForDiff``: split elements of one side wherever the other side has
  an element boundary between the same two matched tokens, so both trees
  end up with a similar shape before the tree diff runs.
* ``diff``: a merged markup with ``<del>``/``<ins>`` around changed runs.
"""
import itertools
from difflib import SequenceMatcher

from genshi.core import QName, Attrs, START, END, TEXT, COMMENT

from .atomization import split_text_into
from .config import DiffConfig, OLD_SIDE, NEW_SIDE
from .parser import parse_html, render_events, POS
from .utils import collapse_ws


def shared_depth(path_a, path_b):
    """Number of leading elements two paths have in common."""
    n = 0
    for frame_a, frame_b in zip(path_a, path_b):
        if frame_a[0] != frame_b[0]:
            break
        n += 1
    return n


class PathDiffEngine(object):
    """Engine side of the ``{s1, s2, type}`` requests."""

    def __init__(self, config=None):
        self.config = config or DiffConfig()

    def handle(self, data):
        kind = data.get('type')
        if kind == 'splitForDiff':
            return self.split_for_diff(data['s1'], data['s2'])
        if kind == 'diff':
            return self.diff(data['s1'], data['s2'])
        raise ValueError('unknown path diff request type %r' % (kind,))

    def flatten(self, html, side):
        """Tokens of a fragment; element frames are ``(uid, tag, attrs)``."""
        counter = itertools.count()
        tokens = []
        path = []
        starts = []
        events = parse_html(html)
        for etype, data, _pos in events[1:-1]:
            if etype == START:
                tag, attrs = data
                path.append(((side, next(counter)), tag, attrs))
                starts.append(len(tokens))
            elif etype == END:
                frame = path.pop()
                if starts.pop() == len(tokens):
                    tokens.append({'kind': 'empty', 'key': ('e', frame[1]),
                                   'frame': frame, 'path': tuple(path)})
            elif etype == TEXT:
                for unit in split_text_into([], data, self.config):
                    tokens.append({'kind': 'text', 'key': ('t', collapse_ws(unit)),
                                   'value': unit, 'path': tuple(path)})
            elif etype == COMMENT:
                tokens.append({'kind': 'comment', 'key': ('c', data),
                               'value': data, 'path': tuple(path)})
        return tokens

    def _match(self, tokens1, tokens2):
        return SequenceMatcher(None, [t['key'] for t in tokens1],
                               [t['key'] for t in tokens2], autojunk=False)

    def split_for_diff(self, s1, s2):
        tokens1 = self.flatten(s1, OLD_SIDE)
        tokens2 = self.flatten(s2, NEW_SIDE)
        splits1 = {}
        splits2 = {}
        for i, j, size in self._match(tokens1, tokens2).get_matching_blocks():
            for k in range(1, size):
                depth1 = shared_depth(tokens1[i + k - 1]['path'], tokens1[i + k]['path'])
                depth2 = shared_depth(tokens2[j + k - 1]['path'], tokens2[j + k]['path'])
                if depth2 < depth1:
                    splits1[i + k] = depth2
                elif depth1 < depth2:
                    splits2[j + k] = depth1
        return [self.build(tokens1, splits1), self.build(tokens2, splits2)]

    def diff(self, s1, s2):
        tokens1 = self.flatten(s1, OLD_SIDE)
        tokens2 = self.flatten(s2, NEW_SIDE)
        matcher = self._match(tokens1, tokens2)

        # Old elements that hold matched text are rendered as their new
        # counterpart, so unchanged containers are not duplicated.
        new_frames = {}
        for token in tokens2:
            for frame in token['path']:
                new_frames[frame[0]] = frame
        uid_map = {}
        for i, j, size in matcher.get_matching_blocks():
            for k in range(size):
                for frame1, frame2 in zip(tokens1[i + k]['path'], tokens2[j + k]['path']):
                    if frame1[1] != frame2[1]:
                        break
                    uid_map.setdefault(frame1[0], frame2[0])

        def translate(token):
            path = tuple(new_frames[uid_map[f[0]]] if f[0] in uid_map else f
                         for f in token['path'])
            return dict(token, path=path)

        merged = []
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == 'equal':
                merged.extend((None, token) for token in tokens2[j1:j2])
                continue
            merged.extend(('del', translate(token)) for token in tokens1[i1:i2])
            merged.extend(('ins', token) for token in tokens2[j1:j2])
        return self.build_merged(merged)

    def _emit(self, events, token):
        kind = token['kind']
        if kind == 'text':
            events.append((TEXT, token['value'], POS))
        elif kind == 'comment':
            events.append((COMMENT, token['value'], POS))
        else:
            _uid, tag, attrs = token['frame']
            events.append((START, (tag, attrs), POS))
            events.append((END, tag, POS))

    def _move_to(self, events, open_frames, path, keep):
        while len(open_frames) > keep:
            events.append((END, open_frames.pop()[1], POS))
        for frame in path[keep:]:
            events.append((START, (frame[1], frame[2]), POS))
            open_frames.append(frame)

    def build(self, tokens, splits):
        """
        Markup for `tokens`.  `splits` maps a token index to a depth: before
        that token, elements at that depth or deeper are closed and reopened.
        """
        events = []
        open_frames = []
        for idx, token in enumerate(tokens):
            keep = shared_depth(open_frames, token['path'])
            if idx in splits:
                keep = min(keep, splits[idx])
            self._move_to(events, open_frames, token['path'], keep)
            self._emit(events, token)
        self._move_to(events, open_frames, (), 0)
        return render_events(events)

    def _change_attrs(self, status):
        marker = getattr(self.config, status + '_class', 'htmldiff-' + status)
        change = getattr(self.config, 'change_class', 'htmldiff-change')
        return Attrs([(QName('class'), u'%s %s' % (marker, change))])

    def build_merged(self, merged):
        """Markup for ``(status, token)`` pairs, status None/'del'/'ins'."""
        events = []
        open_frames = []
        change = None
        for status, token in merged:
            path = token['path']
            keep = shared_depth(open_frames, path)
            same_place = keep == len(open_frames) == len(path)
            if change is not None and (status != change or not same_place):
                events.append((END, QName(change), POS))
                change = None
            self._move_to(events, open_frames, path, keep)
            if status is not None and change is None:
                events.append((START, (QName(status), self._change_attrs(status)), POS))
                change = status
            self._emit(events, token)
        if change is not None:
            events.append((END, QName(change), POS))
        self._move_to(events, open_frames, (), 0)
        return render_events(events)
