# -*- coding: utf-8 -*-
"""
Clases principales para calcular el diff entre dos árboles HTML.
"""
import asyncio
import logging

from .atomization import events_to_plain, plain_to_events
from .config import DiffConfig
from .normalization import swap_ins_del
from .numbering import add_numbering, combine_nodes, remove_numbering
from .parser import parse_html, render_events, inner_html, replace_inner
from .path_engine import PathDiffEngine
from .tree_engine import TreeDiffEngine
from .worker import DiffWorker

log = logging.getLogger(__name__)


class PathDiff(object):
    """Requests to the path based diff engine."""

    def __init__(self, worker):
        self.worker = worker

    def diff(self, s1, s2):
        return self.worker.run({'s1': s1, 's2': s2, 'type': 'diff'})

    def split_for_diff(self, s1, s2):
        return self.worker.run({'s1': s1, 's2': s2, 'type': 'splitForDiff'})


class TreeDiff(object):
    """Requests to the tree diff engine."""

    def __init__(self, worker):
        self.worker = worker

    def diff(self, node_obj1, node_obj2):
        return self.worker.run({'nodeObj1': node_obj1, 'nodeObj2': node_obj2})


def create_path_worker(config=None):
    return DiffWorker(PathDiffEngine(config).handle, 'path-diff-worker', config)


def create_tree_worker(config=None):
    return DiffWorker(TreeDiffEngine(config).handle, 'tree-diff-worker', config)


class TreeDiffer(object):
    """
    Calculates the diff between two element trees.

    Both inputs are event lists holding a single root element; the result is
    the list of events for the children of the merged root, with ``del`` and
    ``ins`` change markers.  Each step returns new event lists, the inputs
    are never modified.

    The raw tree alignment can't follow an element that got split or merged,
    so both trees are first split with the path diff (see `numbering`), then
    re-joined once the tree diff is done.  Joining can leave an insertion
    right before a deletion; `swap_ins_del` fixes the order afterwards.
    """

    def __init__(self, path_diff, tree_diff, config=None):
        self.path_diff = path_diff
        self.tree_diff = tree_diff
        self.config = config or DiffConfig()

    async def diff(self, old_events, new_events):
        config = self.config
        old = add_numbering(old_events, getattr(config, 'old_prefix', '1-'), config)
        new = add_numbering(new_events, getattr(config, 'new_prefix', '2-'), config)

        old, new = await self.split_for_diff(old, new)

        old = combine_nodes(old, 'li', config)
        new = combine_nodes(new, 'li', config)

        node_obj1 = events_to_plain(old, config)
        node_obj2 = events_to_plain(new, config)
        log.debug('tree diff: %d vs %d characters',
                  node_obj1['textLength'], node_obj2['textLength'])

        merged = await self.tree_diff.diff(node_obj1, node_obj2)
        events = plain_to_events(merged)[1:-1]

        events = combine_nodes(events, None, config)
        events = swap_ins_del(events, config)
        return remove_numbering(events, config)

    async def split_for_diff(self, old, new):
        html1, html2 = await self.path_diff.split_for_diff(inner_html(old), inner_html(new))
        return replace_inner(old, html1), replace_inner(new, html2)


def render_tree_diff(old, new, config=None):
    """
    Renders the tree diff between two HTML fragments, using private engine
    threads for this one call.
    """
    async def run():
        with create_path_worker(config) as path_worker, \
                create_tree_worker(config) as tree_worker:
            differ = TreeDiffer(PathDiff(path_worker), TreeDiff(tree_worker), config)
            events = await differ.diff(parse_html(old), parse_html(new))
            return render_events(events)

    return asyncio.run(run())
