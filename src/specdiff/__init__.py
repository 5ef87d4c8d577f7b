# -*- coding: utf-8 -*-
"""
    specdiff
    ~~~~~~~~

    Diffs revisions of a large HTML document (a language specification)
    section by section, keeping structure intact.  Examples:

    >>> from specdiff import render_tree_diff, list_marker

    >>> print(render_tree_diff('<p>Foo bar baz</p>', '<p>Foo baz</p>'))
    <p>Foo <del class="htmldiff-del htmldiff-change">bar </del>baz</p>

    >>> print(render_tree_diff('<p>Foo baz</p>', '<p>Foo blah baz</p>'))
    <p>Foo <ins class="htmldiff-ins htmldiff-change">blah </ins>baz</p>

    >>> [list_marker(i, 2) for i in (0, 25, 26)]
    ['a', 'z', 'aa']
"""
from .config import DiffConfig
from .comparator import Comparator, CancelToken
from .differ import (
    TreeDiffer, PathDiff, TreeDiff, render_tree_diff,
    create_path_worker, create_tree_worker
)
from .errors import SpecDiffError, DiffEngineError, SectionDataError
from .list_marker import list_marker, textify
from .parser import parse_html, render_events
from .sections import SectionSource, DictSectionSource
from .worker import DiffWorker

__all__ = [
    'render_tree_diff',
    'list_marker',
    'textify',
    'parse_html',
    'render_events',
    'DiffConfig',
    'TreeDiffer',
    'PathDiff',
    'TreeDiff',
    'create_path_worker',
    'create_tree_worker',
    'DiffWorker',
    'Comparator',
    'CancelToken',
    'SectionSource',
    'DictSectionSource',
    'SpecDiffError',
    'DiffEngineError',
    'SectionDataError',
]
