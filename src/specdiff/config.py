# -*- coding: utf-8 -*-
"""
Configuración y constantes para specdiff.
"""
import re

text_type = str
string_types = (str,)

# Expresiones regulares (exportadas para uso en otros módulos)
_space_before_word_re = re.compile(r'\s[^\s]', re.U)
_punctuation_re = re.compile(r'[.,:;?!()[\]]', re.U)
_spaces_re = re.compile(r'\s+', re.U)
_whitespace_only_re = re.compile(r'^[ \r\n\t]*$')

# Elements whose neighbouring whitespace is pure source formatting.
BLOCK_TAGS = frozenset([
    'div', 'p', 'pre',
    'emu-annex', 'emu-clause', 'emu-figure',
    'emu-note',
    'figcaption', 'figure',
    'h1', 'h2',
    'ol', 'ul', 'li',
    'dl', 'dt', 'dd',
    'table', 'thead', 'tbody', 'tr', 'th', 'td',
])

OLD_SIDE = 'old'
NEW_SIDE = 'new'


class DiffConfig(object):
    """
    Runtime configuration for the tree diff pipeline.

    Plain object with class-level defaults; override on an instance.
    """

    # Identity numbering
    numbering_attr = 'tree-diff-num'
    old_prefix = '1-'
    new_prefix = '2-'

    # Marker classes written by the engines and read by normalization / stats
    ins_class = 'htmldiff-ins'
    del_class = 'htmldiff-del'
    change_class = 'htmldiff-change'

    block_tags = BLOCK_TAGS

    # Text segmentation
    punctuation_regex = _punctuation_re
    space_regex = _space_before_word_re

    # Tree engine: two same-named elements are diffed recursively (instead of
    # rendered as delete + insert) when their texts are at least this similar.
    similarity_threshold = 0.3

    # Correlation ids wrap to 0 past this value.
    max_request_id = 1000000

    # Comparator
    excluded_id_prefix = 'excluded-'
    # Placeholders for numbers of sections/figures rendered elsewhere; the
    # target id is in `excluded_number_attr`.
    excluded_number_classes = ('excluded-secnum', 'excluded-caption-num', 'excluded-xref')
    excluded_number_attr = 'excluded-id'
    list_marker_suffix = u'. '
    # Use the path engine's merged markup instead of the tree pipeline.
    path_diff = False
    no_markup_change_note = u' (changes in markup or something)'
