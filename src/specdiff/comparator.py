# -*- coding: utf-8 -*-
"""
Comparación de varias secciones entre dos revisiones.
"""
import asyncio
import logging

from genshi.core import QName, Attrs, START, END, TEXT

from .config import DiffConfig
from .differ import PathDiff, TreeDiff, TreeDiffer, create_path_worker, create_tree_worker
from .errors import DiffEngineError, SectionDataError
from .list_marker import textify
from .normalization import marker_classes
from .parser import POS, parse_html, render_events, inner_html
from .utils import (
    split_siblings, is_element, chunk_localname, chunk_attr, map_inner, has_class,
    remove_classes
)

log = logging.getLogger(__name__)

VIEWS = ('diff', 'from', 'to')


class CancelToken(object):
    """Cooperative cancellation flag of one running comparison."""

    def __init__(self):
        self.cancelled = False
        self.finished = asyncio.Event()

    def cancel(self):
        self.cancelled = True


def remove_excluded_content(events, config=None):
    """
    Empty every <div id="excluded-..."> placeholder.  Those hold sections
    that are rendered separately, so their content must not be diffed twice.
    """
    prefix = getattr(config or DiffConfig(), 'excluded_id_prefix', 'excluded-')
    out = []
    for chunk in split_siblings(events):
        if chunk_localname(chunk) == 'div' and (chunk_attr(chunk, 'id') or u'').startswith(prefix):
            out.append(chunk[0])
            out.append(chunk[-1])
        elif is_element(chunk):
            out.extend(map_inner(chunk, lambda inner: remove_excluded_content(inner, config)))
        else:
            out.extend(chunk)
    return out


def _number_placeholder(attrs, config):
    """Placeholder class of a number placeholder element, else None."""
    for class_name in getattr(config, 'excluded_number_classes', ()):
        if has_class(attrs, class_name):
            return class_name
    return None


def excluded_number_ids(events, config=None):
    """Target ids of the number placeholders in `events`, in order."""
    config = config or DiffConfig()
    id_attr = getattr(config, 'excluded_number_attr', 'excluded-id')
    ids = []
    for etype, data, _pos in events:
        if etype == START and _number_placeholder(data[1], config) is not None:
            target_id = data[1].get(id_attr)
            if target_id is not None and target_id not in ids:
                ids.append(target_id)
    return ids


def _number_events(view, from_num, to_num, config):
    if view == 'from':
        return None if from_num is None else [(TEXT, from_num, POS)]
    if view == 'to':
        return None if to_num is None else [(TEXT, to_num, POS)]
    if from_num is not None and to_num is not None and from_num != to_num:
        events = []
        for kind, num in (('del', from_num), ('ins', to_num)):
            tag = QName(kind)
            attrs = Attrs([(QName('class'), u' '.join(marker_classes(kind, config)))])
            events.extend([(START, (tag, attrs), POS), (TEXT, num, POS), (END, tag, POS)])
        return events
    num = to_num if to_num is not None else from_num
    return None if num is None else [(TEXT, num, POS)]


def fill_excluded_numbers(events, view, from_nums, to_nums, config=None):
    """
    Write section/figure numbers into their placeholders.

    Numbers are looked up by the placeholder's target id in `from_nums` and
    `to_nums`.  In the diff view, a number that differs between the two
    revisions becomes a deletion followed by an insertion.  A filled
    placeholder loses its placeholder class and target id.  Returns
    ``(events, complete)``; `complete` is False when some number is unknown,
    those placeholders are left untouched.
    """
    config = config or DiffConfig()
    id_attr = getattr(config, 'excluded_number_attr', 'excluded-id')
    complete = True
    out = []
    for chunk in split_siblings(events):
        if not is_element(chunk):
            out.extend(chunk)
            continue
        tag, attrs = chunk[0][1]
        class_name = _number_placeholder(attrs, config)
        if class_name is None:
            inner, inner_complete = fill_excluded_numbers(
                chunk[1:-1], view, from_nums, to_nums, config)
            complete = complete and inner_complete
            out.append(chunk[0])
            out.extend(inner)
            out.append(chunk[-1])
            continue
        target_id = attrs.get(id_attr)
        content = _number_events(view, from_nums.get(target_id), to_nums.get(target_id), config)
        if content is None:
            complete = False
            out.extend(chunk)
            continue
        attrs = remove_classes(attrs, class_name) - id_attr
        out.append((START, (tag, attrs), chunk[0][2]))
        out.extend(content)
        out.append(chunk[-1])
    return out, complete


def count_changes(events, config=None):
    """Number of (insertion, deletion) markers in `events`."""
    config = config or DiffConfig()
    ins_class = getattr(config, 'ins_class', 'htmldiff-ins')
    del_class = getattr(config, 'del_class', 'htmldiff-del')
    ins = dels = 0
    for etype, data, _pos in events:
        if etype != START:
            continue
        attrs = data[1]
        if has_class(attrs, ins_class):
            ins += 1
        elif has_class(attrs, del_class):
            dels += 1
    return ins, dels


class Comparator(object):
    """
    Renders a list of sections of two revisions, as a diff or as either side.

    Only one comparison fills `result` at a time: starting a new one cancels
    the running one and waits until it has stopped.  Cancellation is checked
    once per section, so a section whose diff already started always
    finishes; the cancelled comparison then publishes nothing.
    """

    def __init__(self, source, config=None, path_worker=None, tree_worker=None):
        self.source = source
        self.config = config or DiffConfig()
        self.path_worker = path_worker or create_path_worker(self.config)
        self.tree_worker = tree_worker or create_tree_worker(self.config)
        self.result = []
        self.stat = u''
        self.progress = u''
        self.messages = []
        self._running = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        self.close()

    def close(self):
        self.path_worker.close()
        self.tree_worker.close()

    @property
    def processing(self):
        return self._running is not None

    async def _acquire(self):
        while self._running is not None:
            running = self._running
            running.cancel()
            await running.finished.wait()
        self._running = CancelToken()
        return self._running

    def _release(self, token):
        if self._running is token:
            self._running = None
        token.finished.set()

    async def compare(self, from_rev, to_rev, section_ids, view='diff'):
        """
        Compare `section_ids` between two revisions.  Returns the published
        ``[(section_id, html)]`` list, or None if a newer comparison cancelled
        this one.
        """
        if view not in VIEWS:
            raise ValueError('unknown view %r' % (view,))
        token = await self._acquire()
        try:
            return await self._compare(token, from_rev, to_rev, section_ids, view)
        finally:
            self.progress = u''
            self._release(token)

    async def _compare(self, token, from_rev, to_rev, section_ids, view):
        output = []
        messages = []
        differs = False
        reloaded = False
        total = len(section_ids)
        for i, section_id in enumerate(section_ids):
            if token.cancelled:
                log.debug('comparison aborted before section %s', section_id)
                return None
            self.progress = u'generating sections... %d/%d' % (i + 1, total)

            try:
                from_html, to_html, reloaded = await self.get_section_html(
                    from_rev, to_rev, section_id, reloaded)
            except SectionDataError as exc:
                # Only raised once the source has been reloaded.
                reloaded = True
                log.warning('%s', exc)
                messages.append(u'Section %s is not found.' % (section_id,))
                continue

            if view == 'from':
                events = parse_html(from_html)[1:-1]
            elif view == 'to':
                events = parse_html(to_html)[1:-1]
            else:
                differs = differs or from_html != to_html
                try:
                    events = await self.create_diff(from_html, to_html)
                except DiffEngineError as exc:
                    log.warning('diff of section %s failed: %s', section_id, exc)
                    messages.append(u'Failed to calculate the diff of section %s.' % (section_id,))
                    continue
            events, reloaded = await self.fixup_excluded(events, view, from_rev, to_rev, reloaded)
            output.append((section_id, events))

        if token.cancelled:
            log.debug('comparison aborted, discarding %d sections', len(output))
            return None

        self.stat = self.diff_stat(output, differs) if view == 'diff' else u''
        self.messages = messages
        self.result = [(section_id, render_events(events)) for section_id, events in output]
        return self.result

    async def get_section_html(self, from_rev, to_rev, section_id, reloaded):
        """
        ``(from_html, to_html, reloaded)``.  Incomplete data triggers a single
        reload of the source per comparison.
        """
        while True:
            from_sec = await self.source.get_section(from_rev, section_id)
            to_sec = await self.source.get_section(to_rev, section_id)
            if _is_complete(from_sec, to_sec):
                return _html_of(from_sec), _html_of(to_sec), reloaded
            if reloaded:
                raise SectionDataError(section_id)
            log.info('section %s incomplete, reloading full data', section_id)
            await self.source.reload()
            reloaded = True

    async def fixup_excluded(self, events, view, from_rev, to_rev, reloaded):
        """
        Fill the number placeholders of a section (see `fill_excluded_numbers`).
        Unknown numbers trigger the single reload of the comparison.  Returns
        ``(events, reloaded)``.
        """
        ids = excluded_number_ids(events, self.config)
        if not ids:
            return events, reloaded
        while True:
            from_nums = {}
            to_nums = {}
            for target_id in ids:
                from_nums[target_id] = await self.source.get_number(from_rev, target_id)
                to_nums[target_id] = await self.source.get_number(to_rev, target_id)
            filled, complete = fill_excluded_numbers(
                events, view, from_nums, to_nums, self.config)
            if complete:
                return filled, reloaded
            if reloaded:
                log.warning('numbers still missing after reload: %s', ', '.join(ids))
                return filled, reloaded
            log.info('numbers missing, reloading full data')
            await self.source.reload()
            reloaded = True

    def prepare(self, html):
        events = parse_html(html)
        events = textify(events, self.config)
        return remove_excluded_content(events, self.config)

    async def create_diff(self, from_html, to_html):
        old = self.prepare(from_html)
        new = self.prepare(to_html)
        if getattr(self.config, 'path_diff', False):
            html = await PathDiff(self.path_worker).diff(inner_html(old), inner_html(new))
            return parse_html(html)[1:-1]
        differ = TreeDiffer(PathDiff(self.path_worker), TreeDiff(self.tree_worker), self.config)
        return await differ.diff(old, new)

    def diff_stat(self, output, differs):
        ins = dels = 0
        for _section_id, events in output:
            section_ins, section_dels = count_changes(events, self.config)
            ins += section_ins
            dels += section_dels
        note = u''
        if ins == 0 and dels == 0 and differs:
            note = getattr(self.config, 'no_markup_change_note', u'')
        return u'+%d -%d%s' % (ins, dels, note)


def _is_complete(from_sec, to_sec):
    if from_sec is None and to_sec is None:
        return False
    return all(sec is None or sec.get('html') is not None for sec in (from_sec, to_sec))


def _html_of(section):
    if section is None:
        return None
    return section['html']
