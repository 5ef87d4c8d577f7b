# -*- coding: utf-8 -*-
"""
Fuentes de datos de secciones.

A section source yields ``{'html', 'num', 'title'}`` for a section of a
revision, and the displayed number of any section or figure.  Sources may
start with partial data (cheap to load) and fetch the full data on `reload`.
"""


class SectionSource(object):
    """Interface consumed by `Comparator`."""

    async def get_section(self, rev, section_id):
        """Section data, or None if the revision has no such section."""
        raise NotImplementedError()

    async def get_number(self, rev, target_id):
        """Number of a section or figure ("7.1.4", "12"), or None if unknown."""
        raise NotImplementedError()

    async def reload(self):
        """Fetch the full data for all revisions."""
        raise NotImplementedError()


class DictSectionSource(SectionSource):
    """
    In-memory source: ``{rev: {section_id: {'html': ..., 'num': ..., 'title': ...}}}``.

    `figures` maps ``{rev: {figure_id: number}}``.  `full_revisions` and
    `full_figures`, when given, replace the data on `reload`.
    """

    def __init__(self, revisions, full_revisions=None, figures=None, full_figures=None):
        self.revisions = revisions
        self.full_revisions = full_revisions
        self.figures = figures or {}
        self.full_figures = full_figures
        self.reloads = 0

    async def get_section(self, rev, section_id):
        return self.revisions.get(rev, {}).get(section_id)

    async def get_number(self, rev, target_id):
        section = self.revisions.get(rev, {}).get(target_id)
        if section is not None and section.get('num') is not None:
            return section['num']
        return self.figures.get(rev, {}).get(target_id)

    async def reload(self):
        self.reloads += 1
        if self.full_revisions is not None:
            self.revisions = self.full_revisions
        if self.full_figures is not None:
            self.figures = self.full_figures
