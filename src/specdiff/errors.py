# -*- coding: utf-8 -*-
"""
Excepciones de specdiff.
"""


class SpecDiffError(Exception):
    """Base class for all errors raised by specdiff."""


class DiffEngineError(SpecDiffError):
    """
    A diff engine raised while handling a request.

    Carries the correlation id of the failed request and the engine's
    error text, since the original exception lives on the engine thread.
    """

    def __init__(self, request_id, message):
        super().__init__('diff request %s failed: %s' % (request_id, message))
        self.request_id = request_id
        self.engine_message = message


class SectionDataError(SpecDiffError):
    """Section data is missing or incomplete even after a reload."""

    def __init__(self, section_id):
        super().__init__('section %s is not available' % (section_id,))
        self.section_id = section_id
