# -*- coding: utf-8 -*-
"""
Funciones de parsing HTML para specdiff.
"""
from xml.etree.ElementTree import Comment

import html5lib
from genshi.core import Stream, QName, Attrs, START, END, TEXT, COMMENT

from .utils import qname_localname

POS = (None, -1, -1)


def parse_html(html, wrapper_element='div', wrapper_class=None):
    """
    Parse an HTML fragment into a list of Genshi events.

    The fragment is wrapped in `wrapper_element`, so the list always starts
    with one START and ends with the matching END.
    """
    builder = html5lib.getTreeBuilder('etree')
    parser = html5lib.HTMLParser(tree=builder, namespaceHTMLElements=False)
    tree = parser.parseFragment(html or u'')
    tree.tag = wrapper_element
    if wrapper_class is not None:
        tree.set('class', wrapper_class)
    return list(element_events(tree))


def element_events(element):
    """
    Like `genshi.input.ET`, but keeps comments as COMMENT events and drops
    namespaces from tag and attribute names.
    """
    if element.tag is Comment:
        yield COMMENT, element.text or u'', POS
    elif isinstance(element.tag, str):
        tag = QName(qname_localname(element.tag))
        attrs = Attrs([(QName(qname_localname(name)), value)
                       for name, value in element.items()])
        yield START, (tag, attrs), POS
        if element.text:
            yield TEXT, element.text, POS
        for child in element:
            for event in element_events(child):
                yield event
        yield END, tag, POS
    if element.tail:
        yield TEXT, element.tail, POS


def render_events(events):
    """Serialize a list of events back to HTML."""
    return Stream(list(events)).render('html', encoding=None, strip_whitespace=False)


def inner_html(events):
    """HTML of the children of the root element of `events`."""
    return render_events(events[1:-1])


def replace_inner(events, html):
    """Return `events` with the root's children replaced by the parsed `html`."""
    tag, attrs = events[0][1]
    parsed = parse_html(html, qname_localname(tag))
    return [events[0]] + parsed[1:-1] + [events[-1]]
