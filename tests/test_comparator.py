from __future__ import annotations

import asyncio

import pytest

from specdiff.comparator import (
    Comparator, count_changes, fill_excluded_numbers, remove_excluded_content
)
from specdiff.differ import create_tree_worker
from specdiff.parser import parse_html, inner_html
from specdiff.sections import DictSectionSource


def _section(html, num="1", title="Intro"):
    return {"html": html, "num": num, "title": title}


def _source(old: dict, new: dict, **kwargs) -> DictSectionSource:
    return DictSectionSource({
        "r1": {sid: _section(html) for sid, html in old.items()},
        "r2": {sid: _section(html) for sid, html in new.items()},
    }, **kwargs)


class _GatedWorker(object):
    """Holds every request until `gate` is set."""

    def __init__(self, worker):
        self.worker = worker
        self.calls = 0
        self.gate = None
        self.entered = None

    async def run(self, data):
        self.calls += 1
        self.entered.set()
        await self.gate.wait()
        return await self.worker.run(data)

    def close(self):
        self.worker.close()


def test_diff_view_and_stat():
    source = _source({"sec-1": "<p>Foo bar</p>"}, {"sec-1": "<p>Foo baz</p>"})
    with Comparator(source) as comparator:
        result = asyncio.run(comparator.compare("r1", "r2", ["sec-1"]))
        assert comparator.stat == "+1 -1"
        assert comparator.messages == []
        assert not comparator.processing
        assert comparator.progress == ""
    assert result == comparator.result
    (section_id, html), = result
    assert section_id == "sec-1"
    assert html == ('<p>Foo <del class="htmldiff-del htmldiff-change">bar</del>'
                    '<ins class="htmldiff-ins htmldiff-change">baz</ins></p>')


def test_from_and_to_views():
    source = _source({"sec-1": "<p>Foo bar</p>"}, {"sec-1": "<p>Foo baz</p>"})
    with Comparator(source) as comparator:
        assert asyncio.run(comparator.compare("r1", "r2", ["sec-1"], "from")) == [
            ("sec-1", "<p>Foo bar</p>")
        ]
        assert asyncio.run(comparator.compare("r1", "r2", ["sec-1"], "to")) == [
            ("sec-1", "<p>Foo baz</p>")
        ]
        assert comparator.stat == ""


def test_unknown_view():
    with Comparator(_source({}, {})) as comparator:
        with pytest.raises(ValueError):
            asyncio.run(comparator.compare("r1", "r2", [], "side-by-side"))


def test_list_markers_are_written_before_diffing():
    html = "<ol><li>a<ol><li>b</li></ol></li><li>c</li></ol>"
    source = _source({"sec-1": html}, {"sec-1": html})
    with Comparator(source) as comparator:
        (_sid, html), = asyncio.run(comparator.compare("r1", "r2", ["sec-1"]))
    assert html == "<ol><li>1. a<ol><li>a. b</li></ol></li><li>2. c</li></ol>"


def test_added_section():
    source = _source({}, {"sec-1": "<p>Brand new</p>"})
    with Comparator(source) as comparator:
        (_sid, html), = asyncio.run(comparator.compare("r1", "r2", ["sec-1"]))
        assert comparator.stat == "+1 -0"
    assert "htmldiff-ins" in html


def test_missing_sections_reload_once():
    source = _source({"sec-1": "<p>a</p>"}, {"sec-1": "<p>a</p>"})
    with Comparator(source) as comparator:
        result = asyncio.run(comparator.compare("r1", "r2", ["sec-x", "sec-1", "sec-y"]))
        assert comparator.messages == ["Section sec-x is not found.",
                                       "Section sec-y is not found."]
    assert source.reloads == 1
    assert result == [("sec-1", "<p>a</p>")]


def test_incomplete_data_is_reloaded():
    partial = {"r1": {"sec-1": _section(None)}, "r2": {"sec-1": _section(None)}}
    full = {"r1": {"sec-1": _section("<p>a</p>")}, "r2": {"sec-1": _section("<p>b</p>")}}
    source = DictSectionSource(partial, full)
    with Comparator(source) as comparator:
        (_sid, html), = asyncio.run(comparator.compare("r1", "r2", ["sec-1"]))
        assert comparator.messages == []
    assert source.reloads == 1
    assert "htmldiff-del" in html and "htmldiff-ins" in html


def test_markup_only_change_note():
    source = _source({"sec-1": '<p class="a">same</p>'}, {"sec-1": '<p class="b">same</p>'})
    with Comparator(source) as comparator:
        asyncio.run(comparator.compare("r1", "r2", ["sec-1"]))
        assert comparator.stat == "+0 -0 (changes in markup or something)"


def test_identical_sections_have_no_note():
    source = _source({"sec-1": "<p>same</p>"}, {"sec-1": "<p>same</p>"})
    with Comparator(source) as comparator:
        asyncio.run(comparator.compare("r1", "r2", ["sec-1"]))
        assert comparator.stat == "+0 -0"


def test_excluded_content_is_not_diffed():
    source = _source({"sec-1": '<p>a</p><div id="excluded-sec-2"><p>old</p></div>'},
                     {"sec-1": '<p>a</p><div id="excluded-sec-2"><p>new</p></div>'})
    with Comparator(source) as comparator:
        (_sid, html), = asyncio.run(comparator.compare("r1", "r2", ["sec-1"]))
        assert comparator.stat == "+0 -0 (changes in markup or something)"
    assert html == '<p>a</p><div id="excluded-sec-2"></div>'


def test_remove_excluded_content_nested():
    events = parse_html('<section><div id="excluded-x">gone<p>too</p></div>'
                        '<div id="kept">stays</div></section>')
    assert inner_html(remove_excluded_content(events)) == (
        '<section><div id="excluded-x"></div><div id="kept">stays</div></section>'
    )


def test_count_changes():
    events = parse_html('<p><ins class="htmldiff-ins htmldiff-change">a</ins></p>'
                        '<li class="x htmldiff-del htmldiff-change">b</li>'
                        '<del class="htmldiff-del htmldiff-change">c</del>')
    assert count_changes(events) == (1, 2)


def test_path_diff_mode():
    source = _source({"sec-1": "<p>Foo bar</p>"}, {"sec-1": "<p>Foo baz</p>"})
    with Comparator(source) as comparator:
        comparator.config.path_diff = True
        (_sid, html), = asyncio.run(comparator.compare("r1", "r2", ["sec-1"]))
    assert html == ('<p>Foo <del class="htmldiff-del htmldiff-change">bar</del>'
                    '<ins class="htmldiff-ins htmldiff-change">baz</ins></p>')


def test_new_comparison_cancels_running_one():
    source = _source({"sec-1": "<p>one</p>", "sec-2": "<p>two</p>"},
                     {"sec-1": "<p>one!</p>", "sec-2": "<p>two!</p>"})
    gated = _GatedWorker(create_tree_worker())

    async def scenario(comparator):
        gated.gate = asyncio.Event()
        gated.entered = asyncio.Event()
        first = asyncio.ensure_future(comparator.compare("r1", "r2", ["sec-1"]))
        await gated.entered.wait()
        second = asyncio.ensure_future(comparator.compare("r1", "r2", ["sec-2"]))
        await asyncio.sleep(0)
        assert comparator.processing
        gated.gate.set()
        return await first, await second

    with Comparator(source, tree_worker=gated) as comparator:
        first, second = asyncio.run(scenario(comparator))
        assert first is None
        assert [sid for sid, _html in second] == ["sec-2"]
        assert comparator.result == second
        assert not comparator.processing
    assert gated.calls == 2


XREF = '<p>See <span class="excluded-xref" excluded-id="sec-b"></span>.</p>'


def _numbered_source(from_num, to_num, **kwargs) -> DictSectionSource:
    return DictSectionSource({
        "r1": {"sec-a": _section(XREF), "sec-b": _section("<p>b</p>", num=from_num)},
        "r2": {"sec-a": _section(XREF), "sec-b": _section("<p>b</p>", num=to_num)},
    }, **kwargs)


def test_renumbered_reference_is_a_change():
    with Comparator(_numbered_source("3", "4")) as comparator:
        (_sid, html), = asyncio.run(comparator.compare("r1", "r2", ["sec-a"]))
        assert comparator.stat == "+1 -1"
    assert html == ('<p>See <span><del class="htmldiff-del htmldiff-change">3</del>'
                    '<ins class="htmldiff-ins htmldiff-change">4</ins></span>.</p>')


def test_unchanged_number_is_written_as_text():
    with Comparator(_numbered_source("3", "3")) as comparator:
        (_sid, html), = asyncio.run(comparator.compare("r1", "r2", ["sec-a"]))
        assert comparator.stat == "+0 -0"
    assert html == "<p>See <span>3</span>.</p>"


def test_from_and_to_views_use_their_own_numbers():
    with Comparator(_numbered_source("3", "4")) as comparator:
        (_sid, from_html), = asyncio.run(comparator.compare("r1", "r2", ["sec-a"], "from"))
        (_sid, to_html), = asyncio.run(comparator.compare("r1", "r2", ["sec-a"], "to"))
    assert from_html == "<p>See <span>3</span>.</p>"
    assert to_html == "<p>See <span>4</span>.</p>"


def test_missing_number_reloads_once():
    html = '<figure><figcaption>Figure <span class="excluded-caption-num" excluded-id="fig-1"></span></figcaption></figure>'
    source = _source({"sec-a": html}, {"sec-a": html},
                     full_figures={"r1": {"fig-1": "2"}, "r2": {"fig-1": "2"}})
    with Comparator(source) as comparator:
        (_sid, out), = asyncio.run(comparator.compare("r1", "r2", ["sec-a"]))
    assert source.reloads == 1
    assert out == "<figure><figcaption>Figure <span>2</span></figcaption></figure>"


def test_number_still_missing_after_reload():
    html = '<p><span class="excluded-secnum" excluded-id="nowhere"></span> Intro</p>'
    source = _source({"sec-a": html, "sec-b": html}, {"sec-a": html, "sec-b": html})
    with Comparator(source) as comparator:
        result = asyncio.run(comparator.compare("r1", "r2", ["sec-a", "sec-b"]))
    assert source.reloads == 1
    assert [out for _sid, out in result] == [html, html]


def test_fill_excluded_numbers():
    events = parse_html('<h1><span class="secnum excluded-secnum" excluded-id="s"></span> T</h1>'
                        '<a class="excluded-xref" excluded-id="f">x</a>')
    filled, complete = fill_excluded_numbers(events, "diff", {"s": "1.2"}, {"s": "1.2", "f": "5"})
    assert complete
    assert inner_html(filled) == '<h1><span class="secnum">1.2</span> T</h1><a>5</a>'
    _filled, complete = fill_excluded_numbers(events, "from", {"s": "1.2"}, {})
    assert not complete
