from __future__ import annotations

from specdiff.atomization import split_text_into, events_to_plain, plain_to_events
from specdiff.parser import parse_html, render_events


def _plain(html: str) -> dict:
    return events_to_plain(parse_html(html))


def _names(node) -> list:
    return [c if isinstance(c, str) else c["name"] for c in node["childNodes"]]


def test_split_text_punctuation_and_spaces():
    assert split_text_into([], "Hello, world.") == ["Hello", ",", " ", "world", "."]


def test_split_text_keeps_trailing_whitespace_on_words():
    assert split_text_into([], "foo bar  baz") == ["foo ", "bar  ", "baz"]
    assert split_text_into([], "f(x)") == ["f", "(", "x", ")"]


def test_split_text_reconstructs_input():
    samples = [
        "",
        "   ",
        "Let x be ? ToNumber(value).",
        "a\n  b\tc [[Slot]]: 1; 2! why?",
        "  leading and trailing  ",
    ]
    for text in samples:
        assert "".join(split_text_into([], text)) == text


def test_serialize_element():
    node = _plain('<p id="x" class="c">Hello, <b>big</b> world.</p>')
    assert node["name"] == "div"
    assert "id" not in node
    (p,) = node["childNodes"]
    assert p["name"] == "p"
    assert p["id"] == "x"
    assert p["attributes"] == {"id": "x", "class": "c"}
    assert p["childNodes"][:3] == ["Hello", ",", " "]
    assert p["childNodes"][3]["name"] == "b"
    assert p["childNodes"][3]["childNodes"] == ["big"]
    assert p["childNodes"][4:] == [" ", "world", "."]
    assert p["textLength"] == len("Hello, big world.")
    assert node["textLength"] == p["textLength"]


def test_serialize_drops_formatting_whitespace_around_blocks():
    node = _plain("<ul>\n  <li>a</li>\n  <li>b</li>\n</ul>")
    (ul,) = node["childNodes"]
    assert _names(ul) == ["li", "li"]


def test_serialize_drops_whitespace_next_to_comments():
    node = _plain("<span>a</span> <!-- c --> <span>b</span>")
    assert _names(node) == ["span", "span"]


def test_serialize_keeps_whitespace_between_inline_elements():
    node = _plain("<span>a</span> <span>b</span>")
    assert _names(node) == ["span", " ", "span"]


def test_serialize_compresses_spaces_in_text_length():
    node = _plain("<span>a   b</span>")
    assert node["textLength"] == 3


def test_serialize_round_trip():
    events = parse_html('<p id="x" class="c">Hello, <b>big</b> world.</p><pre>a  b</pre>')
    restored = plain_to_events(events_to_plain(events))
    assert render_events(restored) == render_events(events)


def test_deserialize_strings_and_attributes():
    node = {
        "name": "p",
        "attributes": {"class": "note"},
        "childNodes": ["a ", {"name": "em", "attributes": {}, "childNodes": ["b"], "textLength": 1}],
        "textLength": 3,
    }
    assert render_events(plain_to_events(node)) == '<p class="note">a <em>b</em></p>'
