import asyncio
import logging
import re
import sys
from pathlib import Path

# Ensure we import the repo-local specdiff (not a pip-installed one).
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from specdiff import Comparator, DictSectionSource, render_tree_diff  # noqa: E402


def markers_in(html: str) -> list[str]:
    return re.findall(r'class="[^"]*htmldiff-(ins|del)[^"]*"', html)


def main():
    logging.basicConfig(level=logging.DEBUG if "-v" in sys.argv else logging.INFO)

    before = (
        '<p>Let <var>x</var> be ? ToNumber(<var>value</var>).</p>'
        '<ol><li>If <var>x</var> is NaN, return NaN.</li>'
        '<li>Return <var>x</var>.</li></ol>'
    )
    after = (
        '<p>Let <var>x</var> be ? ToNumeric(<var>value</var>).</p>'
        '<ol><li>If <var>x</var> is NaN, return NaN.</li>'
        '<li>If <var>x</var> is a BigInt, throw a TypeError exception.</li>'
        '<li>Return <var>x</var>.</li></ol>'
    )
    out = render_tree_diff(before, after)
    print("markers:", markers_in(out))
    print(out)

    source = DictSectionSource({
        "r1": {"sec-tonumber": {"html": before, "num": "7.1.4", "title": "ToNumber"}},
        "r2": {"sec-tonumber": {"html": after, "num": "7.1.4", "title": "ToNumber"}},
    })
    with Comparator(source) as comparator:
        result = asyncio.run(comparator.compare("r1", "r2", ["sec-tonumber", "sec-missing"]))
        print("stat:", comparator.stat)
        print("messages:", comparator.messages)
    for section_id, html in result:
        print(section_id, html)


if __name__ == "__main__":
    main()
