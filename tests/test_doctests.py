from __future__ import annotations

import doctest
import importlib


def test_doctests():
    # specdiff.list_marker is shadowed by the function of the same name.
    for name in ("specdiff", "specdiff.list_marker"):
        failures, _tests = doctest.testmod(importlib.import_module(name))
        assert failures == 0
