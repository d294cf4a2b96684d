import pytest

from posturekit.slices import (
    string_in_slice,
    trim,
    trim_stable,
    trim_stable_unique,
    trim_unique,
    trim_unique_ids,
    unique_resources_ids,
    unique_strings,
)

# (name, origin, trim_from, expected, expected_stable)
TRIM_CASES = [
    ("trim from beginning", ["a", "b", "c"], ["a"], ["c", "b"], ["b", "c"]),
    ("trim from middle", ["a", "b", "c"], ["b"], ["a", "c"], None),
    ("trim from end", ["a", "b", "c"], ["c"], ["a", "b"], None),
    ("do nothing", ["a", "b", "c"], ["d"], ["a", "b", "c"], None),
    ("trim all", ["a", "b", "c"], ["a", "b", "c"], [], None),
    ("trimFrom larger", ["a", "b", "c"], ["a", "b", "e", "d"], ["c"], None),
    ("trim all not sorted", ["c", "a", "b"], ["a", "b", "c"], [], None),
    ("nothing to do 1", [], ["d"], [], None),
    ("nothing to do 2", ["a"], [], ["a"], None),
    ("nil origin", None, [], [], None),
    ("nil trim list", ["a", "b"], [], ["a", "b"], None),
]

IDS = [case[0] for case in TRIM_CASES]


def _copy(origin):
    return None if origin is None else list(origin)


@pytest.mark.parametrize("name,origin,trim_from,expected,expected_stable", TRIM_CASES, ids=IDS)
def test_trim(name, origin, trim_from, expected, expected_stable):
    assert trim(_copy(origin), trim_from) == expected


@pytest.mark.parametrize("name,origin,trim_from,expected,expected_stable", TRIM_CASES, ids=IDS)
def test_trim_stable(name, origin, trim_from, expected, expected_stable):
    want = expected_stable if expected_stable is not None else expected
    assert trim_stable(_copy(origin), trim_from) == want


@pytest.mark.parametrize("name,origin,trim_from,expected,expected_stable", TRIM_CASES, ids=IDS)
def test_trim_unique(name, origin, trim_from, expected, expected_stable):
    assert trim_unique(_copy(origin), trim_from) == expected


@pytest.mark.parametrize("name,origin,trim_from,expected,expected_stable", TRIM_CASES, ids=IDS)
def test_trim_stable_unique(name, origin, trim_from, expected, expected_stable):
    want = expected_stable if expected_stable is not None else expected
    assert trim_stable_unique(_copy(origin), trim_from) == want


def test_trim_stable_trims_but_does_not_dedupe():
    assert trim_stable(["c", "a", "b", "c", "b"], ["a", "b", "e"]) == ["c", "c"]


def test_trim_stable_unique_dedupes_and_trims():
    assert trim_stable_unique(["c", "a", "b", "c", "b"], ["a", "b", "e"]) == ["c"]


def test_trim_trims_but_does_not_dedupe():
    assert trim(["c", "a", "b", "c", "b"], ["a", "b", "e"]) == ["c", "c"]


def test_trim_does_not_modify_input():
    origin = ["a", "b", "c"]
    trim(origin, ["a"])
    trim_unique(origin, ["a"])
    assert origin == ["a", "b", "c"]


def test_unique_strings():
    assert unique_strings(["B", "B", "A", "A", "B", "C", "B", "A"]) == ["B", "A", "C"]


def test_unique_strings_empty():
    assert unique_strings([]) == []


def test_unique_strings_none():
    assert unique_strings(None) == []


def test_string_in_slice():
    assert string_in_slice(["A", "B", "C"], "B") is True
    assert string_in_slice(["A", "B", "C"], "D") is False
    assert string_in_slice([], "D") is False
    assert string_in_slice(None, "D") is False


def test_unique_resources_ids():
    assert unique_resources_ids(["B", "B", "A", "A", "B", "C", "B", "A"]) == ["B", "A", "C"]


def test_trim_unique_ids_keeps_order():
    assert trim_unique_ids(["a", "b", "c"], ["a"]) == ["b", "c"]