from __future__ import annotations

import pytest

from coderunner.normalize import OutputRecord, normalize_output


def test_array_of_objects_keeps_positions() -> None:
    records = normalize_output([{"a": 1}, {"a": 2}])
    assert [record.as_dict() for record in records] == [
        {"json": {"a": 1}, "index": 0},
        {"json": {"a": 2}, "index": 1},
    ]


def test_json_field_is_unwrapped() -> None:
    records = normalize_output([{"json": {"b": 2}, "extra": True}, {"json": None}])
    assert records == [OutputRecord(json={"b": 2}, index=0), OutputRecord(json=None, index=1)]


def test_scalars_and_nested_arrays_are_wrapped() -> None:
    records = normalize_output([1, "x", None, [1, 2]])
    assert [record.json for record in records] == [
        {"value": 1},
        {"value": "x"},
        {"value": None},
        {"value": [1, 2]},
    ]
    assert [record.index for record in records] == [0, 1, 2, 3]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ({"a": 1}, {"a": 1}),
        (None, {}),
        (42, 42),
        ("text", "text"),
        (False, False),
    ],
)
def test_non_array_becomes_single_record(value, expected) -> None:
    assert normalize_output(value) == [OutputRecord(json=expected, index=0)]


def test_empty_array_yields_no_records() -> None:
    assert normalize_output([]) == []
