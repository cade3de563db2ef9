"""Coerce the child's JSON output into indexed output records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class OutputRecord:
    json: Any
    index: int

    def as_dict(self) -> dict[str, Any]:
        return {"json": self.json, "index": self.index}


def _payload(element: Any) -> Any:
    if isinstance(element, dict):
        if "json" in element:
            return element["json"]
        return element
    return {"value": element}


def normalize_output(output: Any) -> list[OutputRecord]:
    """Map a parsed JSON value to output records.

    A bare value becomes a single record at index 0 (``null`` becomes ``{}``).
    Array elements keep their position as index; objects carrying a ``json``
    key are unwrapped, other objects pass through and scalars or nested
    arrays are wrapped as ``{"value": element}``.
    """

    if not isinstance(output, list):
        return [OutputRecord(json=output if output is not None else {}, index=0)]
    return [OutputRecord(json=_payload(element), index=index) for index, element in enumerate(output)]
