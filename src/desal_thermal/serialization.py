"""Plain-dict view of calculator inputs and results, for JSON export and reporting."""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import Any

import numpy as np


def to_record(obj: Any) -> Any:
    """Recursively convert dataclasses to dicts.

    Enums become their values, tuples become lists, numpy scalars become Python numbers and
    fields that are None are left out of the record.
    """

    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        record = {}
        for f in dataclasses.fields(obj):
            value = getattr(obj, f.name)
            if value is None:
                continue
            record[f.name] = to_record(value)
        return record
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [to_record(item) for item in obj]
    if isinstance(obj, dict):
        return {to_record(key): to_record(value) for key, value in obj.items()}
    if isinstance(obj, np.generic):
        return obj.item()
    return obj


__all__ = ["to_record"]
