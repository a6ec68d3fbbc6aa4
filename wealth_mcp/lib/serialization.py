"""JSON-safe conversion of engine results."""

from __future__ import annotations

import math
from dataclasses import asdict, is_dataclass
from datetime import date
from enum import Enum
from typing import Any


def to_jsonable(value: Any) -> Any:
    """Recursively turn dataclasses, enums and dates into plain JSON values.

    Non-finite floats become None so no NaN/Infinity reaches a JSON encoder.
    """
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {str(to_jsonable(key)): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value
