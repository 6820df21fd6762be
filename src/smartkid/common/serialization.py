from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable


def camel_case(name: str) -> str:
    head, *tail = name.split("_")
    return head + "".join(part.capitalize() for part in tail)


def to_json(value: Any, *, exclude: Iterable[str] = ()) -> Any:
    """Render domain dataclasses as camelCase JSON-ready structures."""
    if is_dataclass(value) and not isinstance(value, type):
        skip = set(exclude)
        return {
            camel_case(f.name): to_json(getattr(value, f.name))
            for f in fields(value)
            if f.name not in skip
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {(k.value if isinstance(k, Enum) else str(k)): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    return value
