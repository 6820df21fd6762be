from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Activity:
    """Domain entity: an activity a class offers, picked from when writing daily reports."""

    id: int
    name: str
    class_id: int
