from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Student:
    """Domain entity: a child, owned by one parent and enrolled in one class.

    Nearly every access decision pivots on ``parent_id`` and ``class_id``.
    """

    id: int
    first_name: str
    last_name: str
    date_of_birth: str
    profile_image: Optional[str] = None
    parent_id: Optional[int] = None
    class_id: Optional[int] = None
