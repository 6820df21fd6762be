from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SchoolClass:
    """Domain entity: a class group owned by one teacher."""

    id: int
    name: str
    teacher_id: Optional[int]
