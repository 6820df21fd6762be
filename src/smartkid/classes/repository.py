from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import SchoolClass


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[SchoolClass]:
        raise NotImplementedError

    def list_by_teacher(self, teacher_id: int) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def list_by_ids(self, class_ids: Iterable[int]) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def list_all(self) -> Sequence[SchoolClass]:
        raise NotImplementedError

    def create_class(self, *, name: str, teacher_id: Optional[int]) -> SchoolClass:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError
