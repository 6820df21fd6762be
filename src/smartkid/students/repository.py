from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_by_parent(self, parent_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_classes(self, class_ids: Iterable[int]) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_ids(self, student_ids: Optional[Iterable[int]]) -> Sequence[Student]:
        """``None`` lists every student."""

        raise NotImplementedError

    def create_student(
        self,
        *,
        first_name: str,
        last_name: str,
        date_of_birth: str,
        profile_image: Optional[str],
        parent_id: Optional[int],
        class_id: Optional[int],
    ) -> Student:
        raise NotImplementedError

    def update_student(self, student_id: int, changes: Mapping[str, Any]) -> Optional[Student]:
        raise NotImplementedError

    def delete_student(self, student_id: int) -> bool:
        raise NotImplementedError

    def count_all(self) -> int:
        raise NotImplementedError
