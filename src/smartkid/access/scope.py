from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from ..classes.repository import ClassRepository
from ..core.enums import Role
from ..students.repository import StudentRepository
from ..users.model import Identity

T = TypeVar("T")


@dataclass(frozen=True)
class StudentScope:
    """Student ids a caller is entitled to; ``student_ids=None`` means every student."""

    student_ids: Optional[frozenset[int]] = None

    @classmethod
    def unrestricted(cls) -> "StudentScope":
        return cls(None)

    @classmethod
    def of(cls, student_ids: Iterable[int]) -> "StudentScope":
        return cls(frozenset(int(s) for s in student_ids))

    @property
    def is_unrestricted(self) -> bool:
        return self.student_ids is None

    @property
    def is_empty(self) -> bool:
        return self.student_ids is not None and not self.student_ids

    def allows(self, student_id: int) -> bool:
        return self.student_ids is None or int(student_id) in self.student_ids

    def intersect(self, student_ids: Iterable[int]) -> "StudentScope":
        ids = frozenset(int(s) for s in student_ids)
        return StudentScope(ids if self.student_ids is None else self.student_ids & ids)

    def keep(self, items: Sequence[T], key: Callable[[T], int]) -> list[T]:
        return [item for item in items if self.allows(key(item))]


class ScopeResolver:
    """Derive a caller's entitlement from ownership relations in the store."""

    def __init__(self, students: StudentRepository, classes: ClassRepository):
        self._students = students
        self._classes = classes

    def taught_class_ids(self, identity: Identity) -> frozenset[int]:
        if identity.role != Role.TEACHER:
            return frozenset()
        return frozenset(c.id for c in self._classes.list_by_teacher(identity.id))

    def resolve(self, identity: Identity) -> StudentScope:
        if identity.role == Role.PARENT:
            return StudentScope.of(s.id for s in self._students.list_by_parent(identity.id))

        if identity.role == Role.TEACHER:
            class_ids = self.taught_class_ids(identity)
            if not class_ids:
                return StudentScope.of(())
            return StudentScope.of(s.id for s in self._students.list_by_classes(class_ids))

        return StudentScope.unrestricted()

    def visible_class_ids(self, identity: Identity) -> Optional[frozenset[int]]:
        """Classes a caller may see; ``None`` means all of them.

        Parents see the classes their children attend, teachers the ones they teach.
        """
        if identity.role == Role.PARENT:
            return frozenset(
                s.class_id for s in self._students.list_by_parent(identity.id) if s.class_id is not None
            )
        if identity.role == Role.TEACHER:
            return self.taught_class_ids(identity)
        return None
