from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import MilestoneCategory
from .model import Milestone


class MilestoneRepository(Protocol):
    def get_by_id(self, milestone_id: int) -> Optional[Milestone]:
        raise NotImplementedError

    def list_milestones(self, *, student_ids: Optional[Iterable[int]]) -> Sequence[Milestone]:
        raise NotImplementedError

    def create_milestone(
        self,
        *,
        student_id: int,
        title: str,
        description: Optional[str],
        date: str,
        category: MilestoneCategory,
        completed: bool,
        teacher_id: int,
    ) -> Milestone:
        raise NotImplementedError

    def update_milestone(self, milestone_id: int, changes: Mapping[str, Any]) -> Optional[Milestone]:
        raise NotImplementedError
