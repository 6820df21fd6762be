from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Activity

DUPLICATE_ACTIVITY = "This class already has an activity with that name"


class ActivityRepository(Protocol):
    def get_by_name(self, class_id: int, name: str) -> Optional[Activity]:
        raise NotImplementedError

    def list_by_classes(self, class_ids: Iterable[int]) -> Sequence[Activity]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Activity]:
        raise NotImplementedError

    def create_activity(self, *, name: str, class_id: int) -> Activity:
        """Raise ``ConflictError`` when the class already has an activity with this name."""
        raise NotImplementedError
