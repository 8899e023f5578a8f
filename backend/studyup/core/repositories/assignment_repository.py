from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from studyup.core.models.assignment import AssignmentSnapshot, MaterialSnapshot


class AssignmentRepository(ABC):
    """Read-only access to assignments and their study materials.

    Implementations perform I/O and therefore expose async methods. Store
    failures are raised as `StoreError`.
    """

    @abstractmethod
    async def get_snapshot(self, assignment_id: str) -> AssignmentSnapshot | None:  # pragma: no cover
        """Fetch the prompt-relevant fields of an assignment or return None if missing."""

    @abstractmethod
    async def list_material_snapshots(
        self, assignment_id: str, *, limit: int = 5
    ) -> Sequence[MaterialSnapshot]:  # pragma: no cover
        """Return up to `limit` materials attached to the assignment, in store order."""
