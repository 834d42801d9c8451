from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional

from pastoral_analytics.io.store import RecordStore
from pastoral_analytics.models.errors import SessionClosed, StoreError
from pastoral_analytics.models.schema import (
    ActivityRecord,
    AggregateView,
    CounselingSession,
    GatheringRecord,
    Member,
)

logger = logging.getLogger(__name__)


class Session:
    """Signed-in scope of one owner and the records loaded for it.

    Mutations follow "update locally, then persist": the local view changes
    at once and the store is written afterwards. When the write fails the
    local change is rolled back, a warning is logged and the method returns
    ``False``, so local and remote state never silently diverge.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store
        self.owner_id: Optional[str] = None
        self._view = AggregateView()

    @classmethod
    def sign_in(cls, store: RecordStore, owner_id: str) -> "Session":
        session = cls(store)
        session.owner_id = owner_id
        session.refresh()
        return session

    def sign_out(self) -> None:
        self.owner_id = None
        self._view = AggregateView()

    @property
    def is_active(self) -> bool:
        return self.owner_id is not None

    @property
    def view(self) -> AggregateView:
        return self._view

    def _require_owner(self) -> str:
        if self.owner_id is None:
            raise SessionClosed("No owner is signed in")
        return self.owner_id

    def refresh(self) -> AggregateView:
        self._view = self.store.load_all(self._require_owner())
        logger.info(
            "Loaded %d gatherings, %d members, %d counseling sessions, %d activities",
            len(self._view.gatherings),
            len(self._view.members),
            len(self._view.counseling),
            len(self._view.activities),
        )
        return self._view

    def _apply(self, new_view: AggregateView, persist: Callable[[], None], action: str) -> bool:
        self._require_owner()
        previous = self._view
        self._view = new_view
        try:
            persist()
        except StoreError as exc:
            self._view = previous
            logger.warning("Rolled back %s after failed write: %s", action, exc)
            return False
        return True

    def add_gathering(self, record: GatheringRecord) -> bool:
        owner = self._require_owner()
        view = replace(self._view, gatherings=[*self._view.gatherings, record])
        return self._apply(view, lambda: self.store.insert_gathering(owner, record), f"add gathering {record.id}")

    def delete_gathering(self, record_id: str) -> bool:
        view = replace(self._view, gatherings=[g for g in self._view.gatherings if g.id != record_id])
        return self._apply(view, lambda: self.store.delete_gathering(record_id), f"delete gathering {record_id}")

    def add_member(self, member: Member) -> bool:
        owner = self._require_owner()
        view = replace(self._view, members=[*self._view.members, member])
        return self._apply(view, lambda: self.store.insert_member(owner, member), f"add member {member.id}")

    def update_member(self, member: Member) -> bool:
        # Past counseling sessions keep their own copy of the member's details.
        view = replace(self._view, members=[member if m.id == member.id else m for m in self._view.members])
        return self._apply(view, lambda: self.store.update_member(member), f"update member {member.id}")

    def add_counseling(self, session: CounselingSession) -> bool:
        owner = self._require_owner()
        view = replace(self._view, counseling=[*self._view.counseling, session])
        return self._apply(view, lambda: self.store.insert_counseling(owner, session), f"add counseling {session.id}")

    def update_counseling(self, session: CounselingSession) -> bool:
        view = replace(self._view, counseling=[session if c.id == session.id else c for c in self._view.counseling])
        return self._apply(view, lambda: self.store.update_counseling(session), f"update counseling {session.id}")

    def toggle_resolved(self, session_id: str) -> bool:
        self._require_owner()
        current = next((c for c in self._view.counseling if c.id == session_id), None)
        if current is None:
            raise KeyError(session_id)
        return self.update_counseling(current.with_resolved(not current.resolved))

    def add_activity(self, activity: ActivityRecord) -> bool:
        owner = self._require_owner()
        view = replace(self._view, activities=[*self._view.activities, activity])
        return self._apply(view, lambda: self.store.insert_activity(owner, activity), f"add activity {activity.id}")

    def delete_activity(self, record_id: str) -> bool:
        view = replace(self._view, activities=[a for a in self._view.activities if a.id != record_id])
        return self._apply(view, lambda: self.store.delete_activity(record_id), f"delete activity {record_id}")
