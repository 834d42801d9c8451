from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import Callable, Protocol

import pandas as pd

from pastoral_analytics.io.loaders import (
    COLUMNS,
    activity_to_row,
    counseling_to_row,
    gathering_to_row,
    load_all,
    load_json,
    member_to_row,
)
from pastoral_analytics.models.errors import StoreError
from pastoral_analytics.models.schema import (
    ActivityRecord,
    AggregateView,
    CounselingSession,
    GatheringRecord,
    Member,
)

logger = logging.getLogger(__name__)


def new_record_id() -> str:
    return str(uuid.uuid4())


class RecordStore(Protocol):
    def load_all(self, owner_id: str) -> AggregateView: ...

    def insert_gathering(self, owner_id: str, record: GatheringRecord) -> None: ...

    def delete_gathering(self, record_id: str) -> None: ...

    def insert_member(self, owner_id: str, member: Member) -> None: ...

    def update_member(self, member: Member) -> None: ...

    def insert_counseling(self, owner_id: str, session: CounselingSession) -> None: ...

    def update_counseling(self, session: CounselingSession) -> None: ...

    def insert_activity(self, owner_id: str, activity: ActivityRecord) -> None: ...

    def delete_activity(self, record_id: str) -> None: ...


class JsonRecordStore:
    """Record store backed by one JSON document per collection.

    Rows are flat (snake_case columns, ``owner_id`` tag); translation to the
    record types happens in ``pastoral_analytics.io.loaders``.
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    def load_all(self, owner_id: str) -> AggregateView:
        try:
            return load_all(self.data_dir, owner_id)
        except (OSError, ValueError) as exc:
            raise StoreError(f"Could not load records from {self.data_dir}: {exc}") from exc

    def _rewrite(self, name: str, change: Callable[[pd.DataFrame], pd.DataFrame]) -> None:
        path = self.data_dir / f"{name}.json"
        try:
            df = change(load_json(self.data_dir, name))
            self.data_dir.mkdir(parents=True, exist_ok=True)
            df = df[COLUMNS[name]]
            path.write_text(df.to_json(orient="records", force_ascii=False, indent=2), encoding="utf-8")
        except (OSError, ValueError) as exc:
            raise StoreError(f"Could not write {name}: {exc}") from exc

    def _insert(self, name: str, owner_id: str, row: dict) -> None:
        row = {**row, "owner_id": owner_id}

        def change(df: pd.DataFrame) -> pd.DataFrame:
            if (df["id"] == row["id"]).any():
                raise ValueError(f"duplicate id {row['id']!r}")
            new = pd.DataFrame([row], columns=COLUMNS[name])
            return new if df.empty else pd.concat([df, new], ignore_index=True)

        self._rewrite(name, change)
        logger.debug("Inserted %s %s", name, row["id"])

    def _update(self, name: str, row: dict) -> None:
        def change(df: pd.DataFrame) -> pd.DataFrame:
            mask = df["id"] == row["id"]
            if not mask.any():
                raise ValueError(f"unknown id {row['id']!r}")
            df = df.astype(object)
            for key, value in row.items():
                df.loc[mask, key] = value
            return df

        self._rewrite(name, change)

    def _delete(self, name: str, record_id: str) -> None:
        self._rewrite(name, lambda df: df[df["id"] != record_id])

    def insert_gathering(self, owner_id: str, record: GatheringRecord) -> None:
        self._insert("gatherings", owner_id, gathering_to_row(record))

    def delete_gathering(self, record_id: str) -> None:
        self._delete("gatherings", record_id)

    def insert_member(self, owner_id: str, member: Member) -> None:
        self._insert("members", owner_id, member_to_row(member))

    def update_member(self, member: Member) -> None:
        self._update("members", member_to_row(member))

    def insert_counseling(self, owner_id: str, session: CounselingSession) -> None:
        self._insert("counseling", owner_id, counseling_to_row(session))

    def update_counseling(self, session: CounselingSession) -> None:
        self._update("counseling", counseling_to_row(session))

    def insert_activity(self, owner_id: str, activity: ActivityRecord) -> None:
        self._insert("activities", owner_id, activity_to_row(activity))

    def delete_activity(self, record_id: str) -> None:
        self._delete("activities", record_id)
