from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

from pastoral_analytics.models.schema import (
    ActivityCategory,
    ActivityRecord,
    AggregateView,
    CounselingSession,
    Demographics,
    GatheringCategory,
    GatheringRecord,
    Member,
    MemberRef,
)

COLLECTIONS = ["gatherings", "members", "counseling", "activities"]

COLUMNS = {
    "gatherings": ["id", "owner_id", "date", "type", "men", "women", "adolescents", "children", "remote", "total", "notes"],
    "members": ["id", "owner_id", "name", "phone", "since"],
    "counseling": ["id", "owner_id", "date", "member_id", "member_name", "member_phone", "notes", "resolved"],
    "activities": ["id", "owner_id", "date", "type", "description", "location"],
}


def load_json(data_dir: Path, name: str) -> pd.DataFrame:
    path = data_dir / f"{name}.json"
    if not path.exists() or not path.read_text(encoding="utf-8").strip():
        return pd.DataFrame(columns=COLUMNS[name])
    df = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    for col in COLUMNS[name]:
        if col not in df.columns:
            df[col] = None
    return df


def _opt_str(value: Any) -> str | None:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


def _str(value: Any) -> str:
    return _opt_str(value) or ""


def _int(value: Any) -> int:
    if value is None or pd.isna(value):
        return 0
    return int(value)


def gathering_from_row(row: dict) -> GatheringRecord:
    attendance = Demographics(
        men=_int(row.get("men")),
        women=_int(row.get("women")),
        adolescents=_int(row.get("adolescents")),
        children=_int(row.get("children")),
        remote=_int(row.get("remote")),
    )
    return GatheringRecord(
        id=_str(row.get("id")),
        date=_str(row.get("date")),
        category=GatheringCategory(row.get("type")),
        attendance=attendance,
        total=_int(row.get("total")),
        note=_opt_str(row.get("notes")),
    )


def gathering_to_row(record: GatheringRecord) -> dict:
    return {
        "id": record.id,
        "date": record.date,
        "type": record.category.value,
        "men": record.attendance.men,
        "women": record.attendance.women,
        "adolescents": record.attendance.adolescents,
        "children": record.attendance.children,
        "remote": record.attendance.remote,
        "total": record.total,
        "notes": record.note,
    }


def member_from_row(row: dict) -> Member:
    return Member(id=_str(row.get("id")), name=_str(row.get("name")), phone=_str(row.get("phone")), since=_str(row.get("since")))


def member_to_row(member: Member) -> dict:
    return {"id": member.id, "name": member.name, "phone": member.phone, "since": member.since}


def counseling_from_row(row: dict) -> CounselingSession:
    return CounselingSession(
        id=_str(row.get("id")),
        date=_str(row.get("date")),
        member=MemberRef(
            id=_str(row.get("member_id")),
            name=_str(row.get("member_name")),
            phone=_str(row.get("member_phone")),
        ),
        notes=_str(row.get("notes")),
        resolved=bool(row.get("resolved")) if not pd.isna(row.get("resolved")) else False,
    )


def counseling_to_row(session: CounselingSession) -> dict:
    return {
        "id": session.id,
        "date": session.date,
        "member_id": session.member.id,
        "member_name": session.member.name,
        "member_phone": session.member.phone,
        "notes": session.notes,
        "resolved": session.resolved,
    }


def activity_from_row(row: dict) -> ActivityRecord:
    return ActivityRecord(
        id=_str(row.get("id")),
        date=_str(row.get("date")),
        category=ActivityCategory(row.get("type")),
        description=_str(row.get("description")),
        location=_opt_str(row.get("location")),
    )


def activity_to_row(activity: ActivityRecord) -> dict:
    return {
        "id": activity.id,
        "date": activity.date,
        "type": activity.category.value,
        "description": activity.description,
        "location": activity.location,
    }


FROM_ROW = {
    "gatherings": gathering_from_row,
    "members": member_from_row,
    "counseling": counseling_from_row,
    "activities": activity_from_row,
}


def owned_rows(df: pd.DataFrame, owner_id: str) -> list[dict]:
    scoped = df[df["owner_id"] == owner_id]
    return scoped.to_dict(orient="records")


def load_all(data_dir: Path, owner_id: str) -> AggregateView:
    data = {name: load_json(data_dir, name) for name in COLLECTIONS}
    records = {name: [FROM_ROW[name](row) for row in owned_rows(data[name], owner_id)] for name in COLLECTIONS}
    return AggregateView(
        gatherings=records["gatherings"],
        members=records["members"],
        counseling=records["counseling"],
        activities=records["activities"],
    )
