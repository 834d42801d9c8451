"""Shared fixtures: record factories, settings pointed at tmp dirs, fake Groq clients."""

from pathlib import Path
from types import SimpleNamespace

import pytest

from pastoral_analytics.config.settings import Settings
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


def make_gathering(id="g1", date="2024-03-10", men=10, women=20, adolescents=5, children=10, remote=5,
                   category=GatheringCategory.SUNDAY_SERVICE, note=None):
    attendance = Demographics(men=men, women=women, adolescents=adolescents, children=children, remote=remote)
    return GatheringRecord.create(id=id, date=date, category=category, attendance=attendance, note=note)


def make_counseling(id="c1", date="2024-03-12", resolved=False, member_id="m1"):
    return CounselingSession(
        id=id,
        date=date,
        member=MemberRef(id=member_id, name="Ana Souza", phone="11 99999-0000"),
        notes="Acompanhamento familiar",
        resolved=resolved,
    )


def make_activity(id="a1", date="2024-03-15", category=ActivityCategory.PASTORAL_VISIT,
                  description="Visita à família Lima", location="Bairro Centro"):
    return ActivityRecord(id=id, date=date, category=category, description=description, location=location)


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeGroq:
    """Stands in for groq.AsyncGroq; counts chat completion requests."""

    def __init__(self, content=None, error=None):
        self.completions = FakeCompletions(content=content, error=error)
        self.chat = SimpleNamespace(completions=self.completions)
        self.factory_calls = 0

    def factory(self, api_key):
        self.factory_calls += 1
        return self

    @property
    def call_count(self):
        return len(self.completions.calls)


@pytest.fixture
def fake_groq():
    return FakeGroq


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    output_dir = tmp_path / "output"
    return Settings(
        base_dir=tmp_path,
        data_dir=tmp_path / "db",
        output_dir=output_dir,
        table_dir=output_dir / "tables",
        fig_dir=output_dir / "figures",
        owner_id="owner-1",
        groq_api_key=None,
        groq_model="test-model",
        narrative_temperature=0.2,
        narrative_timeout_seconds=5.0,
    )


@pytest.fixture
def march_view() -> AggregateView:
    return AggregateView(
        gatherings=[
            make_gathering(id="g1", date="2024-03-03"),
            make_gathering(id="g2", date="2024-03-10", men=12, women=18, adolescents=6, children=4, remote=10),
            make_gathering(id="g3", date="2024-02-25"),
            make_gathering(id="g4", date="2023-03-05"),
        ],
        members=[Member(id="m1", name="Ana Souza", phone="11 99999-0000", since="2020-01-01")],
        counseling=[
            make_counseling(id="c1", date="2024-03-12", resolved=True),
            make_counseling(id="c2", date="2024-03-20", resolved=False),
            make_counseling(id="c3", date="2024-04-01", resolved=True),
        ],
        activities=[
            make_activity(id="a1", date="2024-03-15"),
            make_activity(id="a2", date="2024-03-28", category=ActivityCategory.HOME_DEDICATION, location=None),
            make_activity(id="a3", date="2024-01-15"),
        ],
    )
