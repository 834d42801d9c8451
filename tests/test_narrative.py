"""Tests for the narrative analyzer client.

The Groq client is replaced by a fake that counts requests, so no test
touches the network.
"""

import asyncio

from conftest import make_counseling, make_gathering
from pastoral_analytics.config.constants import PARSE_FALLBACKS, SECTION_DELIMITER, SERVICE_FAILURE_TEXT
from pastoral_analytics.features.metrics import aggregate
from pastoral_analytics.features.narrative import NarrativeAnalyzer, build_prompt, parse_sections
from pastoral_analytics.models.schema import NarrativeStatus

LABEL = "Março de 2024"


def _summary():
    return aggregate([make_gathering()], [make_counseling(resolved=True)], [], period=LABEL)


def _analyzer(fake, api_key="gsk-test"):
    return NarrativeAnalyzer(api_key=api_key, model="test-model", client_factory=fake.factory)


def test_missing_credential_skips_network(fake_groq):
    fake = fake_groq(content="irrelevant")
    result = asyncio.run(_analyzer(fake, api_key=None).analyze(_summary(), LABEL))

    assert fake.factory_calls == 0
    assert fake.call_count == 0
    assert result.status is NarrativeStatus.MISSING_CREDENTIAL
    assert "API" in result.raw_text
    assert all(text for text in result.sections().values())


def test_blank_credential_counts_as_missing(fake_groq):
    fake = fake_groq(content="irrelevant")
    result = asyncio.run(_analyzer(fake, api_key="   ").analyze(_summary(), LABEL))

    assert fake.call_count == 0
    assert result.status is NarrativeStatus.MISSING_CREDENTIAL


def test_empty_period_returns_insufficient_data_without_calling(fake_groq):
    fake = fake_groq(content="irrelevant")
    result = asyncio.run(_analyzer(fake).analyze(aggregate([], [], [], period=LABEL), LABEL))

    assert fake.call_count == 0
    assert result.status is NarrativeStatus.INSUFFICIENT_DATA
    assert result.executive_summary == "Nenhum registro encontrado para o período selecionado."


def test_empty_period_without_key_reports_insufficient_data(fake_groq):
    fake = fake_groq(content="irrelevant")
    result = asyncio.run(_analyzer(fake, api_key=None).analyze(aggregate([], [], [], period=LABEL), LABEL))

    assert fake.factory_calls == 0
    assert fake.call_count == 0
    assert result.status is NarrativeStatus.INSUFFICIENT_DATA


def test_full_response_is_split_into_four_sections(fake_groq):
    text = SECTION_DELIMITER.join(["  Roteiro  ", "Resumo", "Tendências", "1. Ação\n2. Ação\n3. Ação "])
    fake = fake_groq(content=text)
    result = asyncio.run(_analyzer(fake).analyze(_summary(), LABEL))

    assert fake.call_count == 1
    assert result.status is NarrativeStatus.OK
    assert result.presentation_script == "Roteiro"
    assert result.executive_summary == "Resumo"
    assert result.trends_and_anomalies == "Tendências"
    assert result.strategic_recommendations == "1. Ação\n2. Ação\n3. Ação"
    assert result.raw_text == text


def test_request_carries_prompt_and_model(fake_groq):
    fake = fake_groq(content="a|||b|||c|||d")
    summary = _summary()
    asyncio.run(_analyzer(fake).analyze(summary, LABEL))

    request = fake.completions.calls[0]
    assert request["model"] == "test-model"
    assert request["messages"] == [{"role": "user", "content": build_prompt(summary, LABEL)}]


def test_short_response_gets_section_fallbacks(fake_groq):
    fake = fake_groq(content=f"Roteiro{SECTION_DELIMITER}Resumo")
    result = asyncio.run(_analyzer(fake).analyze(_summary(), LABEL))

    assert result.presentation_script == "Roteiro"
    assert result.executive_summary == "Resumo"
    assert result.trends_and_anomalies == PARSE_FALLBACKS["trends_and_anomalies"]
    assert result.strategic_recommendations == PARSE_FALLBACKS["strategic_recommendations"]


def test_parse_sections_replaces_blank_positions_and_ignores_extras():
    result = parse_sections(" |||Resumo|||   |||Recs|||extra")

    assert result.presentation_script == PARSE_FALLBACKS["presentation_script"]
    assert result.executive_summary == "Resumo"
    assert result.trends_and_anomalies == PARSE_FALLBACKS["trends_and_anomalies"]
    assert result.strategic_recommendations == "Recs"


def test_transport_error_maps_to_failure_result(fake_groq):
    fake = fake_groq(error=TimeoutError("timed out"))
    result = asyncio.run(_analyzer(fake).analyze(_summary(), LABEL))

    assert fake.call_count == 1
    assert result.status is NarrativeStatus.SERVICE_FAILURE
    assert result.raw_text == ""
    assert set(result.sections().values()) == {SERVICE_FAILURE_TEXT}


def test_empty_payload_maps_to_failure_result(fake_groq):
    fake = fake_groq(content=None)
    result = asyncio.run(_analyzer(fake).analyze(_summary(), LABEL))

    assert result.status is NarrativeStatus.SERVICE_FAILURE
    assert result.raw_text == ""


def test_client_construction_error_is_contained():
    def broken_factory(api_key):
        raise RuntimeError("bad client")

    analyzer = NarrativeAnalyzer(api_key="gsk-test", model="m", client_factory=broken_factory)
    result = asyncio.run(analyzer.analyze(_summary(), LABEL))

    assert result.status is NarrativeStatus.SERVICE_FAILURE


def test_prompt_contains_summary_and_protocol():
    prompt = build_prompt(_summary(), LABEL)

    assert LABEL in prompt
    assert '"totalAttendance": 50' in prompt
    assert prompt.count(SECTION_DELIMITER) >= 4
    assert "ROTEIRO DE APRESENTAÇÃO" in prompt
