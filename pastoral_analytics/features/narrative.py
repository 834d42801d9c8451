from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

from groq import AsyncGroq

from pastoral_analytics.config.constants import (
    INSUFFICIENT_DATA_TEXT,
    MISSING_CREDENTIAL_TEXT,
    PARSE_FALLBACKS,
    PROMPT_TEMPLATE,
    SECTION_DELIMITER,
    SECTION_KEYS,
    SERVICE_FAILURE_TEXT,
)
from pastoral_analytics.config.settings import Settings
from pastoral_analytics.models.errors import (
    InsufficientPeriodData,
    MissingCredential,
    NarrativeServiceFailure,
)
from pastoral_analytics.models.schema import NarrativeResult, NarrativeStatus, SummaryMetrics

logger = logging.getLogger(__name__)


def missing_credential_result() -> NarrativeResult:
    return NarrativeResult(
        presentation_script=MISSING_CREDENTIAL_TEXT["presentation_script"],
        executive_summary=MISSING_CREDENTIAL_TEXT["executive_summary"],
        trends_and_anomalies=MISSING_CREDENTIAL_TEXT["trends_and_anomalies"],
        strategic_recommendations=MISSING_CREDENTIAL_TEXT["strategic_recommendations"],
        raw_text=MISSING_CREDENTIAL_TEXT["raw_text"],
        status=NarrativeStatus.MISSING_CREDENTIAL,
    )


def insufficient_data_result() -> NarrativeResult:
    return NarrativeResult(**INSUFFICIENT_DATA_TEXT, raw_text="", status=NarrativeStatus.INSUFFICIENT_DATA)


def service_failure_result() -> NarrativeResult:
    return NarrativeResult(
        presentation_script=SERVICE_FAILURE_TEXT,
        executive_summary=SERVICE_FAILURE_TEXT,
        trends_and_anomalies=SERVICE_FAILURE_TEXT,
        strategic_recommendations=SERVICE_FAILURE_TEXT,
        raw_text="",
        status=NarrativeStatus.SERVICE_FAILURE,
    )


def build_prompt(summary: SummaryMetrics, period_label: str) -> str:
    payload = json.dumps(summary.as_payload(), indent=2, ensure_ascii=False)
    return PROMPT_TEMPLATE.format(period=period_label, payload=payload, delimiter=SECTION_DELIMITER)


def parse_sections(text: str) -> NarrativeResult:
    parts = text.split(SECTION_DELIMITER)
    sections: dict[str, str] = {}
    for idx, key in enumerate(SECTION_KEYS):
        value = parts[idx].strip() if idx < len(parts) else ""
        sections[key] = value or PARSE_FALLBACKS[key]
    return NarrativeResult(**sections, raw_text=text, status=NarrativeStatus.OK)


def _extract_text(completion: Any) -> str:
    choices = getattr(completion, "choices", None)
    if not choices:
        raise NarrativeServiceFailure("Narrative service returned no choices")
    content = getattr(getattr(choices[0], "message", None), "content", None)
    if not isinstance(content, str) or not content.strip():
        raise NarrativeServiceFailure("Narrative service returned an empty message")
    return content


class NarrativeAnalyzer:
    """Asks the text-generation service for the period's management narrative.

    ``analyze`` never raises: a missing key, an empty period and any service
    failure each map to a fixed ``NarrativeResult``. It takes no lock, so the
    caller must not start a second analysis for the same view while one is
    pending.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        temperature: float = 0.4,
        timeout_seconds: float = 30.0,
        client_factory: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self.api_key = api_key.strip() if api_key else ""
        self.model = model
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self._client_factory = client_factory or self._groq_client

    @classmethod
    def from_settings(cls, settings: Settings, client_factory: Optional[Callable[[str], Any]] = None) -> "NarrativeAnalyzer":
        return cls(
            api_key=settings.groq_api_key,
            model=settings.groq_model,
            temperature=settings.narrative_temperature,
            timeout_seconds=settings.narrative_timeout_seconds,
            client_factory=client_factory,
        )

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)

    def _groq_client(self, api_key: str) -> AsyncGroq:
        return AsyncGroq(api_key=api_key, timeout=self.timeout_seconds)

    def check_preconditions(self, summary: SummaryMetrics) -> None:
        # An empty period wins over a missing key.
        if summary.is_empty:
            raise InsufficientPeriodData(f"No records for {summary.period or 'the period'}")
        if not self.has_credential:
            raise MissingCredential("GROQ_API_KEY is not set")

    async def analyze(self, summary: SummaryMetrics, period_label: str) -> NarrativeResult:
        try:
            self.check_preconditions(summary)
        except MissingCredential as exc:
            logger.warning("%s; skipping narrative generation for %s", exc, period_label)
            return missing_credential_result()
        except InsufficientPeriodData as exc:
            logger.info("%s; narrative not requested", exc)
            return insufficient_data_result()

        prompt = build_prompt(summary, period_label)
        try:
            client = self._client_factory(self.api_key)
            completion = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
            )
            text = _extract_text(completion)
        except Exception:
            logger.warning("Narrative generation failed for %s", period_label, exc_info=True)
            return service_failure_result()

        result = parse_sections(text)
        missing = [key for key, value in result.sections().items() if value == PARSE_FALLBACKS[key]]
        if missing:
            logger.warning("Narrative response for %s is missing sections: %s", period_label, ", ".join(missing))
        return result
