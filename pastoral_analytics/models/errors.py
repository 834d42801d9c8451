from __future__ import annotations


class ReportingError(Exception):
    """Base class for every error raised by the reporting pipeline."""


class InvalidDateFormat(ReportingError, ValueError):
    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid record date: {value!r} (expected YYYY-MM-DD)")
        self.value = value


class RecordIntegrityError(ReportingError, ValueError):
    pass


class MissingCredential(ReportingError):
    pass


class NarrativeServiceFailure(ReportingError):
    pass


class InsufficientPeriodData(ReportingError):
    pass


class StoreError(ReportingError):
    pass


class SessionClosed(ReportingError):
    pass
