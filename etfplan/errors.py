"""Typed errors for the settings store, price source and pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from etfplan.enums import ErrorKind


@dataclass(eq=False)
class PlannerError(Exception):
    kind: ErrorKind
    message: str
    subject: Optional[str] = None   # asset id, ticker, ISIN or file path

    def __str__(self) -> str:
        if self.subject:
            return f"{self.message} ({self.subject})"
        return self.message


class StorageUnavailableError(PlannerError):
    def __init__(self, message: str, subject: Optional[str] = None):
        super().__init__(ErrorKind.STORAGE_UNAVAILABLE, message, subject)


class LookupNotFoundError(PlannerError):
    def __init__(self, message: str, subject: Optional[str] = None):
        super().__init__(ErrorKind.LOOKUP_NOT_FOUND, message, subject)


class LookupAmbiguousError(PlannerError):
    def __init__(self, message: str, subject: Optional[str] = None):
        super().__init__(ErrorKind.LOOKUP_AMBIGUOUS, message, subject)


class NetworkFailureError(PlannerError):
    def __init__(self, message: str, subject: Optional[str] = None):
        super().__init__(ErrorKind.NETWORK_FAILURE, message, subject)
