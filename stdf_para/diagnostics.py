"""
Structured diagnostics.

Nothing the aggregator sees in a record stream is fatal. Conflicts and
gaps are recorded here, logged, and processing carries on; callers decide
how much they care by looking at the severity.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List

logger = logging.getLogger(__name__)


class DiagnosticKind(Enum):
    DECODE_FAILED = "decode_failed"
    DUPLICATE_HEADER = "duplicate_header"
    BIN_CONFLICT = "bin_conflict"
    LIMIT_CONFLICT = "limit_conflict"
    MISSING_HEADER = "missing_header"
    DUPLICATE_RESULT = "duplicate_result"


class Severity(Enum):
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


@dataclass(frozen=True)
class Diagnostic:
    file_id: int
    kind: DiagnosticKind
    severity: Severity
    message: str


class DiagnosticLog:
    """Diagnostics for one input file, logged as they are added"""

    def __init__(self, file_id: int, file_name: str):
        self.file_id = file_id
        self.file_name = file_name
        self.entries: List[Diagnostic] = []

    def add(self, kind: DiagnosticKind, severity: Severity, message: str) -> Diagnostic:
        diagnostic = Diagnostic(self.file_id, kind, severity, message)
        self.entries.append(diagnostic)
        logger.log(severity.value, "%s: %s", self.file_name, message)
        return diagnostic

    def warn(self, kind: DiagnosticKind, message: str) -> Diagnostic:
        return self.add(kind, Severity.WARNING, message)

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.entries if d.kind is kind]

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
