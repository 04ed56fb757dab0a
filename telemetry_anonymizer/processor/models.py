from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class InputKind(StrEnum):
    """Closed set of telemetry shapes handed to the anonymizer."""

    LOG = "log"
    CONFIG = "config"
    DATABASE = "database"
    ERROR = "error"
    DIAGNOSTIC = "diagnostic"


@dataclass(frozen=True)
class TelemetryPayload:
    """Telemetry value tagged with the kind of data it carries."""

    kind: InputKind
    data: Any
