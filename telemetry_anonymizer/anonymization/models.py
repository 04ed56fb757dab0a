import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Generic, TypeVar

from telemetry_anonymizer.config.settings import Settings

T = TypeVar("T")


class RuleType(StrEnum):
    """Kind of sensitive value a rule detects."""

    IP_ADDRESS = "ip_address"
    HOSTNAME = "hostname"
    USERNAME = "username"
    PASSWORD = "password"
    TOKEN = "token"
    EMAIL = "email"
    PATH = "path"
    UUID = "uuid"
    CUSTOM_PATTERN = "custom_pattern"


class ReplacementStrategy(StrEnum):
    """How a matched value is substituted."""

    PSEUDONYM = "pseudonym"
    REDACT = "redact"
    HASH = "hash"
    GENERIC = "generic"


@dataclass(frozen=True)
class AnonymizationRule:
    """Single detection/substitution rule.

    ``pattern`` may be given as a string; it is compiled on construction.
    """

    type: RuleType
    pattern: re.Pattern[str]
    replacement: ReplacementStrategy
    category: str
    priority: int
    preserve_format: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.priority, bool) or not isinstance(self.priority, (int, float)):
            raise TypeError(
                f"Rule priority must be a number, got {type(self.priority).__name__}"
            )
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))
        object.__setattr__(self, "type", RuleType(self.type))
        object.__setattr__(self, "replacement", ReplacementStrategy(self.replacement))


@dataclass(frozen=True)
class AnonymizationOptions:
    """Per-call anonymization options. Not persisted."""

    enable_pseudonyms: bool = True
    preserve_structure: bool = True
    hash_salt: str | None = None
    max_processing_time: int | None = None  # milliseconds
    enabled_rules: frozenset[RuleType] | None = None
    custom_rules: tuple[AnonymizationRule, ...] = ()

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnonymizationOptions":
        """Build default options from application settings."""
        return cls(
            enable_pseudonyms=settings.enable_pseudonyms,
            preserve_structure=settings.preserve_structure,
            hash_salt=settings.hash_salt,
            max_processing_time=settings.max_processing_time_ms,
        )


@dataclass(frozen=True)
class PseudonymMapping:
    """Original value -> pseudonym record. Created once, never mutated."""

    original_value: str
    pseudonym: str
    type: str
    category: str
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    def to_dict(self) -> dict[str, str]:
        return {
            "originalValue": self.original_value,
            "pseudonym": self.pseudonym,
            "type": self.type,
            "category": self.category,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "PseudonymMapping":
        return cls(
            original_value=raw["originalValue"],
            pseudonym=raw["pseudonym"],
            type=raw["type"],
            category=raw["category"],
            created_at=raw.get("createdAt") or datetime.now(timezone.utc).isoformat(),
        )


@dataclass
class AnonymizationMetadata:
    """Per-call summary attached to anonymized output."""

    rules_applied: list[str] = field(default_factory=list)
    pseudonyms_used: int = 0
    processing_time_ms: int = 1
    is_anonymized: bool = False
    preserved_structure: bool = True


@dataclass
class AnonymizedData(Generic[T]):
    """Output of a single anonymize call."""

    data: T
    metadata: AnonymizationMetadata = field(default_factory=AnonymizationMetadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "metadata": {
                "rulesApplied": list(self.metadata.rules_applied),
                "pseudonymsUsed": self.metadata.pseudonyms_used,
                "processingTimeMs": self.metadata.processing_time_ms,
                "isAnonymized": self.metadata.is_anonymized,
                "preservedStructure": self.metadata.preserved_structure,
            },
        }


@dataclass(frozen=True)
class PIILocation:
    """Where a rule matched inside serialized input."""

    type: RuleType
    path: str
    value: str
    start_index: int
    end_index: int


@dataclass
class PIIDetectionResult:
    """Read-only presence report produced by the detector."""

    has_pii: bool = False
    detected_types: list[RuleType] = field(default_factory=list)
    confidence: float = 0.0
    locations: list[PIILocation] = field(default_factory=list)


@dataclass
class AnonymizationEngineStats:
    """Running aggregates across all anonymize calls."""

    total_processed: int = 0
    total_pseudonyms: int = 0
    average_processing_time: float = 0.0
    rules_usage: dict[str, int] = field(default_factory=dict)
    error_rate: float = 0.0


@dataclass(frozen=True)
class PseudonymStoreStats:
    """Mapping counts held by a pseudonym store."""

    total_mappings: int
    mappings_by_type: dict[str, int]
    mappings_by_category: dict[str, int]
