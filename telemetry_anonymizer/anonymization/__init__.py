from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.anonymization.factory import (
    AnonymizationEngineFactory,
    get_default_engine,
)
from telemetry_anonymizer.anonymization.models import (
    AnonymizationOptions,
    AnonymizationRule,
    AnonymizedData,
    PIIDetectionResult,
    PseudonymMapping,
    ReplacementStrategy,
    RuleType,
)
from telemetry_anonymizer.anonymization.pseudonyms import PseudonymStore

__all__ = [
    "AnonymizationEngine",
    "AnonymizationEngineFactory",
    "AnonymizationOptions",
    "AnonymizationRule",
    "AnonymizedData",
    "PIIDetectionResult",
    "PseudonymMapping",
    "PseudonymStore",
    "ReplacementStrategy",
    "RuleType",
    "get_default_engine",
]
