from telemetry_anonymizer.processor.base import BaseDataProcessor
from telemetry_anonymizer.processor.factory import ProcessorFactory
from telemetry_anonymizer.processor.models import InputKind, TelemetryPayload
from telemetry_anonymizer.processor.processor import anonymize_payload

__all__ = [
    "BaseDataProcessor",
    "InputKind",
    "ProcessorFactory",
    "TelemetryPayload",
    "anonymize_payload",
]
