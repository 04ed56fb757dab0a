from typing import Any

from telemetry_anonymizer.anonymization.engine import AnonymizationEngine
from telemetry_anonymizer.anonymization.models import AnonymizationOptions, AnonymizedData
from telemetry_anonymizer.processor.factory import ProcessorFactory
from telemetry_anonymizer.processor.models import TelemetryPayload


def anonymize_payload(
    payload: TelemetryPayload,
    engine: AnonymizationEngine | None = None,
    options: AnonymizationOptions | None = None,
) -> AnonymizedData[Any]:
    """Anonymize *payload* with the processor registered for its kind."""
    processor = ProcessorFactory.create(payload.kind, engine)
    return processor.process(payload.data, options)
